"""Read access to map configuration tables.

All rows leave this module as normalized pydantic records, so callers never
see the historical column variants (``style_url``, ``map_category`` ...).
Errors from the database propagate; handlers decide how to degrade.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models.layer_group import LayerGroup, LayerGroupOverlay
from db.models.map_config import MapConfig
from models.layer_group import LayerGroupOverlayRecord, LayerGroupRecord
from models.map_config import MapConfigRecord, normalize_record

logger = logging.getLogger(__name__)


def style_name_candidates(name: str) -> List[str]:
    """Lower-cased names a style request may refer to (``-``/``_`` read as spaces)."""
    candidates = [name, name.replace("-", " ").replace("_", " ")]
    seen = []
    for candidate in candidates:
        lowered = candidate.strip().lower()
        if lowered and lowered not in seen:
            seen.append(lowered)
    return seen


class MapConfigStore:
    """Queries against ``map_configs``, ``layer_groups`` and ``layer_group_overlays``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_public_configs(self) -> List[MapConfigRecord]:
        result = await self.session.execute(
            select(MapConfig)
            .where(MapConfig.is_active.is_(True), MapConfig.is_public.is_(True))
            .order_by(MapConfig.country.asc(), MapConfig.label.asc())
        )
        return [normalize_record(row.as_record_dict()) for row in result.scalars().all()]

    async def find_by_name(self, name: str) -> Optional[MapConfigRecord]:
        """Find an active record whose name matches ``name`` case-insensitively."""
        candidates = style_name_candidates(name)
        if not candidates:
            return None
        result = await self.session.execute(
            select(MapConfig)
            .where(func.lower(MapConfig.name).in_(candidates), MapConfig.is_active.is_(True))
            .order_by(MapConfig.updated_at.desc())
            .limit(1)
        )
        row = result.scalars().first()
        if row is None:
            logger.debug(f"No active map config named {name!r}")
            return None
        return normalize_record(row.as_record_dict())

    async def list_layer_groups(self, group_id: Optional[str] = None) -> List[LayerGroupRecord]:
        query = (
            select(LayerGroup, MapConfig)
            .outerjoin(MapConfig, LayerGroup.basemap_id == MapConfig.id)
            .where(LayerGroup.is_active.is_(True), LayerGroup.is_public.is_(True))
            .order_by(LayerGroup.display_order.asc())
        )
        if group_id is not None:
            query = query.where(LayerGroup.id == group_id)
        result = await self.session.execute(query)

        groups = []
        for group, basemap in result.all():
            groups.append(
                LayerGroupRecord(
                    id=group.id,
                    name=group.name,
                    description=group.description,
                    display_order=group.display_order or 0,
                    is_featured=bool(group.is_featured),
                    tags=list(group.tags or []),
                    preview_image_url=group.preview_image_url,
                    basemap=normalize_record(basemap.as_record_dict()) if basemap else None,
                )
            )
        return groups

    async def list_group_overlays(self, group_ids: Iterable) -> List[LayerGroupOverlayRecord]:
        group_ids = list(group_ids)
        if not group_ids:
            return []
        result = await self.session.execute(
            select(LayerGroupOverlay, MapConfig)
            .join(MapConfig, LayerGroupOverlay.overlay_id == MapConfig.id)
            .where(
                LayerGroupOverlay.layer_group_id.in_(group_ids),
                MapConfig.is_active.is_(True),
            )
            .order_by(LayerGroupOverlay.display_order.asc())
        )
        return [
            LayerGroupOverlayRecord(
                layer_group_id=link.layer_group_id,
                overlay=normalize_record(overlay.as_record_dict()),
                display_order=link.display_order or 0,
                is_visible_default=bool(link.is_visible_default),
                opacity=link.opacity if link.opacity is not None else 1.0,
            )
            for link, overlay in result.all()
        ]

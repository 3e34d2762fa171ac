"""Assembly of public layer groups from stored groups and overlay associations."""

from collections import defaultdict
from typing import Dict, Iterable, List

from models.layer_group import (
    LayerGroupOverlayRecord,
    LayerGroupRecord,
    PublicLayerGroup,
    PublicLayerGroupOverlay,
)
from services.mapconfig.sanitizer import ConfigSanitizer


def build_public_layer_groups(
    groups: Iterable[LayerGroupRecord],
    overlays: Iterable[LayerGroupOverlayRecord],
    sanitizer: ConfigSanitizer,
    caller_authorized: bool = False,
) -> List[PublicLayerGroup]:
    """Attach sanitized overlays to each group, keeping ``display_order``.

    Groups without overlay rows get an empty list.
    """
    by_group: Dict[str, List[LayerGroupOverlayRecord]] = defaultdict(list)
    for overlay in overlays:
        by_group[str(overlay.layer_group_id)].append(overlay)

    public_groups = []
    for group in groups:
        group_overlays = sorted(by_group.get(str(group.id), []), key=lambda o: o.display_order)
        public_groups.append(
            PublicLayerGroup(
                id=group.id,
                name=group.name,
                description=group.description,
                display_order=group.display_order,
                is_featured=group.is_featured,
                tags=group.tags,
                preview_image_url=group.preview_image_url,
                basemap=(
                    sanitizer.sanitize(group.basemap, caller_authorized)
                    if group.basemap is not None
                    else None
                ),
                overlays=[
                    PublicLayerGroupOverlay(
                        overlay=sanitizer.sanitize(item.overlay, caller_authorized),
                        display_order=item.display_order,
                        is_visible_default=item.is_visible_default,
                        opacity=item.opacity,
                    )
                    for item in group_overlays
                ],
            )
        )
    return public_groups

"""
Public map configuration API

Endpoints:
- GET /public/mapconfig         - All active public configs (``format=json|legacy``)
- GET /public/mapconfig-secure  - Same, but requires a first-party app token
- GET /public/layer-groups      - Public layer groups with sanitized basemap/overlays

Anonymous callers only ever receive proxy URLs for commercial providers.
Callers presenting a recognised app token get direct URLs with fresh keys.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from api.deps import (
    enforce_rate_limit,
    get_caller_app,
    get_map_config_store,
    get_sanitizer,
    require_caller_app,
)
from core.config import SERVICE_VERSION
from models.layer_group import PublicLayerGroup
from models.responses import LayerGroupsResponse, MapConfigResponse
from services.database.map_config_store import MapConfigStore
from services.mapconfig.layer_groups import build_public_layer_groups
from services.mapconfig.legacy_format import to_legacy_format
from services.mapconfig.sanitizer import ConfigSanitizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["public"])

RESPONSE_FORMATS = ("json", "legacy")
PUBLIC_CACHE_CONTROL = "public, max-age=3600"
PRIVATE_CACHE_CONTROL = "private, max-age=300"
LAYER_GROUPS_VERSION = "1.0"


def json_response(content: Any, pretty: bool = False, cache_control: Optional[str] = None):
    """Serialize ``content``, indenting it when ``pretty`` is requested."""
    headers = {"Cache-Control": cache_control} if cache_control else None
    if pretty:
        return Response(
            content=json.dumps(content, indent=2, ensure_ascii=False),
            media_type="application/json",
            headers=headers,
        )
    return JSONResponse(content=content, headers=headers)


def _validate_format(format: str) -> str:
    normalized = (format or "json").strip().lower()
    if normalized not in RESPONSE_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid format",
                "message": f"format must be one of: {', '.join(RESPONSE_FORMATS)}",
            },
        )
    return normalized


async def load_public_layer_groups(
    store: MapConfigStore,
    sanitizer: ConfigSanitizer,
    caller_authorized: bool,
    group_id: Optional[UUID] = None,
    required: bool = False,
) -> List[PublicLayerGroup]:
    """Load and sanitize layer groups.

    Overlay failures always degrade to groups without overlays. Group
    failures degrade to an empty list unless ``required`` is set.
    """
    try:
        groups = await store.list_layer_groups(group_id)
    except SQLAlchemyError as exc:
        if required:
            logger.error(f"Database error loading layer groups: {exc}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to fetch layer groups",
            )
        logger.warning(f"Layer groups unavailable, serving none: {exc}")
        return []

    try:
        overlays = await store.list_group_overlays([group.id for group in groups])
    except SQLAlchemyError as exc:
        logger.warning(f"Layer group overlays unavailable, serving groups without them: {exc}")
        overlays = []

    return build_public_layer_groups(groups, overlays, sanitizer, caller_authorized)


async def serve_map_config(
    format: str,
    pretty: bool,
    caller_authorized: bool,
    sanitizer: ConfigSanitizer,
    store: MapConfigStore,
):
    response_format = _validate_format(format)

    try:
        records = await store.list_public_configs()
    except SQLAlchemyError as exc:
        logger.error(f"Database error: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch configurations",
        )

    configs = sanitizer.sanitize_all(records, caller_authorized)
    cache_control = PRIVATE_CACHE_CONTROL if caller_authorized else PUBLIC_CACHE_CONTROL

    if response_format == "legacy":
        legacy = to_legacy_format(configs)
        content = legacy.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json_response(content, pretty, cache_control)

    layer_groups = await load_public_layer_groups(store, sanitizer, caller_authorized)
    content = MapConfigResponse(
        version=SERVICE_VERSION,
        timestamp=datetime.now(timezone.utc),
        configs=configs,
        layer_groups=layer_groups,
        total=len(configs),
    ).model_dump(mode="json", by_alias=True)
    return json_response(content, pretty, cache_control)


@router.get("/mapconfig", dependencies=[Depends(enforce_rate_limit)])
async def get_map_config(
    format: str = Query("json", description="Response shape: json or legacy"),
    pretty: bool = Query(False, description="Indent the JSON output"),
    caller_app: Optional[str] = Depends(get_caller_app),
    sanitizer: ConfigSanitizer = Depends(get_sanitizer),
    store: MapConfigStore = Depends(get_map_config_store),
):
    """Serve all active, public map configurations."""
    return await serve_map_config(format, pretty, caller_app is not None, sanitizer, store)


@router.get("/mapconfig-secure", dependencies=[Depends(enforce_rate_limit)])
async def get_map_config_secure(
    format: str = Query("legacy", description="Response shape: json or legacy"),
    pretty: bool = Query(False, description="Indent the JSON output"),
    caller_app: str = Depends(require_caller_app),
    sanitizer: ConfigSanitizer = Depends(get_sanitizer),
    store: MapConfigStore = Depends(get_map_config_store),
):
    """Serve configurations with direct keyed URLs to first-party apps."""
    return await serve_map_config(format, pretty, True, sanitizer, store)


@router.get("/layer-groups")
async def get_layer_groups(
    id: Optional[UUID] = Query(None, description="Return a single layer group"),
    pretty: bool = Query(False, description="Indent the JSON output"),
    caller_app: Optional[str] = Depends(get_caller_app),
    sanitizer: ConfigSanitizer = Depends(get_sanitizer),
    store: MapConfigStore = Depends(get_map_config_store),
):
    """Serve public layer groups, or one group when ``id`` is given."""
    caller_authorized = caller_app is not None
    cache_control = PRIVATE_CACHE_CONTROL if caller_authorized else PUBLIC_CACHE_CONTROL
    groups = await load_public_layer_groups(
        store, sanitizer, caller_authorized, group_id=id, required=True
    )

    if id is not None:
        if not groups:
            raise HTTPException(status_code=404, detail="Layer group not found")
        return json_response(groups[0].model_dump(mode="json"), pretty, cache_control)

    content = LayerGroupsResponse(
        version=LAYER_GROUPS_VERSION,
        timestamp=datetime.now(timezone.utc),
        layer_groups=groups,
        total=len(groups),
    ).model_dump(mode="json", by_alias=True)
    return json_response(content, pretty, cache_control)

"""Style document resolution for ``/api/styles/{name}.json``.

Lookup order: static file, datastore record, known raster maps, else 404.
"""

import logging
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from api.deps import get_context, get_map_config_store, get_sanitizer
from services.context import ServiceContext
from services.database.map_config_store import MapConfigStore
from services.mapconfig.sanitizer import ConfigSanitizer, is_absolute_url
from services.mapconfig.style_documents import (
    InvalidStyleName,
    generate_raster_style,
    known_raster_config,
    load_static_style,
    parse_style_filename,
    record_raster_config,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/styles", tags=["styles"])

STYLE_CACHE_CONTROL = "public, max-age=3600"
STYLES_API_PATH = "/api/styles/"


def _style_text_response(text: str) -> Response:
    return Response(
        content=text,
        media_type="application/json",
        headers={"Cache-Control": STYLE_CACHE_CONTROL},
    )


def _is_own_url(url: str, base_url: str) -> bool:
    """True for relative URLs and URLs on this service's own origin."""
    if not is_absolute_url(url):
        return True
    parsed = urlparse(url)
    own = urlparse(base_url)
    return bool(own.netloc) and (parsed.scheme, parsed.netloc) == (own.scheme, own.netloc)


def _style_json_response(style: dict) -> JSONResponse:
    return JSONResponse(content=style, headers={"Cache-Control": STYLE_CACHE_CONTROL})


@router.get("/{filename}")
async def get_style(
    filename: str,
    context: ServiceContext = Depends(get_context),
    sanitizer: ConfigSanitizer = Depends(get_sanitizer),
    store: MapConfigStore = Depends(get_map_config_store),
):
    """Serve, generate or redirect to the style document for a map name."""
    try:
        name = parse_style_filename(filename)
    except InvalidStyleName as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    static_style = load_static_style(context.styles_dir, name)
    if static_style is not None:
        return _style_text_response(static_style)

    try:
        record = await store.find_by_name(name)
    except SQLAlchemyError as exc:
        logger.error(f"Database error resolving style '{name}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Internal server error", "message": "Failed to resolve style"},
        )

    if record is not None:
        raster_config = record_raster_config(record)
        if raster_config:
            return _style_json_response(generate_raster_style(raster_config))

        style_url = sanitizer.sanitize(record).style
        path = urlparse(style_url).path
        own_url = _is_own_url(style_url, sanitizer.base_url)
        if own_url and path.startswith("/styles/"):
            local_style = load_static_style(
                context.styles_dir, PurePosixPath(unquote(path)).stem
            )
            if local_style is not None:
                return _style_text_response(local_style)
        elif is_absolute_url(style_url) and not (own_url and path.startswith(STYLES_API_PATH)):
            logger.debug(f"Redirecting style '{name}' to {style_url}")
            return RedirectResponse(url=style_url, status_code=status.HTTP_302_FOUND)

    raster_config = known_raster_config(name)
    if raster_config:
        return _style_json_response(generate_raster_style(raster_config))

    logger.info(f"No style configuration found for '{name}'")
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "Style not found", "message": f"No style configuration found for: {name}"},
    )

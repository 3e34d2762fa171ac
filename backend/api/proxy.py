"""
Provider Style Proxy API

Serves commercial basemap styles to anonymous clients without ever exposing
the operator's API keys.

Supported endpoints:
- /proxy/style/{style_id}: Upstream style with every asset URL rewritten
- /proxy/asset/{style_id}/{encoded_base}/{tail}: Tiles, TileJSON, sprites, glyphs

Security Considerations:
- Only catalogued styles can be proxied
- Asset hosts must belong to the style's provider (no open proxy)
- Keys are injected server-side and stripped from everything returned
"""

import logging
from urllib.parse import urlencode

import requests
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from api.deps import enforce_rate_limit, get_base_url, get_context
from services.context import ServiceContext
from services.mapconfig.api_keys import API_KEY_PARAMS, inject_api_key
from services.mapconfig.providers import COMMERCIAL_PROVIDERS
from services.mapconfig.style_catalog import STYLE_PROXIES, ProxiedStyle, find_proxied_style
from services.mapconfig.style_proxy import (
    decode_asset_base,
    is_allowed_asset_url,
    rewrite_style_urls,
    rewrite_tilejson,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proxy", tags=["proxy"])

USER_AGENT = "MapConfig-Proxy/1.0"
STYLE_CACHE_CONTROL = "public, max-age=3600"
ASSET_CACHE_CONTROL = "public, max-age=86400"


def _get_entry(style_id: str) -> ProxiedStyle:
    entry = find_proxied_style(style_id)
    if entry is None:
        raise HTTPException(
            status_code=404,
            detail={
                "error": "Style not found",
                "message": f"Unknown style id: {style_id}",
                "available": sorted(STYLE_PROXIES),
            },
        )
    return entry


def fetch_upstream(url: str, display_url: str, timeout: int, accept: str = "*/*"):
    """GET ``url`` and map transport failures onto HTTP errors.

    ``display_url`` is the keyless form used in log lines and messages.
    """
    try:
        response = requests.get(
            url,
            headers={"Accept": accept, "User-Agent": USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
        return response
    except requests.exceptions.Timeout:
        logger.error(f"Timeout fetching from: {display_url}")
        raise HTTPException(status_code=504, detail="Request to upstream provider timed out")
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error fetching from {display_url}: {e.__class__.__name__}")
        raise HTTPException(status_code=502, detail="Could not connect to upstream provider")
    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else 502
        logger.error(f"HTTP error fetching from {display_url}: {status_code}")
        raise HTTPException(
            status_code=status_code,
            detail=f"Upstream provider returned error: {status_code}",
        )


@router.get("/style/{style_id}", dependencies=[Depends(enforce_rate_limit)])
def proxy_style(
    style_id: str,
    context: ServiceContext = Depends(get_context),
    base_url: str = Depends(get_base_url),
) -> JSONResponse:
    """Fetch a provider style with the operator key and rewrite its asset URLs."""
    entry = _get_entry(style_id)
    if entry.provider in COMMERCIAL_PROVIDERS and not context.credentials.get(entry.provider):
        logger.warning(f"No API key configured for {entry.provider.value}; upstream may refuse")

    upstream_url = inject_api_key(entry.url, entry.provider, context.credentials)
    logger.info(f"Proxying style {entry.style_id} from: {entry.url}")
    response = fetch_upstream(
        upstream_url, entry.url, context.proxy_timeout, accept="application/json"
    )

    try:
        style = response.json()
    except ValueError:
        logger.error(f"Upstream style {entry.style_id} is not valid JSON")
        raise HTTPException(status_code=502, detail="Upstream provider returned invalid JSON")
    if not isinstance(style, dict):
        raise HTTPException(status_code=502, detail="Upstream provider returned invalid style")

    return JSONResponse(
        content=rewrite_style_urls(style, entry, base_url),
        headers={
            "Cache-Control": STYLE_CACHE_CONTROL,
            "X-Proxy-Provider": entry.provider.value if entry.provider else "none",
        },
    )


@router.get("/asset/{style_id}/{encoded_base}/{tail:path}")
def proxy_asset(
    style_id: str,
    encoded_base: str,
    tail: str,
    request: Request,
    context: ServiceContext = Depends(get_context),
    base_url: str = Depends(get_base_url),
) -> Response:
    """Fetch a style asset (tile, TileJSON, sprite, glyph range) with the operator key."""
    entry = _get_entry(style_id)
    try:
        upstream_base = decode_asset_base(encoded_base)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid asset URL")

    asset_url = f"{upstream_base}{tail}"
    if not is_allowed_asset_url(entry, asset_url):
        logger.warning(f"Rejected asset host for {entry.style_id}: {upstream_base}")
        raise HTTPException(status_code=403, detail="Asset host not allowed for this style")

    query = [
        (name, value)
        for name, value in request.query_params.multi_items()
        if name.lower() not in API_KEY_PARAMS
    ]
    if query:
        asset_url = f"{asset_url}?{urlencode(query)}"

    upstream_url = inject_api_key(asset_url, entry.provider, context.credentials)
    response = fetch_upstream(upstream_url, asset_url, context.proxy_timeout)

    content_type = response.headers.get("content-type", "").split(";")[0].strip()
    if content_type == "application/json" or tail.endswith(".json"):
        try:
            document = response.json()
        except ValueError:
            document = None
        if isinstance(document, dict) and ("tiles" in document or "url" in document):
            return JSONResponse(
                content=rewrite_tilejson(document, entry.style_id, base_url),
                headers={"Cache-Control": ASSET_CACHE_CONTROL},
            )

    return Response(
        content=response.content,
        media_type=content_type or "application/octet-stream",
        headers={"Cache-Control": ASSET_CACHE_CONTROL},
    )

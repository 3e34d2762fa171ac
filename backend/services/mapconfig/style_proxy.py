"""
Style proxy URL rewriting

Upstream styles reference sources, tiles, sprites and glyphs on the
provider's host, usually with the operator key attached. Every such URL is
stripped of its key and rewritten to the asset proxy::

    {base}/api/proxy/asset/{style_id}/{encoded_base}/{tail}

``encoded_base`` is the base64url-encoded upstream prefix up to the last
``/`` before any ``{placeholder}``; ``tail`` is the rest, so map clients can
still substitute ``{z}/{x}/{y}``, ``{fontstack}/{range}`` or append sprite
suffixes (``@2x.png``). Non-key query parameters ride along on the proxy URL.
"""

import base64
import binascii
import copy
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from services.mapconfig.api_keys import strip_api_keys
from services.mapconfig.providers import host_belongs_to
from services.mapconfig.style_catalog import ProxiedStyle

ASSET_PROXY_PATH = "/api/proxy/asset/"
PROXY_VERSION = "1.0.0"

# Key parameters embedded in free text such as HTML attributions.
_KEY_IN_TEXT = re.compile(
    r"[?&](?:key|apikey|api_key|x-api-key|token)=[^&\s<\"']*", re.IGNORECASE
)


def encode_asset_base(url: str) -> str:
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


def decode_asset_base(token: str) -> str:
    """Inverse of :func:`encode_asset_base`.

    Raises:
        ValueError: if ``token`` is not valid base64url/UTF-8
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        decoded = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        return decoded.decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Invalid encoded asset URL: {token}") from exc


def split_asset_url(url: str) -> Tuple[str, str, str]:
    """Split a keyless upstream URL into (base, tail, query)."""
    url = url.split("#", 1)[0]
    query = ""
    if "?" in url:
        url, query = url.split("?", 1)
    template_start = url.find("{")
    head = url if template_start < 0 else url[:template_start]
    cut = head.rfind("/") + 1
    scheme_end = url.find("://") + 3 if "://" in url else 0
    if cut <= scheme_end:
        return url, "", query
    return url[:cut], url[cut:], query


def asset_proxy_url(base_url: str, style_id: str, upstream_url: str) -> str:
    base, tail, query = split_asset_url(strip_api_keys(upstream_url))
    proxied = f"{base_url}{ASSET_PROXY_PATH}{style_id}/{encode_asset_base(base)}/{tail}"
    return f"{proxied}?{query}" if query else proxied


def is_allowed_asset_url(entry: ProxiedStyle, url: str) -> bool:
    """Only hosts belonging to the style's provider may be fetched."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    if entry.provider is not None:
        return host_belongs_to(parsed.hostname, entry.provider)
    return parsed.hostname == urlparse(entry.url).hostname


def _rewrite(value: Any, style_id: str, base_url: str) -> Any:
    if isinstance(value, str) and value.startswith(("http://", "https://")):
        return asset_proxy_url(base_url, style_id, value)
    return value


def rewrite_tilejson(doc: Dict[str, Any], style_id: str, base_url: str) -> Dict[str, Any]:
    """Point a TileJSON (or style source) document's tiles at the asset proxy."""
    rewritten = copy.deepcopy(doc)
    if isinstance(rewritten.get("tiles"), list):
        rewritten["tiles"] = [_rewrite(t, style_id, base_url) for t in rewritten["tiles"]]
    if isinstance(rewritten.get("url"), str):
        rewritten["url"] = _rewrite(rewritten["url"], style_id, base_url)
    return rewritten


def rewrite_style_urls(
    style: Dict[str, Any],
    entry: ProxiedStyle,
    base_url: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Return a copy of ``style`` whose external URLs all go through the proxy."""
    modified = copy.deepcopy(style)
    style_id = entry.style_id

    sources = modified.get("sources")
    if isinstance(sources, dict):
        for source_id, source in sources.items():
            if not isinstance(source, dict):
                continue
            sources[source_id] = rewrite_tilejson(source, style_id, base_url)
            attribution = sources[source_id].get("attribution")
            if isinstance(attribution, str) and "http" in attribution:
                sources[source_id]["attribution"] = _strip_keys_in_text(attribution)

    sprite = modified.get("sprite")
    if isinstance(sprite, str):
        modified["sprite"] = _rewrite(sprite, style_id, base_url)
    elif isinstance(sprite, list):
        for item in sprite:
            if isinstance(item, dict) and "url" in item:
                item["url"] = _rewrite(item["url"], style_id, base_url)

    if isinstance(modified.get("glyphs"), str):
        modified["glyphs"] = _rewrite(modified["glyphs"], style_id, base_url)

    metadata = modified.get("metadata") if isinstance(modified.get("metadata"), dict) else {}
    modified["metadata"] = {
        **metadata,
        "proxied": True,
        "proxyVersion": PROXY_VERSION,
        "originalProvider": entry.provider.value if entry.provider else None,
        "proxiedAt": (now or datetime.now(timezone.utc)).isoformat(),
    }
    return modified


def _strip_keys_in_text(text: str) -> str:
    return _KEY_IN_TEXT.sub("", text)

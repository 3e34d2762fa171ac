"""
Config sanitization

Turns a stored map configuration record into the shape served to clients:

1. strip any key embedded in the stored style URL
2. classify the provider (explicit ``metadata.provider`` wins over the host)
3. choose the served URL: proxy endpoint for anonymous callers of commercial
   providers, a freshly keyed URL for authorized app callers, a local static
   document or keyless URL for the cadastral service, and an absolute
   same-origin URL for everything else
4. escape spaces, filter private layers and project metadata to an
   allow-list so nothing sensitive leaks through the side channels

The sanitizer does no I/O; everything it needs is handed in at construction.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import unquote

from pydantic import BaseModel

from models.map_config import MapConfigRecord, PublicMapConfig, normalize_record
from services.mapconfig.api_keys import inject_api_key, strip_api_keys
from services.mapconfig.providers import (
    COMMERCIAL_PROVIDERS,
    Provider,
    ProviderCredentials,
    detect_provider,
    resolve_provider,
)
from services.mapconfig.style_catalog import (
    STYLE_PROXY_PATH,
    find_proxied_style,
    proxy_style_id,
)

logger = logging.getLogger(__name__)

# Metadata keys that may be shown to clients. Anything else is dropped.
METADATA_ALLOW_LIST = (
    "attribution",
    "description",
    "version",
    "lastUpdated",
    "isOverlay",
    "overlayType",
    "category",
    "provider",
    "isOfficial",
    "optimizedFor",
    "coloring",
)

_ABSOLUTE_URL = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def is_absolute_url(url: Optional[str]) -> bool:
    return bool(url) and bool(_ABSOLUTE_URL.match(url))


def static_style_key(name: str) -> str:
    """Lower-case, hyphenated form used to match static style file names."""
    return re.sub(r"\s+", "-", (name or "").strip()).lower()


class ConfigSanitizer:
    """Build client-safe configuration records.

    Args:
        credentials: operator keys, used only for authorized callers
        base_url: origin of this service, e.g. ``https://mapconfig.example.com``
        static_styles: names (without ``.json``) of locally hosted style documents
    """

    def __init__(
        self,
        credentials: Optional[ProviderCredentials] = None,
        base_url: str = "",
        static_styles: Optional[Iterable[str]] = None,
    ):
        self.credentials = credentials or ProviderCredentials()
        self.base_url = (base_url or "").rstrip("/")
        self._static_styles = {static_style_key(name): name for name in (static_styles or ())}

    def sanitize(
        self,
        record: Union[BaseModel, Mapping[str, Any]],
        caller_authorized: bool = False,
    ) -> PublicMapConfig:
        if not isinstance(record, MapConfigRecord):
            record = normalize_record(record)

        canonical_url = strip_api_keys(record.style) or ""
        provider = resolve_provider(record.metadata.get("provider")) or detect_provider(
            canonical_url
        )

        style = self.resolve_style_url(record, canonical_url, provider, caller_authorized)
        style = style.replace(" ", "%20")

        return PublicMapConfig(
            id=record.id,
            name=record.name,
            label=record.label,
            type=record.type,
            style=style,
            country=record.country,
            flag=record.flag,
            layers=self._public_layers(record.layers),
            metadata=self._public_metadata(record),
        )

    def sanitize_all(
        self, records: Iterable[MapConfigRecord], caller_authorized: bool = False
    ) -> List[PublicMapConfig]:
        return [self.sanitize(record, caller_authorized) for record in records]

    def resolve_style_url(
        self,
        record: MapConfigRecord,
        canonical_url: str,
        provider: Optional[Provider],
        caller_authorized: bool,
    ) -> str:
        """Decide which URL the client receives for ``record``."""
        if self._is_proxy_url(canonical_url):
            if caller_authorized:
                style_id = unquote(canonical_url.rsplit(STYLE_PROXY_PATH, 1)[1].split("?", 1)[0])
                direct = self._keyed_upstream_url(style_id)
                if direct:
                    return direct
            return self._absolute(canonical_url)

        if provider in COMMERCIAL_PROVIDERS:
            if caller_authorized:
                if is_absolute_url(canonical_url):
                    return inject_api_key(canonical_url, provider, self.credentials)
                direct = self._keyed_upstream_url(proxy_style_id(canonical_url, provider))
                if direct:
                    return direct
            return self.proxy_url(canonical_url, provider)

        if provider is Provider.BEV:
            static_name = self._static_styles.get(static_style_key(record.name))
            if static_name:
                return f"{self.base_url}/styles/{static_name}.json"
            if canonical_url:
                return self._absolute(canonical_url)
            return self.default_style_url(record.name)

        if not canonical_url:
            return self.default_style_url(record.name)
        return self._absolute(canonical_url)

    def proxy_url(self, canonical_url: str, provider: Provider) -> str:
        style_id = proxy_style_id(canonical_url, provider)
        return f"{self.base_url}{STYLE_PROXY_PATH}{style_id}"

    def _keyed_upstream_url(self, style_id: Optional[str]) -> Optional[str]:
        """Direct upstream URL with a fresh key for a commercial proxied style."""
        entry = find_proxied_style(style_id)
        if entry is None or entry.provider not in COMMERCIAL_PROVIDERS:
            return None
        return inject_api_key(entry.url, entry.provider, self.credentials)

    def default_style_url(self, name: str) -> str:
        logger.debug(f"No usable style URL for '{name}', serving default style path")
        return f"{self.base_url}/api/styles/{name}.json"

    def _absolute(self, url: str) -> str:
        if is_absolute_url(url):
            return url
        if url.startswith("//"):
            return f"https:{url}"
        if url.startswith("/"):
            return f"{self.base_url}{url}"
        return f"{self.base_url}/{url}"

    def _is_proxy_url(self, url: str) -> bool:
        if not url:
            return False
        return url.startswith(f"{self.base_url}{STYLE_PROXY_PATH}") or url.startswith(
            STYLE_PROXY_PATH
        )

    @staticmethod
    def _public_layers(layers: List[Any]) -> List[Dict[str, Any]]:
        return [
            layer for layer in layers if isinstance(layer, dict) and not layer.get("private")
        ]

    @staticmethod
    def _public_metadata(record: MapConfigRecord) -> Dict[str, Any]:
        source = dict(record.metadata)
        if record.updated_at is not None:
            source["lastUpdated"] = record.updated_at.isoformat()
        return {
            key: source[key]
            for key in METADATA_ALLOW_LIST
            if key in source and source[key] is not None
        }

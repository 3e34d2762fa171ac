"""Tile/style provider classification and credential lookup."""

from enum import Enum
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse


class Provider(str, Enum):
    """Known style/tile providers that need special handling."""

    MAPTILER = "maptiler"  # vector basemap vendor
    CLOCKWORK = "clockwork"  # commercial imagery / streets vendor
    BEV = "bev"  # national cadastral service (Austria)


# Host substrings identifying each provider, checked in order.
PROVIDER_HOST_PATTERNS = (
    ("maptiler.com", Provider.MAPTILER),
    ("clockworkmicro.com", Provider.CLOCKWORK),
    ("kataster.bev.gv.at", Provider.BEV),
)

# Registered domains whose hosts may receive a provider key. A host matches
# only as the domain itself or one of its subdomains.
PROVIDER_DOMAINS: Dict[Provider, str] = {
    Provider.MAPTILER: "maptiler.com",
    Provider.CLOCKWORK: "clockworkmicro.com",
    Provider.BEV: "kataster.bev.gv.at",
}

# Query parameter each provider expects its key in. Fixed, not inferred.
PROVIDER_KEY_PARAMS: Dict[Provider, str] = {
    Provider.MAPTILER: "key",
    Provider.CLOCKWORK: "x-api-key",
    Provider.BEV: "key",
}

# Providers whose keys must never reach anonymous clients.
COMMERCIAL_PROVIDERS = frozenset({Provider.MAPTILER, Provider.CLOCKWORK})

_PROVIDER_ALIASES = {
    "maptiler": Provider.MAPTILER,
    "clockwork": Provider.CLOCKWORK,
    "clockworkmicro": Provider.CLOCKWORK,
    "bev": Provider.BEV,
    "kataster": Provider.BEV,
}


def detect_provider(url: Optional[str]) -> Optional[Provider]:
    """Classify a style URL by its host.

    Returns None for empty, relative, malformed or unrecognised URLs.
    """
    if not url or not isinstance(url, str):
        return None
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    for pattern, provider in PROVIDER_HOST_PATTERNS:
        if pattern in host:
            return provider
    return None


def host_belongs_to(host: Optional[str], provider: Optional[Provider]) -> bool:
    """True if ``host`` is the provider's registered domain or a subdomain of it."""
    if not host or provider is None:
        return False
    domain = PROVIDER_DOMAINS.get(provider)
    if domain is None:
        return False
    host = host.lower().rstrip(".")
    return host == domain or host.endswith("." + domain)


def resolve_provider(hint) -> Optional[Provider]:
    """Map a free-text provider hint (e.g. ``metadata.provider``) to a Provider."""
    if isinstance(hint, Provider):
        return hint
    if not isinstance(hint, str):
        return None
    return _PROVIDER_ALIASES.get(hint.strip().lower())


class ProviderCredentials:
    """Operator-held keys per provider, read once from configuration."""

    def __init__(self, keys: Optional[Mapping[str, str]] = None):
        self._keys: Dict[Provider, str] = {}
        for name, value in (keys or {}).items():
            provider = resolve_provider(name)
            if provider is not None and value:
                self._keys[provider] = value

    @classmethod
    def from_env(cls) -> "ProviderCredentials":
        from core.config import get_provider_keys

        return cls(get_provider_keys())

    def get(self, provider: Optional[Provider]) -> Optional[str]:
        if provider is None:
            return None
        return self._keys.get(provider)

    def configured(self) -> Dict[str, bool]:
        """Which providers have a key, without exposing the keys."""
        return {provider.value: provider in self._keys for provider in Provider}

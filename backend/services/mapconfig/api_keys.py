"""Removal and injection of provider API keys in style URLs."""

from typing import Optional, Tuple
from urllib.parse import quote

from services.mapconfig.providers import (
    PROVIDER_KEY_PARAMS,
    Provider,
    ProviderCredentials,
    detect_provider,
)

# Query parameters that carry credentials, compared case-insensitively.
API_KEY_PARAMS = frozenset({"key", "apikey", "api_key", "x-api-key", "token"})


def _split_url(url: str) -> Tuple[str, Optional[str], str]:
    """Split into (base, query or None, fragment suffix including '#')."""
    fragment = ""
    if "#" in url:
        url, frag = url.split("#", 1)
        fragment = "#" + frag
    if "?" not in url:
        return url, None, fragment
    base, query = url.split("?", 1)
    return base, query, fragment


def _param_name(pair: str) -> str:
    return pair.split("=", 1)[0].strip().lower()


def strip_api_keys(url: Optional[str]) -> Optional[str]:
    """Remove credential query parameters from ``url``.

    Other parameters are kept verbatim and in order. Empty pairs left by
    ``&&`` or a trailing ``&`` are dropped, and the ``?`` goes away with the
    last parameter.
    """
    if not url:
        return url

    base, query, fragment = _split_url(url)
    if query is None:
        return url

    kept = [pair for pair in query.split("&") if pair and _param_name(pair) not in API_KEY_PARAMS]
    if not kept:
        return f"{base}{fragment}"
    return f"{base}?{'&'.join(kept)}{fragment}"


def append_query_param(url: str, name: str, value: str) -> str:
    """Append ``name=value`` to the query of ``url``, keeping any fragment."""
    base, query, fragment = _split_url(url)
    param = f"{name}={quote(value, safe='')}"
    if query:
        return f"{base}?{query}&{param}{fragment}"
    return f"{base}?{param}{fragment}"


def inject_api_key(
    url: Optional[str],
    provider: Optional[Provider] = None,
    credentials: Optional[ProviderCredentials] = None,
) -> Optional[str]:
    """Return ``url`` carrying a fresh operator key for its provider.

    Existing keys are always stripped first, so repeated calls never stack
    parameters. Without a provider or a configured key the keyless URL is
    returned unchanged.
    """
    if not url:
        return url

    if provider is None:
        provider = detect_provider(url)

    clean_url = strip_api_keys(url)
    if provider is None:
        return clean_url

    if credentials is None:
        credentials = ProviderCredentials.from_env()
    api_key = credentials.get(provider)
    if not api_key:
        return clean_url

    return append_query_param(clean_url, PROVIDER_KEY_PARAMS[provider], api_key)

"""Legacy ``backgroundMaps``/``overlayMaps`` response shape for older mobile clients."""

import re
from typing import Iterable

from models.map_config import LegacyMapConfig, LegacyMapEntry, PublicMapConfig

# Overlay names from the original static mapconfig.json. Records this old
# carry no overlay metadata, so the name is the only signal.
OVERLAY_MAP_NAMES = (
    "Kataster",
    "Kataster BEV",
    "Kataster BEV2",
    "KatasterKTNLight",
    "Kataster OVL",
    "dkm_bev_symbole",
    "flawi",
    "gefahr",
    "NZParcels",
    "NSW BaseMap Overlay",
    "Inspire WMS",
    "BEV DKM GST",
)
_OVERLAY_NAMES_LOWER = frozenset(name.lower() for name in OVERLAY_MAP_NAMES)

# Keys hardcoded in client-side lookups, matched on name or label.
KEY_ALIASES = (
    ("Global", "Global"),
    ("Global 2", "Global2"),
)

DEFAULT_TYPE = "vtc"
DEFAULT_FLAG = "🌐"
DEFAULT_COUNTRY = "Global"


def is_overlay(config: PublicMapConfig) -> bool:
    """Classify a record as overlay.

    First match wins: ``metadata.isOverlay is True``, then
    ``metadata.category == "overlay"``, then the known overlay names.
    """
    metadata = config.metadata or {}
    if metadata.get("isOverlay") is True:
        return True
    if metadata.get("category") == "overlay":
        return True
    return (config.name or "").lower() in _OVERLAY_NAMES_LOWER


def legacy_key(config: PublicMapConfig) -> str:
    for alias, key in KEY_ALIASES:
        if config.name == alias or config.label == alias:
            return key
    return re.sub(r"[^a-zA-Z0-9]", "", config.name or "")


def to_legacy_entry(config: PublicMapConfig) -> LegacyMapEntry:
    return LegacyMapEntry(
        name=config.name,
        style=config.style,
        label=config.label or config.name,
        type=config.type or DEFAULT_TYPE,
        flag=config.flag or DEFAULT_FLAG,
        country=config.country or DEFAULT_COUNTRY,
        layers=config.layers or None,
    )


def to_legacy_format(configs: Iterable[PublicMapConfig]) -> LegacyMapConfig:
    """Bucket sanitized records into background and overlay maps.

    Records sharing a key overwrite earlier ones, so input order matters.
    """
    legacy = LegacyMapConfig()
    for config in configs:
        bucket = legacy.overlay_maps if is_overlay(config) else legacy.background_maps
        bucket[legacy_key(config)] = to_legacy_entry(config)
    return legacy

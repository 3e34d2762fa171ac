"""Pydantic models for map configuration records and their public shapes."""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Columns that have held the style URL over the dataset's lifetime, most
# authoritative first.
STYLE_FIELD_PRIORITY = ("style", "style_url", "public_style_url")


class MapConfigRecord(BaseModel):
    """Canonical internal shape of one ``map_configs`` row."""

    id: Optional[Any] = None
    name: str = ""
    label: Optional[str] = None
    country: Optional[str] = None
    flag: Optional[str] = None
    type: Optional[str] = None
    style: str = ""
    original_style: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    layers: List[Any] = Field(default_factory=list)
    is_active: bool = True
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _first_style(raw: Mapping[str, Any]) -> str:
    for field in STYLE_FIELD_PRIORITY:
        value = raw.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def normalize_record(raw: Union[BaseModel, Mapping[str, Any]]) -> MapConfigRecord:
    """Fold the historical field variants of a raw row into a MapConfigRecord.

    Existing ``metadata`` keys win over the legacy ``map_category``,
    ``requires_api_key`` and ``is_overlay`` columns.
    """
    if isinstance(raw, MapConfigRecord):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        raw = {}

    metadata = raw.get("metadata")
    metadata = dict(metadata) if isinstance(metadata, Mapping) else {}

    map_category = raw.get("map_category")
    if isinstance(map_category, str) and map_category and "category" not in metadata:
        metadata["category"] = map_category

    requires_api_key = raw.get("requires_api_key")
    if isinstance(requires_api_key, str) and requires_api_key and "provider" not in metadata:
        metadata["provider"] = requires_api_key

    if raw.get("is_overlay") is True and "isOverlay" not in metadata:
        metadata["isOverlay"] = True

    layers = raw.get("layers")
    is_active = raw.get("is_active")
    is_public = raw.get("is_public")

    return MapConfigRecord(
        id=raw.get("id"),
        name=_text(raw.get("name")) or "",
        label=_text(raw.get("label")),
        country=_text(raw.get("country")),
        flag=_text(raw.get("flag")),
        type=_text(raw.get("type")),
        style=_first_style(raw),
        original_style=_text(raw.get("original_style") or raw.get("originalStyle")),
        metadata=metadata,
        layers=list(layers) if isinstance(layers, (list, tuple)) else [],
        is_active=is_active if isinstance(is_active, bool) else True,
        is_public=is_public if isinstance(is_public, bool) else True,
        created_at=_timestamp(raw.get("created_at")),
        updated_at=_timestamp(raw.get("updated_at")),
    )


class PublicMapConfig(BaseModel):
    """A sanitized record as served to clients."""

    id: Optional[Any] = None
    name: str
    label: Optional[str] = None
    type: Optional[str] = None
    style: str
    country: Optional[str] = None
    flag: Optional[str] = None
    layers: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class LegacyMapEntry(BaseModel):
    """One entry of the legacy ``backgroundMaps``/``overlayMaps`` buckets."""

    name: str
    style: str
    label: str
    type: str
    flag: str
    country: str
    layers: Optional[List[Dict[str, Any]]] = None


class LegacyMapConfig(BaseModel):
    """The two-bucket shape expected by older mobile clients."""

    background_maps: Dict[str, LegacyMapEntry] = Field(
        default_factory=dict, alias="backgroundMaps"
    )
    overlay_maps: Dict[str, LegacyMapEntry] = Field(default_factory=dict, alias="overlayMaps")

    model_config = ConfigDict(populate_by_name=True)

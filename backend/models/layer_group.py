"""Pydantic models for layer groups (a basemap plus ordered overlays)."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from models.map_config import MapConfigRecord, PublicMapConfig


class LayerGroupOverlayRecord(BaseModel):
    """Association of an overlay record with a layer group."""

    layer_group_id: Any
    overlay: MapConfigRecord
    display_order: int = 0
    is_visible_default: bool = True
    opacity: float = 1.0


class LayerGroupRecord(BaseModel):
    """A layer group row with its (optional) basemap record."""

    id: Any
    name: str
    description: Optional[str] = None
    display_order: int = 0
    is_featured: bool = False
    tags: List[str] = Field(default_factory=list)
    preview_image_url: Optional[str] = None
    basemap: Optional[MapConfigRecord] = None


class PublicLayerGroupOverlay(BaseModel):
    overlay: PublicMapConfig
    display_order: int
    is_visible_default: bool
    opacity: float


class PublicLayerGroup(BaseModel):
    id: Any
    name: str
    description: Optional[str] = None
    display_order: int = 0
    is_featured: bool = False
    tags: List[str] = Field(default_factory=list)
    preview_image_url: Optional[str] = None
    basemap: Optional[PublicMapConfig] = None
    overlays: List[PublicLayerGroupOverlay] = Field(default_factory=list)

"""Package for ORM model definitions."""

from db.models.layer_group import LayerGroup, LayerGroupOverlay
from db.models.map_config import MapConfig

__all__ = ["LayerGroup", "LayerGroupOverlay", "MapConfig"]

"""Response envelopes for the public configuration endpoints."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from models.layer_group import PublicLayerGroup
from models.map_config import PublicMapConfig


class MapConfigResponse(BaseModel):
    """Current (non-legacy) ``/public/mapconfig`` shape."""

    version: str
    timestamp: datetime
    configs: List[PublicMapConfig]
    layer_groups: List[PublicLayerGroup] = Field(default_factory=list, alias="layerGroups")
    total: int

    model_config = ConfigDict(populate_by_name=True)


class LayerGroupsResponse(BaseModel):
    version: str
    timestamp: datetime
    layer_groups: List[PublicLayerGroup] = Field(default_factory=list, alias="layerGroups")
    total: int

    model_config = ConfigDict(populate_by_name=True)

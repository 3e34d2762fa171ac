"""ORM models for layer groups and their overlay associations."""

from sqlalchemy import Column, ForeignKey, text
from sqlalchemy.dialects.postgresql import (
    ARRAY,
    BOOLEAN,
    DOUBLE_PRECISION,
    INTEGER,
    TEXT,
    TIMESTAMP,
    UUID,
)

from db.base import Base


class LayerGroup(Base):
    """A basemap bundled with a curated set of overlays."""

    __tablename__ = "layer_groups"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    )
    name = Column(TEXT, nullable=False)
    description = Column(TEXT, nullable=True)
    basemap_id = Column(
        UUID(as_uuid=True),
        ForeignKey("map_configs.id", ondelete="SET NULL"),
        nullable=True,
    )
    display_order = Column(INTEGER, nullable=False, server_default=text("0"))
    is_active = Column(BOOLEAN, nullable=False, server_default=text("true"))
    is_public = Column(BOOLEAN, nullable=False, server_default=text("true"))
    is_featured = Column(BOOLEAN, nullable=False, server_default=text("false"))
    tags = Column(ARRAY(TEXT), nullable=True)
    preview_image_url = Column(TEXT, nullable=True)
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )


class LayerGroupOverlay(Base):
    """Overlay membership with per-group display settings."""

    __tablename__ = "layer_group_overlays"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    )
    layer_group_id = Column(
        UUID(as_uuid=True),
        ForeignKey("layer_groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    overlay_id = Column(
        UUID(as_uuid=True),
        ForeignKey("map_configs.id", ondelete="CASCADE"),
        nullable=False,
    )
    display_order = Column(INTEGER, nullable=False, server_default=text("0"))
    is_visible_default = Column(BOOLEAN, nullable=False, server_default=text("true"))
    opacity = Column(DOUBLE_PRECISION, nullable=False, server_default=text("1.0"))

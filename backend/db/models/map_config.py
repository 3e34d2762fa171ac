"""ORM model for the map_configs table."""

from sqlalchemy import Column, text
from sqlalchemy.dialects.postgresql import BOOLEAN, JSONB, TEXT, TIMESTAMP, UUID

from db.base import Base


class MapConfig(Base):
    """One basemap or overlay style record."""

    __tablename__ = "map_configs"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    )
    # Unique constraint was dropped to allow renames.
    name = Column(TEXT, nullable=False)
    label = Column(TEXT, nullable=True)
    country = Column(TEXT, nullable=True)
    flag = Column(TEXT, nullable=True)
    type = Column(TEXT, nullable=True)
    style = Column(TEXT, nullable=True)
    style_url = Column(TEXT, nullable=True)
    public_style_url = Column(TEXT, nullable=True)
    original_style = Column(TEXT, nullable=True)
    requires_api_key = Column(TEXT, nullable=True)
    map_category = Column(TEXT, nullable=True)
    # "metadata" is reserved on declarative classes
    config_metadata = Column("metadata", JSONB, nullable=True)
    layers = Column(JSONB, nullable=True)
    preview_image_url = Column(TEXT, nullable=True)
    is_active = Column(BOOLEAN, nullable=False, server_default=text("true"))
    is_public = Column(BOOLEAN, nullable=False, server_default=text("true"))
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

    def as_record_dict(self) -> dict:
        """Raw column values keyed by their database names."""
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "country": self.country,
            "flag": self.flag,
            "type": self.type,
            "style": self.style,
            "style_url": self.style_url,
            "public_style_url": self.public_style_url,
            "original_style": self.original_style,
            "requires_api_key": self.requires_api_key,
            "map_category": self.map_category,
            "metadata": self.config_metadata,
            "layers": self.layers,
            "is_active": self.is_active,
            "is_public": self.is_public,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

"""Create map_configs, layer_groups and layer_group_overlays tables."""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20260301_create_map_configs"
down_revision = None
branch_labels = None
depends_on = None


def _has_table(conn, table_name: str) -> bool:
    inspector = sa.inspect(conn)
    return inspector.has_table(table_name)


def _uuid_pk():
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps():
    return [
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade():
    conn = op.get_bind()
    if not _has_table(conn, "map_configs"):
        op.create_table(
            "map_configs",
            _uuid_pk(),
            sa.Column("name", sa.TEXT(), nullable=False),
            sa.Column("label", sa.TEXT(), nullable=True),
            sa.Column("country", sa.TEXT(), nullable=True),
            sa.Column("flag", sa.TEXT(), nullable=True),
            sa.Column("type", sa.TEXT(), nullable=True),
            sa.Column("style", sa.TEXT(), nullable=True),
            sa.Column("style_url", sa.TEXT(), nullable=True),
            sa.Column("public_style_url", sa.TEXT(), nullable=True),
            sa.Column("original_style", sa.TEXT(), nullable=True),
            sa.Column("requires_api_key", sa.TEXT(), nullable=True),
            sa.Column("map_category", sa.TEXT(), nullable=True),
            sa.Column("metadata", postgresql.JSONB(), nullable=True),
            sa.Column("layers", postgresql.JSONB(), nullable=True),
            sa.Column("preview_image_url", sa.TEXT(), nullable=True),
            sa.Column("is_active", sa.BOOLEAN(), nullable=False, server_default=sa.text("true")),
            sa.Column("is_public", sa.BOOLEAN(), nullable=False, server_default=sa.text("true")),
            *_timestamps(),
        )
        op.create_index("ix_map_configs_lower_name", "map_configs", [sa.text("lower(name)")])

    if not _has_table(conn, "layer_groups"):
        op.create_table(
            "layer_groups",
            _uuid_pk(),
            sa.Column("name", sa.TEXT(), nullable=False),
            sa.Column("description", sa.TEXT(), nullable=True),
            sa.Column(
                "basemap_id",
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey("map_configs.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("display_order", sa.INTEGER(), nullable=False, server_default=sa.text("0")),
            sa.Column("is_active", sa.BOOLEAN(), nullable=False, server_default=sa.text("true")),
            sa.Column("is_public", sa.BOOLEAN(), nullable=False, server_default=sa.text("true")),
            sa.Column(
                "is_featured", sa.BOOLEAN(), nullable=False, server_default=sa.text("false")
            ),
            sa.Column("tags", postgresql.ARRAY(sa.TEXT()), nullable=True),
            sa.Column("preview_image_url", sa.TEXT(), nullable=True),
            *_timestamps(),
        )

    if not _has_table(conn, "layer_group_overlays"):
        op.create_table(
            "layer_group_overlays",
            _uuid_pk(),
            sa.Column(
                "layer_group_id",
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey("layer_groups.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "overlay_id",
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey("map_configs.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("display_order", sa.INTEGER(), nullable=False, server_default=sa.text("0")),
            sa.Column(
                "is_visible_default", sa.BOOLEAN(), nullable=False, server_default=sa.text("true")
            ),
            sa.Column(
                "opacity",
                postgresql.DOUBLE_PRECISION(),
                nullable=False,
                server_default=sa.text("1.0"),
            ),
        )
        op.create_index(
            "ix_layer_group_overlays_group", "layer_group_overlays", ["layer_group_id"]
        )


def downgrade():
    conn = op.get_bind()
    if _has_table(conn, "layer_group_overlays"):
        op.drop_table("layer_group_overlays")
    if _has_table(conn, "layer_groups"):
        op.drop_table("layer_groups")
    if _has_table(conn, "map_configs"):
        op.drop_table("map_configs")

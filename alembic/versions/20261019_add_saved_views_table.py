# File: /alembic/versions/20261019_add_saved_views_table.py | Version: 1.0 | Title: Add saved_views table
"""add saved_views table"""

from alembic import op
import sqlalchemy as sa

revision = "add_saved_views_20261019"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "saved_views",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(length=20), nullable=False),
        sa.Column("filters", sa.JSON(), nullable=False),
        sa.Column("column_state", sa.JSON(), nullable=True),
        sa.Column("sort_column_id", sa.String(length=100), nullable=True),
        sa.Column("sort_direction", sa.String(length=4), nullable=False),
        sa.Column("view_mode", sa.String(length=10), nullable=False),
        sa.Column("board_group_by", sa.String(length=100), nullable=True),
        sa.Column("pinned", sa.Boolean(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False),
        sa.Column("color", sa.String(length=20), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("cached_record_count", sa.Integer(), nullable=True),
        sa.Column("cached_record_count_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("use_count", sa.Integer(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_saved_views_owner_entity", "saved_views", ["owner_id", "entity_type"])
    op.create_index("ix_saved_views_entity_visibility", "saved_views", ["entity_type", "visibility"])


def downgrade():
    op.drop_index("ix_saved_views_entity_visibility", table_name="saved_views")
    op.drop_index("ix_saved_views_owner_entity", table_name="saved_views")
    op.drop_table("saved_views")

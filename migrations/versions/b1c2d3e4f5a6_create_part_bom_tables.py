"""create part, bom link, audit and sequence tables

Revision ID: b1c2d3e4f5a6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "b1c2d3e4f5a6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "parts" not in existing_tables:
        op.create_table(
            "parts",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("part_number", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            op.f("ix_parts_part_number"), "parts", ["part_number"], unique=True
        )

    if "bom_links" not in existing_tables:
        op.create_table(
            "bom_links",
            sa.Column("parent_id", sa.String(length=36), nullable=False),
            sa.Column("child_id", sa.String(length=36), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.CheckConstraint("quantity > 0", name="bom_links_quantity_check"),
            sa.CheckConstraint("parent_id <> child_id", name="bom_links_no_self_link"),
            sa.ForeignKeyConstraint(["parent_id"], ["parts.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["child_id"], ["parts.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("parent_id", "child_id"),
        )
        op.create_index("idx_bom_links_parent", "bom_links", ["parent_id"], unique=False)
        op.create_index("idx_bom_links_child", "bom_links", ["child_id"], unique=False)

    if "audit_logs" not in existing_tables:
        op.create_table(
            "audit_logs",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("part_id", sa.String(length=36), nullable=False),
            sa.Column("action", sa.String(length=32), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("timestamp", sa.DateTime(), nullable=False),
            sa.Column("metadata", sa.JSON(), nullable=True),
            sa.ForeignKeyConstraint(["part_id"], ["parts.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "idx_audit_logs_part_timestamp",
            "audit_logs",
            ["part_id", "timestamp"],
            unique=False,
        )

    if "id_sequences" not in existing_tables:
        op.create_table(
            "id_sequences",
            sa.Column("name", sa.String(length=32), nullable=False),
            sa.Column("next_value", sa.Integer(), nullable=False),
            sa.PrimaryKeyConstraint("name"),
        )


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "id_sequences" in existing_tables:
        op.drop_table("id_sequences")
    if "audit_logs" in existing_tables:
        op.drop_index("idx_audit_logs_part_timestamp", table_name="audit_logs")
        op.drop_table("audit_logs")
    if "bom_links" in existing_tables:
        op.drop_index("idx_bom_links_child", table_name="bom_links")
        op.drop_index("idx_bom_links_parent", table_name="bom_links")
        op.drop_table("bom_links")
    if "parts" in existing_tables:
        op.drop_index(op.f("ix_parts_part_number"), table_name="parts")
        op.drop_table("parts")

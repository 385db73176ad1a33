"""Create users and packaging tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  users, packaging_items, packaging_components, packaging_documents
       with their enum types and indexes.
Child tables reference packaging_items with ON DELETE CASCADE.

Rollback: downgrade() drops the tables and enum types (all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

packaging_status = sa.Enum(
    "DRAFT", "ACTIVE", "INACTIVE", "DEACTIVATED", name="packaging_status"
)
document_type = sa.Enum(
    "CONFORMITY_DECLARATION", "TECHNICAL_DOCUMENTATION", name="document_type"
)
user_role = sa.Enum("USER", "ADMIN", name="user_role")


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("role", user_role, nullable=False, server_default="USER"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "packaging_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("internal_code", sa.String(100), nullable=False),
        sa.Column("materials", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("status", packaging_status, nullable=False, server_default="DRAFT"),
        sa.Column("weight", sa.String(50), nullable=False),
        sa.Column("ppwr_level", sa.String(100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_packaging_items"),
    )
    op.create_index(
        "ix_packaging_items_internal_code", "packaging_items", ["internal_code"]
    )
    op.create_index(
        "idx_packaging_items_created_at", "packaging_items", ["created_at"]
    )

    op.create_table(
        "packaging_components",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("packaging_item_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("format", sa.String(100), nullable=False),
        sa.Column("weight", sa.String(50), nullable=False),
        sa.Column("volume", sa.String(50), nullable=False),
        sa.Column("ppwr_category", sa.String(100), nullable=False),
        sa.Column("ppwr_level", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("supplier", sa.String(255), nullable=False),
        sa.Column("manufacturing_process", sa.String(255), nullable=False),
        sa.Column("color", sa.String(100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_packaging_components"),
        sa.ForeignKeyConstraint(
            ["packaging_item_id"],
            ["packaging_items.id"],
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("quantity > 0", name="ck_packaging_components_quantity_positive"),
    )
    op.create_index(
        "ix_packaging_components_packaging_item_id",
        "packaging_components",
        ["packaging_item_id"],
    )

    op.create_table(
        "packaging_documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("packaging_item_id", sa.Uuid(), nullable=False),
        sa.Column("type", document_type, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "file_path",
            sa.String(512),
            nullable=False,
            comment="Path relative to the upload root, e.g. packaging/<uuid>.pdf",
        ),
        sa.Column("file_size", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_packaging_documents"),
        sa.ForeignKeyConstraint(
            ["packaging_item_id"],
            ["packaging_items.id"],
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_packaging_documents_packaging_item_id",
        "packaging_documents",
        ["packaging_item_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_packaging_documents_packaging_item_id", table_name="packaging_documents")
    op.drop_table("packaging_documents")
    op.drop_index("ix_packaging_components_packaging_item_id", table_name="packaging_components")
    op.drop_table("packaging_components")
    op.drop_index("idx_packaging_items_created_at", table_name="packaging_items")
    op.drop_index("ix_packaging_items_internal_code", table_name="packaging_items")
    op.drop_table("packaging_items")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (document_type, packaging_status, user_role):
        enum_type.drop(bind, checkfirst=True)

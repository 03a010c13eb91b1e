"""Initial master catalog schema.

Revision ID: 0001_initial_catalog
Revises:
Create Date: 2026-10-19 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial_catalog"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "master_product",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("master_sku", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("dimensions", sa.JSON(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("category", sa.JSON(), nullable=True),
        sa.Column("brand", sa.String(length=255), nullable=True),
        sa.Column("pricing", sa.JSON(), nullable=False),
        sa.Column("seo", sa.JSON(), nullable=False),
        sa.Column("variants", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("data_quality_score", sa.Integer(), nullable=False),
        sa.Column("validation_errors", sa.JSON(), nullable=False),
        sa.Column("validation_warnings", sa.JSON(), nullable=False),
        sa.Column("import_source", sa.String(length=64), nullable=True),
        sa.Column("imported_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("import_batch_id", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_master_product")),
        sa.UniqueConstraint("master_sku", name=op.f("uq_master_product_master_sku")),
    )
    op.create_index(
        op.f("ix_master_product_organization_id"),
        "master_product",
        ["organization_id"],
    )
    op.create_index(
        op.f("ix_master_product_import_batch_id"),
        "master_product",
        ["import_batch_id"],
    )

    op.create_table(
        "platform_mapping",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("master_product_id", sa.Uuid(), nullable=True),
        sa.Column("platform", sa.String(length=32), nullable=False),
        sa.Column("platform_product_id", sa.String(length=128), nullable=False),
        sa.Column("platform_data", sa.JSON(), nullable=False),
        sa.Column("sync_status", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["master_product_id"],
            ["master_product.id"],
            name=op.f("fk_platform_mapping_master_product_id_master_product"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_platform_mapping")),
    )
    op.create_index(
        "uq_platform_mapping_active_key",
        "platform_mapping",
        ["platform", "platform_product_id"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )
    op.create_index(
        "ix_platform_mapping_key",
        "platform_mapping",
        ["platform", "platform_product_id"],
    )

    op.create_table(
        "import_batch",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("batch_id", sa.String(length=128), nullable=False),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("import_type", sa.String(length=64), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_products", sa.Integer(), nullable=False),
        sa.Column("successful_products", sa.Integer(), nullable=False),
        sa.Column("failed_products", sa.Integer(), nullable=False),
        sa.Column("skipped_products", sa.Integer(), nullable=False),
        sa.Column("errors", sa.JSON(), nullable=False),
        sa.Column("warnings", sa.JSON(), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_import_batch")),
        sa.UniqueConstraint("batch_id", name=op.f("uq_import_batch_batch_id")),
    )

    op.create_table(
        "sync_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("batch_id", sa.String(length=128), nullable=False),
        sa.Column("product_id", sa.String(length=128), nullable=False),
        sa.Column("platform", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("error_code", sa.String(length=64), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("synced_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sync_log")),
    )
    op.create_index(op.f("ix_sync_log_batch_id"), "sync_log", ["batch_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_sync_log_batch_id"), table_name="sync_log")
    op.drop_table("sync_log")
    op.drop_table("import_batch")
    op.drop_index("ix_platform_mapping_key", table_name="platform_mapping")
    op.drop_index("uq_platform_mapping_active_key", table_name="platform_mapping")
    op.drop_table("platform_mapping")
    op.drop_index(op.f("ix_master_product_import_batch_id"), table_name="master_product")
    op.drop_index(op.f("ix_master_product_organization_id"), table_name="master_product")
    op.drop_table("master_product")

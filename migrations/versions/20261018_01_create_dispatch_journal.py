"""create dispatch journal table

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "dispatch_journal",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("operation_id", sa.Integer(), nullable=False),
        sa.Column("script_guid", sa.String(length=64), nullable=False),
        sa.Column("script_name", sa.String(length=255), nullable=False),
        sa.Column("script_version", sa.String(length=50), nullable=True),
        sa.Column("collection_id", sa.String(length=50), nullable=True),
        sa.Column("resource_ids", sa.Text(), nullable=True),
        sa.Column("parameter_hash", sa.String(length=64), nullable=True),
        sa.Column("operator", sa.String(length=100), nullable=True),
        sa.Column("dispatched_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_dispatch_journal_operation_id", "dispatch_journal", ["operation_id"])
    op.create_index("ix_dispatch_journal_script_name", "dispatch_journal", ["script_name"])


def downgrade() -> None:
    op.drop_index("ix_dispatch_journal_script_name", table_name="dispatch_journal")
    op.drop_index("ix_dispatch_journal_operation_id", table_name="dispatch_journal")
    op.drop_table("dispatch_journal")

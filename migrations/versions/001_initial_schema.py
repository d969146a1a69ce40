"""Initial schema: health_samples

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Ensure pgcrypto is available for gen_random_uuid()
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "health_samples",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("metric", sa.String(64), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("value", sa.Float, nullable=True),
        sa.Column("category_value", sa.Integer, nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "metadata", postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")
        ),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("end_at >= start_at", name="chk_health_samples_end_after_start"),
        sa.CheckConstraint(
            "(kind = 'quantity' AND value IS NOT NULL AND category_value IS NULL)"
            " OR (kind = 'category' AND category_value IS NOT NULL AND value IS NULL)",
            name="chk_health_samples_kind_payload",
        ),
    )
    op.create_index("idx_health_samples_metric_start", "health_samples", ["metric", "start_at"])
    op.create_index("idx_health_samples_batch", "health_samples", ["batch_id"])


def downgrade() -> None:
    op.drop_index("idx_health_samples_batch", table_name="health_samples")
    op.drop_index("idx_health_samples_metric_start", table_name="health_samples")
    op.drop_table("health_samples")

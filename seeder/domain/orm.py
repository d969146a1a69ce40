"""SQLAlchemy ORM model for the database-backed health store.

Tables:
- health_samples: every written sample, quantity or sleep category
"""

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SampleKind(enum.Enum):
    QUANTITY = "quantity"
    CATEGORY = "category"


class HealthSampleModel(Base):
    __tablename__ = "health_samples"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    metric: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)

    # Exactly one of value / category_value is set, depending on kind
    value: Mapped[float | None] = mapped_column(Float, nullable=True)
    category_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # "metadata" is reserved on declarative classes
    sample_metadata: Mapped[dict] = mapped_column(
        "metadata", JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    batch_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("now()")
    )

    __table_args__ = (
        CheckConstraint("end_at >= start_at", name="chk_health_samples_end_after_start"),
        CheckConstraint(
            "(kind = 'quantity' AND value IS NOT NULL AND category_value IS NULL)"
            " OR (kind = 'category' AND category_value IS NOT NULL AND value IS NULL)",
            name="chk_health_samples_kind_payload",
        ),
        Index("idx_health_samples_metric_start", "metric", "start_at"),
        Index("idx_health_samples_batch", "batch_id"),
    )

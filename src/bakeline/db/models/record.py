"""Persisted production record model."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bakeline.db.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProductionRecord(Base):
    """One submitted unit-of-work as stored.

    The raw submission payload is kept in ``data``; the indexed columns and
    the three duration metrics are derived from it on insert.
    """

    __tablename__ = "production_record"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, nullable=False, index=True
    )
    panel: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    unit: Mapped[str] = mapped_column(String(100), nullable=False)
    lote: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    lot_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    shift_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    fecha_texto: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Derived metrics (milliseconds)
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    dead_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    overall_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return (
            f"<ProductionRecord(id={self.id}, panel={self.panel}, unit={self.unit}, "
            f"lot_id={self.lot_id}, overall_ms={self.overall_ms})>"
        )

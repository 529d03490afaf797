"""ORM models for weekly plans and bin manifests."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from uid_ops.db.base import Base


class WeeklyPlan(Base):
    """One plan document per week; ``data`` holds the whole ordered line list."""

    __tablename__ = "plans"

    week_start: Mapped[str] = mapped_column(String(10), primary_key=True)
    data: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


def _number_out(value: float | None) -> float | int | None:
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


class BinRecord(Base):
    """Bin manifest row keyed by (week_start, mobile_bin)."""

    __tablename__ = "bins"
    __table_args__ = (Index("idx_bins_week", "week_start"),)

    week_start: Mapped[str] = mapped_column(String(10), primary_key=True)
    mobile_bin: Mapped[str] = mapped_column(String(128), primary_key=True)
    total_units: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    weight_kg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    date_local: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start,
            "mobile_bin": self.mobile_bin,
            "total_units": _number_out(self.total_units),
            "weight_kg": _number_out(self.weight_kg),
            "date_local": self.date_local,
        }

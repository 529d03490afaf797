"""Plan line and bin row models with their loose-input coercion rules."""

import math
from typing import Any, Optional

from pydantic import BaseModel


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _number_or_zero(value: Any) -> float | int:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(n) or n < 0:
        return 0
    return int(n) if n.is_integer() else n


class PlanLine(BaseModel):
    """One line of a weekly production plan."""

    po_number: str
    sku_code: str
    start_date: str
    due_date: str
    target_qty: float | int = 0
    priority: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any, fallback_start: str = "") -> Optional["PlanLine"]:
        """Coerce a client line; None when po_number, sku_code or due_date is blank."""
        if not isinstance(raw, dict):
            return None
        line = cls(
            po_number=_text(raw.get("po_number")),
            sku_code=_text(raw.get("sku_code")),
            start_date=_text(raw.get("start_date")) or fallback_start,
            due_date=_text(raw.get("due_date")),
            target_qty=_number_or_zero(raw.get("target_qty")),
            priority=_text(raw.get("priority")) or None,
            notes=_text(raw.get("notes")) or None,
        )
        if not (line.po_number and line.sku_code and line.due_date):
            return None
        return line

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def _optional_measure(value: Any) -> tuple[float | None, bool]:
    """Return (number, ok). Blank means None; anything else must be finite and >= 0."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None, True
    if isinstance(value, bool):
        return None, False
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None, False
    if not math.isfinite(n) or n < 0:
        return None, False
    return n, True


class BinRow(BaseModel):
    """Validated bin manifest row for one week."""

    week_start: str
    mobile_bin: str
    total_units: Optional[float] = None
    weight_kg: Optional[float] = None
    date_local: str

    @classmethod
    def validate_raw(cls, raw: Any, week_start: str) -> tuple[Optional["BinRow"], Optional[str]]:
        """Return (row, None) or (None, reason)."""
        if not isinstance(raw, dict):
            return None, "row must be an object"
        mobile_bin = _text(raw.get("mobile_bin"))
        if not mobile_bin:
            return None, "missing mobile_bin"
        units, ok = _optional_measure(raw.get("total_units"))
        if not ok:
            return None, "invalid total_units"
        weight, ok = _optional_measure(raw.get("weight_kg"))
        if not ok:
            return None, "invalid weight_kg"
        return (
            cls(
                week_start=week_start,
                mobile_bin=mobile_bin,
                total_units=units,
                weight_kg=weight,
                date_local=_text(raw.get("date_local")) or week_start,
            ),
            None,
        )

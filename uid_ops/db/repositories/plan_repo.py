"""Weekly plan and bin manifest repositories.

Plans are whole documents per week: a write replaces the full line list.
Bins are rows keyed by (week_start, mobile_bin): a write replaces the row.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select

from uid_ops.config import PLAN_WEEKS_LIMIT
from uid_ops.db import get_session
from uid_ops.db.models.plan import BinRecord, WeeklyPlan
from uid_ops.errors import ValidationError
from uid_ops.models.plans import BinRow, PlanLine
from uid_ops.utils.dates import monday_of, to_utc_iso
from uid_ops.utils.logger import get_logger

logger = get_logger("uid_ops.db.plan_repo")


def week_key(value: Any) -> str:
    """Normalize any date in a week to that week's Monday; ValidationError if unreadable."""
    monday = monday_of(value)
    if not monday:
        raise ValidationError("invalid weekStart", fields=["week_start"])
    return monday


class PlanStore:
    """Per-week production plan documents."""

    def get_week(self, week_start: Any) -> list[dict[str, Any]]:
        """Stored lines for the week, or [] when the week was never written."""
        monday = week_key(week_start)
        with get_session() as session:
            plan = session.get(WeeklyPlan, monday)
            if plan is None or not isinstance(plan.data, list):
                return []
            return list(plan.data)

    def put_week(self, week_start: Any, lines: Any) -> list[dict[str, Any]]:
        """Replace the week's lines. Lines without po_number, sku_code or due_date are dropped."""
        monday = week_key(week_start)
        raw = lines if isinstance(lines, list) else []
        clean = [line.to_dict() for line in (PlanLine.from_raw(r, monday) for r in raw) if line is not None]
        with get_session() as session:
            plan = session.get(WeeklyPlan, monday)
            if plan is None:
                session.add(WeeklyPlan(week_start=monday, data=clean))
            else:
                plan.data = clean
                plan.updated_at = datetime.now(timezone.utc)
        logger.info("plan.put_week", week_start=monday, lines=len(clean), dropped=len(raw) - len(clean))
        return clean

    def zero_week(self, week_start: Any) -> str:
        """Empty the week's plan; returns the normalized week key."""
        monday = week_key(week_start)
        self.put_week(monday, [])
        return monday

    def list_recent_weeks(self, limit: int = PLAN_WEEKS_LIMIT) -> list[dict[str, Any]]:
        with get_session() as session:
            q = select(WeeklyPlan.week_start, WeeklyPlan.updated_at).order_by(WeeklyPlan.week_start.desc()).limit(limit)
            return [
                {"week_start": week_start, "updated_at": to_utc_iso(updated_at) if updated_at else None}
                for week_start, updated_at in session.execute(q).all()
            ]


class BinStore:
    """Per-week bin manifests."""

    def put_week(self, week_start: Any, rows: Any) -> dict[str, Any]:
        """Validate rows individually and upsert the valid ones as one batch.

        A mobile_bin repeated within the call keeps only its last occurrence.
        Returns {"upserted", "rejected", "errors"}; raises ValidationError with
        the per-row errors when rows were given but none is valid.
        """
        monday = week_key(week_start)
        raw = rows if isinstance(rows, list) else []
        if not raw:
            return {"upserted": 0, "rejected": 0, "errors": []}

        clean: dict[str, BinRow] = {}
        errors: list[dict[str, Any]] = []
        for index, r in enumerate(raw):
            row, reason = BinRow.validate_raw(r, monday)
            if row is None:
                errors.append({"index": index, "row": r, "reason": reason})
                continue
            # Last occurrence wins; re-insert so it also takes the last position
            clean.pop(row.mobile_bin, None)
            clean[row.mobile_bin] = row

        if not clean:
            logger.warning("bins.put_week.all_rejected", week_start=monday, rejected=len(errors))
            raise ValidationError("no valid bin rows", fields=["mobile_bin"], details=errors)

        with get_session() as session:
            for row in clean.values():
                session.merge(BinRecord(**row.model_dump()))
        if errors:
            logger.info("bins.put_week.rejected", week_start=monday, rejected=len(errors))
        logger.info("bins.put_week", week_start=monday, upserted=len(clean))
        return {"upserted": len(clean), "rejected": len(errors), "errors": errors}

    def get_week(self, week_start: Any) -> list[dict[str, Any]]:
        monday = week_key(week_start)
        with get_session() as session:
            q = select(BinRecord).where(BinRecord.week_start == monday).order_by(BinRecord.mobile_bin)
            return [r.to_dict() for r in session.scalars(q).all()]

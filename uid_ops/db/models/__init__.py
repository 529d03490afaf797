"""Re-export all ORM models so Base.metadata has all tables."""

from uid_ops.db.models.plan import BinRecord, WeeklyPlan
from uid_ops.db.models.record import IntakeRecord

__all__ = [
    "IntakeRecord",
    "WeeklyPlan",
    "BinRecord",
]

"""DB repositories: stores that own the records, plans and bins tables."""

from uid_ops.db.repositories.plan_repo import BinStore, PlanStore, week_key
from uid_ops.db.repositories.record_repo import RecordStore

__all__ = [
    "RecordStore",
    "PlanStore",
    "BinStore",
    "week_key",
]

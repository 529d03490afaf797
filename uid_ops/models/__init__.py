"""Pydantic request/response models."""

from uid_ops.models.plans import BinRow, PlanLine
from uid_ops.models.records import (
    DeleteResult,
    FieldPatch,
    ImportResult,
    RecordIn,
    RejectedRow,
)

__all__ = [
    "BinRow",
    "PlanLine",
    "DeleteResult",
    "FieldPatch",
    "ImportResult",
    "RecordIn",
    "RejectedRow",
]

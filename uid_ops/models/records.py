"""Request/response models for intake records."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class FieldPatch(BaseModel):
    """Body of PATCH /records/{id}: one inline cell edit."""

    field: Optional[str] = None
    value: Any = None


class RecordIn(BaseModel):
    """Body of POST /records. Loosely typed; the store validates and coerces."""

    id: Optional[str] = None
    date_local: Any = None
    mobile_bin: Any = None
    sscc_label: Any = None
    po_number: Any = None
    sku_code: Any = None
    uid: Any = None

    model_config = {"extra": "ignore"}


class RejectedRow(BaseModel):
    """One import row that was not committed."""

    index: int
    po_number: str = ""
    sku_code: str = ""
    uid: str = ""
    reason: str
    missing: list[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    inserted_count: int = 0
    total_count: int = 0
    rejected_count: int = 0
    rejected_details: list[RejectedRow] = Field(default_factory=list)


class DeleteResult(BaseModel):
    """Outcome of one item of a batch delete."""

    uid: str
    sku_code: str = ""
    deleted: int = 0
    error: Optional[str] = None

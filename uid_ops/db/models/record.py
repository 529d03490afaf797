"""ORM model for intake scan records."""

from typing import Any, Optional

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from uid_ops.db.base import Base

STATUS_DRAFT = "draft"
STATUS_COMPLETE = "complete"

SYNC_UNKNOWN = "unknown"
SYNC_PENDING = "pending"
SYNC_SYNCED = "synced"

# Fields an intake edit may touch, in table-column order
EDITABLE_FIELDS = ("date_local", "mobile_bin", "sscc_label", "po_number", "sku_code", "uid")
NATURAL_KEY_FIELDS = ("po_number", "sku_code", "uid")
# sscc_label is never required
REQUIRED_FOR_COMPLETION = ("date_local", "mobile_bin", "po_number", "sku_code", "uid")


class IntakeRecord(Base):
    """One intake scan. Natural key (po_number, sku_code, uid) is unique once filled in.

    Blank natural-key parts are stored as NULL so incomplete shells never collide.
    """

    __tablename__ = "records"
    __table_args__ = (
        UniqueConstraint("po_number", "sku_code", "uid", name="uniq_po_sku_uid"),
        Index("idx_records_date", "date_local"),
        Index("idx_records_status", "status"),
        Index("idx_records_po", "po_number"),
        Index("idx_records_sku", "sku_code"),
        Index("idx_records_uid", "uid"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date_local: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    mobile_bin: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    sscc_label: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    po_number: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    sku_code: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    uid: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_DRAFT)
    # ISO-8601 UTC text; fixed format keeps string ordering chronological
    completed_at: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    sync_state: Mapped[str] = mapped_column(String(16), nullable=False, default=SYNC_UNKNOWN)

    def get_field(self, field: str) -> str:
        return getattr(self, field) or ""

    def set_field(self, field: str, value: str) -> None:
        if field in NATURAL_KEY_FIELDS:
            setattr(self, field, value if value and value.strip() else None)
        else:
            setattr(self, field, value)

    @property
    def natural_key(self) -> tuple[str, str, str] | None:
        """(po_number, sku_code, uid) when all three are filled in, else None."""
        key = tuple(self.get_field(f) for f in NATURAL_KEY_FIELDS)
        return key if all(k.strip() for k in key) else None  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date_local": self.get_field("date_local"),
            "mobile_bin": self.get_field("mobile_bin"),
            "sscc_label": self.get_field("sscc_label"),
            "po_number": self.get_field("po_number"),
            "sku_code": self.get_field("sku_code"),
            "uid": self.get_field("uid"),
            "status": self.status,
            "completed_at": self.completed_at,
            "sync_state": self.sync_state,
        }


def is_complete(values: dict[str, Any]) -> bool:
    """Completion predicate over a plain field mapping."""
    return all(str(values.get(f) or "").strip() for f in REQUIRED_FOR_COMPLETION)

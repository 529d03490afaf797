"""Intake record repository: field patches, natural-key upserts, import, query, delete.

Each public method runs in one session, so a call either commits as a whole
or rolls back. Completion pulses are published only after the commit.
"""

import uuid
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from uid_ops.db import get_session
from uid_ops.db.models.record import (
    EDITABLE_FIELDS,
    NATURAL_KEY_FIELDS,
    REQUIRED_FOR_COMPLETION,
    STATUS_COMPLETE,
    STATUS_DRAFT,
    SYNC_PENDING,
    SYNC_SYNCED,
    IntakeRecord,
    is_complete,
)
from uid_ops.errors import RecordConflictError, ValidationError
from uid_ops.models.records import DeleteResult, ImportResult, RejectedRow
from uid_ops.utils.dates import business_today, to_iso_date, utc_now_iso
from uid_ops.utils.logger import get_logger
from uid_ops.utils.row_normalizer import normalize_row

if TYPE_CHECKING:
    from uid_ops.api.scan_events import ScanEventHub

logger = get_logger("uid_ops.db.record_repo")

# Required on import; mobile_bin may be repaired later through a field patch
IMPORT_REQUIRED = ("date_local", "po_number", "sku_code", "uid")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _find_by_natural_key(
    session: Session,
    key: tuple[str, str, str],
    exclude_id: Optional[str] = None,
) -> Optional[IntakeRecord]:
    po_number, sku_code, uid = key
    q = (
        select(IntakeRecord)
        .where(IntakeRecord.po_number == po_number)
        .where(IntakeRecord.sku_code == sku_code)
        .where(IntakeRecord.uid == uid)
    )
    if exclude_id is not None:
        q = q.where(IntakeRecord.id != exclude_id)
    return session.scalars(q).first()


def _earliest(a: Optional[str], b: Optional[str]) -> Optional[str]:
    stamps = [s for s in (a, b) if s]
    return min(stamps) if stamps else None


class RecordStore:
    """Single source of truth for intake completion state."""

    def __init__(self, events: Optional["ScanEventHub"] = None):
        self._events = events

    def _pulse(self, ts: Optional[str]) -> None:
        if self._events is None:
            return
        try:
            self._events.publish(ts)
        except Exception as e:
            logger.warning("records.pulse_error", error=str(e))

    # --- field patch ---

    def apply_patch(self, record_id: Any, field: Any, value: Any) -> dict[str, Any]:
        """Set one field on a record (creating a shell for an unknown id) and re-evaluate completion."""
        record_id = _text(record_id)
        field = _text(field)
        if not record_id or not field:
            missing = [name for name, v in (("id", record_id), ("field", field)) if not v]
            raise ValidationError("id and field required", fields=missing)
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Invalid field: {field}", fields=[field])
        # Stored as typed; only None becomes blank
        value = "" if value is None else str(value)

        completed_now = False
        with get_session() as session:
            row = session.get(IntakeRecord, record_id)
            created = row is None
            if created:
                row = IntakeRecord(
                    id=record_id,
                    date_local=business_today(),
                    status=STATUS_DRAFT,
                    sync_state=SYNC_PENDING,
                )
                session.add(row)
            was_complete = row.status == STATUS_COMPLETE
            was_shell = not was_complete and row.natural_key is None

            row.set_field(field, value)

            key = row.natural_key
            survivor = _find_by_natural_key(session, key, exclude_id=record_id) if key else None
            if survivor is not None:
                if not was_shell:
                    raise RecordConflictError(
                        f"po_number/sku_code/uid already used by record {survivor.id}",
                        details={"id": record_id, "existing_id": survivor.id},
                    )
                if created:
                    session.expunge(row)
                else:
                    session.delete(row)
                logger.info(
                    "records.patch.shell_discarded",
                    id=record_id,
                    survivor_id=survivor.id,
                    created=created,
                )
                return survivor.to_dict()

            if not was_complete:
                if is_complete(row.to_dict()):
                    row.status = STATUS_COMPLETE
                    row.completed_at = utc_now_iso()
                    row.sync_state = SYNC_SYNCED
                    completed_now = True
                else:
                    row.sync_state = SYNC_PENDING
            session.flush()
            result = row.to_dict()

        logger.info(
            "records.patch",
            id=record_id,
            field=field,
            created=created,
            completed=completed_now,
        )
        if completed_now:
            self._pulse(result["completed_at"])
        return result

    # --- natural-key upsert ---

    def _candidate(self, payload: Mapping[str, Any], default_date: bool = True) -> dict[str, Any]:
        date_local = to_iso_date(payload.get("date_local"))
        if not date_local and default_date:
            date_local = business_today()
        return {
            "id": _text(payload.get("id")) or str(uuid.uuid4()),
            "date_local": date_local,
            "mobile_bin": _text(payload.get("mobile_bin")),
            "sscc_label": _text(payload.get("sscc_label")),
            "po_number": _text(payload.get("po_number")),
            "sku_code": _text(payload.get("sku_code")),
            "uid": _text(payload.get("uid")),
            "status": STATUS_COMPLETE,
            "completed_at": utc_now_iso(),
            "sync_state": SYNC_SYNCED,
        }

    def _upsert(self, session: Session, rec: dict[str, Any]) -> IntakeRecord:
        """Insert, or merge into the record holding the same natural key.

        Non-empty incoming values win, blanks never overwrite; status is forced
        to complete and the earliest completed_at is kept.
        """
        key = (rec["po_number"], rec["sku_code"], rec["uid"])
        target = _find_by_natural_key(session, key)
        same_id = session.get(IntakeRecord, rec["id"])
        if target is None:
            target = same_id
        elif same_id is not None and same_id is not target and same_id.natural_key is None:
            # Shell under the incoming id duplicates the keyed record; a keyed draft is its own scan
            session.delete(same_id)
            logger.debug("records.upsert.shell_discarded", id=same_id.id, survivor_id=target.id)

        if target is None:
            target = IntakeRecord(id=rec["id"])
            for field in EDITABLE_FIELDS:
                target.set_field(field, rec[field])
            target.completed_at = rec["completed_at"]
            session.add(target)
        else:
            for field in EDITABLE_FIELDS:
                if field in NATURAL_KEY_FIELDS or rec[field]:
                    target.set_field(field, rec[field])
            target.completed_at = _earliest(target.completed_at, rec["completed_at"])
        target.status = STATUS_COMPLETE
        target.sync_state = SYNC_SYNCED
        # Later rows of the same batch must see this one
        session.flush()
        return target

    def create_or_replace(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Create a complete record, or merge into the one with the same natural key."""
        rec = self._candidate(payload)
        missing = [f for f in REQUIRED_FOR_COMPLETION if not rec[f]]
        if missing:
            raise ValidationError(
                "date_local, mobile_bin, po_number, sku_code, uid are required",
                fields=missing,
            )
        with get_session() as session:
            result = self._upsert(session, rec).to_dict()
        logger.info("records.create", id=result["id"], requested_id=rec["id"])
        self._pulse(rec["completed_at"])
        return result

    # --- bulk import ---

    def bulk_import(self, rows: Any) -> ImportResult:
        """Normalize loosely keyed rows, reject incomplete ones, commit the rest as one batch."""
        if not isinstance(rows, list) or not rows:
            raise ValidationError("array of rows required", fields=["rows"])

        accepted: list[dict[str, Any]] = []
        rejected: list[RejectedRow] = []
        for index, raw in enumerate(rows):
            rec = self._candidate(normalize_row(raw if isinstance(raw, Mapping) else {}), default_date=False)
            missing = [f for f in IMPORT_REQUIRED if not rec[f]]
            if missing:
                rejected.append(
                    RejectedRow(
                        index=index,
                        po_number=rec["po_number"],
                        sku_code=rec["sku_code"],
                        uid=rec["uid"],
                        reason="Missing " + ", ".join(missing),
                        missing=missing,
                    )
                )
                continue
            accepted.append(rec)

        result = ImportResult(
            inserted_count=len(accepted),
            total_count=len(rows),
            rejected_count=len(rejected),
            rejected_details=rejected,
        )
        if not accepted:
            logger.info("records.import.nothing_accepted", total=len(rows), rejected=len(rejected))
            return result

        with get_session() as session:
            for rec in accepted:
                self._upsert(session, rec)
        logger.info(
            "records.import",
            inserted=result.inserted_count,
            total=result.total_count,
            rejected=result.rejected_count,
        )
        self._pulse(accepted[-1]["completed_at"])
        return result

    # --- queries ---

    def query(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Records with date_local in [date_from, date_to], newest completed_at first."""
        with get_session() as session:
            q = select(IntakeRecord)
            if date_from:
                q = q.where(IntakeRecord.date_local >= date_from)
            if date_to:
                q = q.where(IntakeRecord.date_local <= date_to)
            if status:
                q = q.where(IntakeRecord.status == status)
            q = q.order_by(IntakeRecord.completed_at.desc())
            if limit:
                q = q.limit(limit)
            return [r.to_dict() for r in session.scalars(q).all()]

    def records_for_day(self, date_local: str) -> list[dict[str, Any]]:
        with get_session() as session:
            q = (
                select(IntakeRecord)
                .where(IntakeRecord.date_local == date_local)
                .order_by(IntakeRecord.completed_at.desc())
            )
            return [r.to_dict() for r in session.scalars(q).all()]

    # --- deletes ---

    @staticmethod
    def _delete(session: Session, uid: str, sku_code: str = "") -> int:
        stmt = delete(IntakeRecord).where(IntakeRecord.uid == uid)
        if sku_code:
            stmt = stmt.where(IntakeRecord.sku_code == sku_code)
        return session.execute(stmt).rowcount or 0

    def delete_by_key(self, uid: Any, sku_code: Any = None) -> int:
        """Delete every record with this uid, narrowed to sku_code when given."""
        uid = _text(uid)
        sku_code = _text(sku_code)
        if not uid:
            raise ValidationError("uid required", fields=["uid"])
        with get_session() as session:
            deleted = self._delete(session, uid, sku_code)
        logger.info("records.delete", uid=uid, sku_code=sku_code or None, deleted=deleted)
        return deleted

    def delete_many(self, items: Iterable[Any]) -> list[DeleteResult]:
        """Batch delete in one transaction; a blank uid is reported, not fatal."""
        descriptors = []
        for item in items:
            if isinstance(item, Mapping):
                descriptors.append((_text(item.get("uid")), _text(item.get("sku_code"))))
            else:
                descriptors.append((_text(item), ""))
        if not descriptors:
            raise ValidationError(
                "Body must be array or object containing uid (and optional sku_code)",
                fields=["uid"],
            )

        results: list[DeleteResult] = []
        with get_session() as session:
            for uid, sku_code in descriptors:
                if not uid:
                    results.append(DeleteResult(uid=uid, sku_code=sku_code, deleted=0, error="missing uid"))
                    continue
                deleted = self._delete(session, uid, sku_code)
                results.append(DeleteResult(uid=uid, sku_code=sku_code, deleted=deleted))
        logger.info(
            "records.delete_many",
            items=len(results),
            total_deleted=sum(r.deleted for r in results),
        )
        return results

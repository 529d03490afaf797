"""Intake record routes: inline patch, create, import, query, delete, one-day export."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Query, Request, Response

from uid_ops.db.repositories.record_repo import RecordStore
from uid_ops.errors import ValidationError
from uid_ops.models.records import FieldPatch, RecordIn
from uid_ops.utils.dates import business_today, to_iso_date
from uid_ops.utils.xlsx_export import XLSX_MEDIA_TYPE, build_workbook, export_filename

router = APIRouter(tags=["records"])


def _store(request: Request) -> RecordStore:
    return request.app.state.record_store


@router.patch("/records/{record_id}")
async def patch_record(
    record_id: str,
    request: Request,
    body: Optional[FieldPatch] = None,
) -> dict[str, Any]:
    """Inline cell edit from the intake table."""
    body = body or FieldPatch()
    record = _store(request).apply_patch(record_id, body.field, body.value)
    return {"ok": True, "record": record}


@router.post("/records")
async def create_record(request: Request, body: RecordIn) -> dict[str, Any]:
    """Create a complete record, merging into an existing one with the same po/sku/uid."""
    record = _store(request).create_or_replace(body.model_dump())
    return {"ok": True, "record": record}


@router.post("/records/import")
async def import_records(request: Request, rows: Any = Body(None)) -> dict[str, Any]:
    result = _store(request).bulk_import(rows)
    return {
        "ok": True,
        "inserted": result.inserted_count,
        "total": result.total_count,
        "rejected": result.rejected_count,
        "errors": [r.model_dump() for r in result.rejected_details],
    }


@router.get("/records")
async def list_records(
    request: Request,
    from_: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD (inclusive)"),
    to: Optional[str] = Query(None, description="YYYY-MM-DD (inclusive)"),
    week_start: Optional[str] = Query(None, alias="weekStart"),
    week_end: Optional[str] = Query(None, alias="weekEnd"),
    status: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
) -> dict[str, Any]:
    """Records in a date range, newest completion first. weekStart/weekEnd stand in for from/to."""
    records = _store(request).query(
        date_from=from_ or week_start,
        date_to=to or week_end,
        status=status,
        limit=limit,
    )
    return {"records": records}


@router.delete("/records")
async def delete_records(
    request: Request,
    uid: Optional[str] = Query(None),
    sku_code: Optional[str] = Query(None),
) -> dict[str, Any]:
    """Delete by uid (every sku) or by uid + sku_code."""
    deleted = _store(request).delete_by_key(uid, sku_code)
    return {"ok": True, "deleted": deleted}


@router.post("/records/delete")
async def delete_records_batch(request: Request, body: Any = Body(None)) -> dict[str, Any]:
    """Batch delete. Body is one {uid, sku_code?}, or a list of those or of bare uid strings."""
    if isinstance(body, list):
        items = body
    elif isinstance(body, dict):
        items = [body]
    else:
        items = []
    results = _store(request).delete_many(items)
    return {
        "ok": True,
        "total_deleted": sum(r.deleted for r in results),
        "results": [r.model_dump(exclude_none=True) for r in results],
    }


@router.get("/export/xlsx")
async def export_xlsx(request: Request, date: Optional[str] = Query(None)) -> Response:
    """Spreadsheet of one business day's records."""
    day = business_today()
    if date and date.strip():
        day = to_iso_date(date)
        if not day:
            raise ValidationError(f"Invalid date: {date!r}", fields=["date"])
    content = build_workbook(_store(request).records_for_day(day))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename(day)}"'},
    )

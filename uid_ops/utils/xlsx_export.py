"""One-day spreadsheet export of intake records."""

from io import BytesIO
from typing import Any, Iterable

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, record key, column width)
EXPORT_COLUMNS = (
    ("Date", "date_local", 12),
    ("Mobile Bin (BOX)", "mobile_bin", 16),
    ("SSCC Label (BOX)", "sscc_label", 18),
    ("PO_Number", "po_number", 14),
    ("SKU_Code", "sku_code", 14),
    ("UID", "uid", 22),
    ("Status", "status", 10),
    ("Completed At", "completed_at", 22),
)


def export_filename(date_local: str) -> str:
    return f"uids_{date_local}.xlsx"


def build_workbook(records: Iterable[dict[str, Any]]) -> bytes:
    """Render records into a single "UIDs" worksheet and return the file bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = "UIDs"
    ws.append([header for header, _, _ in EXPORT_COLUMNS])
    for idx, (_, _, width) in enumerate(EXPORT_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    for record in records:
        ws.append([record.get(key) or "" for _, key, _ in EXPORT_COLUMNS])
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()

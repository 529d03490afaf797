"""Load import rows from CSV or XLSX files."""

import csv
from pathlib import Path
from typing import Any

from openpyxl import load_workbook


def _read_csv(path: Path) -> list[dict[str, Any]]:
    """Read a CSV file and return list of row dicts."""
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        return list(reader)


def _read_xlsx(path: Path, sheet_name: str | None = None) -> list[dict[str, Any]]:
    """Read the first (or named) worksheet; the first row holds the headers."""
    if not path.exists():
        return []
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook[sheet_name] if sheet_name else workbook.active
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            return []
        keys = [str(h).strip() if h is not None else "" for h in header]
        out = []
        for values in rows:
            if values is None or all(v is None for v in values):
                continue
            out.append({k: v for k, v in zip(keys, values) if k})
        return out
    finally:
        workbook.close()


def load_rows(path: Path, sheet_name: str | None = None) -> list[dict[str, Any]]:
    """Load rows from a .csv or .xlsx file by extension."""
    path = Path(path)
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        return _read_xlsx(path, sheet_name)
    return _read_csv(path)

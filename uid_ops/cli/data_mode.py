"""Offline data commands: create tables, import a record file, export a day."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from uid_ops.config import DATABASE_URL
from uid_ops.db import init_db
from uid_ops.db.repositories import RecordStore
from uid_ops.errors import ValidationError
from uid_ops.utils.csv_loader import load_rows
from uid_ops.utils.dates import business_today, to_iso_date
from uid_ops.utils.xlsx_export import build_workbook, export_filename

from .shared import console, default_export_path, logger


def init_database() -> None:
    """Create the records, plans and bins tables if missing."""
    init_db()
    console.print(f"[green]Database ready: {DATABASE_URL}[/green]")
    logger.info("init_db.ok", database_url=DATABASE_URL)


def import_records(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV or XLSX file of intake rows"),
    sheet: Optional[str] = typer.Option(None, "--sheet", "-s", help="Worksheet name (XLSX only)"),
) -> None:
    """Bulk import intake rows; rows missing date, PO, SKU or UID are reported, not imported."""
    log = logger.bind(command="import-records", path=str(path))
    init_db()
    rows = load_rows(path, sheet_name=sheet)
    try:
        result = RecordStore().bulk_import(rows)
    except ValidationError as e:
        console.print(f"[red]{e.message}[/red]")
        log.warning("import_records.empty", error=e.message)
        raise typer.Exit(1)

    console.print(
        f"[green]Imported {result.inserted_count} of {result.total_count} rows[/green]"
        f" ([yellow]{result.rejected_count} rejected[/yellow])"
    )
    if result.rejected_details:
        table = Table(title="Rejected rows")
        table.add_column("Row", justify="right", style="cyan")
        table.add_column("PO")
        table.add_column("SKU")
        table.add_column("UID")
        table.add_column("Reason", style="red")
        for r in result.rejected_details:
            table.add_row(str(r.index), r.po_number, r.sku_code, r.uid, r.reason)
        console.print(table)
    log.info(
        "import_records.ok",
        inserted=result.inserted_count,
        rejected=result.rejected_count,
    )


def export_day(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Business date (default: today)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output .xlsx path"),
) -> None:
    """Write one day's records to a spreadsheet."""
    day = to_iso_date(date) if date else business_today()
    if not day:
        console.print(f"[red]Invalid date: {date!r}[/red]")
        raise typer.Exit(1)
    init_db()
    records = RecordStore().records_for_day(day)
    path = out or default_export_path(export_filename(day))
    path.write_bytes(build_workbook(records))
    console.print(f"[green]Wrote {len(records)} records to {path}[/green]")
    logger.info("export_day.ok", date=day, records=len(records), path=str(path))

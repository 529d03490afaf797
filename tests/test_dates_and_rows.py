"""Tests for business-calendar dates, import row normalization and file loading."""

import csv
import sys
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from openpyxl import Workbook, load_workbook

from uid_ops.utils.csv_loader import load_rows
from uid_ops.utils.dates import business_today, monday_of, to_iso_date, to_utc_iso
from uid_ops.utils.row_normalizer import normalize_row, pick
from uid_ops.utils.xlsx_export import EXPORT_COLUMNS, build_workbook


class TestDates(unittest.TestCase):
    def test_business_today_uses_reference_zone(self):
        # 03:00 UTC on Jan 7 is still Jan 6 in Chicago
        now = datetime(2025, 1, 7, 3, 0, tzinfo=timezone.utc)
        self.assertEqual(business_today(now, "America/Chicago"), "2025-01-06")
        self.assertEqual(business_today(now, "UTC"), "2025-01-07")

    def test_to_iso_date_formats(self):
        self.assertEqual(to_iso_date("2025-01-06"), "2025-01-06")
        self.assertEqual(to_iso_date(" 2025-01-06T14:00:00Z "), "2025-01-06")
        self.assertEqual(to_iso_date(45663), "2025-01-06")
        self.assertEqual(to_iso_date("1/6/2025"), "2025-01-06")
        self.assertEqual(to_iso_date("25/12/2024"), "2024-12-25")
        self.assertEqual(to_iso_date("1-6-25"), "2025-01-06")
        self.assertEqual(to_iso_date(datetime(2025, 1, 6, 23, 0)), "2025-01-06")

    def test_to_iso_date_rejects_garbage(self):
        for value in (None, "", "   ", "yesterday", "2025-02-30", "40/40/2025", True):
            self.assertEqual(to_iso_date(value), "", value)

    def test_monday_of(self):
        self.assertEqual(monday_of("2025-01-06"), "2025-01-06")
        self.assertEqual(monday_of("2025-01-08"), "2025-01-06")
        self.assertEqual(monday_of("2025-01-12"), "2025-01-06")
        self.assertEqual(monday_of("2025-01-01"), "2024-12-30")
        self.assertEqual(monday_of("nope"), "")

    def test_to_utc_iso(self):
        self.assertEqual(to_utc_iso(datetime(2025, 1, 6, 9, 5, 1, 123456)), "2025-01-06T09:05:01.123Z")


class TestRowNormalizer(unittest.TestCase):
    def test_aliases_are_case_and_space_insensitive(self):
        row = {" PO Number ": "P1", "SKU": "S1", "U_ID": "U1", "SSCC Label (BOX)": "X", "Mobile Bin (BOX)": "B1"}
        out = normalize_row(row)
        self.assertEqual(out["po_number"], "P1")
        self.assertEqual(out["sku_code"], "S1")
        self.assertEqual(out["uid"], "U1")
        self.assertEqual(out["sscc_label"], "X")
        self.assertEqual(out["mobile_bin"], "B1")
        self.assertEqual(out["date_local"], "")

    def test_first_non_blank_alias_wins(self):
        row = {"po_number": "  ", "PO": "P-from-po", "po#": "P-from-hash"}
        self.assertEqual(pick(row, ("po_number", "po", "po#")), "P-from-po")

    def test_date_keeps_raw_type(self):
        self.assertEqual(normalize_row({"Date": 45663})["date_local"], 45663)

    def test_non_mapping_row(self):
        out = normalize_row("junk")
        self.assertTrue(all(v == "" for v in out.values()))


class TestFileLoadingAndExport(unittest.TestCase):
    def test_load_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rows.csv"
            with path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(["PO#", "SKU", "UID", "Date"])
                writer.writerow(["P1", "S1", "U1", "2025-01-06"])
            rows = load_rows(path)
        self.assertEqual(rows, [{"PO#": "P1", "SKU": "S1", "UID": "U1", "Date": "2025-01-06"}])

    def test_load_xlsx_skips_blank_rows(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rows.xlsx"
            wb = Workbook()
            ws = wb.active
            ws.append(["PO Number", "SKU Code", "UID", "Date"])
            ws.append(["P1", "S1", "U1", 45663])
            ws.append([None, None, None, None])
            wb.save(path)
            rows = load_rows(path)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["PO Number"], "P1")
        self.assertEqual(normalize_row(rows[0])["po_number"], "P1")

    def test_missing_file_loads_nothing(self):
        self.assertEqual(load_rows(Path("/nonexistent/rows.csv")), [])

    def test_build_workbook(self):
        content = build_workbook([
            {"date_local": "2025-01-06", "mobile_bin": "B1", "po_number": "P1", "sku_code": "S1",
             "uid": "U1", "status": "complete", "completed_at": "2025-01-06T10:00:00.000Z"},
        ])
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "out.xlsx"
            path.write_bytes(content)
            wb = load_workbook(path)
            ws = wb["UIDs"]
            header = [c.value for c in ws[1]]
            values = [c.value for c in ws[2]]
            wb.close()
        self.assertEqual(header, [h for h, _, _ in EXPORT_COLUMNS])
        self.assertEqual(values[0], "2025-01-06")
        self.assertEqual(values[5], "U1")


if __name__ == "__main__":
    unittest.main()

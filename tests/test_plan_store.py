"""Tests for weekly plan and bin manifest stores."""

import sys
import unittest
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from uid_ops.db import init_db
from uid_ops.db.repositories.plan_repo import BinStore, PlanStore, week_key
from uid_ops.errors import StorageError, ValidationError

MONDAY = "2025-01-06"


class TestPlanStore(unittest.TestCase):
    def setUp(self):
        init_db("sqlite://", reset=True)
        self.store = PlanStore()

    def test_missing_week_reads_empty(self):
        self.assertEqual(self.store.get_week(MONDAY), [])

    def test_put_then_get(self):
        lines = [{"po_number": "P1", "sku_code": "S1", "due_date": "2025-01-10", "target_qty": 5}]
        saved = self.store.put_week(MONDAY, lines)
        expected = [
            {
                "po_number": "P1",
                "sku_code": "S1",
                "start_date": MONDAY,
                "due_date": "2025-01-10",
                "target_qty": 5,
            }
        ]
        self.assertEqual(saved, expected)
        self.assertEqual(self.store.get_week(MONDAY), expected)

    def test_invalid_lines_dropped_and_values_coerced(self):
        lines = [
            {"po_number": " P1 ", "sku_code": "S1", "due_date": "2025-01-10", "target_qty": "abc", "priority": "high"},
            {"po_number": "P2", "sku_code": "S2", "due_date": "2025-01-11", "target_qty": -3, "start_date": "2025-01-07"},
            {"po_number": "P3", "sku_code": "", "due_date": "2025-01-10"},
            {"po_number": "P4", "sku_code": "S4"},
            "garbage",
        ]
        saved = self.store.put_week(MONDAY, lines)
        self.assertEqual([line["po_number"] for line in saved], ["P1", "P2"])
        self.assertEqual(saved[0]["target_qty"], 0)
        self.assertEqual(saved[0]["priority"], "high")
        self.assertNotIn("notes", saved[0])
        self.assertEqual(saved[1]["target_qty"], 0)
        self.assertEqual(saved[1]["start_date"], "2025-01-07")

    def test_write_replaces_whole_week(self):
        self.store.put_week(MONDAY, [{"po_number": "P1", "sku_code": "S1", "due_date": "2025-01-10"}])
        self.store.put_week(MONDAY, [{"po_number": "P2", "sku_code": "S2", "due_date": "2025-01-10"}])
        self.assertEqual([line["po_number"] for line in self.store.get_week(MONDAY)], ["P2"])

    def test_zero_week(self):
        self.store.put_week(MONDAY, [{"po_number": "P1", "sku_code": "S1", "due_date": "2025-01-10"}])
        self.assertEqual(self.store.zero_week(MONDAY), MONDAY)
        self.assertEqual(self.store.get_week(MONDAY), [])

    def test_week_key_normalized_to_monday(self):
        self.store.put_week("2025-01-08", [{"po_number": "P1", "sku_code": "S1", "due_date": "2025-01-10"}])
        self.assertEqual(len(self.store.get_week(MONDAY)), 1)
        self.assertEqual(len(self.store.get_week("2025-01-12")), 1)
        with self.assertRaises(ValidationError):
            self.store.get_week("not-a-date")

    def test_list_recent_weeks(self):
        for week in ("2024-12-30", "2025-01-13", MONDAY):
            self.store.put_week(week, [])
        weeks = self.store.list_recent_weeks()
        self.assertEqual([w["week_start"] for w in weeks], ["2025-01-13", MONDAY, "2024-12-30"])
        self.assertTrue(all(w["updated_at"].endswith("Z") for w in weeks))
        self.assertRegex(weeks[0]["updated_at"], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
        self.assertEqual(len(self.store.list_recent_weeks(limit=1)), 1)


class TestBinStore(unittest.TestCase):
    def setUp(self):
        init_db("sqlite://", reset=True)
        self.store = BinStore()

    def test_last_duplicate_wins(self):
        result = self.store.put_week(
            MONDAY,
            [
                {"mobile_bin": "B2", "total_units": 10, "weight_kg": 1.5},
                {"mobile_bin": "B1", "total_units": 3},
                {"mobile_bin": "B2", "total_units": 12, "weight_kg": 2.25},
            ],
        )
        self.assertEqual(result, {"upserted": 2, "rejected": 0, "errors": []})
        rows = self.store.get_week(MONDAY)
        self.assertEqual([r["mobile_bin"] for r in rows], ["B1", "B2"])
        self.assertEqual(rows[1]["total_units"], 12)
        self.assertEqual(rows[1]["weight_kg"], 2.25)
        self.assertEqual(rows[0]["weight_kg"], None)
        self.assertEqual(rows[0]["date_local"], MONDAY)

    def test_invalid_rows_rejected_individually(self):
        result = self.store.put_week(
            MONDAY,
            [
                {"mobile_bin": "", "total_units": 1},
                {"mobile_bin": "B1", "total_units": -1},
                {"mobile_bin": "B2", "weight_kg": "heavy"},
                {"mobile_bin": "B3", "total_units": "", "weight_kg": "4"},
            ],
        )
        self.assertEqual(result["upserted"], 1)
        self.assertEqual(result["rejected"], 3)
        self.assertEqual(
            [e["reason"] for e in result["errors"]],
            ["missing mobile_bin", "invalid total_units", "invalid weight_kg"],
        )
        rows = self.store.get_week(MONDAY)
        self.assertEqual(rows, [
            {"week_start": MONDAY, "mobile_bin": "B3", "total_units": None, "weight_kg": 4, "date_local": MONDAY}
        ])

    def test_upsert_replaces_fields(self):
        self.store.put_week(MONDAY, [{"mobile_bin": "B1", "total_units": 5, "weight_kg": 2, "date_local": "2025-01-07"}])
        self.store.put_week(MONDAY, [{"mobile_bin": "B1", "total_units": 6}])
        rows = self.store.get_week(MONDAY)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["total_units"], 6)
        self.assertIsNone(rows[0]["weight_kg"])
        self.assertEqual(rows[0]["date_local"], MONDAY)

    def test_empty_and_all_invalid(self):
        self.assertEqual(self.store.put_week(MONDAY, []), {"upserted": 0, "rejected": 0, "errors": []})
        with self.assertRaises(ValidationError) as ctx:
            self.store.put_week(MONDAY, [{"total_units": 3}])
        self.assertEqual(ctx.exception.details[0]["reason"], "missing mobile_bin")
        self.assertEqual(self.store.get_week(MONDAY), [])

    def test_weeks_are_separate(self):
        self.store.put_week(MONDAY, [{"mobile_bin": "B1"}])
        self.store.put_week("2025-01-13", [{"mobile_bin": "B1", "total_units": 9}])
        self.assertEqual(self.store.get_week(MONDAY)[0]["total_units"], None)
        self.assertEqual(self.store.get_week("2025-01-15")[0]["total_units"], 9)

    def test_put_week_rolls_back_when_a_row_fails(self):
        self.store.put_week(MONDAY, [{"mobile_bin": "B1", "total_units": 1}])
        merge = Session.merge
        calls = []

        def failing_merge(session, instance, **kw):
            calls.append(instance.mobile_bin)
            if len(calls) == 2:
                raise OperationalError("INSERT INTO bins", {}, Exception("disk I/O error"))
            return merge(session, instance, **kw)

        with mock.patch.object(Session, "merge", failing_merge):
            with self.assertRaises(StorageError):
                self.store.put_week(MONDAY, [{"mobile_bin": "B1", "total_units": 5}, {"mobile_bin": "B2"}])
        self.assertEqual(calls, ["B1", "B2"])
        self.assertEqual(
            [(r["mobile_bin"], r["total_units"]) for r in self.store.get_week(MONDAY)],
            [("B1", 1)],
        )

    def test_week_key(self):
        self.assertEqual(week_key("2025-01-12"), MONDAY)
        with self.assertRaises(ValidationError):
            week_key("")


if __name__ == "__main__":
    unittest.main()

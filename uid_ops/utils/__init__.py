"""Utility modules."""

from uid_ops.utils.csv_loader import load_rows
from uid_ops.utils.dates import business_today, monday_of, to_iso_date, utc_now_iso
from uid_ops.utils.logger import get_logger
from uid_ops.utils.row_normalizer import FIELD_ALIASES, normalize_row

__all__ = [
    "load_rows",
    "business_today",
    "monday_of",
    "to_iso_date",
    "utc_now_iso",
    "get_logger",
    "FIELD_ALIASES",
    "normalize_row",
]

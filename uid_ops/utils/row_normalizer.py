"""Map loosely keyed import rows (spreadsheet exports, hand-made CSVs) onto record fields.

Header names vary by source. Each canonical field lists the headers it
accepts in priority order; keys are compared lowercased and trimmed, and the
first alias carrying a non-blank value wins.
"""

from typing import Any, Mapping

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "date_local": ("date_local", "date"),
    "mobile_bin": ("mobile_bin", "mobile bin (box)", "mobile bin"),
    "sscc_label": ("sscc_label", "sscc label (box)", "sscc"),
    "po_number": ("po_number", "po", "po#", "po number"),
    "sku_code": ("sku_code", "sku", "sku code"),
    "uid": ("uid", "u_id", "u id"),
}


def _fold_key(key: Any) -> str:
    return str(key).strip().lower()


def pick(row: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    """Return the first non-blank value among ``aliases`` (raw, not stringified), else ""."""
    folded = {_fold_key(k): v for k, v in row.items()}
    for alias in aliases:
        value = folded.get(_fold_key(alias))
        if value is not None and str(value).strip() != "":
            return value
    return ""


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Resolve every canonical field of an import row. Values other than date_local are stringified."""
    if not isinstance(row, Mapping):
        row = {}
    out: dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES.items():
        value = pick(row, aliases)
        # date_local keeps its raw type so spreadsheet serial numbers survive
        out[field] = value if field == "date_local" else str(value).strip()
    return out

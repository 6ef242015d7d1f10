from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from obras.fields import FIELDS

# A "." or "," between a digit and exactly three trailing digits is a thousands separator.
_THOUSANDS_RE = re.compile(r"(?<=\d)[.,](?=\d{3}\b)")
# A "," followed by one or two trailing digits is a decimal comma.
_DECIMAL_COMMA_RE = re.compile(r",(?=\d{1,2}\b)")
_WHITESPACE_RE = re.compile(r"\s+")
_YEAR_RE = re.compile(r"\b(\d{4})\b")

# Placeholder strings the upstream API uses for "no value".
EMPTY_MARKERS = frozenset({"Sin información", "undefined"})


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if pd.api.types.is_scalar(value):
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False
    return False


def to_text(value: Any) -> str:
    """Stringify a cell the way the dashboard labels it.

    Missing values become "", integral floats drop their ".0" and dates are
    rendered as ISO strings so that "2024-05-01" prefixes stay comparable.
    """
    if is_missing(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_number(value: Any) -> float:
    """Parse a loosely formatted number; anything unparseable is 0.

    Text goes through the separator heuristic ("1.500.000" -> 1500000,
    "1.234,56" -> 1234.56, "12,5" -> 12.5). Real numbers are taken as-is.
    """
    if is_missing(value):
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        out = float(value)
        return out if math.isfinite(out) else 0.0

    s = _WHITESPACE_RE.sub("", to_text(value))
    s = _THOUSANDS_RE.sub("", s)
    s = _DECIMAL_COMMA_RE.sub(".", s)
    if not s:
        return 0.0
    # float() accepts "1_000" and "nan"; neither is a valid amount upstream.
    if "_" in s:
        return 0.0
    try:
        out = float(s)
    except ValueError:
        return 0.0
    return out if math.isfinite(out) else 0.0


def _is_blank_cost(raw: Any) -> bool:
    if is_missing(raw):
        return True
    text = to_text(raw).strip()
    return text == "" or text == "undefined"


def resolve_cost(raw_updated: Any, raw_estimated: Any) -> float:
    """Updated cost unless it is blank or zero, then the estimated cost."""
    updated = to_number(raw_updated)
    if _is_blank_cost(raw_updated) or updated == 0:
        return to_number(raw_estimated)
    return updated


def row_cost(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> float:
    return resolve_cost(row.get(fields["costo_total_actualizado"]), row.get(fields["costo_estimado_total"]))


def total_cost(rows: Iterable[Mapping[str, Any]], fields: Mapping[str, str] = FIELDS) -> float:
    return float(sum(row_cost(r, fields) for r in rows))


def sum_field(rows: Iterable[Mapping[str, Any]], column: str) -> float:
    return float(sum(to_number(r.get(column)) for r in rows))


def extract_year(value: Any) -> Optional[int]:
    """First standalone 4-digit group of a date-ish value, if any."""
    text = to_text(value).strip()
    if not text or text in EMPTY_MARKERS:
        return None
    match = _YEAR_RE.search(text)
    if not match:
        return None
    return int(match.group(1))


def leading_year(value: Any) -> int:
    """Year read from the first four characters, 0 when they are not a number."""
    head = to_text(value).strip()[:4]
    return int(head) if head.isdigit() else 0


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    if is_missing(value):
        return None
    text = to_text(value).strip()
    if not text or text in EMPTY_MARKERS:
        return None
    ts = pd.to_datetime(text, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts


def coerce_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Copy a row turning numeric-looking strings into numbers and blanks into None."""
    out: Dict[str, Any] = {}
    for key, value in row.items():
        if is_missing(value):
            out[key] = None
        elif isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                out[key] = None
                continue
            try:
                num = float(stripped)
            except ValueError:
                out[key] = value
                continue
            if not math.isfinite(num) or "_" in stripped:
                out[key] = value
            else:
                out[key] = int(num) if num.is_integer() and "." not in stripped and "e" not in stripped.lower() else num
        else:
            out[key] = value
    return out

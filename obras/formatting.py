from __future__ import annotations

import re
from typing import Optional

import pandas as pd

from obras.numbers import is_missing, to_text

MONTH_NAMES = (
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
)


def _comma(value: float) -> str:
    return f"{value:.2f}".replace(".", ",")


def format_money_colombian(value: object) -> str:
    """Short money label in Colombian notation: "$1,50 mill", "$2,00 mil M", "$3,29 bill"."""
    if is_missing(value):
        return "N/A"
    v = float(value)
    a = abs(v)
    if a >= 1e12:
        billones = round(v / 1e12, 2)
        if billones >= 1000:
            return f"${_comma(billones / 1000)} bill"
        return f"${_comma(billones)} bill"
    if a >= 1e9:
        return f"${_comma(v / 1e9)} mil M"
    if a >= 1e6:
        return f"${_comma(v / 1e6)} mill"
    if a >= 1e3:
        return f"${_comma(v / 1e3)} mil"
    return f"${_comma(v)}"


def format_percent(value: object, decimals: int = 1) -> str:
    if is_missing(value):
        return ""
    return f"{float(value) * 100:.{decimals}f}%".replace(".", ",")


def format_date(value: object) -> str:
    text = to_text(value).strip()
    if not text or text in {"Sin información", "undefined"}:
        return "Sin fecha"
    if re.fullmatch(r"\d{4}", text):
        return text
    if re.fullmatch(r"\d{4}-\d{2}", text):
        year, month = text.split("-")
        m = int(month)
        return f"{MONTH_NAMES[m - 1]} {year}" if 1 <= m <= 12 else text
    ts: Optional[pd.Timestamp] = pd.to_datetime(text[:10], format="%Y-%m-%d", errors="coerce")
    if ts is not None and not pd.isna(ts) and re.match(r"\d{4}-\d{2}-\d{2}", text):
        return f"{ts.day} de {MONTH_NAMES[ts.month - 1].lower()} de {ts.year}"
    year = re.search(r"\d{4}", text)
    if year:
        return year.group(0)
    return text

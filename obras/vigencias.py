"""Per-year ("vigencia") delivery aggregates."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from obras.fields import FIELDS
from obras.numbers import extract_year, parse_date, row_cost, to_number, to_text

Row = Dict[str, Any]

# Derived year columns some upstream exports already carry.
ESTIMATED_YEAR_COLUMN = "AÑO DE ENTREGA"
REAL_YEAR_COLUMN = "AÑO DE ENTREGA REAL"

# Upstream records "not delivered yet" as this date in the real delivery column.
PLACEHOLDER_DATE = pd.Timestamp(2000, 1, 1)


@dataclass(frozen=True)
class VigenciaRow:
    year: int
    estimated_count: int
    estimated_investment: float
    real_count: int
    real_investment: float


def is_confirmed_delivered(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> bool:
    return to_text(row.get(fields["obra_entregada"])).strip().lower() in {"si", "sí"}


def corrected_real_delivery(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> Optional[pd.Timestamp]:
    real = parse_date(row.get(fields["fecha_real_de_entrega"]))
    end_of_works = parse_date(row.get(fields["fecha_fin_real_ejecucion_obra"]))
    if real is not None and real.normalize() == PLACEHOLDER_DATE:
        if end_of_works is not None and end_of_works.normalize() != PLACEHOLDER_DATE:
            return end_of_works
    return real


def estimated_year(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> Optional[int]:
    if to_text(row.get(ESTIMATED_YEAR_COLUMN)):
        return extract_year(row.get(ESTIMATED_YEAR_COLUMN))
    ts = parse_date(row.get(fields["fecha_estimada_de_entrega"]))
    return int(ts.year) if ts is not None else None


def real_year(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> Optional[int]:
    if to_text(row.get(REAL_YEAR_COLUMN)):
        return extract_year(row.get(REAL_YEAR_COLUMN))
    ts = corrected_real_delivery(row, fields)
    return int(ts.year) if ts is not None else None


def _floor(value: float) -> float:
    return 0.0 if value < 1 else value


def compute_vigencias(rows: Sequence[Row], *, fields: Mapping[str, str] = FIELDS) -> List[VigenciaRow]:
    """Estimated vs. real deliveries per year, most recent year first.

    Estimated: every row with an estimated delivery year, valued at its resolved
    cost. Real: only confirmed deliveries with a real delivery year, valued at
    the executed budget.
    """
    est_count: Dict[int, int] = defaultdict(int)
    est_inv: Dict[int, float] = defaultdict(float)
    real_count: Dict[int, int] = defaultdict(int)
    real_inv: Dict[int, float] = defaultdict(float)

    for r in rows:
        y_est = estimated_year(r, fields)
        if y_est is not None:
            est_count[y_est] += 1
            est_inv[y_est] += row_cost(r, fields)

        y_real = real_year(r, fields)
        if y_real is not None and is_confirmed_delivered(r, fields):
            real_count[y_real] += 1
            real_inv[y_real] += to_number(r.get(fields["presupuesto_ejecutado"]))

    years = sorted(set(est_count) | set(real_count), reverse=True)
    return [
        VigenciaRow(
            year=y,
            estimated_count=est_count.get(y, 0),
            estimated_investment=_floor(est_inv.get(y, 0.0)),
            real_count=real_count.get(y, 0),
            real_investment=_floor(real_inv.get(y, 0.0)),
        )
        for y in years
    ]


def _year_in(value: Optional[int], start: int, end: int) -> bool:
    return value is not None and start <= value <= end


def filter_by_period(rows: Sequence[Row], start: int = 2024, end: int = 2027, *, fields: Mapping[str, str] = FIELDS) -> List[Row]:
    """Rows with any delivery, spend or progress recorded inside ``start..end``."""
    yearly = list(range(start, end + 1))
    progress_cols = [fields[f"avance_{y}"] for y in yearly if f"avance_{y}" in fields]
    budget_cols = [fields[f"presupuesto_ejecutado_{y}"] for y in yearly if f"presupuesto_ejecutado_{y}" in fields]

    out: List[Row] = []
    for r in rows:
        if _year_in(extract_year(r.get(ESTIMATED_YEAR_COLUMN)), start, end):
            out.append(r)
        elif _year_in(extract_year(r.get(fields["fecha_estimada_de_entrega"])), start, end):
            out.append(r)
        elif is_confirmed_delivered(r, fields) and (
            _year_in(extract_year(r.get(REAL_YEAR_COLUMN)), start, end)
            or _year_in(extract_year(r.get(fields["fecha_real_de_entrega"])), start, end)
        ):
            out.append(r)
        elif to_number(r.get(fields["presupuesto_ejecutado_adm_2024_2027"])) > 0:
            out.append(r)
        elif any(to_number(r.get(c)) > 0 for c in progress_cols + budget_cols):
            out.append(r)
    return out

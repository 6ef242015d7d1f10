from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from obras.fields import FIELDS
from obras.numbers import leading_year, sum_field, to_text, total_cost

Row = Dict[str, Any]

NO_RISK_VALUES = frozenset({"", "sin información", "sin informacion", "no aplica", "ninguna"})
YES_VALUES = frozenset({"si", "sí"})


@dataclass(frozen=True)
class KpiSummary:
    total_obras: int
    inv_total: float
    ejec: float
    entregadas: int
    pct_entregadas: float
    pct_ejec: float
    alertas: int


@dataclass(frozen=True)
class ExtendedKpis:
    alertas_encontradas: int
    entregadas_confirmadas: int
    valor_cuatrienio: float
    pct_cuatrienio: float
    valor_adm_anteriores: float
    con_ubicacion: int
    sin_ubicacion: int


def _current_year(today: Optional[date]) -> int:
    return (today or date.today()).year


def _status(row: Mapping[str, Any], fields: Mapping[str, str]) -> str:
    return to_text(row.get(fields["estado_de_la_obra"])).lower()


def is_delivered(row: Mapping[str, Any], year_now: int, fields: Mapping[str, str] = FIELDS) -> bool:
    """Status mentions "entreg", or failing that the real delivery year is set and not in the future."""
    if "entreg" in _status(row, fields):
        return True
    y = leading_year(row.get(fields["fecha_real_de_entrega"]))
    return bool(y) and y <= year_now


def is_pending(row: Mapping[str, Any], year_now: int, fields: Mapping[str, str] = FIELDS) -> bool:
    status = _status(row, fields)
    if status and "entreg" not in status:
        return True
    y = leading_year(row.get(fields["fecha_estimada_de_entrega"]))
    return bool(y) and y > year_now


def has_alert(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> bool:
    return len(to_text(row.get(fields["descripcion_del_riesgo"])).strip()) > 0


def alert_rows(rows: Sequence[Row], fields: Mapping[str, str] = FIELDS) -> List[Row]:
    return [r for r in rows if has_alert(r, fields)]


def compute_kpis(rows: Sequence[Row], *, fields: Mapping[str, str] = FIELDS, today: Optional[date] = None) -> KpiSummary:
    total_obras = len(rows)
    inv_total = total_cost(rows, fields)
    ejec = sum_field(rows, fields["presupuesto_ejecutado"])

    year_now = _current_year(today)
    entregadas = sum(1 for r in rows if is_delivered(r, year_now, fields))
    alertas = sum(1 for r in rows if has_alert(r, fields))

    return KpiSummary(
        total_obras=total_obras,
        inv_total=inv_total,
        ejec=ejec,
        entregadas=entregadas,
        pct_entregadas=(entregadas / total_obras) if total_obras else 0.0,
        pct_ejec=(ejec / inv_total) if inv_total else 0.0,
        alertas=alertas,
    )


def coordinate(value: Any) -> Optional[float]:
    # Plain decimal parse: "-75.574" is a longitude, not a thousands-separated integer.
    out = pd.to_numeric(to_text(value).strip(), errors="coerce")
    if pd.isna(out):
        return None
    return float(out)


def has_location(row: Mapping[str, Any], fields: Mapping[str, str] = FIELDS) -> bool:
    lat = coordinate(row.get(fields["latitud"]))
    lng = coordinate(row.get(fields["longitud"]))
    return bool(lat) and bool(lng)


def compute_extended_kpis(rows: Sequence[Row], *, fields: Mapping[str, str] = FIELDS) -> ExtendedKpis:
    """Secondary indicators shown beside the headline KPIs."""
    alertas_encontradas = sum(
        1 for r in rows if to_text(r.get(fields["presencia_de_riesgo"])).strip().lower() not in NO_RISK_VALUES
    )
    entregadas_confirmadas = sum(
        1 for r in rows if to_text(r.get(fields["obra_entregada"])).strip().lower() in YES_VALUES
    )
    valor_cuatrienio = sum_field(rows, fields["presupuesto_ejecutado_adm_2024_2027"])
    inv_total = total_cost(rows, fields)
    con_ubicacion = sum(1 for r in rows if has_location(r, fields))

    return ExtendedKpis(
        alertas_encontradas=alertas_encontradas,
        entregadas_confirmadas=entregadas_confirmadas,
        valor_cuatrienio=valor_cuatrienio,
        pct_cuatrienio=(valor_cuatrienio / inv_total) if inv_total else 0.0,
        valor_adm_anteriores=round(sum_field(rows, fields["presupuesto_ejecutado_adm_anteriores"]), 2),
        con_ubicacion=con_ubicacion,
        sin_ubicacion=len(rows) - con_ubicacion,
    )

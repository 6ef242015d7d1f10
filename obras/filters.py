from __future__ import annotations

import re
from dataclasses import asdict, dataclass, fields as dc_fields, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from obras.fields import FIELDS
from obras.numbers import EMPTY_MARKERS, to_text

Row = Dict[str, Any]

# Filter attribute -> canonical field it constrains.
EQUALITY_DIMENSIONS: Tuple[Tuple[str, str], ...] = (
    ("proyecto", "proyecto_estrategico"),
    ("subproyecto", "subproyecto_estrategico"),
    ("comuna", "comuna_o_corregimiento"),
    ("dependencia", "dependencia"),
    ("tipo", "tipo_de_intervencion"),
    ("estado", "estado_de_la_obra"),
    ("contratista", "contratista_operador"),
    ("nombre", "nombre"),
)

DATE_FIELD = "fecha_estimada_de_entrega"

_YEAR_RE = re.compile(r"\d{4}")
_YEAR_MONTH_RE = re.compile(r"^\d{4}-\d{2}(-\d{2})?$")

# Changing a key clears these filters (proyecto -> dependencia -> comuna; tipo is independent).
DEPENDENT_FILTERS: Dict[str, Tuple[str, ...]] = {
    "proyecto": ("subproyecto", "dependencia", "comuna"),
    "dependencia": ("comuna",),
}


@dataclass(frozen=True)
class Filters:
    proyecto: Optional[str] = None
    subproyecto: Optional[str] = None
    comuna: Optional[str] = None
    dependencia: Optional[str] = None
    tipo: Optional[str] = None
    estado: Optional[str] = None
    contratista: Optional[str] = None
    nombre: Optional[str] = None
    desde: Optional[str] = None
    hasta: Optional[str] = None

    def active(self) -> Dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v}

    def without(self, name: str) -> "Filters":
        return replace(self, **{name: None})


@dataclass(frozen=True)
class FilterOptions:
    proyectos: List[str]
    comunas: List[str]
    dependencias: List[str]
    tipos: List[str]
    subproyectos: List[str]
    estados: List[str]
    contratistas: List[str]
    nombres: List[str]


_OPTION_KEYS: Dict[str, str] = {
    "proyecto": "proyectos",
    "subproyecto": "subproyectos",
    "comuna": "comunas",
    "dependencia": "dependencias",
    "tipo": "tipos",
    "estado": "estados",
    "contratista": "contratistas",
    "nombre": "nombres",
}

_FILTER_NAMES = frozenset(f.name for f in dc_fields(Filters))


def _clean_str(value: object) -> Optional[str]:
    if value is None:
        return None
    s = to_text(value).strip()
    return s or None


def normalize_filters(raw: Optional[Mapping[str, Any]]) -> Filters:
    """Build Filters from untrusted input; unknown keys are ignored, blanks mean "no constraint"."""
    raw = raw or {}
    values = {name: _clean_str(raw.get(name)) for name in _FILTER_NAMES}
    return Filters(**values)


def clean_dependent_filters(current: Filters, changed: str) -> Filters:
    """Clear the filters that depend on the one that just changed."""
    cleared = DEPENDENT_FILTERS.get(changed, ())
    if not cleared:
        return replace(current)
    return replace(current, **{name: None for name in cleared})


def _date_text(value: object) -> str:
    text = to_text(value).strip()
    if text in EMPTY_MARKERS:
        return ""
    return text


def _in_date_range(value: object, desde: Optional[str], hasta: Optional[str]) -> bool:
    if not desde and not hasta:
        return True
    text = _date_text(value)
    if not text:
        return True
    # Each bound compares against the same-length prefix: "YYYY" or "YYYY-MM".
    if desde and text[: len(desde)] < desde:
        return False
    if hasta and text[: len(hasta)] > hasta:
        return False
    return True


def filter_mask(rows: Sequence[Row], filters: Filters, *, fields: Mapping[str, str] = FIELDS) -> pd.Series:
    """Boolean mask (aligned to ``rows``) of the rows passing every active filter."""
    mask = pd.Series(True, index=range(len(rows)), dtype=bool)
    if not rows:
        return mask
    for attr, field_key in EQUALITY_DIMENSIONS:
        wanted = getattr(filters, attr)
        if not wanted:
            continue
        column = fields[field_key]
        values = pd.Series([to_text(r.get(column)) for r in rows], dtype=object)
        mask &= values.eq(wanted)
    if filters.desde or filters.hasta:
        column = fields[DATE_FIELD]
        in_range = pd.Series([_in_date_range(r.get(column), filters.desde, filters.hasta) for r in rows], dtype=bool)
        mask &= in_range
    return mask


def apply_filters(rows: Sequence[Row], filters: Filters, *, fields: Mapping[str, str] = FIELDS) -> List[Row]:
    rows = list(rows)
    mask = filter_mask(rows, filters, fields=fields)
    return [row for row, keep in zip(rows, mask.tolist()) if keep]


def uniques(rows: Iterable[Row], column: str) -> List[str]:
    values = {to_text(r.get(column)) for r in rows}
    return sorted(v for v in values if v and v not in EMPTY_MARKERS)


def get_filter_options(rows: Sequence[Row], current: Filters, *, fields: Mapping[str, str] = FIELDS) -> FilterOptions:
    """Options per dimension, computed from rows filtered by every other active filter."""
    rows = list(rows)
    out: Dict[str, List[str]] = {}
    for attr, field_key in EQUALITY_DIMENSIONS:
        reachable = apply_filters(rows, current.without(attr), fields=fields)
        out[_OPTION_KEYS[attr]] = uniques(reachable, fields[field_key])
    return FilterOptions(**out)


def unique_years(rows: Iterable[Row], column: str) -> List[str]:
    years = set()
    for r in rows:
        text = _date_text(r.get(column))
        if not text:
            continue
        found = _YEAR_RE.search(text)
        if found:
            years.add(found.group(0))
    return sorted(years, reverse=True)


def unique_year_months(rows: Iterable[Row], column: str) -> List[str]:
    out = set()
    for r in rows:
        text = _date_text(r.get(column))
        if not text:
            continue
        if _YEAR_MONTH_RE.match(text):
            out.add(text[:7])
            continue
        found = _YEAR_RE.search(text)
        if found:
            out.add(found.group(0))
    return sorted(out, reverse=True)


def default_date_filters(today: Optional[date] = None) -> Dict[str, str]:
    today = today or date.today()
    return {"desde": f"{today.year}-{today.month:02d}", "hasta": f"{today.year}"}

"""Stage (Gantt) timelines built from the per-stage date columns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from obras.fields import FIELDS, STAGES
from obras.numbers import parse_date, to_number, to_text

Row = Dict[str, Any]
Span = Tuple[pd.Timestamp, pd.Timestamp]

# Earlier dates are placeholders or belong to previous administrations.
TIMELINE_START = pd.Timestamp(2024, 1, 1)
PLACEHOLDER_PREFIX = "2000"


@dataclass(frozen=True)
class StageSpan:
    stage: str
    label: str
    est_start: Optional[str]
    est_end: Optional[str]
    real_start: Optional[str]
    real_end: Optional[str]
    pct: float


@dataclass(frozen=True)
class WorkSpan:
    id: Any
    nombre: str
    est_start: Optional[str]
    est_end: Optional[str]
    real_start: Optional[str]
    real_end: Optional[str]


def timeline_date(value: Any) -> Optional[pd.Timestamp]:
    """Date usable on the timeline: parseable, not a 2000 placeholder, from 2024 on."""
    if to_text(value).strip().startswith(PLACEHOLDER_PREFIX):
        return None
    ts = parse_date(value)
    if ts is None:
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    if ts < TIMELINE_START:
        return None
    return ts


def _span(row: Mapping[str, Any], stage: str, kind: str, fields: Mapping[str, str]) -> Optional[Span]:
    start = timeline_date(row.get(fields[f"fecha_inicio_{kind}_{stage}"]))
    end = timeline_date(row.get(fields[f"fecha_fin_{kind}_{stage}"]))
    if start is None or end is None or end < start:
        return None
    return start, end


def _iso(ts: Optional[pd.Timestamp]) -> Optional[str]:
    return ts.date().isoformat() if ts is not None else None


def _bounds(spans: List[Span]) -> Tuple[Optional[str], Optional[str]]:
    if not spans:
        return None, None
    return _iso(min(s for s, _ in spans)), _iso(max(e for _, e in spans))


def stage_timeline(rows: Union[Row, Sequence[Row]], *, fields: Mapping[str, str] = FIELDS) -> List[StageSpan]:
    """Estimated and real span per project stage, in stage order.

    ``rows`` is one obra or many; with many, each span runs from the earliest
    start to the latest end over the rows. A row contributes a span only when
    both of its dates are usable and the end is not before the start. Stages
    with neither span are left out. ``pct`` is the mean stage percentage.
    """
    if isinstance(rows, Mapping):
        rows = [rows]
    rows = list(rows)

    out: List[StageSpan] = []
    for stage, label in STAGES.items():
        est = [s for s in (_span(r, stage, "estimada", fields) for r in rows) if s is not None]
        real = [s for s in (_span(r, stage, "real", fields) for r in rows) if s is not None]
        if not est and not real:
            continue
        pct = [to_number(r.get(fields[f"porcentaje_{stage}"])) for r in rows]
        est_start, est_end = _bounds(est)
        real_start, real_end = _bounds(real)
        out.append(
            StageSpan(
                stage=stage,
                label=label,
                est_start=est_start,
                est_end=est_end,
                real_start=real_start,
                real_end=real_end,
                pct=float(sum(pct) / len(pct)),
            )
        )
    return out


def work_timeline(rows: Sequence[Row], *, fields: Mapping[str, str] = FIELDS, limit: int = 30) -> List[WorkSpan]:
    """Execution-stage span per obra, skipping obras with no usable span."""
    out: List[WorkSpan] = []
    for r in rows:
        if len(out) >= limit:
            break
        est = _span(r, "ejecucion_obra", "estimada", fields)
        real = _span(r, "ejecucion_obra", "real", fields)
        if est is None and real is None:
            continue
        out.append(
            WorkSpan(
                id=r.get(fields["id"]),
                nombre=to_text(r.get(fields["nombre"])) or "Sin nombre",
                est_start=_iso(est[0]) if est else None,
                est_end=_iso(est[1]) if est else None,
                real_start=_iso(real[0]) if real else None,
                real_end=_iso(real[1]) if real else None,
            )
        )
    return out

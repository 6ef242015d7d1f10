from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Mapping

from obras.charts import vigencias_chart
from obras.fields import FIELDS
from obras.filters import Filters
from obras.vigencias import compute_vigencias, filter_by_period

PERIOD_START = 2024
PERIOD_END = 2027


def compute_vigencias_page(
    filters: Filters,
    ctx: Dict[str, Any],
    *,
    start: int = PERIOD_START,
    end: int = PERIOD_END,
) -> Dict[str, Any]:
    rows = ctx.get("filtered", [])
    fields: Mapping[str, str] = ctx.get("fields", FIELDS)

    table = [asdict(v) for v in compute_vigencias(rows, fields=fields) if start <= v.year <= end]
    table.sort(key=lambda v: v["year"])
    in_period = filter_by_period(rows, start, end, fields=fields)

    totals = {
        "estimated_count": sum(v["estimated_count"] for v in table),
        "estimated_investment": float(sum(v["estimated_investment"] for v in table)),
        "real_count": sum(v["real_count"] for v in table),
        "real_investment": float(sum(v["real_investment"] for v in table)),
    }
    return {
        "filters": asdict(filters),
        "period": {"start": start, "end": end, "obras_in_period": len(in_period)},
        "table": table,
        "totals": totals,
        "charts": {"vigencias": vigencias_chart(table)},
    }

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Mapping

from obras.charts import gantt_chart
from obras.fields import FIELDS
from obras.filters import Filters
from obras.timeline import stage_timeline, work_timeline

WORKS_LIMIT = 30


def compute_timeline_page(filters: Filters, ctx: Dict[str, Any], *, limit: int = WORKS_LIMIT) -> Dict[str, Any]:
    """Stage timeline of the filtered obras plus per-obra execution spans."""
    rows = ctx.get("filtered", [])
    fields: Mapping[str, str] = ctx.get("fields", FIELDS)

    phases = [asdict(s) for s in stage_timeline(rows, fields=fields)]
    works = [asdict(w) for w in work_timeline(rows, fields=fields, limit=limit)]
    return {
        "filters": asdict(filters),
        "active_filters": filters.active(),
        "phases": phases,
        "works": works,
        "charts": {
            "phases": gantt_chart(phases),
            "works": gantt_chart(works, label_key="nombre"),
        },
    }

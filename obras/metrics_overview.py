from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from obras.aggregate import build_two_series_dataset, group_sum, sort_desc, top_n_with_others
from obras.charts import grouped_bar_chart, two_series_bar_chart
from obras.fields import FIELDS
from obras.filters import Filters
from obras.formatting import format_date, format_money_colombian, format_percent
from obras.kpis import alert_rows, compute_extended_kpis, compute_kpis, is_delivered, is_pending
from obras.numbers import row_cost, to_text


def _alert_record(row: Mapping[str, Any], fields: Mapping[str, str]) -> Dict[str, Any]:
    return {
        "id": row.get(fields["id"]),
        "nombre": to_text(row.get(fields["nombre"])),
        "dependencia": to_text(row.get(fields["dependencia"])),
        "descripcion_del_riesgo": to_text(row.get(fields["descripcion_del_riesgo"])).strip(),
        "impacto_del_riesgo": to_text(row.get(fields["impacto_del_riesgo"])),
        "estado_de_riesgo": to_text(row.get(fields["estado_de_riesgo"])),
        "entrega_estimada": format_date(row.get(fields["fecha_estimada_de_entrega"])),
    }


def compute_overview(filters: Filters, ctx: Dict[str, Any], *, top_n: int = 15, today: Optional[date] = None) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = ctx.get("filtered", [])
    fields: Mapping[str, str] = ctx.get("fields", FIELDS)
    year_now = (today or date.today()).year

    summary = compute_kpis(rows, fields=fields, today=today)
    extended = compute_extended_kpis(rows, fields=fields)

    dataset = build_two_series_dataset(
        rows,
        fields["nombre"],
        fields["costo_total_actualizado"],
        fields["presupuesto_ejecutado"],
        top_n,
    )

    # Investment by agency uses the resolved cost, same as the KPI total.
    by_dependencia = group_sum(
        [{"k": r.get(fields["dependencia"]), "v": row_cost(r, fields)} for r in rows],
        "k",
        "v",
    )
    by_dependencia = top_n_with_others(sort_desc(by_dependencia), top_n, "Otros")

    alerts = [_alert_record(r, fields) for r in alert_rows(rows, fields)]
    delivered = sum(1 for r in rows if is_delivered(r, year_now, fields))
    pending = sum(1 for r in rows if is_pending(r, year_now, fields))

    return {
        "filters": asdict(filters),
        "active_filters": filters.active(),
        "row_counts": {"total": len(ctx.get("rows", [])), "filtered": len(rows)},
        "kpis": asdict(summary),
        "kpis_extra": asdict(extended),
        "display": {
            "inv_total": format_money_colombian(summary.inv_total),
            "ejec": format_money_colombian(summary.ejec),
            "pct_ejec": format_percent(summary.pct_ejec),
            "pct_entregadas": format_percent(summary.pct_entregadas),
        },
        "delivery": {"entregadas": delivered, "por_entregar": pending},
        "dataset": dataset,
        "by_dependencia": by_dependencia,
        "alerts": alerts,
        "charts": {
            "inversion_vs_ejecutado": two_series_bar_chart(dataset, series_titles=("Inversión total", "Presupuesto ejecutado")),
            "inversion_por_dependencia": grouped_bar_chart(by_dependencia, title="Inversión"),
        },
    }

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from obras.aggregate import GroupedEntry, TableDataset

alt.data_transformers.disable_max_rows()

# Corporate palette used by the city dashboards.
PRIMARY = "#79BC99"
SECONDARY = "#4E8484"
ACCENT = "#3B8686"


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def dataset_frame(dataset: TableDataset) -> pd.DataFrame:
    if not dataset:
        return pd.DataFrame()
    header, body = [str(h) for h in dataset[0]], dataset[1:]
    return pd.DataFrame(body, columns=header)


def two_series_bar_chart(dataset: TableDataset, *, series_titles: Sequence[str] = ()) -> Dict[str, Any]:
    df = dataset_frame(dataset)
    if df.empty or len(df.columns) < 3:
        return {}
    dim, s1, s2 = df.columns[:3]
    titles = list(series_titles) or [s1, s2]
    # Upstream column names carry spaces and accents; chart on fixed names.
    df = df.iloc[:, :3].set_axis(["name", "v1", "v2"], axis=1)
    long_df = df.melt(id_vars="name", value_vars=["v1", "v2"], var_name="serie", value_name="valor")
    long_df["serie"] = long_df["serie"].map({"v1": titles[0], "v2": titles[1]})
    order: List[str] = df["name"].astype(str).tolist()
    bars = (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            y=alt.Y("name:N", title=None, sort=order),
            x=alt.X("valor:Q", title="Valor", axis=alt.Axis(format="$~s", gridDash=[4, 4], domain=False, ticks=False)),
            yOffset="serie:N",
            color=alt.Color("serie:N", title=None, scale=alt.Scale(range=[PRIMARY, SECONDARY])),
            tooltip=[alt.Tooltip("name:N", title=dim), "serie:N", alt.Tooltip("valor:Q", format="$,.0f")],
        )
    )
    return to_vega_spec(bars)


def grouped_bar_chart(entries: Sequence[GroupedEntry], *, title: str = "Valor") -> Dict[str, Any]:
    df = pd.DataFrame(list(entries), columns=["name", "value"])
    if df.empty:
        return {}
    hover = alt.selection_point(fields=["name"], on="mouseover")
    bars = (
        alt.Chart(df)
        .mark_bar(color=ACCENT)
        .encode(
            x=alt.X("value:Q", title=title, axis=alt.Axis(format="$~s", gridDash=[4, 4], domain=False, ticks=False)),
            y=alt.Y("name:N", title=None, sort="-x"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.4)),
            tooltip=[alt.Tooltip("name:N", title="Grupo"), alt.Tooltip("value:Q", title=title, format="$,.0f")],
        )
        .add_params(hover)
    )
    return to_vega_spec(bars)


def vigencias_chart(rows: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Estimated vs. real investment per year; ``rows`` are VigenciaRow dicts."""
    df = pd.DataFrame(list(rows))
    if df.empty or "year" not in df.columns:
        return {}
    long_df = df.melt(
        id_vars="year",
        value_vars=["estimated_investment", "real_investment"],
        var_name="metric",
        value_name="investment",
    )
    long_df["metric"] = long_df["metric"].map({"estimated_investment": "Inversión estimada", "real_investment": "Inversión real"})
    bars = (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=alt.X("year:O", title="Vigencia"),
            xOffset="metric:N",
            y=alt.Y("investment:Q", title="Inversión", axis=alt.Axis(format="$~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("metric:N", title=None, scale=alt.Scale(range=[PRIMARY, SECONDARY])),
            tooltip=["year", "metric", alt.Tooltip("investment:Q", format="$,.0f")],
        )
    )
    return to_vega_spec(bars)


def gantt_chart(spans: Sequence[Dict[str, Any]], *, label_key: str = "label") -> Dict[str, Any]:
    """Estimated vs. real bars per span; ``spans`` are StageSpan or WorkSpan dicts."""
    records = []
    for span in spans:
        for serie, start, end in (("Estimado", "est_start", "est_end"), ("Real", "real_start", "real_end")):
            if span.get(start) and span.get(end):
                records.append({"name": str(span[label_key]), "serie": serie, "start": span[start], "end": span[end]})
    df = pd.DataFrame(records, columns=["name", "serie", "start", "end"])
    if df.empty:
        return {}
    order: List[str] = list(dict.fromkeys(df["name"]))
    bars = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("start:T", title=None, axis=alt.Axis(format="%b %Y", gridDash=[4, 4], domain=False, ticks=False)),
            x2="end:T",
            y=alt.Y("name:N", title=None, sort=order),
            yOffset="serie:N",
            color=alt.Color("serie:N", title=None, scale=alt.Scale(range=[PRIMARY, SECONDARY])),
            tooltip=[
                "name:N",
                "serie:N",
                alt.Tooltip("start:T", title="Inicio", format="%d/%m/%Y"),
                alt.Tooltip("end:T", title="Fin", format="%d/%m/%Y"),
            ],
        )
    )
    return to_vega_spec(bars)

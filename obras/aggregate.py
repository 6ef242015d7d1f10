from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from obras.numbers import to_number, to_text

Row = Dict[str, Any]
GroupedEntry = Dict[str, Any]
TableDataset = List[List[Union[str, float]]]


def group_sum(rows: Iterable[Row], key_field: str, value_field: str) -> List[GroupedEntry]:
    """Sum ``value_field`` per distinct ``key_field`` label, skipping rows with an empty key.

    Entries come out in first-seen key order; callers sort as needed.
    """
    keys: List[str] = []
    values: List[float] = []
    for r in rows:
        k = to_text(r.get(key_field))
        if not k:
            continue
        keys.append(k)
        values.append(to_number(r.get(value_field)))
    if not keys:
        return []
    df = pd.DataFrame({"name": keys, "value": values})
    grouped = df.groupby("name", sort=False)["value"].sum().reset_index()
    return [{"name": str(n), "value": float(v)} for n, v in zip(grouped["name"], grouped["value"])]


def sort_desc(entries: Iterable[GroupedEntry]) -> List[GroupedEntry]:
    return sorted(entries, key=lambda e: e["value"], reverse=True)


def top_n_with_others(entries: Sequence[GroupedEntry], n: int = 15, label: str = "Otros") -> List[GroupedEntry]:
    """Keep the first ``n`` entries and fold the rest into one ``label`` bucket.

    ``entries`` must already be sorted descending. The bucket is only added when
    the remainder is strictly positive.
    """
    entries = list(entries)
    if len(entries) <= n:
        return entries
    top = entries[:n]
    rest = float(sum(e["value"] for e in entries[n:]))
    if rest > 0:
        return top + [{"name": label, "value": rest}]
    return top


def build_two_series_dataset(
    rows: Sequence[Row],
    dim_field: str,
    val1_field: str,
    val2_field: str,
    top_n: int = 15,
    *,
    others_label: Optional[str] = None,
) -> TableDataset:
    """Header row ``[dim_field, val1_field, val2_field]`` then ``[name, v1, v2]`` by descending v1+v2.

    Only the ``top_n`` names by combined total are kept. Overflow names are
    dropped unless ``others_label`` is given, in which case they are summed into
    one trailing row (only when that row's total is positive).
    """
    rows = list(rows)
    top_n = max(0, int(top_n))
    header: List[Union[str, float]] = [dim_field, val1_field, val2_field]

    a = pd.DataFrame(group_sum(rows, dim_field, val1_field), columns=["name", "value"])
    b = pd.DataFrame(group_sum(rows, dim_field, val2_field), columns=["name", "value"])
    if a.empty and b.empty:
        return [header]
    # A name present in only one series gets 0 for the other.
    merged = (
        pd.concat(
            [
                a.rename(columns={"value": "v1"}).assign(v2=0.0),
                b.rename(columns={"value": "v2"}).assign(v1=0.0),
            ],
            ignore_index=True,
        )
        .groupby("name", sort=False)[["v1", "v2"]]
        .sum()
        .reset_index()
    )
    merged["total"] = merged["v1"] + merged["v2"]
    merged = merged.sort_values("total", ascending=False, kind="stable").reset_index(drop=True)

    top = merged.head(top_n)
    data: TableDataset = [[str(n), float(v1), float(v2)] for n, v1, v2 in zip(top["name"], top["v1"], top["v2"])]

    if others_label and len(merged) > top_n:
        overflow = merged.iloc[top_n:]
        v1, v2 = float(overflow["v1"].sum()), float(overflow["v2"].sum())
        if v1 + v2 > 0:
            data.append([others_label, v1, v2])
    return [header] + data

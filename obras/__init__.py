"""Core (UI-agnostic) public-works dashboard logic.

This package contains:
- the field map of the upstream "obras" API
- numeric parsing and cost resolution
- row filters and cascading filter options
- aggregations, KPIs and per-year (vigencia) summaries
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
- upstream fetch, spreadsheet reading and the row cache
"""

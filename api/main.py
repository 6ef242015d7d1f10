from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response

from api.schemas import FilterChangeModel, FiltersModel, GroupSumRequest
from obras.aggregate import group_sum, sort_desc, top_n_with_others
from obras.cache import RowCache
from obras.charts import grouped_bar_chart
from obras.config import Settings, get_settings
from obras.data import SpreadsheetError, UpstreamError, fetch_rows, list_sheets, prepare_context, read_spreadsheet
from obras.fields import FIELDS, FIELD_GROUPS, all_columns
from obras.filters import (
    DATE_FIELD,
    Filters,
    clean_dependent_filters,
    default_date_filters,
    get_filter_options,
    normalize_filters,
    unique_year_months,
    unique_years,
)
from obras.metrics_overview import compute_overview
from obras.metrics_timeline import compute_timeline_page
from obras.metrics_vigencias import compute_vigencias_page

logger = logging.getLogger(__name__)


def _filters_from_model(model: FiltersModel) -> Filters:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _cache(request: Request) -> RowCache:
    return request.app.state.cache


def _resolve_field(name: str) -> str:
    # Accept canonical keys ("dependencia") as well as raw column names.
    return FIELDS.get(name, name)


def create_app(settings: Optional[Settings] = None, cache: Optional[RowCache] = None) -> FastAPI:
    settings = settings or get_settings()
    if cache is None:
        cache = RowCache(lambda: fetch_rows(settings), max_age_seconds=settings.cache_seconds)

    app = FastAPI(title="Obras Dashboard API", version="0.1.0")
    app.state.settings = settings
    app.state.cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/obras")
    def obras(request: Request):
        try:
            return _json(_cache(request).get())
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("obras failed")
            return _error(exc)

    @app.get("/api/data")
    def data(request: Request, sheet: Optional[str] = None):
        try:
            path = request.app.state.settings.workbook_path
            return _json({"rows": read_spreadsheet(path, sheet or None)})
        except SpreadsheetError as exc:
            return _error(exc, 400)
        except Exception as exc:
            logger.exception("data failed")
            return _error(exc)

    @app.get("/api/sheets")
    def sheets(request: Request):
        try:
            return _json({"sheets": list_sheets(request.app.state.settings.workbook_path)})
        except SpreadsheetError as exc:
            return _error(exc, 400)
        except Exception as exc:
            logger.exception("sheets failed")
            return _error(exc)

    @app.get("/api/status")
    def status(request: Request):
        try:
            cache = _cache(request)
            cache.get()
            return _json({"status": "OK", **cache.status()})
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("status failed")
            return _error(exc)

    @app.post("/api/refresh")
    def refresh(request: Request):
        try:
            # A failed refresh leaves the previous rows in place.
            rows = _cache(request).refresh()
            return _json({"message": "Cache refreshed", "records": len(rows)})
        except UpstreamError as exc:
            logger.warning("Refresh failed: %s", exc)
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("refresh failed")
            return _error(exc)

    @app.get("/api/limites")
    def limites(request: Request):
        path = request.app.state.settings.limits_path
        if not path.is_file():
            return JSONResponse(status_code=404, content={"error": "Boundaries file not available", "type": "NotFound"})
        return FileResponse(path, media_type="application/geo+json")

    @app.get("/meta/fields")
    def meta_fields():
        return _json(
            {
                "fields": dict(FIELDS),
                "columns": all_columns(),
                "groups": {k: list(v) for k, v in FIELD_GROUPS.items()},
            }
        )

    @app.post("/filter-options")
    def filter_options(request: Request, filters: FiltersModel):
        try:
            rows = _cache(request).get()
            f = _filters_from_model(filters)
            options = get_filter_options(rows, f)
            date_column = FIELDS[DATE_FIELD]
            return _json(
                {
                    "filters": asdict(f),
                    "options": asdict(options),
                    "years": unique_years(rows, date_column),
                    "year_months": unique_year_months(rows, date_column),
                    "date_defaults": default_date_filters(),
                }
            )
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("filter_options failed")
            return _error(exc)

    @app.post("/filters/clean")
    def filters_clean(change: FilterChangeModel):
        try:
            f = _filters_from_model(change.filters)
            return _json({"filters": asdict(clean_dependent_filters(f, change.changed))})
        except Exception as exc:
            logger.exception("filters_clean failed")
            return _error(exc)

    @app.post("/overview")
    def overview(request: Request, filters: FiltersModel, top_n: int = Query(default=15, ge=1, le=200)):
        try:
            ctx = prepare_context(_filters_from_model(filters), _cache(request).get())
            return _json(compute_overview(ctx["filters"], ctx, top_n=top_n))
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("overview failed")
            return _error(exc)

    @app.post("/vigencias")
    def vigencias(request: Request, filters: FiltersModel):
        try:
            ctx = prepare_context(_filters_from_model(filters), _cache(request).get())
            return _json(compute_vigencias_page(ctx["filters"], ctx))
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("vigencias failed")
            return _error(exc)

    @app.post("/timeline")
    def timeline(request: Request, filters: FiltersModel, limit: int = Query(default=30, ge=1, le=200)):
        try:
            ctx = prepare_context(_filters_from_model(filters), _cache(request).get())
            return _json(compute_timeline_page(ctx["filters"], ctx, limit=limit))
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("timeline failed")
            return _error(exc)

    @app.post("/group-sum")
    def group_sum_endpoint(request: Request, body: GroupSumRequest):
        try:
            ctx = prepare_context(_filters_from_model(body.filters), _cache(request).get())
            entries = group_sum(ctx["filtered"], _resolve_field(body.key_field), _resolve_field(body.value_field))
            entries = top_n_with_others(sort_desc(entries), body.top_n, body.others_label)
            return _json({"entries": entries, "chart": grouped_bar_chart(entries, title=body.value_field)})
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("group_sum failed")
            return _error(exc)

    @app.post("/export")
    def export(request: Request, filters: FiltersModel):
        try:
            ctx = prepare_context(_filters_from_model(filters), _cache(request).get())
            export_df = pd.DataFrame(ctx["filtered"])
            csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        except UpstreamError as exc:
            return _error(exc, 502)
        except Exception as exc:
            logger.exception("export failed")
            return _error(exc)
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=obras.csv"})

    return app


app = create_app()


def run() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)


if __name__ == "__main__":
    run()

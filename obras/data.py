from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
import requests

from obras.config import Settings
from obras.fields import FIELDS
from obras.filters import Filters, apply_filters, normalize_filters
from obras.numbers import coerce_row

logger = logging.getLogger(__name__)

MAX_SPREADSHEET_BYTES = 5 * 1024 * 1024
SPREADSHEET_SUFFIXES = (".xlsx", ".xls")
PREFERRED_SHEET = "Obras"

Row = Dict[str, Any]


class ObrasError(Exception):
    """Base class for data-access failures."""


class UpstreamError(ObrasError):
    """The upstream obras API could not be reached or returned an unusable payload."""


class SpreadsheetError(ObrasError, ValueError):
    """A spreadsheet input was rejected or could not be parsed."""


def unwrap_payload(payload: Any) -> List[Row]:
    """Accept a bare list of records or an object wrapping it under ``data`` or ``rows``."""
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        records = payload["data"]
    elif isinstance(payload, dict) and isinstance(payload.get("rows"), list):
        records = payload["rows"]
    else:
        raise UpstreamError(f"Unexpected payload type from obras API: {type(payload).__name__}")
    return [r for r in records if isinstance(r, dict)]


def fetch_rows(settings: Settings, session: Optional[requests.Session] = None) -> List[Row]:
    http = session or requests.Session()
    logger.info("Fetching obras from %s", settings.api_url)
    try:
        response = http.get(settings.api_url, headers=settings.headers, timeout=settings.timeout_seconds)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        logger.error("Obras API request failed: %s", exc)
        raise UpstreamError(f"Obras API request failed: {exc}") from exc
    except ValueError as exc:
        raise UpstreamError("Obras API returned invalid JSON") from exc
    finally:
        if session is None:
            http.close()
    rows = unwrap_payload(payload)
    logger.info("Fetched %d obras", len(rows))
    return rows


def _validate_spreadsheet(path: Path) -> None:
    if path.suffix.lower() not in SPREADSHEET_SUFFIXES:
        raise SpreadsheetError("Unsupported format. Upload a .xlsx or .xls file")
    if not path.exists():
        raise SpreadsheetError(f"{path} does not exist")
    size = path.stat().st_size
    if size > MAX_SPREADSHEET_BYTES:
        raise SpreadsheetError(f"File too large ({size / 1024 / 1024:.1f}MB). Max 5MB")


def list_sheets(path: Union[str, Path]) -> List[str]:
    path = Path(path)
    _validate_spreadsheet(path)
    try:
        with pd.ExcelFile(path) as book:
            return [str(name) for name in book.sheet_names]
    except Exception as exc:
        raise SpreadsheetError(f"Could not read {path.name}: {exc}") from exc


def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


def read_spreadsheet(path: Union[str, Path], sheet: Optional[str] = None) -> List[Row]:
    """Read one sheet as rows; defaults to the "Obras" sheet, else the first one."""
    path = Path(path)
    sheets = list_sheets(path)
    if not sheets:
        raise SpreadsheetError(f"{path.name} has no sheets")
    if sheet is None:
        sheet = PREFERRED_SHEET if PREFERRED_SHEET in sheets else sheets[0]
    elif sheet not in sheets:
        raise SpreadsheetError(f'Sheet "{sheet}" does not exist')

    try:
        df = pd.read_excel(path, sheet_name=sheet, dtype=object)
    except Exception as exc:
        raise SpreadsheetError(f"Could not read {path.name}: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    df = drop_duplicate_columns(df)
    df = df.astype(object).where(pd.notna(df), None)
    rows = [coerce_row(r) for r in df.to_dict(orient="records")]
    logger.info("Read %d rows from %s [%s]", len(rows), path.name, sheet)
    return rows


def prepare_context(
    filters: Union[Mapping[str, Any], Filters],
    rows: Sequence[Row],
    *,
    fields: Mapping[str, str] = FIELDS,
) -> Dict[str, Any]:
    filt = filters if isinstance(filters, Filters) else normalize_filters(filters)
    return {
        "filters": filt,
        "fields": fields,
        "rows": list(rows),
        "filtered": apply_filters(rows, filt, fields=fields),
    }

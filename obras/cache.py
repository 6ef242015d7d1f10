from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass(frozen=True)
class CacheEntry:
    data: List[Row]
    fetched_at: float


class RowCache:
    """Time-bounded in-memory copy of the upstream rows.

    A failed refresh keeps serving the previous rows when there are any.
    """

    def __init__(self, fetcher: Callable[[], List[Row]], max_age_seconds: float = 300.0, clock: Callable[[], float] = time.time):
        self._fetcher = fetcher
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def is_stale(self) -> bool:
        if self._entry is None:
            return True
        return (self._clock() - self._entry.fetched_at) > self.max_age_seconds

    def refresh(self) -> List[Row]:
        rows = self._fetcher()
        self._entry = CacheEntry(data=rows, fetched_at=self._clock())
        logger.info("Row cache refreshed with %d rows", len(rows))
        return rows

    def get(self) -> List[Row]:
        if not self.is_stale():
            return self._entry.data  # type: ignore[union-attr]
        try:
            return self.refresh()
        except Exception:
            if self._entry is not None:
                logger.warning("Refresh failed; serving cached rows from %s", self._iso(self._entry.fetched_at))
                return self._entry.data
            raise

    def invalidate(self) -> None:
        self._entry = None

    @staticmethod
    def _iso(ts: float) -> str:
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()

    def status(self) -> Dict[str, Any]:
        if self._entry is None:
            return {"records": 0, "last_fetch": None, "cache_age_seconds": None}
        return {
            "records": len(self._entry.data),
            "last_fetch": self._iso(self._entry.fetched_at),
            "cache_age_seconds": round(self._clock() - self._entry.fetched_at),
        }

"""Runtime settings, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

DATA_DIR = Path(__file__).resolve().parents[1] / "data"

DEFAULT_API_URL = "https://visorestrategicobackend-gkejc4hthnace6b4.eastus2-01.azurewebsites.net/api/powerbi/obras"
DEFAULT_LIMITS_PATH = DATA_DIR / "limites.geojson"
DEFAULT_WORKBOOK_PATH = DATA_DIR / "datos.xlsx"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    api_url: str = field(default_factory=lambda: os.getenv("OBRAS_API_URL", DEFAULT_API_URL))
    api_key: str = field(default_factory=lambda: os.getenv("OBRAS_API_KEY", ""))
    cache_seconds: float = field(default_factory=lambda: _env_float("OBRAS_CACHE_SECONDS", 300.0))
    timeout_seconds: float = field(default_factory=lambda: _env_float("OBRAS_TIMEOUT_SECONDS", 10.0))
    port: int = field(default_factory=lambda: _env_int("PORT", 3001))
    limits_path: Path = field(default_factory=lambda: Path(os.getenv("OBRAS_LIMITS_PATH", str(DEFAULT_LIMITS_PATH))))
    workbook_path: Path = field(default_factory=lambda: Path(os.getenv("OBRAS_WORKBOOK_PATH", str(DEFAULT_WORKBOOK_PATH))))
    cors_origins: List[str] = field(
        default_factory=lambda: _env_list("OBRAS_CORS_ORIGINS", ["http://localhost:5173", "http://127.0.0.1:5173"])
    )

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": "ObrasDashboard/1.0"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers


def get_settings() -> Settings:
    return Settings()

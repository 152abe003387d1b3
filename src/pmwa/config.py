from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v is not None and v != "" else default


def _get_int(name: str, default: int) -> int:
    v = _get_env(name, str(default))
    return int(v)


def _get_float(name: str, default: float) -> float:
    v = _get_env(name, str(default))
    return float(v)


def _get_bool(name: str, default: bool) -> bool:
    v = _get_env(name, "1" if default else "0")
    return v.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    data_api: str
    http_timeout_sec: float

    activity_page: int
    closed_page: int
    max_records: int
    dust_usd: float

    lmdb_path: Path
    snapshot_max_age_sec: int

    log_dir: Path
    log_level: str

    trades_per_page: int
    unify_keywords: bool


def load_settings() -> Settings:
    lmdb_path = Path(_get_env("PMWA_LMDB_PATH", "./data/wallets.lmdb"))
    log_dir = Path(_get_env("PMWA_LOG_DIR", "./data/logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    lmdb_path.parent.mkdir(parents=True, exist_ok=True)

    return Settings(
        data_api=_get_env("PMWA_DATA_API", "https://data-api.polymarket.com"),
        http_timeout_sec=_get_float("PMWA_HTTP_TIMEOUT_SEC", 20.0),
        activity_page=_get_int("PMWA_ACTIVITY_PAGE", 500),
        # closed-positions endpoint caps pages at 50
        closed_page=_get_int("PMWA_CLOSED_PAGE", 50),
        max_records=_get_int("PMWA_MAX_RECORDS", 10000),
        dust_usd=_get_float("PMWA_DUST_USD", 1.0),
        lmdb_path=lmdb_path,
        snapshot_max_age_sec=_get_int("PMWA_SNAPSHOT_MAX_AGE_SEC", 900),
        log_dir=log_dir,
        log_level=_get_env("PMWA_LOG_LEVEL", "INFO"),
        trades_per_page=_get_int("PMWA_TRADES_PER_PAGE", 25),
        unify_keywords=_get_bool("PMWA_UNIFY_KEYWORDS", False),
    )

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from fact_feed.domain.models import MAX_FETCH_LIMIT


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v


def _env_choice(name: str, default: str, allowed: set[str]) -> str:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    val = v.strip().lower()
    return val if val in allowed else default


def _env_log_level(name: str, default: str = "INFO") -> str:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    val = v.strip().upper()
    return val if isinstance(logging.getLevelName(val), int) else default


@dataclass(frozen=True)
class StoreSettings:
    backend: str = "json"  # json | supabase
    json_path: str = "./facts.json"

    supabase_url: str = ""
    supabase_key: str = ""
    table: str = "facts"
    increment_function: str = "increment_vote"
    timeout_s: float = 15.0


@dataclass(frozen=True)
class AppSettings:
    store: StoreSettings = StoreSettings()
    fetch_limit: int = MAX_FETCH_LIMIT
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "AppSettings":
        store = StoreSettings(
            backend=_env_choice("FF_STORE", StoreSettings.backend, {"json", "supabase"}),
            json_path=_env_str("FF_JSON_STORE", StoreSettings.json_path),
            supabase_url=_env_str("FF_SUPABASE_URL", StoreSettings.supabase_url),
            supabase_key=_env_str("FF_SUPABASE_KEY", StoreSettings.supabase_key),
            table=_env_str("FF_TABLE", StoreSettings.table),
            increment_function=_env_str("FF_INCREMENT_FN", StoreSettings.increment_function),
            timeout_s=_env_float("FF_TIMEOUT", StoreSettings.timeout_s),
        )

        limit = _env_int("FF_FETCH_LIMIT", AppSettings.fetch_limit)
        if limit <= 0:
            limit = AppSettings.fetch_limit
        limit = min(limit, MAX_FETCH_LIMIT)

        return AppSettings(
            store=store,
            fetch_limit=limit,
            log_level=_env_log_level("FF_LOG_LEVEL", AppSettings.log_level),
        )

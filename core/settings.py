"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


def _env_int(name: str, default: int, env: Optional[Mapping[str, str]] = None) -> int:
    raw = (env if env is not None else os.environ).get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


APP_NAME = "Coalition"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "app.db"
RETRY_LOG_PATH = LOG_DIR / "retry.log"
PRODUCTS_LOG_PATH = LOG_DIR / "products.log"


@dataclass(frozen=True)
class RetrySettings:
    base_interval_sec: float = 10
    tick_interval_sec: float = 10
    max_attempts: int = 5
    storage_key: str = "coalition_retry_queue"

    def backoff_seconds(self, attempts: int) -> float:
        """Delay required after the last attempt before entry ``attempts`` is retried."""

        return (2 ** max(attempts - 1, 0)) * self.base_interval_sec


def load_retry_settings(env: Optional[Mapping[str, str]] = None) -> RetrySettings:
    defaults = RetrySettings()
    return RetrySettings(
        base_interval_sec=_env_int("COALITION_RETRY_BASE_SEC", int(defaults.base_interval_sec), env),
        tick_interval_sec=_env_int("COALITION_RETRY_TICK_SEC", int(defaults.tick_interval_sec), env),
        max_attempts=_env_int("COALITION_RETRY_MAX_ATTEMPTS", defaults.max_attempts, env),
        storage_key=defaults.storage_key,
    )


RETRY = load_retry_settings()


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str] = None
    anon_key: Optional[str] = field(default=None, repr=False)
    table: str = "products"
    timeout_sec: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)


def load_supabase_settings(env: Optional[Mapping[str, str]] = None) -> SupabaseSettings:
    environ = env if env is not None else os.environ
    url = (environ.get("SUPABASE_URL") or "").strip().rstrip("/") or None
    key = (environ.get("SUPABASE_ANON_KEY") or "").strip() or None
    return SupabaseSettings(url=url, anon_key=key)


SUPABASE = load_supabase_settings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "RETRY_LOG_PATH",
    "PRODUCTS_LOG_PATH",
    "RETRY",
    "SUPABASE",
    "RetrySettings",
    "SupabaseSettings",
    "get_default_data_dir",
    "load_retry_settings",
    "load_supabase_settings",
]

"""Deployment settings read from the environment.

Product constants live in `domain.constants`; this module only covers values that
change per deployment (backend credentials, timezone, timeouts).
"""
import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from utils.paths import resolve_data_dir

logger = logging.getLogger(__name__)

ENV_PREFIX = "ART_APP_"


@dataclass(frozen=True)
class AppConfig:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    timezone: str = "UTC"
    http_timeout: float = 10.0
    poll_interval: float = 3.0
    data_dir: str = ""
    log_level: str = "INFO"

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, falling back to UTC", self.timezone)
            return ZoneInfo("UTC")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or value.strip() == '':
        return default
    return value.strip()


def _float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s%s=%r", ENV_PREFIX, name, raw)
        return default


def load_config() -> AppConfig:
    return AppConfig(
        supabase_url=_env("SUPABASE_URL"),
        supabase_key=_env("SUPABASE_KEY"),
        timezone=_env("TIMEZONE", "UTC"),
        http_timeout=_float("HTTP_TIMEOUT", 10.0),
        poll_interval=_float("POLL_INTERVAL", 3.0),
        data_dir=resolve_data_dir(_env("DATA_DIR")),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )

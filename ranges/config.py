"""Settings loaded from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from ranges.strategies import DEFAULT_INCREMENT, RangeStrategy

DEFAULT_DB_PATH = str((Path(__file__).parent.parent / "ranges.db").resolve())


def _number(env: Mapping[str, str], key: str, default: float, cast=float):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None


@dataclass(frozen=True, slots=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    default_strategy: str = RangeStrategy.STANDARD.value
    increment: float = DEFAULT_INCREMENT
    notify_concurrency: int = 8
    notify_timeout: float = 5.0
    log_level: str = "INFO"

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        s = Settings(
            db_path=env.get("RANGES_DB_PATH", DEFAULT_DB_PATH),
            default_strategy=env.get("RANGES_DEFAULT_STRATEGY", RangeStrategy.STANDARD.value),
            increment=_number(env, "RANGES_INCREMENT", DEFAULT_INCREMENT),
            notify_concurrency=_number(env, "RANGES_NOTIFY_CONCURRENCY", 8, int),
            notify_timeout=_number(env, "RANGES_NOTIFY_TIMEOUT", 5.0),
            log_level=env.get("RANGES_LOG_LEVEL", "INFO").upper(),
        )
        if s.increment <= 0:
            raise ValueError("RANGES_INCREMENT must be > 0")
        if s.notify_concurrency < 1:
            raise ValueError("RANGES_NOTIFY_CONCURRENCY must be >= 1")
        return s


@lru_cache()
def get_settings() -> Settings:
    """Cached settings from the process environment."""
    return Settings.from_env()

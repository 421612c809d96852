from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_WORKER_COUNT_ENV = "DECODER_WORKER_COUNT"
_MAX_BATCH_ENV = "DECODER_MAX_BATCH_FRAMES"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    decoder_workers: int
    max_batch_frames: int
    log_level: str


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        decoder_workers=_read_positive_int(_WORKER_COUNT_ENV, 4),
        max_batch_frames=_read_positive_int(_MAX_BATCH_ENV, 1000),
        log_level=_read_log_level("INFO"),
    )

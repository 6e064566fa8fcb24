from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from .exceptions import InvalidConfigurationError

# Number of distinct ball colors the front ends can draw. Each color also has a
# second visual variant, so indices beyond the palette stay distinguishable.
PALETTE_SIZE = 13

MIN_COLUMNS = 1
MAX_COLUMNS = PALETTE_SIZE + 1
MIN_CAPACITY = 2
MAX_CAPACITY = 20

HISTORY_DISPLAY_LIMIT = 10

DEFAULT_COLUMNS = 7
DEFAULT_CAPACITY = 7
DEFAULT_DB = 'data/boule.db'
DEFAULT_AUTOSAVE_SECONDS = 30.0


@dataclass(frozen=True, order=True)
class Config:
    """A puzzle configuration: how many columns and how many rows per column."""
    column_count: int
    column_capacity: int

    def key(self) -> str:
        return f"{self.column_count}x{self.column_capacity}"


def validate_config(column_count: int, column_capacity: int) -> Config:
    """Rejects dimensions the engine cannot build a board for."""
    if column_count < 1:
        raise InvalidConfigurationError(f'column_count must be >= 1, got {column_count}')
    if column_capacity < 1:
        raise InvalidConfigurationError(f'column_capacity must be >= 1, got {column_capacity}')
    return Config(int(column_count), int(column_capacity))


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def clamp_config(column_count: Any, column_capacity: Any) -> Config:
    """Clamps user-supplied values into the bounds offered by the front ends."""
    return Config(
        _clamp(int(column_count), MIN_COLUMNS, MAX_COLUMNS),
        _clamp(int(column_capacity), MIN_CAPACITY, MAX_CAPACITY),
    )


def _env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Process-wide settings read from the environment."""
    db_path: str
    debug: bool
    autosave_seconds: float
    default_config: Config

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            db_path=os.getenv('BOULE_DB', DEFAULT_DB),
            debug=_env_flag('BOULE_DEBUG'),
            autosave_seconds=_env_float('BOULE_AUTOSAVE_SECONDS', DEFAULT_AUTOSAVE_SECONDS),
            default_config=clamp_config(
                _env_int('BOULE_COLUMNS', DEFAULT_COLUMNS),
                _env_int('BOULE_CAPACITY', DEFAULT_CAPACITY),
            ),
        )

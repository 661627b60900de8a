"""Environment variable configuration for the scholar client.

Settings are loaded in priority order:
  1. Shell environment variables (highest priority)
  2. .env file in current directory
  3. ~/.scholar/.env (persistent config, set via `scholar env set`)

Run `scholar env` to see which settings are configured.
Run `scholar env set KEY value` to save a setting persistently.

Known settings:
    SCHOLAR_TIMEOUT    ->  request timeout in seconds (default 10)
    SCHOLAR_LOG_LEVEL  ->  logging level for the CLI (default WARNING)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv, set_key

SCHOLAR_DIR = Path.home() / ".scholar"
PERSISTENT_ENV = SCHOLAR_DIR / ".env"

DEFAULT_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "WARNING"

# Load in reverse priority order (later loads don't overwrite existing)
if PERSISTENT_ENV.exists():
    load_dotenv(PERSISTENT_ENV)

load_dotenv()


# --- Parsing ---

def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"SCHOLAR_TIMEOUT must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise ValueError(f"SCHOLAR_TIMEOUT must be positive, got {raw!r}")
    return timeout


def _parse_log_level(raw: str) -> str:
    level = raw.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown SCHOLAR_LOG_LEVEL: {level!r}")
    return level


# --- Accessors ---

def get_timeout() -> float:
    raw = os.getenv("SCHOLAR_TIMEOUT", "")
    return _parse_timeout(raw) if raw else DEFAULT_TIMEOUT


def get_log_level() -> str:
    return _parse_log_level(os.getenv("SCHOLAR_LOG_LEVEL", DEFAULT_LOG_LEVEL))


# --- Known settings ---

SETTINGS = {
    "SCHOLAR_TIMEOUT": {
        "default": str(DEFAULT_TIMEOUT),
        "parse": _parse_timeout,
        "description": "Request timeout in seconds for fetching result pages",
    },
    "SCHOLAR_LOG_LEVEL": {
        "default": DEFAULT_LOG_LEVEL,
        "parse": _parse_log_level,
        "description": "Logging level used by the scholar CLI",
    },
}

VALID_KEYS = set(SETTINGS)


# --- Persistent config ---

def save_setting(name: str, value: str) -> Path:
    """Validate a setting and save it to ~/.scholar/.env.

    Raises ValueError for unknown names or values the accessor would reject,
    so a bad value never reaches the file.
    """
    if name not in SETTINGS:
        raise ValueError(f"Unknown setting: {name}")
    SETTINGS[name]["parse"](value)

    SCHOLAR_DIR.mkdir(parents=True, exist_ok=True)
    PERSISTENT_ENV.touch(exist_ok=True)
    set_key(PERSISTENT_ENV, name, value, quote_mode="never")

    # Also set in current process
    os.environ[name] = value

    return PERSISTENT_ENV


# --- Status check ---

def check_env() -> list[tuple[str, str | None, dict]]:
    """Return (var_name, value or None, info) for every known setting."""
    return [(var, os.getenv(var) or None, info) for var, info in SETTINGS.items()]

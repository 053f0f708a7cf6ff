"""
Runtime configuration from environment variables.

- HERB_LEDGER_STATE: state directory (default: ./state)
- HERB_LEDGER_FILE: ledger file inside the state directory (default: ledger.jsonl)
- HERB_LEDGER_STRICT_VALIDATION: parse dates/coordinates/quantity (default: false)
- HERB_LEDGER_LOG_LEVEL: logging level name (default: INFO)
- HERB_LEDGER_HOST / HERB_LEDGER_PORT: dev server bind (default: 0.0.0.0:8080)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .validation import OpaqueFieldValidator, RecordValidator, StrictFieldValidator


def _opt(name: str, default: str) -> str:
    """Get optional environment variable with default."""
    return os.getenv(name, default)


def _opt_bool(name: str, default: bool) -> bool:
    """Parse boolean environment variable."""
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _opt_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v)
    except ValueError:
        raise RuntimeError(f"Env var {name} must be an integer, got {v!r}")


@dataclass(frozen=True)
class Settings:
    """Herb ledger configuration."""

    STATE_DIR: str = "./state"
    LEDGER_FILE: str = "ledger.jsonl"
    STRICT_VALIDATION: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    @property
    def ledger_path(self) -> str:
        return os.path.join(self.STATE_DIR, self.LEDGER_FILE)

    def validator(self) -> RecordValidator:
        return StrictFieldValidator() if self.STRICT_VALIDATION else OpaqueFieldValidator()

    @staticmethod
    def load() -> Settings:
        """Load settings from environment variables."""
        return Settings(
            STATE_DIR=_opt("HERB_LEDGER_STATE", "./state"),
            LEDGER_FILE=_opt("HERB_LEDGER_FILE", "ledger.jsonl"),
            STRICT_VALIDATION=_opt_bool("HERB_LEDGER_STRICT_VALIDATION", False),
            LOG_LEVEL=_opt("HERB_LEDGER_LOG_LEVEL", "INFO").upper(),
            HOST=_opt("HERB_LEDGER_HOST", "0.0.0.0"),
            PORT=_opt_int("HERB_LEDGER_PORT", 8080),
        )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

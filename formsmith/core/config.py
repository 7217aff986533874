"""
Unified configuration for the formsmith engine.

Consolidates validation, derivation, storage and logging options into a
single configuration class with sensible defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

VALID_INTERPRETERS = ("arithmetic", "substitution")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass
class FormConfig:
    """
    Unified configuration for validation passes and schema storage.
    """

    # === Validation ===
    enforce_ranges: bool = True
    """Enforce minNumber/maxNumber/minDate/maxDate during validation"""

    # === Derivation ===
    interpreter: str = "arithmetic"
    """Formula interpreter: 'arithmetic' or 'substitution'"""

    # === Storage ===
    store_path: Optional[str] = None
    """SQLite file for saved schemas (None = in-memory store)"""

    store_key: str = "forms"
    """Name of the persisted schema list inside the store"""

    # === Logging ===
    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"""

    enable_progress_bar: bool = True
    """Show a progress bar when validating batches of submissions"""

    def __post_init__(self):
        """Validate configuration values after initialization."""
        if self.interpreter not in VALID_INTERPRETERS:
            raise ConfigurationError(
                f"interpreter must be one of {VALID_INTERPRETERS}, got '{self.interpreter}'"
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{self.log_level}'"
            )

        if not self.store_key:
            raise ConfigurationError("store_key must be a non-empty string")

    @classmethod
    def for_development(cls) -> FormConfig:
        """Create configuration optimized for development."""
        return cls(
            store_path=None,       # In-memory store
            enable_progress_bar=True,
            log_level="DEBUG",
        )

    @classmethod
    def for_production(cls, store_path: str = "formsmith.db") -> FormConfig:
        """Create configuration optimized for production."""
        return cls(
            store_path=store_path,
            enable_progress_bar=False,  # No console output
            log_level="WARNING",
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> FormConfig:
        """Build a configuration from ``FORMSMITH_*`` environment variables.

        A ``.env`` file is loaded first (existing variables win).
        """
        load_dotenv(dotenv_path)
        defaults = cls()
        return cls(
            enforce_ranges=_env_bool("FORMSMITH_ENFORCE_RANGES", defaults.enforce_ranges),
            interpreter=os.getenv("FORMSMITH_INTERPRETER", defaults.interpreter),
            store_path=os.getenv("FORMSMITH_STORE_PATH") or defaults.store_path,
            store_key=os.getenv("FORMSMITH_STORE_KEY", defaults.store_key),
            log_level=os.getenv("FORMSMITH_LOG_LEVEL", defaults.log_level),
            enable_progress_bar=_env_bool(
                "FORMSMITH_PROGRESS_BAR", defaults.enable_progress_bar
            ),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got '{raw}'")

"""Lifecycle hooks for validation observability.

Typed event dataclasses + ``ValidationHooks`` container.  Hook callables
are optional; ``_fire_hook`` catches errors so observability failures never
break a validation pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationStartEvent:
    """Fired once at the beginning of ``FormValidator.run()``."""

    schema_id: str
    num_fields: int
    num_values: int


@dataclass(frozen=True)
class DerivedValueEvent:
    """Fired after a derived field's value has been computed."""

    field_id: str
    value: str


@dataclass(frozen=True)
class FieldErrorEvent:
    """Fired for every error recorded against a field."""

    field_id: str
    message: str
    kind: str


@dataclass(frozen=True)
class ValidationEndEvent:
    """Fired once at the end of ``FormValidator.run()``."""

    schema_id: str
    num_errors: int
    num_diagnostics: int
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# ValidationHooks container
# ---------------------------------------------------------------------------


@dataclass
class ValidationHooks:
    """User-facing hook container, passed to ``FormValidator``.

    All fields are optional callables.  Hook errors are caught and logged;
    they never abort validation.
    """

    on_validation_start: Optional[Callable[[ValidationStartEvent], Any]] = None
    on_derived_value: Optional[Callable[[DerivedValueEvent], Any]] = None
    on_field_error: Optional[Callable[[FieldErrorEvent], Any]] = None
    on_validation_end: Optional[Callable[[ValidationEndEvent], Any]] = None


# ---------------------------------------------------------------------------
# Fire helper
# ---------------------------------------------------------------------------


def _fire_hook(hook: Optional[Callable], event: Any) -> None:
    """Call *hook* with *event*.  Catches and logs errors."""
    if hook is None:
        return
    try:
        hook(event)
    except Exception:
        logger.warning("Hook %s raised an exception", hook, exc_info=True)

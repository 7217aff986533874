"""
Custom exceptions for the formsmith engine.

Provides specific exception types for the schema-authoring, storage and
configuration failure modes, plus the ``ValidationFailure`` record used to
report per-field problems without raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class FormError(Exception):
    """Base exception for all formsmith errors.

    Attributes:
        message: Human-readable error description.
        field_id: Field involved (``None`` if not field-specific).
    """

    def __init__(self, message: str, field_id: str | None = None):
        self.message = message
        self.field_id = field_id

        error_parts = [message]
        if field_id is not None:
            error_parts.append(f"Field: {field_id}")

        super().__init__(" | ".join(error_parts))


class SchemaEditError(FormError):
    """Raised when a builder edit would break a schema invariant.

    Common causes:
        - A field listing itself as a parent.
        - An unknown validation key.
        - Saving a form without a name.
    """

    pass


class ConfigurationError(FormError):
    """Raised when configuration is invalid."""

    pass


class PersistenceFailure(FormError):
    """Raised when the schema store cannot load or save.

    In-memory schemas and builder state are left untouched.
    """

    pass


class SchemaDefinitionError(FormError):
    """Base class for defects in how a schema's derived fields are wired."""

    kind = "schema"


class CyclicDependency(SchemaDefinitionError):
    """Raised when derived fields depend on each other in a loop.

    Attributes:
        field_ids: Every field id on a cycle, in schema order.
    """

    kind = "cyclic_dependency"

    def __init__(self, field_ids: Iterable[str]):
        self.field_ids = list(field_ids)
        super().__init__(
            f"Cycle detected involving fields: {', '.join(self.field_ids)}"
        )


class DanglingParentReference(SchemaDefinitionError):
    """Raised when a derived field names a parent id absent from the schema."""

    kind = "dangling_parent"

    def __init__(self, field_id: str, missing_id: str):
        self.missing_id = missing_id
        super().__init__(
            f"Field '{field_id}' depends on unknown field '{missing_id}'",
            field_id=field_id,
        )


class UnresolvedFormulaReference(SchemaDefinitionError):
    """Raised when a formula names something that is not one of its parents."""

    kind = "unresolved_reference"

    def __init__(self, field_id: str, reference: str):
        self.reference = reference
        super().__init__(
            f"Formula references unknown field '{reference}'",
            field_id=field_id,
        )


class FormulaEvaluationError(SchemaDefinitionError):
    """Raised when a formula cannot be evaluated for a reason other than a bad reference.

    Attributes:
        reason: Short description of what went wrong.
    """

    kind = "formula_error"

    def __init__(self, field_id: str, reason: str):
        self.reason = reason
        super().__init__(
            f"Formula could not be evaluated: {reason}",
            field_id=field_id,
        )


@dataclass(frozen=True)
class ValidationFailure:
    """A per-field problem reported in a validation result (never raised).

    ``kind`` is ``"input"`` for user-correctable value errors and the
    ``SchemaDefinitionError.kind`` of the underlying error for schema defects.
    """

    field_id: str
    message: str
    kind: str = "input"

    @property
    def is_schema_level(self) -> bool:
        return self.kind != "input"

    def __str__(self) -> str:
        return f"ValidationFailure(field='{self.field_id}', {self.kind}: {self.message})"

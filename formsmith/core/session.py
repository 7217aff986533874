"""FormSession: one respondent filling in a saved form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..schemas.form import ErrorSet, FormSchema, ValueSet
from ..utils.logger import get_logger
from .exceptions import SchemaEditError
from .validator import FormValidator, ValidationResult

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of :meth:`FormSession.submit`."""

    ok: bool
    errors: ErrorSet = field(default_factory=dict)
    values: ValueSet = field(default_factory=dict)


class FormSession:
    """Holds the values and errors of a single preview/data-entry session.

    Values are seeded from each field's default (``"false"`` for an empty
    checkbox) and derived fields are computed straight away.  Nothing is
    persisted; the session is discarded after submission.
    """

    def __init__(self, schema: FormSchema, validator: Optional[FormValidator] = None):
        self.schema = schema
        self.validator = validator or FormValidator()
        self.errors: ErrorSet = {}
        self.values: ValueSet = self.initial_values()

    def initial_values(self) -> ValueSet:
        seeded = {f.id: f.initial_value for f in self.schema.fields if not f.is_derived}
        return self._with_derived(seeded)

    def _with_derived(self, values: ValueSet) -> ValueSet:
        return self.validator.derived.compute_all(self.schema, values).values

    def _editable(self, field_id: str):
        field_def = self.schema.get_field(field_id)
        if field_def is None:
            raise SchemaEditError(f"No field with id '{field_id}'", field_id=field_id)
        if field_def.is_derived:
            raise SchemaEditError("Derived fields are computed, not entered", field_id=field_id)
        return field_def

    def set_value(self, field_id: str, value: str) -> None:
        """Record user input and clear that field's error."""
        self._editable(field_id)
        updated = dict(self.values)
        updated[field_id] = value
        self.values = self._with_derived(updated)
        self.errors.pop(field_id, None)

    def set_checked(self, field_id: str, checked: bool) -> None:
        self.set_value(field_id, "true" if checked else "false")

    def check(self) -> ValidationResult:
        """Validate without ending the session."""
        result = self.validator.run(self.schema, self.values)
        self.errors = dict(result.errors)
        self.values = result.values
        return result

    def submit(self) -> SubmissionResult:
        result = self.check()
        if result.is_valid:
            logger.info("Form %s submitted", self.schema.id)
        return SubmissionResult(ok=result.is_valid, errors=dict(result.errors), values=dict(result.values))

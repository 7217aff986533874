"""FieldDefinition: one form field, plus its per-type validation rules."""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import model_validator

from .base import BaseFormSchema

FieldType = Literal["text", "number", "textarea", "select", "radio", "checkbox", "date"]

FIELD_TYPES: tuple[str, ...] = (
    "text",
    "number",
    "textarea",
    "select",
    "radio",
    "checkbox",
    "date",
)

OPTION_TYPES = frozenset({"select", "radio", "checkbox"})
DEFAULT_OPTIONS = ["Option 1", "Option 2"]


class ValidationRules(BaseFormSchema):
    """Every validation property a field may carry, regardless of its type.

    This is the stored shape.  Which keys actually apply is decided by
    :func:`rules_for`, so a field whose type changes keeps its old keys
    without them being enforced.
    """

    min_length: Optional[int] = None
    max_length: Optional[int] = None
    email: Optional[bool] = None
    password: Optional[bool] = None
    min_number: Optional[float] = None
    max_number: Optional[float] = None
    min_date: Optional[str] = None
    max_date: Optional[str] = None


# -- per-type rule variants ---------------------------------------------


class TextRules(BaseFormSchema):
    kind: Literal["text"] = "text"
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    email: bool = False
    password: bool = False


class TextareaRules(BaseFormSchema):
    kind: Literal["textarea"] = "textarea"
    min_length: Optional[int] = None
    max_length: Optional[int] = None


class NumberRules(BaseFormSchema):
    kind: Literal["number"] = "number"
    min_number: Optional[float] = None
    max_number: Optional[float] = None


class DateRules(BaseFormSchema):
    kind: Literal["date"] = "date"
    min_date: Optional[str] = None
    max_date: Optional[str] = None


class NoRules(BaseFormSchema):
    """Choice fields (select, radio, checkbox) only support ``required``."""

    kind: Literal["none"] = "none"


TypedRules = Union[TextRules, TextareaRules, NumberRules, DateRules, NoRules]

_RULE_VARIANTS: dict[str, type[BaseFormSchema]] = {
    "text": TextRules,
    "textarea": TextareaRules,
    "number": NumberRules,
    "date": DateRules,
}


def rules_for(field: FieldDefinition) -> TypedRules:
    """Project a field's stored validations onto the variant for its type.

    Keys that do not apply to the type are dropped.  Derived fields never
    carry rules.
    """
    variant = _RULE_VARIANTS.get(field.type, NoRules)
    if field.is_derived or field.validations is None:
        return variant()
    stored = field.validations.model_dump(exclude_none=True)
    return variant.model_validate(stored)


# -- field definition ----------------------------------------------------


class FieldDefinition(BaseFormSchema):
    """Strict schema for a single form field.

    A derived field is computed from ``parent_field_ids`` via ``formula`` and
    is never required; the engine ignores its options, default value and
    validations.  ``required`` is forced to ``False`` on construction when
    ``is_derived`` is set.
    """

    id: str
    type: FieldType
    label: str = ""
    required: bool = False
    default_value: str = ""
    options: Optional[List[str]] = None
    validations: Optional[ValidationRules] = None
    is_derived: bool = False
    parent_field_ids: List[str] = []
    formula: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derived_fields_are_never_required(cls, data: Any) -> Any:
        if isinstance(data, dict):
            derived = data.get("isDerived", data.get("is_derived", False))
            if derived:
                data = {**data, "required": False}
        return data

    @property
    def is_required(self) -> bool:
        """True when the field must be filled in by the respondent."""
        return self.required and not self.is_derived

    @property
    def display_label(self) -> str:
        """Label for listings such as the parent-field picker."""
        return self.label or f"(No label) - {self.type}"

    @property
    def message_label(self) -> str:
        """Label used at the start of a ``required`` error message."""
        return self.label or "Field"

    @property
    def initial_value(self) -> str:
        """Seed value for a fresh form session."""
        if self.default_value:
            return self.default_value
        return "false" if self.type == "checkbox" else ""

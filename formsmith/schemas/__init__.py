"""Pydantic schemas for form definitions.

This package provides the data model the engine works on:

- FieldDefinition: one field (type, label, rules, derivation)
- ValidationRules: stored validation properties, projected per type by rules_for
- FormSchema: a named, ordered, saved list of fields
- edits: builder commands and the ``apply`` reducer

Example:
    from formsmith.schemas import FormSchema, FieldDefinition

    schema = FormSchema(
        id="contact",
        name="Contact",
        fields=[FieldDefinition(id="1", type="text", label="Name", required=True)],
    )
    payload = schema.to_dict()   # camelCase keys, ready for storage
"""

from .base import BaseFormSchema
from .field import (
    FIELD_TYPES,
    DateRules,
    FieldDefinition,
    FieldType,
    NoRules,
    NumberRules,
    TextareaRules,
    TextRules,
    TypedRules,
    ValidationRules,
    rules_for,
)
from .form import ErrorSet, FormSchema, ValueSet
from .edits import (
    AddField,
    DeleteField,
    FieldEdit,
    MoveField,
    SetDerived,
    SetOptions,
    SetParents,
    SetValidationKey,
    UpdateField,
    apply,
    new_field,
    parent_candidates,
    set_derived,
    set_validation_key,
)

__all__ = [
    "BaseFormSchema",
    "FIELD_TYPES",
    "FieldType",
    "FieldDefinition",
    "ValidationRules",
    "TextRules",
    "TextareaRules",
    "NumberRules",
    "DateRules",
    "NoRules",
    "TypedRules",
    "rules_for",
    "FormSchema",
    "ValueSet",
    "ErrorSet",
    "FieldEdit",
    "AddField",
    "UpdateField",
    "SetDerived",
    "SetParents",
    "SetValidationKey",
    "SetOptions",
    "DeleteField",
    "MoveField",
    "apply",
    "new_field",
    "parent_candidates",
    "set_derived",
    "set_validation_key",
]

"""Builder edits as commands, applied by a pure reducer.

Every change the form builder makes goes through :func:`apply`, which
returns a new field list and never mutates its input.  The invariant
checks (derived fields drop their parents when un-derived, no
self-parenting, unknown keys rejected) live here rather than in any UI.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Sequence, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from ..core.exceptions import SchemaEditError
from .field import (
    DEFAULT_OPTIONS,
    OPTION_TYPES,
    FieldDefinition,
    FieldType,
    ValidationRules,
)


class TimestampIdFactory:
    """Millisecond-timestamp ids, bumped so two calls never collide."""

    def __init__(self) -> None:
        self._last = 0

    def __call__(self) -> str:
        candidate = int(time.time() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)


default_id_factory = TimestampIdFactory()

_FIELD_KEYS: dict[str, str] = {}
for _name in FieldDefinition.model_fields:
    _FIELD_KEYS[_name] = _name
    _FIELD_KEYS[to_camel(_name)] = _name

_VALIDATION_KEY_NAMES: dict[str, str] = {}
for _name in ValidationRules.model_fields:
    _VALIDATION_KEY_NAMES[_name] = _name
    _VALIDATION_KEY_NAMES[to_camel(_name)] = _name


# -- single-field operations ---------------------------------------------


def new_field(
    field_type: FieldType,
    field_id: Optional[str] = None,
    id_factory: Callable[[], str] = default_id_factory,
) -> FieldDefinition:
    """Create an empty field with the builder's per-type defaults."""
    return FieldDefinition(
        id=field_id or id_factory(),
        type=field_type,
        label="",
        required=False,
        default_value="false" if field_type == "checkbox" else "",
        options=list(DEFAULT_OPTIONS) if field_type in OPTION_TYPES else None,
        validations=ValidationRules(),
        is_derived=False,
        parent_field_ids=[],
        formula="",
    )


def _replace(field: FieldDefinition, **changes: Any) -> FieldDefinition:
    data = field.model_dump()
    data.update(changes)
    try:
        return FieldDefinition.model_validate(data)
    except ValidationError as exc:
        raise SchemaEditError(f"Invalid edit: {exc}", field_id=field.id) from exc


def set_derived(field: FieldDefinition, flag: bool) -> FieldDefinition:
    """Mark or unmark a field as derived.

    Un-deriving always clears ``parent_field_ids`` and ``formula``.  Deriving
    keeps them and drops ``required``.
    """
    if flag:
        return _replace(field, is_derived=True, required=False)
    return _replace(field, is_derived=False, parent_field_ids=[], formula="")


def set_parents(field: FieldDefinition, parent_ids: Sequence[str]) -> FieldDefinition:
    if field.id in parent_ids:
        raise SchemaEditError("A field cannot be its own parent", field_id=field.id)
    # Keep selection order, drop repeats
    unique = list(dict.fromkeys(parent_ids))
    return _replace(field, parent_field_ids=unique)


def set_validation_key(field: FieldDefinition, key: str, value: Any) -> FieldDefinition:
    """Write one validation property; ``None`` removes it.

    The key does not have to apply to the field's type.  Inapplicable keys
    are stored and ignored at evaluation time, so changing a field's type
    never loses them.
    """
    if key not in _VALIDATION_KEY_NAMES:
        raise SchemaEditError(f"Unknown validation key '{key}'", field_id=field.id)
    name = _VALIDATION_KEY_NAMES[key]

    current = field.validations.model_dump(exclude_none=True) if field.validations else {}
    if value is None:
        current.pop(name, None)
    else:
        current[name] = value

    try:
        validations = ValidationRules.model_validate(current)
    except ValidationError as exc:
        raise SchemaEditError(f"Invalid value for '{key}': {value!r}", field_id=field.id) from exc
    return _replace(field, validations=validations.model_dump())


def split_options(text: str) -> list[str]:
    """Parse the builder's comma-separated options box."""
    return [opt.strip() for opt in text.split(",")]


def update_field(field: FieldDefinition, key: str, value: Any) -> FieldDefinition:
    """Generic property write, routed through the invariant-preserving helpers."""
    name = _FIELD_KEYS.get(key)
    if name is None:
        raise SchemaEditError(f"Unknown field property '{key}'", field_id=field.id)
    if name == "id":
        raise SchemaEditError("Field ids cannot be changed", field_id=field.id)
    if name == "is_derived":
        return set_derived(field, bool(value))
    if name == "parent_field_ids":
        return set_parents(field, list(value or []))
    return _replace(field, **{name: value})


def parent_candidates(fields: Sequence[FieldDefinition], field_id: str) -> list[tuple[str, str]]:
    """``(id, display label)`` pairs a field may pick as parents."""
    return [(f.id, f.display_label) for f in fields if f.id != field_id]


# -- commands --------------------------------------------------------------


@dataclass(frozen=True)
class AddField:
    field_type: FieldType
    field_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateField:
    field_id: str
    key: str
    value: Any


@dataclass(frozen=True)
class SetDerived:
    field_id: str
    flag: bool


@dataclass(frozen=True)
class SetParents:
    field_id: str
    parent_ids: tuple[str, ...]


@dataclass(frozen=True)
class SetValidationKey:
    field_id: str
    key: str
    value: Any


@dataclass(frozen=True)
class SetOptions:
    field_id: str
    text: str


@dataclass(frozen=True)
class DeleteField:
    field_id: str


@dataclass(frozen=True)
class MoveField:
    field_id: str
    direction: Literal["up", "down"]


FieldEdit = Union[
    AddField, UpdateField, SetDerived, SetParents, SetValidationKey, SetOptions, DeleteField, MoveField
]


def _index(fields: list[FieldDefinition], field_id: str) -> int:
    for idx, f in enumerate(fields):
        if f.id == field_id:
            return idx
    raise SchemaEditError(f"No field with id '{field_id}'", field_id=field_id)


def apply(
    fields: Sequence[FieldDefinition],
    edit: FieldEdit,
    id_factory: Callable[[], str] = default_id_factory,
) -> list[FieldDefinition]:
    """Return a new field list with *edit* applied.

    Raises:
        SchemaEditError: If the edit targets an unknown field or would break
            a field invariant.
    """
    result = list(fields)

    if isinstance(edit, AddField):
        created = new_field(edit.field_type, edit.field_id, id_factory=id_factory)
        if any(f.id == created.id for f in result):
            raise SchemaEditError("Field id already in use", field_id=created.id)
        result.append(created)
        return result

    idx = _index(result, edit.field_id)
    target = result[idx]

    if isinstance(edit, UpdateField):
        result[idx] = update_field(target, edit.key, edit.value)
    elif isinstance(edit, SetDerived):
        result[idx] = set_derived(target, edit.flag)
    elif isinstance(edit, SetParents):
        result[idx] = set_parents(target, edit.parent_ids)
    elif isinstance(edit, SetValidationKey):
        result[idx] = set_validation_key(target, edit.key, edit.value)
    elif isinstance(edit, SetOptions):
        result[idx] = _replace(target, options=split_options(edit.text))
    elif isinstance(edit, DeleteField):
        del result[idx]
    elif isinstance(edit, MoveField):
        if edit.direction == "up" and idx > 0:
            result[idx - 1], result[idx] = result[idx], result[idx - 1]
        elif edit.direction == "down" and idx < len(result) - 1:
            result[idx + 1], result[idx] = result[idx], result[idx + 1]
    else:
        raise SchemaEditError(f"Unsupported edit: {type(edit).__name__}")

    return result

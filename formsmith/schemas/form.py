"""FormSchema: a named, ordered sequence of field definitions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from .base import BaseFormSchema
from .field import FieldDefinition

ValueSet = Dict[str, str]
"""Field id -> entered (or derived) value.  Checkboxes use ``"true"``/``"false"``."""

ErrorSet = Dict[str, str]
"""Field id -> single error message.  A missing key means no error."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FormSchema(BaseFormSchema):
    """A saved form.

    Field order is significant: it is the rendering order and the tie-break
    order whenever fields are processed deterministically.

    Attributes:
        id: Schema identifier.
        name: Display name chosen at save time.
        created_at: When the schema was saved (ISO-8601 on the wire).
        fields: Ordered field definitions with unique ids.
    """

    id: str
    name: str
    created_at: datetime = Field(default_factory=_utcnow)
    fields: List[FieldDefinition] = []

    @field_validator("fields")
    @classmethod
    def _field_ids_are_unique(cls, fields: List[FieldDefinition]) -> List[FieldDefinition]:
        seen: set[str] = set()
        dupes: list[str] = []
        for f in fields:
            if f.id in seen:
                dupes.append(f.id)
            seen.add(f.id)
        if dupes:
            raise ValueError(f"Duplicate field ids: {sorted(set(dupes))}")
        return fields

    @property
    def field_ids(self) -> list[str]:
        """All field ids in schema order."""
        return [f.id for f in self.fields]

    def get_field(self, field_id: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def index_of(self, field_id: str) -> int:
        """Position of *field_id* in the schema.

        Raises:
            KeyError: If no field has this id.
        """
        for idx, f in enumerate(self.fields):
            if f.id == field_id:
                return idx
        raise KeyError(field_id)

    def snapshot(self) -> FormSchema:
        """Deep copy, detached from any live builder state."""
        return self.model_copy(deep=True)

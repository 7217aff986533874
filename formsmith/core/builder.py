"""FormBuilder: live editing state for a form that has not been saved yet."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from ..schemas.edits import (
    AddField,
    DeleteField,
    FieldEdit,
    MoveField,
    UpdateField,
    apply,
    default_id_factory,
    parent_candidates,
)
from ..schemas.field import FieldDefinition, FieldType
from ..schemas.form import FormSchema
from ..utils.logger import get_logger
from .exceptions import PersistenceFailure, SchemaEditError

if TYPE_CHECKING:
    from ..storage.base import SchemaStore

logger = get_logger(__name__)


class FormBuilder:
    """Applies edits to a working field list and saves snapshots of it.

    Every change goes through :func:`formsmith.schemas.edits.apply`; the
    builder only keeps the current list.  Saving takes an immutable
    snapshot, so later edits never change a saved schema.
    """

    def __init__(
        self,
        fields: Optional[Sequence[FieldDefinition]] = None,
        id_factory: Callable[[], str] = default_id_factory,
    ):
        self.fields: list[FieldDefinition] = list(fields or [])
        self._id_factory = id_factory

    def apply(self, edit: FieldEdit) -> list[FieldDefinition]:
        self.fields = apply(self.fields, edit, id_factory=self._id_factory)
        return self.fields

    # -- shortcuts ------------------------------------------------------------

    def add_field(self, field_type: FieldType) -> FieldDefinition:
        self.apply(AddField(field_type))
        return self.fields[-1]

    def update_field(self, field_id: str, key: str, value: Any) -> FieldDefinition:
        self.apply(UpdateField(field_id, key, value))
        return self.get_field(field_id)

    def delete_field(self, field_id: str) -> None:
        self.apply(DeleteField(field_id))

    def move_up(self, field_id: str) -> None:
        self.apply(MoveField(field_id, "up"))

    def move_down(self, field_id: str) -> None:
        self.apply(MoveField(field_id, "down"))

    def get_field(self, field_id: str) -> FieldDefinition:
        for f in self.fields:
            if f.id == field_id:
                return f
        raise SchemaEditError(f"No field with id '{field_id}'", field_id=field_id)

    def parent_candidates(self, field_id: str) -> list[tuple[str, str]]:
        return parent_candidates(self.fields, field_id)

    # -- saving -------------------------------------------------------------

    def to_schema(self, name: Optional[str], schema_id: Optional[str] = None) -> FormSchema:
        """Snapshot the current fields as a named schema.

        Raises:
            SchemaEditError: If *name* is empty or there are no fields.
        """
        if not name or not name.strip():
            raise SchemaEditError("Form name is required")
        if not self.fields:
            raise SchemaEditError("Add at least one field before saving")
        schema = FormSchema(
            id=schema_id or self._id_factory(),
            name=name.strip(),
            created_at=datetime.now(timezone.utc),
            fields=[f.model_copy(deep=True) for f in self.fields],
        )
        return schema.snapshot()

    async def save(self, store: SchemaStore, name: Optional[str]) -> FormSchema:
        """Append a snapshot of the current fields to *store*.

        The builder state is unchanged whether or not the store succeeds.
        """
        schema = self.to_schema(name)
        try:
            await store.save(schema)
        except PersistenceFailure as exc:
            logger.warning("Could not save form '%s': %s", schema.name, exc)
            raise
        logger.info("Form %s saved as '%s'", schema.id, schema.name)
        return schema

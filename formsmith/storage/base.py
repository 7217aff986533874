"""Schema store protocol: the persistence boundary of the engine."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from ..schemas.form import FormSchema


@runtime_checkable
class SchemaStore(Protocol):
    """Protocol all schema stores must satisfy.

    Saved schemas are immutable: ``save`` appends and never updates.
    ``load_all`` returns schemas in the order they were saved.  Every
    failure surfaces as :class:`~formsmith.core.exceptions.PersistenceFailure`.

    Store I/O is async; everything else in the engine is synchronous.
    Implementations can be plain classes; no inheritance required.
    """

    def open(self) -> None: ...

    def close(self) -> None: ...

    async def load_all(self) -> list[FormSchema]: ...

    async def save(self, schema: FormSchema) -> None: ...

    async def get(self, schema_id: str) -> Optional[FormSchema]: ...


def find_schema(schemas: Sequence[FormSchema], schema_id: Optional[str] = None) -> Optional[FormSchema]:
    """Pick the schema to preview.

    Returns the schema with *schema_id*; when the id is missing or unknown,
    falls back to the most recently saved schema (``None`` if there are
    none).
    """
    if schema_id:
        for schema in schemas:
            if schema.id == schema_id:
                return schema
    return schemas[-1] if schemas else None

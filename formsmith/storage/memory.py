"""In-memory schema store, for tests and the development preset."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from ..core.exceptions import PersistenceFailure
from ..schemas.form import FormSchema
from ..utils.logger import get_logger

logger = get_logger(__name__)


class InMemorySchemaStore:
    """Keeps serialized schema documents in a list.

    Documents are stored as dicts (the persisted shape) so a saved schema
    can never be changed through a reference the caller still holds.
    """

    def __init__(self, key: str = "forms") -> None:
        self.key = key
        self._documents: list[dict[str, Any]] = []
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    async def __aenter__(self) -> InMemorySchemaStore:
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._open:
            raise PersistenceFailure(f"Schema store '{self.key}' is not open")

    async def load_all(self) -> list[FormSchema]:
        self._require_open()
        try:
            return [FormSchema.model_validate(doc) for doc in self._documents]
        except ValidationError as exc:
            raise PersistenceFailure(f"Stored schema is malformed: {exc}") from exc

    async def save(self, schema: FormSchema) -> None:
        self._require_open()
        if any(doc["id"] == schema.id for doc in self._documents):
            raise PersistenceFailure(f"Schema '{schema.id}' already saved; schemas are immutable")
        self._documents.append(schema.to_dict())
        logger.debug("Saved schema %s to in-memory store '%s'", schema.id, self.key)

    async def get(self, schema_id: str) -> Optional[FormSchema]:
        for schema in await self.load_all():
            if schema.id == schema_id:
                return schema
        return None

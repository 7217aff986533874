"""SQLiteSchemaStore: append-only schema persistence in a single file.

Each saved schema is one row holding its JSON document.  Rows are grouped
under a store key (``"forms"`` by default) so several independent schema
lists can share a database.  Blocking sqlite calls run in the default
executor so the async store API never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import ValidationError

from ..core.exceptions import PersistenceFailure
from ..schemas.form import FormSchema
from ..utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SQLiteSchemaStore:
    """SQLite-backed schema store.

    Args:
        path: Database file.  Parent directories are created on ``open()``.
            ``":memory:"`` keeps everything in memory.
        key: Name of the schema list inside the database.
    """

    def __init__(self, path: str = "formsmith.db", key: str = "forms") -> None:
        self._path = path
        self.key = key
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        if self._conn is not None:
            return
        try:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path, check_same_thread=False)
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schemas (
                    seq        INTEGER PRIMARY KEY AUTOINCREMENT,
                    store_key  TEXT NOT NULL,
                    id         TEXT NOT NULL,
                    name       TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    document   TEXT NOT NULL,
                    UNIQUE (store_key, id)
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_store_key ON schemas(store_key)")
            conn.commit()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceFailure(f"Cannot open schema store at {self._path}: {exc}") from exc
        self._conn = conn
        logger.debug("Opened schema store %s (key=%s)", self._path, self.key)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    async def __aenter__(self) -> SQLiteSchemaStore:
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # -- async API ---------------------------------------------------------

    async def load_all(self) -> list[FormSchema]:
        """All schemas under this key, oldest first."""
        rows = await self._run(self._select_documents)
        try:
            return [FormSchema.model_validate(json.loads(doc)) for (doc,) in rows]
        except (ValidationError, json.JSONDecodeError) as exc:
            raise PersistenceFailure(f"Stored schema is malformed: {exc}") from exc

    async def save(self, schema: FormSchema) -> None:
        """Append *schema*.  Saving an id twice raises ``PersistenceFailure``."""
        document = json.dumps(schema.to_dict())
        await self._run(lambda: self._insert(schema, document))
        logger.info("Saved schema %s (%s) with %d field(s)", schema.id, schema.name, len(schema.fields))

    async def get(self, schema_id: str) -> Optional[FormSchema]:
        rows = await self._run(lambda: self._select_documents(schema_id))
        if not rows:
            return None
        try:
            return FormSchema.model_validate(json.loads(rows[0][0]))
        except (ValidationError, json.JSONDecodeError) as exc:
            raise PersistenceFailure(f"Stored schema is malformed: {exc}") from exc

    # -- blocking helpers ------------------------------------------------

    async def _run(self, fn: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn)

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceFailure(f"Schema store at {self._path} is not open")
        return self._conn

    def _select_documents(self, schema_id: Optional[str] = None) -> list[tuple[str]]:
        conn = self._connection()
        with self._lock:
            try:
                if schema_id is None:
                    cursor = conn.execute(
                        "SELECT document FROM schemas WHERE store_key = ? ORDER BY seq",
                        (self.key,),
                    )
                else:
                    cursor = conn.execute(
                        "SELECT document FROM schemas WHERE store_key = ? AND id = ?",
                        (self.key, schema_id),
                    )
                return cursor.fetchall()
            except sqlite3.Error as exc:
                raise PersistenceFailure(f"Failed to load schemas: {exc}") from exc

    def _insert(self, schema: FormSchema, document: str) -> None:
        conn = self._connection()
        with self._lock:
            try:
                conn.execute(
                    "INSERT INTO schemas (store_key, id, name, created_at, document) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (self.key, schema.id, schema.name, schema.created_at.isoformat(), document),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                raise PersistenceFailure(
                    f"Schema '{schema.id}' already saved; schemas are immutable"
                ) from exc
            except sqlite3.Error as exc:
                conn.rollback()
                raise PersistenceFailure(f"Failed to save schema '{schema.id}': {exc}") from exc

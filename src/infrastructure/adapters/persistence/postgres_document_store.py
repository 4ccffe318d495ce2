"""PostgreSQL document store (SQLAlchemy async, asyncpg driver).

Documents live in one JSONB table keyed by (collection, id); filters
are JSONB containment (``body @> filter``) and patches are JSONB merges
(``body || patch``). Each call runs in its own transaction.

Compare-and-set: the UPDATE statements repeat the filter in their WHERE
clause, so a row whose fields changed while the statement waited for
its row lock no longer matches and is left alone.

Schema:
    session_documents(collection, id, body jsonb), primary key
    (collection, id), plus a unique index on member usernames.
    session_counters(key, value) for increment_and_fetch.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from structlog import get_logger

from src.application.ports.document_store import Document, Filter
from src.domain.errors import DuplicateDocumentError, StoreError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS session_documents (
        collection TEXT NOT NULL,
        id TEXT NOT NULL,
        body JSONB NOT NULL,
        PRIMARY KEY (collection, id)
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS session_documents_member_username
        ON session_documents ((body->>'username'))
        WHERE collection = 'members'
    """,
    """
    CREATE TABLE IF NOT EXISTS session_counters (
        key TEXT PRIMARY KEY,
        value BIGINT NOT NULL
    )
    """,
)

_FIRST_MATCH = """
    id = (
        SELECT id FROM session_documents
        WHERE collection = :collection AND body @> CAST(:filter AS jsonb)
        ORDER BY id
        LIMIT 1
        FOR UPDATE
    )
"""


def _dumps(value: Any) -> str:
    return json.dumps(value or {})


class PostgresDocumentStore:
    """DocumentStoreProtocol over PostgreSQL JSONB.

    Example:
        >>> store = PostgresDocumentStore(get_session_factory())
        >>> await store.ensure_schema()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: SQLAlchemy async session factory.
        """
        self._session_factory = session_factory
        self._log = logger.bind(component="postgres_document_store")

    async def _execute(
        self,
        operation: str,
        collection: str | None,
        statement: str,
        params: dict[str, Any],
        document_id: str | None = None,
    ) -> tuple[list[Any], int]:
        """Run one statement in its own transaction.

        Returns:
            (rows, rowcount); rows are fetched only for statements that
            return them.

        Raises:
            DuplicateDocumentError: A write of ``document_id`` hit a
                unique constraint.
            StoreError: Any other database failure.
        """
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(text(statement), params)
                rows = list(result.fetchall()) if result.returns_rows else []
                return rows, result.rowcount
        except IntegrityError as exc:
            if document_id is not None and collection is not None:
                raise DuplicateDocumentError(collection, document_id) from exc
            raise StoreError(
                f"Store operation {operation} violated a constraint",
                operation=operation,
                collection=collection,
            ) from exc
        except SQLAlchemyError as exc:
            self._log.error(
                "Document store operation failed",
                operation=operation,
                collection=collection,
                error=str(exc),
            )
            raise StoreError(
                f"Store operation {operation} failed",
                operation=operation,
                collection=collection,
            ) from exc

    async def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        for statement in SCHEMA_STATEMENTS:
            await self._execute("ensure_schema", None, statement, {})
        self._log.info("Document store schema ensured")

    async def find_one(self, collection: str, filter: Filter) -> Document | None:
        rows, _ = await self._execute(
            "find_one",
            collection,
            """
            SELECT body::text FROM session_documents
            WHERE collection = :collection AND body @> CAST(:filter AS jsonb)
            ORDER BY id
            LIMIT 1
            """,
            {"collection": collection, "filter": _dumps(filter)},
        )
        return json.loads(rows[0][0]) if rows else None

    async def find_many(
        self, collection: str, filter: Filter | None = None
    ) -> list[Document]:
        rows, _ = await self._execute(
            "find_many",
            collection,
            """
            SELECT body::text FROM session_documents
            WHERE collection = :collection AND body @> CAST(:filter AS jsonb)
            ORDER BY id
            """,
            {"collection": collection, "filter": _dumps(filter)},
        )
        return [json.loads(row[0]) for row in rows]

    async def insert_one(self, collection: str, document: Document) -> None:
        await self._execute(
            "insert_one",
            collection,
            """
            INSERT INTO session_documents (collection, id, body)
            VALUES (:collection, :id, CAST(:body AS jsonb))
            """,
            {
                "collection": collection,
                "id": document["id"],
                "body": _dumps(document),
            },
            document_id=document["id"],
        )

    async def upsert_one(self, collection: str, document: Document) -> None:
        await self._execute(
            "upsert_one",
            collection,
            """
            INSERT INTO session_documents (collection, id, body)
            VALUES (:collection, :id, CAST(:body AS jsonb))
            ON CONFLICT (collection, id) DO UPDATE SET body = EXCLUDED.body
            """,
            {
                "collection": collection,
                "id": document["id"],
                "body": _dumps(document),
            },
            document_id=document["id"],
        )

    async def update_one(self, collection: str, filter: Filter, patch: Document) -> int:
        _, count = await self._execute(
            "update_one",
            collection,
            f"""
            UPDATE session_documents SET body = body || CAST(:patch AS jsonb)
            WHERE collection = :collection
              AND {_FIRST_MATCH}
              AND body @> CAST(:filter AS jsonb)
            """,
            {
                "collection": collection,
                "filter": _dumps(filter),
                "patch": _dumps(patch),
            },
        )
        return count

    async def update_many(
        self, collection: str, filter: Filter, patch: Document
    ) -> int:
        _, count = await self._execute(
            "update_many",
            collection,
            """
            UPDATE session_documents SET body = body || CAST(:patch AS jsonb)
            WHERE collection = :collection AND body @> CAST(:filter AS jsonb)
            """,
            {
                "collection": collection,
                "filter": _dumps(filter),
                "patch": _dumps(patch),
            },
        )
        return count

    async def find_one_and_update(
        self, collection: str, filter: Filter, patch: Document
    ) -> Document | None:
        rows, _ = await self._execute(
            "find_one_and_update",
            collection,
            f"""
            UPDATE session_documents SET body = body || CAST(:patch AS jsonb)
            WHERE collection = :collection
              AND {_FIRST_MATCH}
              AND body @> CAST(:filter AS jsonb)
            RETURNING body::text
            """,
            {
                "collection": collection,
                "filter": _dumps(filter),
                "patch": _dumps(patch),
            },
        )
        return json.loads(rows[0][0]) if rows else None

    async def increment_field(
        self, collection: str, filter: Filter, field: str, amount: int
    ) -> Document | None:
        rows, _ = await self._execute(
            "increment_field",
            collection,
            f"""
            UPDATE session_documents
            SET body = body || jsonb_build_object(
                CAST(:field AS text),
                COALESCE((body->>CAST(:field AS text))::bigint, 0) + :amount
            )
            WHERE collection = :collection
              AND {_FIRST_MATCH}
            RETURNING body::text
            """,
            {
                "collection": collection,
                "filter": _dumps(filter),
                "field": field,
                "amount": amount,
            },
        )
        return json.loads(rows[0][0]) if rows else None

    async def delete_one(self, collection: str, filter: Filter) -> int:
        _, count = await self._execute(
            "delete_one",
            collection,
            f"""
            DELETE FROM session_documents
            WHERE collection = :collection AND {_FIRST_MATCH}
            """,
            {"collection": collection, "filter": _dumps(filter)},
        )
        return count

    async def delete_many(self, collection: str, filter: Filter) -> int:
        _, count = await self._execute(
            "delete_many",
            collection,
            """
            DELETE FROM session_documents
            WHERE collection = :collection AND body @> CAST(:filter AS jsonb)
            """,
            {"collection": collection, "filter": _dumps(filter)},
        )
        return count

    async def count_documents(
        self, collection: str, filter: Filter | None = None
    ) -> int:
        rows, _ = await self._execute(
            "count_documents",
            collection,
            """
            SELECT COUNT(*) FROM session_documents
            WHERE collection = :collection AND body @> CAST(:filter AS jsonb)
            """,
            {"collection": collection, "filter": _dumps(filter)},
        )
        return int(rows[0][0])

    async def increment_and_fetch(self, counter_key: str) -> int:
        rows, _ = await self._execute(
            "increment_and_fetch",
            None,
            """
            INSERT INTO session_counters (key, value) VALUES (:key, 1)
            ON CONFLICT (key) DO UPDATE SET value = session_counters.value + 1
            RETURNING value
            """,
            {"key": counter_key},
        )
        return int(rows[0][0])

"""Document store port.

The session core needs only key/filter CRUD over a handful of
collections plus one atomic counter primitive. Filters are equality
matches on top-level fields; every document carries a string ``id``.

Collections used:
- members, proposals, votes, votingLogs, fines, systemParameters
- counters (internal to ``increment_and_fetch``)

Adapters raise ``StoreError`` for any persistence failure and
``DuplicateDocumentError`` when ``insert_one`` meets an existing id.
"""

from __future__ import annotations

from typing import Any, Protocol

Document = dict[str, Any]
Filter = dict[str, Any]

MEMBERS = "members"
PROPOSALS = "proposals"
VOTES = "votes"
VOTING_LOGS = "votingLogs"
FINES = "fines"
SYSTEM_PARAMETERS = "systemParameters"


class DocumentStoreProtocol(Protocol):
    """Protocol for the durable document store."""

    async def find_one(self, collection: str, filter: Filter) -> Document | None:
        """Return one document matching every field of ``filter``, or None."""
        ...

    async def find_many(
        self, collection: str, filter: Filter | None = None
    ) -> list[Document]:
        """Return every matching document (all documents when filter is None)."""
        ...

    async def insert_one(self, collection: str, document: Document) -> None:
        """Insert a new document.

        Raises:
            DuplicateDocumentError: If a document with the same id exists.
        """
        ...

    async def upsert_one(self, collection: str, document: Document) -> None:
        """Insert the document or replace the one with the same id."""
        ...

    async def update_one(self, collection: str, filter: Filter, patch: Document) -> int:
        """Set the fields of ``patch`` on the first match.

        Returns:
            Number of documents modified (0 or 1).
        """
        ...

    async def update_many(
        self, collection: str, filter: Filter, patch: Document
    ) -> int:
        """Set the fields of ``patch`` on every match.

        Returns:
            Number of documents modified.
        """
        ...

    async def find_one_and_update(
        self, collection: str, filter: Filter, patch: Document
    ) -> Document | None:
        """Atomically patch the first match and return it after the update.

        This is the compare-and-set primitive: include the expected
        current values in ``filter``; None means nothing matched.
        """
        ...

    async def increment_field(
        self, collection: str, filter: Filter, field: str, amount: int
    ) -> Document | None:
        """Atomically add ``amount`` to a numeric field of the first match.

        Returns:
            The updated document, or None when nothing matched.
        """
        ...

    async def delete_one(self, collection: str, filter: Filter) -> int:
        """Delete the first match. Returns the number deleted (0 or 1)."""
        ...

    async def delete_many(self, collection: str, filter: Filter) -> int:
        """Delete every match. Returns the number deleted."""
        ...

    async def count_documents(self, collection: str, filter: Filter | None = None) -> int:
        """Count matching documents."""
        ...

    async def increment_and_fetch(self, counter_key: str) -> int:
        """Atomically increment a named counter and return the new value.

        A counter that does not exist yet starts at 0, so the first call
        returns 1.
        """
        ...

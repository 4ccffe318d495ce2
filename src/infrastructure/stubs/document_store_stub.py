"""In-memory document store stub.

This module provides an in-memory implementation of DocumentStoreProtocol
for development and tests. Every operation runs under one asyncio.Lock,
so each call is atomic with respect to every other call, which is the
guarantee the compare-and-set and counter primitives rely on.

Documents are deep-copied on the way in and out; callers can never
mutate stored state by holding a reference.
"""

from __future__ import annotations

import asyncio
import copy
from collections import defaultdict

from src.application.ports.document_store import (
    MEMBERS,
    Document,
    DocumentStoreProtocol,
    Filter,
)
from src.domain.errors import DuplicateDocumentError, StoreError

# Fields that must be unique per collection, besides the id
_UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {MEMBERS: ("username",)}


def _matches(document: Document, filter: Filter | None) -> bool:
    if not filter:
        return True
    return all(document.get(key) == value for key, value in filter.items())


class DocumentStoreStub(DocumentStoreProtocol):
    """In-memory stub for the document store.

    Supports failure injection for tests: ``fail_writes_for`` makes every
    write that targets the given document raise StoreError until
    ``heal`` is called.
    """

    def __init__(self) -> None:
        """Initialize with empty storage."""
        # collection -> document id -> document
        self._collections: dict[str, dict[str, Document]] = defaultdict(dict)
        self._counters: dict[str, int] = {}
        self._failing: set[tuple[str, str]] = set()
        self._lock = asyncio.Lock()

    def clear(self) -> None:
        """Clear all stored data for test cleanup."""
        self._collections.clear()
        self._counters.clear()
        self._failing.clear()

    def fail_writes_for(self, collection: str, document_id: str) -> None:
        """Make writes to one document raise StoreError."""
        self._failing.add((collection, document_id))

    def heal(self) -> None:
        """Stop all injected failures."""
        self._failing.clear()

    def documents(self, collection: str) -> list[Document]:
        """Snapshot of a collection, for test assertions."""
        return [copy.deepcopy(doc) for doc in self._collections[collection].values()]

    def _check_writable(self, operation: str, collection: str, document_id: str) -> None:
        if (collection, document_id) in self._failing:
            raise StoreError(
                f"Injected failure writing '{document_id}'",
                operation=operation,
                collection=collection,
            )

    def _check_unique(self, collection: str, document: Document) -> None:
        for field in _UNIQUE_FIELDS.get(collection, ()):
            for existing in self._collections[collection].values():
                if existing["id"] != document["id"] and existing.get(field) == document.get(
                    field
                ):
                    raise DuplicateDocumentError(collection, document["id"])

    def _first(self, collection: str, filter: Filter | None) -> Document | None:
        for document in self._collections[collection].values():
            if _matches(document, filter):
                return document
        return None

    async def find_one(self, collection: str, filter: Filter) -> Document | None:
        async with self._lock:
            document = self._first(collection, filter)
            return copy.deepcopy(document) if document is not None else None

    async def find_many(
        self, collection: str, filter: Filter | None = None
    ) -> list[Document]:
        async with self._lock:
            return [
                copy.deepcopy(document)
                for document in self._collections[collection].values()
                if _matches(document, filter)
            ]

    async def insert_one(self, collection: str, document: Document) -> None:
        async with self._lock:
            document_id = document["id"]
            self._check_writable("insert_one", collection, document_id)
            if document_id in self._collections[collection]:
                raise DuplicateDocumentError(collection, document_id)
            self._check_unique(collection, document)
            self._collections[collection][document_id] = copy.deepcopy(document)

    async def upsert_one(self, collection: str, document: Document) -> None:
        async with self._lock:
            document_id = document["id"]
            self._check_writable("upsert_one", collection, document_id)
            self._check_unique(collection, document)
            self._collections[collection][document_id] = copy.deepcopy(document)

    async def update_one(self, collection: str, filter: Filter, patch: Document) -> int:
        async with self._lock:
            document = self._first(collection, filter)
            if document is None:
                return 0
            self._check_writable("update_one", collection, document["id"])
            document.update(copy.deepcopy(patch))
            return 1

    async def update_many(
        self, collection: str, filter: Filter, patch: Document
    ) -> int:
        async with self._lock:
            matched = [
                document
                for document in self._collections[collection].values()
                if _matches(document, filter)
            ]
            for document in matched:
                self._check_writable("update_many", collection, document["id"])
            for document in matched:
                document.update(copy.deepcopy(patch))
            return len(matched)

    async def find_one_and_update(
        self, collection: str, filter: Filter, patch: Document
    ) -> Document | None:
        async with self._lock:
            document = self._first(collection, filter)
            if document is None:
                return None
            self._check_writable("find_one_and_update", collection, document["id"])
            document.update(copy.deepcopy(patch))
            return copy.deepcopy(document)

    async def increment_field(
        self, collection: str, filter: Filter, field: str, amount: int
    ) -> Document | None:
        async with self._lock:
            document = self._first(collection, filter)
            if document is None:
                return None
            self._check_writable("increment_field", collection, document["id"])
            document[field] = int(document.get(field, 0)) + amount
            return copy.deepcopy(document)

    async def delete_one(self, collection: str, filter: Filter) -> int:
        async with self._lock:
            document = self._first(collection, filter)
            if document is None:
                return 0
            self._check_writable("delete_one", collection, document["id"])
            del self._collections[collection][document["id"]]
            return 1

    async def delete_many(self, collection: str, filter: Filter) -> int:
        async with self._lock:
            doomed = [
                document_id
                for document_id, document in self._collections[collection].items()
                if _matches(document, filter)
            ]
            for document_id in doomed:
                self._check_writable("delete_many", collection, document_id)
            for document_id in doomed:
                del self._collections[collection][document_id]
            return len(doomed)

    async def count_documents(
        self, collection: str, filter: Filter | None = None
    ) -> int:
        async with self._lock:
            return sum(
                1
                for document in self._collections[collection].values()
                if _matches(document, filter)
            )

    async def increment_and_fetch(self, counter_key: str) -> int:
        async with self._lock:
            value = self._counters.get(counter_key, 0) + 1
            self._counters[counter_key] = value
            return value

    def counter_value(self, counter_key: str) -> int:
        """Current counter value, for test assertions."""
        return self._counters.get(counter_key, 0)

"""Persistence adapters."""

from src.infrastructure.adapters.persistence.postgres_document_store import (
    PostgresDocumentStore,
)

__all__: list[str] = ["PostgresDocumentStore"]

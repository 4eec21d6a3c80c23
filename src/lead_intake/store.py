"""Document store abstraction, in-memory backend and receipt file store."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Final, Protocol
from uuid import uuid4

from slugify import slugify

from lead_intake.exceptions import StoreError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)


class ServerTimestamp:
    """Placeholder replaced by the store's own clock when a document is written."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP: Final = ServerTimestamp()


@dataclass(frozen=True)
class Document:
    """A stored document and its store-assigned id."""

    id: str
    data: dict[str, Any]


class DocumentStore(Protocol):
    """Protocol for document database backends."""

    def add(self, collection: str, data: Mapping[str, Any]) -> str: ...

    def query(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]: ...


def new_document_id() -> str:
    """Return a 20-character document id."""
    return uuid4().hex[:20]


def resolve_server_timestamps(value: Any, now: datetime) -> Any:
    """Return a copy of ``value`` with every SERVER_TIMESTAMP replaced by ``now``."""
    if isinstance(value, ServerTimestamp):
        return now
    if isinstance(value, dict):
        return {key: resolve_server_timestamps(item, now) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [resolve_server_timestamps(item, now) for item in value]
    return value


class InMemoryDocumentStore:
    """Process-local DocumentStore, used for local runs and tests.

    Documents are copied on the way in and out so callers never share
    state with the stored record.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        resolved = resolve_server_timestamps(copy.deepcopy(dict(data)), self._clock())
        self._collections.setdefault(collection, {})[doc_id] = resolved
        logger.debug("Stored document %s in %s", doc_id, collection)
        return doc_id

    def query(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        """Return documents, optionally ordered by a top-level field.

        Documents without the ``order_by`` field are left out, matching
        how the hosted store treats ordered queries.
        """
        stored = self._collections.get(collection, {})
        docs = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in stored.items()
        ]

        if order_by is not None:
            docs = [doc for doc in docs if doc.data.get(order_by) is not None]
            try:
                docs.sort(key=lambda doc: doc.data[order_by], reverse=descending)
            except TypeError as exc:
                msg = f"Cannot order {collection} by {order_by}: {exc}"
                raise StoreError(msg) from exc

        if limit is not None:
            docs = docs[:limit]
        return docs


def open_store(url: str) -> DocumentStore:
    """Return the DocumentStore for a DATABASE_URL."""
    if url.startswith("memory://"):
        return InMemoryDocumentStore()

    from lead_intake.db import PostgresDocumentStore

    return PostgresDocumentStore(url)


class ReceiptFileStore:
    """Local filesystem store for exported receipt PDFs.

    Directory layout: {root}/{YYYY}/{MM}/{YYYY-MM-DD}__{customer}__{order_id}.pdf
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def save(
        self, created: datetime, customer: str, order_id: str, pdf_data: bytes
    ) -> str:
        """Save PDF and return the relative path from store root."""
        day = created.date()
        customer_slug = self._slugify(customer, 50)
        order_slug = self._slugify(order_id, 40)
        dir_path = self.root / str(day.year) / f"{day.month:02d}"
        dir_path.mkdir(parents=True, exist_ok=True)

        stem = f"{day.isoformat()}__{customer_slug}__{order_slug}"
        file_path = dir_path / f"{stem}.pdf"

        # Handle re-exports by appending numeric suffix
        counter = 1
        while file_path.exists():
            counter += 1
            file_path = dir_path / f"{stem}_{counter}.pdf"

        file_path.write_bytes(pdf_data)
        return str(file_path.relative_to(self.root))

    def get_path(self, relative_path: str) -> Path:
        """Return the absolute path for a relative store path."""
        return self.root / relative_path

    def exists(self, relative_path: str) -> bool:
        return (self.root / relative_path).exists()

    @staticmethod
    def _slugify(value: str, max_length: int) -> str:
        """Convert a value to a filesystem-safe slug."""
        return str(slugify(value, max_length=max_length)) or "sem-nome"

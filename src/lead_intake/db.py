"""PostgreSQL-backed document store."""

from __future__ import annotations

import json
import logging
from functools import partial
from typing import TYPE_CHECKING, Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from pydantic_core import to_jsonable_python

from lead_intake.config import get_database_url
from lead_intake.exceptions import StoreError
from lead_intake.store import Document, new_document_id, resolve_server_timestamps

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

SCHEMA = """\
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    collection TEXT NOT NULL,
    data JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_documents_collection
    ON documents (collection, created_at DESC);
"""

_dumps = partial(json.dumps, default=to_jsonable_python, ensure_ascii=False)


def get_connection(url: str | None = None) -> psycopg.Connection[dict[str, Any]]:
    """Create and return a new database connection."""
    return psycopg.connect(url or get_database_url(), row_factory=dict_row)


def init_schema(url: str | None = None) -> None:
    """Create the documents table if it does not exist."""
    try:
        with get_connection(url) as conn:
            conn.execute(SCHEMA)
    except psycopg.Error as exc:
        msg = f"Failed to initialise schema: {exc}"
        raise StoreError(msg) from exc


class PostgresDocumentStore:
    """DocumentStore over a single JSONB ``documents`` table.

    SERVER_TIMESTAMP placeholders are resolved to the transaction's
    ``now()`` so every timestamp in one write is identical.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        connect: Callable[[], psycopg.Connection[dict[str, Any]]] | None = None,
    ) -> None:
        self._connect = connect or partial(get_connection, url)

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT now() AS now").fetchone()
                now = row["now"] if row else None
                resolved = resolve_server_timestamps(dict(data), now)
                conn.execute(
                    "INSERT INTO documents (id, collection, data, created_at) "
                    "VALUES (%s, %s, %s, %s)",
                    (doc_id, collection, Jsonb(resolved, dumps=_dumps), now),
                )
        except psycopg.Error as exc:
            msg = f"Failed to write to {collection}: {exc}"
            raise StoreError(msg) from exc

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
        stmt = sql.SQL("SELECT id, data FROM documents WHERE collection = %s")
        params: list[Any] = [collection]

        if order_by is not None:
            stmt += sql.SQL(
                " AND data->{key} IS NOT NULL AND data->{key} <> 'null'::jsonb"
                " ORDER BY data->{key} {direction}"
            ).format(
                key=sql.Literal(order_by),
                direction=sql.SQL("DESC" if descending else "ASC"),
            )
        if limit is not None:
            stmt += sql.SQL(" LIMIT %s")
            params.append(limit)

        try:
            with self._connect() as conn:
                rows = conn.execute(stmt, params).fetchall()
        except psycopg.Error as exc:
            msg = f"Failed to read {collection}: {exc}"
            raise StoreError(msg) from exc

        return [Document(id=row["id"], data=row["data"]) for row in rows]

"""Document store client: flat collections of JSON field maps.

The store speaks in raw documents (``doc_id`` plus a field map). It knows nothing
about projects or experiences; typed mapping lives in the service layer.

Queries run in SQLite through its JSON functions: filters are equality
predicates on top-level fields, and ordering is on one top-level field.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from folio.database.schema import Document
from folio.database.sqlite_client import dispose_engine, session_context
from folio.utils.id_generator import new_document_id
from folio.utils.logging import get_logger
from folio.utils.time import timestamp_now

logger = get_logger(__name__)

ORDER_DIRECTIONS = ("asc", "desc")

# json_type() names for a filter value's Python type
_NUMBER_TYPES = ("integer", "real")


class DocumentStoreError(Exception):
    """Backend fault raised by a document store (I/O, locking, corrupt rows)."""


class StoredDocument(BaseModel):
    """A document as returned by the store."""

    doc_id: str
    data: Dict[str, Any] = Field(default_factory=dict)


class DocumentStore(Protocol):
    """Operations a service needs from a document store."""

    def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        ...

    def get_document(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        ...

    def update_document(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        ...

    def delete_document(self, collection: str, doc_id: str) -> None:
        ...

    def delete_collection(self, collection: str) -> int:
        ...

    def query_documents(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        direction: str = "asc",
        limit: Optional[int] = None,
    ) -> List[StoredDocument]:
        ...


def _json_path(field: str) -> str:
    return '$."' + field.replace('"', '\\"') + '"'


def _json_field(field: str, sql_function: str = "json_extract"):
    """SQL value of a top-level field; NULL when absent or when the body is not valid JSON."""
    function = getattr(func, sql_function)
    return case(
        (func.json_valid(Document.body_json) == 1, function(Document.body_json, _json_path(field))),
        else_=None,
    )


def field_equals(field: str, expected: Any):
    """
    SQL predicate for ``field == expected`` on the stored JSON.

    JSON types must agree, so ``false`` never matches ``0``. A missing field
    never matches.

    Raises:
        ValueError: expected is not a JSON scalar
    """
    kind = _json_field(field, "json_type")
    if expected is None:
        return kind == "null"
    if isinstance(expected, bool):
        return kind == ("true" if expected else "false")
    if isinstance(expected, (int, float)):
        return kind.in_(_NUMBER_TYPES) & (_json_field(field) == expected)
    if isinstance(expected, str):
        return (kind == "text") & (_json_field(field) == expected)
    raise ValueError(f"Unsupported filter value for {field}: {expected!r}")


def order_clauses(order_by: Optional[str], direction: str = "asc") -> list:
    """
    ORDER BY clauses for one field.

    Ties break on ``doc_id`` ascending. Documents lacking the field (or holding
    null) go last in either direction. With no field, documents are ordered by
    ``doc_id`` in the given direction.
    """
    if direction not in ORDER_DIRECTIONS:
        raise ValueError(f"Unsupported order direction: {direction}")
    if not order_by:
        return [Document.doc_id.asc() if direction == "asc" else Document.doc_id.desc()]
    value = _json_field(order_by)
    return [
        case((value.is_(None), 1), else_=0),
        value.asc() if direction == "asc" else value.desc(),
        Document.doc_id.asc(),
    ]


class SqlDocumentStore:
    """Document store persisted in SQLite through SQLAlchemy."""

    def __init__(self, sqlite_path: str):
        # engines are cached per path, so pin relative paths to the current directory now
        if sqlite_path != ":memory:":
            sqlite_path = str(Path(sqlite_path).resolve())
        self.sqlite_path = sqlite_path

    def _decode(self, row: Document) -> StoredDocument:
        try:
            data = json.loads(row.body_json)
        except (json.JSONDecodeError, TypeError) as exc:
            raise DocumentStoreError(
                f"Corrupt document {row.collection}/{row.doc_id}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise DocumentStoreError(f"Document {row.collection}/{row.doc_id} is not a field map")
        return StoredDocument(doc_id=row.doc_id, data=data)

    def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """
        Insert a document and return its store-assigned id.

        Args:
            collection: Collection name
            data: JSON-serializable field map

        Returns:
            New document id
        """
        doc_id = new_document_id()
        try:
            with session_context(self.sqlite_path) as session:
                session.add(
                    Document(
                        collection=collection,
                        doc_id=doc_id,
                        body_json=json.dumps(data),
                        written_at_utc=timestamp_now(),
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to add document to {collection}: {exc}") from exc
        logger.debug(f"Added document {collection}/{doc_id}")
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        """Fetch one document, or None when no document has that id."""
        try:
            with session_context(self.sqlite_path) as session:
                row = session.get(Document, (collection, doc_id))
                if row is None:
                    return None
                return self._decode(row)
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to read {collection}/{doc_id}: {exc}") from exc

    def update_document(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        """
        Shallow-merge ``fields`` into an existing document.

        Top-level keys are replaced whole; list values are not merged.

        Returns:
            False if the document does not exist (nothing written), True otherwise
        """
        try:
            with session_context(self.sqlite_path) as session:
                row = session.get(Document, (collection, doc_id))
                if row is None:
                    return False
                merged = self._decode(row).data
                merged.update(fields)
                row.body_json = json.dumps(merged)
                row.written_at_utc = timestamp_now()
                session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to update {collection}/{doc_id}: {exc}") from exc
        logger.debug(f"Updated document {collection}/{doc_id} ({', '.join(sorted(fields))})")
        return True

    def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete one document. Deleting a missing id is not an error."""
        try:
            with session_context(self.sqlite_path) as session:
                session.query(Document).filter(
                    Document.collection == collection,
                    Document.doc_id == doc_id,
                ).delete(synchronize_session=False)
                session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to delete {collection}/{doc_id}: {exc}") from exc
        logger.debug(f"Deleted document {collection}/{doc_id}")

    def delete_collection(self, collection: str) -> int:
        """Delete every document in a collection and return how many were removed."""
        try:
            with session_context(self.sqlite_path) as session:
                removed = session.query(Document).filter(
                    Document.collection == collection,
                ).delete(synchronize_session=False)
                session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to clear {collection}: {exc}") from exc
        logger.debug(f"Deleted {removed} documents from {collection}")
        return removed

    def query_documents(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        direction: str = "asc",
        limit: Optional[int] = None,
    ) -> List[StoredDocument]:
        """
        Query a collection.

        Args:
            collection: Collection name
            where: Equality predicates, ANDed together
            order_by: Field to order by (see ``order_clauses``)
            direction: ``asc`` or ``desc``
            limit: Maximum number of documents to return (None = unbounded)

        Returns:
            Matching documents in order
        """
        query_filters = [Document.collection == collection]
        for field, expected in (where or {}).items():
            query_filters.append(field_equals(field, expected))
        ordering = order_clauses(order_by, direction)

        try:
            with session_context(self.sqlite_path) as session:
                query = session.query(Document).filter(*query_filters).order_by(*ordering)
                if limit is not None:
                    query = query.limit(limit)
                return [self._decode(row) for row in query.all()]
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to query {collection}: {exc}") from exc

    def close(self) -> None:
        """Release the pooled connections for this store's database file."""
        dispose_engine(self.sqlite_path)

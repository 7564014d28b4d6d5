"""Data Access Service: CRUD and filtered listing against one collection."""

from datetime import datetime, timedelta
from typing import Any, Callable, ClassVar, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from folio.database.document_store import DocumentStore, DocumentStoreError, StoredDocument
from folio.items.models import PartialUpdate, StoredEntity
from folio.items.query_options import QueryOptions, resolve_order_field
from folio.services.results import ErrorKind, ServiceResult
from folio.utils.logging import get_logger
from folio.utils.time import format_timestamp, utc_now

logger = get_logger(__name__)

TEntity = TypeVar("TEntity", bound=StoredEntity)
TCreate = TypeVar("TCreate", bound=BaseModel)
TUpdate = TypeVar("TUpdate", bound=PartialUpdate)
TOptions = TypeVar("TOptions", bound=QueryOptions)

Clock = Callable[[], datetime]
OptionsInput = Union[QueryOptions, Mapping[str, Any], None]

UPDATE_TICK = timedelta(microseconds=1)


class CollectionService(Generic[TEntity, TCreate, TUpdate, TOptions]):
    """
    Stateless façade over one collection of a document store.

    Subclasses bind the entity, input and options models. The collection name,
    default ordering and clock are injected so tests can swap any of them.
    Every operation returns a ``ServiceResult``; none raises for store,
    lookup or validation failures.
    """

    entity_model: ClassVar[Type[StoredEntity]]
    create_model: ClassVar[Type[BaseModel]]
    update_model: ClassVar[Type[PartialUpdate]]
    options_model: ClassVar[Type[QueryOptions]]

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        order_by: str,
        order_direction: str = "asc",
        clock: Optional[Clock] = None,
    ):
        if not collection:
            raise ValueError("collection name is required")
        self.store = store
        self.collection = collection
        self.default_order_by = resolve_order_field(self.entity_model, order_by)
        if order_direction not in ("asc", "desc"):
            raise ValueError(f"Unsupported order direction: {order_direction}")
        self.default_direction = order_direction
        self._clock = clock or utc_now

    def _op(self, name: str) -> str:
        return f"{self.collection}.{name}"

    def _fail(self, op: str, kind: ErrorKind, message: str, **detail: Any) -> ServiceResult:
        logger.warning(f"{op} failed ({kind.value}): {message}")
        return ServiceResult.failure(op, kind, message, **detail)

    def _to_entity(self, document: StoredDocument) -> TEntity:
        try:
            return self.entity_model.model_validate({**document.data, "id": document.doc_id})
        except ValidationError as exc:
            raise DocumentStoreError(
                f"Malformed document {self.collection}/{document.doc_id}: {exc}"
            ) from exc

    def create(self, fields: Union[TCreate, Mapping[str, Any]]) -> ServiceResult[TEntity]:
        """
        Create a document. The store assigns the id; both timestamps get the same instant.

        Args:
            fields: Create model or mapping (no id, createdAt or updatedAt)

        Returns:
            Result holding the created entity
        """
        op = self._op("create")
        try:
            payload = self.create_model.model_validate(fields)
        except ValidationError as exc:
            return self._fail(op, ErrorKind.VALIDATION, f"Invalid {self.collection} input: {exc}")

        stamp = format_timestamp(self._clock())
        document = {**payload.to_document(), "createdAt": stamp, "updatedAt": stamp}
        try:
            doc_id = self.store.add_document(self.collection, document)
            entity = self._to_entity(StoredDocument(doc_id=doc_id, data=document))
        except DocumentStoreError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, str(exc))

        logger.debug(f"Created {self.collection}/{doc_id}")
        return ServiceResult.success(op, entity)

    def list(self, options: OptionsInput = None) -> ServiceResult[List[TEntity]]:
        """
        List entities matching every active filter, ordered, capped at ``limit``.

        Args:
            options: Query options, a mapping of option values, or None for defaults

        Returns:
            Result holding the (possibly empty) list
        """
        op = self._op("list")
        try:
            query = self.options_model.coerce(options)
            order_field = resolve_order_field(self.entity_model, query.order_by or self.default_order_by)
        except (ValueError, TypeError) as exc:
            return self._fail(op, ErrorKind.VALIDATION, f"Invalid query options: {exc}")

        direction = query.order_direction or self.default_direction
        try:
            documents = self.store.query_documents(
                self.collection,
                where=query.filters(),
                # the id lives outside the field map; the store orders by it natively
                order_by=None if order_field == "id" else order_field,
                direction=direction,
                limit=query.limit,
            )
            entities = [self._to_entity(document) for document in documents]
        except DocumentStoreError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, str(exc))

        return ServiceResult.success(op, entities)

    def get_by_id(self, item_id: str) -> ServiceResult[TEntity]:
        """Fetch one entity. A missing document is a NOT_FOUND result, not a fault."""
        op = self._op("get_by_id")
        if not item_id:
            return self._fail(op, ErrorKind.VALIDATION, "An id is required")
        try:
            document = self.store.get_document(self.collection, item_id)
            if document is None:
                return ServiceResult.failure(
                    op, ErrorKind.NOT_FOUND, f"{self.collection}/{item_id} not found", id=item_id
                )
            return ServiceResult.success(op, self._to_entity(document))
        except DocumentStoreError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, str(exc))

    def update(self, item_id: str, fields: Union[TUpdate, Mapping[str, Any]]) -> ServiceResult[TEntity]:
        """
        Merge ``fields`` into a document and return the state read back from the store.

        Top-level fields are replaced whole: passing ``technologies`` replaces
        the list, it never appends. ``updatedAt`` is re-stamped.

        Args:
            item_id: Document id
            fields: Update model or mapping of changed fields

        Returns:
            Result holding the entity as persisted
        """
        op = self._op("update")
        if not item_id:
            return self._fail(op, ErrorKind.VALIDATION, "An id is required")
        try:
            changes = self.update_model.model_validate(fields).to_document(exclude_unset=True)
        except ValidationError as exc:
            return self._fail(op, ErrorKind.VALIDATION, f"Invalid {self.collection} update: {exc}")

        try:
            current = self.store.get_document(self.collection, item_id)
            if current is None:
                return ServiceResult.failure(
                    op, ErrorKind.NOT_FOUND, f"{self.collection}/{item_id} not found", id=item_id
                )
            existing = self._to_entity(current)
            # strictly after the previous stamp even if the clock stalls or steps back
            floor = existing.updated_at + UPDATE_TICK
            changes["updatedAt"] = format_timestamp(max(self._clock(), floor))

            try:
                self.entity_model.model_validate({**current.data, **changes, "id": item_id})
            except ValidationError as exc:
                return self._fail(op, ErrorKind.VALIDATION, f"Update would leave an invalid document: {exc}")

            if not self.store.update_document(self.collection, item_id, changes):
                return ServiceResult.failure(
                    op, ErrorKind.NOT_FOUND, f"{self.collection}/{item_id} not found", id=item_id
                )
            persisted = self.store.get_document(self.collection, item_id)
            if persisted is None:
                return ServiceResult.failure(
                    op, ErrorKind.NOT_FOUND, f"{self.collection}/{item_id} not found after update", id=item_id
                )
            entity = self._to_entity(persisted)
        except DocumentStoreError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, str(exc))

        logger.debug(f"Updated {self.collection}/{item_id}")
        return ServiceResult.success(op, entity)

    def delete(self, item_id: str) -> ServiceResult[bool]:
        """Delete one document. Deleting an id that does not exist still succeeds."""
        op = self._op("delete")
        if not item_id:
            return self._fail(op, ErrorKind.VALIDATION, "An id is required")
        try:
            self.store.delete_document(self.collection, item_id)
        except DocumentStoreError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, str(exc))
        logger.debug(f"Deleted {self.collection}/{item_id}")
        return ServiceResult.success(op, True)

    def delete_all(self) -> ServiceResult[int]:
        """Delete every document in the collection; data is the number removed."""
        op = self._op("delete_all")
        try:
            removed = self.store.delete_collection(self.collection)
        except DocumentStoreError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, str(exc))
        logger.info(f"Deleted {removed} documents from {self.collection}")
        return ServiceResult.success(op, removed)

"""Retrieval: presentation-side state over a service call.

State is three fields: ``data``, ``loading`` and ``error``. A fetch runs on mount,
whenever the options change structurally, and on ``refetch()``. Each dispatched
fetch gets a ticket; a result is applied only if its ticket is still the latest,
so a slow response can never overwrite a newer one.

Failures keep the previous ``data`` and set ``error``. A NOT_FOUND result is
"no data" rather than an error.
"""

import json
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel

from folio.services.collection_service import CollectionService, OptionsInput
from folio.services.results import ErrorKind, ServiceResult
from folio.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Fetch = Callable[[Any], ServiceResult]


@dataclass(frozen=True)
class RetrievalState(Generic[T]):
    data: Optional[T]
    loading: bool
    error: Optional[str]


def options_fingerprint(options: Any) -> str:
    """Structural identity of an options value; unset and None fields compare equal."""
    if isinstance(options, BaseModel):
        options = options.model_dump(mode="json", by_alias=True, exclude_none=True)
    elif isinstance(options, dict):
        options = {key: value for key, value in options.items() if value is not None}
    return json.dumps(options, sort_keys=True, default=str)


class Retrieval(Generic[T]):
    """
    Tracks loading / error / data for one fetch function.

    Args:
        fetch: Called with the current options; must return a ServiceResult
        options: Initial options value
        initial: Data to expose before the first successful fetch
        on_change: Called with the new state after every applied transition
    """

    def __init__(
        self,
        fetch: Fetch,
        options: Any = None,
        *,
        initial: Optional[T] = None,
        on_change: Optional[Callable[[RetrievalState[T]], None]] = None,
    ):
        self._fetch = fetch
        self._options = options
        self._on_change = on_change
        self._lock = threading.Lock()
        self._ticket = 0
        self._disposed = False
        self.data: Optional[T] = initial
        self.loading = True
        self.error: Optional[str] = None

    @property
    def options(self) -> Any:
        return self._options

    @property
    def state(self) -> RetrievalState[T]:
        with self._lock:
            return RetrievalState(data=self.data, loading=self.loading, error=self.error)

    def mount(self) -> RetrievalState[T]:
        return self.refetch()

    def set_options(self, options: Any) -> bool:
        """
        Replace the options, fetching only if they differ structurally.

        Returns:
            True if a fetch was issued
        """
        if options_fingerprint(options) == options_fingerprint(self._options):
            return False
        self._options = options
        if self._disposed:
            return False
        self.refetch()
        return True

    def begin(self) -> int:
        """Start a fetch and return its ticket. Any earlier ticket is now superseded."""
        with self._lock:
            self._ticket += 1
            self.loading = True
            return self._ticket

    def settle(self, ticket: int, result: ServiceResult) -> bool:
        """
        Apply a finished fetch.

        Returns:
            False if the ticket was superseded or the retrieval disposed (nothing applied)
        """
        with self._lock:
            if self._disposed or ticket != self._ticket:
                logger.debug(f"Discarding result for ticket {ticket} (latest {self._ticket})")
                return False
            if result.ok:
                self.data = result.data
                self.error = None
            elif result.error is not None and result.error.kind == ErrorKind.NOT_FOUND:
                self.data = None
                self.error = None
            else:
                self.error = result.error.message if result.error else "Unknown error"
            self.loading = False
            snapshot = RetrievalState(data=self.data, loading=self.loading, error=self.error)

        if self._on_change is not None:
            self._on_change(snapshot)
        return True

    def refetch(self) -> RetrievalState[T]:
        """
        Run the fetch with the current options and return the resulting state.

        Once disposed, no fetch is issued and the current state is returned.
        """
        if self._disposed:
            logger.debug("Ignoring refetch on a disposed retrieval")
            return self.state
        ticket = self.begin()
        options = self._options
        try:
            result = self._fetch(options)
        except Exception as exc:
            logger.warning(f"Fetch raised instead of returning a result: {exc}", exc_info=True)
            result = ServiceResult.failure("retrieval.fetch", ErrorKind.TRANSPORT, str(exc) or type(exc).__name__)
        self.settle(ticket, result)
        return self.state

    def dispose(self) -> None:
        """Teardown: results of fetches still in flight are dropped and nothing is loading."""
        with self._lock:
            self._disposed = True
            self.loading = False


def use_collection(service: CollectionService, options: OptionsInput = None, **kwargs: Any) -> Retrieval[list]:
    """Mounted retrieval over ``service.list``; data starts as an empty list."""
    kwargs.setdefault("initial", [])
    retrieval: Retrieval[list] = Retrieval(service.list, options, **kwargs)
    retrieval.mount()
    return retrieval


def _item_fetch(service: CollectionService) -> Fetch:
    def fetch(item_id: Optional[str]) -> ServiceResult:
        if not item_id:
            return ServiceResult.success(f"{service.collection}.get_by_id", None)
        return service.get_by_id(item_id)

    return fetch


def use_item(service: CollectionService, item_id: Optional[str], **kwargs: Any) -> Retrieval[Any]:
    """
    Mounted retrieval over ``service.get_by_id``.

    An empty id performs no store call: the retrieval settles with no data and
    ``loading`` False. Change the id later with ``set_options``.
    """
    retrieval: Retrieval[Any] = Retrieval(_item_fetch(service), item_id, **kwargs)
    retrieval.mount()
    return retrieval

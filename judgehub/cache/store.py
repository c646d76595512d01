"""Client-side query cache with tag-based invalidation.

Every list query keeps a normalized snapshot of one server collection. A
successful mutation invalidates its declared tags; each subscribed query that
provided one of those tags is fetched again and its snapshot replaced
wholesale. Nothing is patched locally.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any, Literal

from judgehub.cache.adapter import EMPTY_STATE, EntitySelectors, NormalizedState
from judgehub.cache.endpoints import MUTATIONS, QUERIES, MutationDefinition, QueryDefinition, Tag, list_tag
from judgehub.cache.transport import ApiResponse, ContestApiClient, TransportError

logger = logging.getLogger("client")

QueryStatus = Literal["uninitialized", "pending", "fulfilled", "rejected"]
Listener = Callable[[str, "QueryResult"], None]


@dataclass(frozen=True)
class QueryResult:
    status: QueryStatus = "uninitialized"
    data: NormalizedState = EMPTY_STATE
    error: str | None = None
    provided_tags: frozenset[Tag] = frozenset()
    request_seq: int = 0

    @property
    def is_error(self) -> bool:
        return self.status == "rejected"


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    status_code: int | None
    payload: Any = None
    error: str | None = None
    invalidated: tuple[Tag, ...] = ()


class TagRegistry:
    """Observer registry: which query provides which tags."""

    def __init__(self) -> None:
        self._by_query: dict[str, frozenset[Tag]] = {}

    def register(self, query_name: str, tags: Iterable[Tag]) -> None:
        self._by_query[query_name] = frozenset(tags)

    def forget(self, query_name: str) -> None:
        self._by_query.pop(query_name, None)

    def dependents(self, tags: Iterable[Tag]) -> list[str]:
        wanted = frozenset(tags)
        return [name for name, provided in self._by_query.items() if provided & wanted]

    def clear(self) -> None:
        self._by_query.clear()


@dataclass
class Subscription:
    cache: ApiCache
    query_name: str
    active: bool = True

    def result(self) -> QueryResult:
        return self.cache.select(self.query_name)

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.cache._release(self.query_name)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


@dataclass
class ApiCache:
    """Explicit cache object; create at application start, close on logout."""

    client: ContestApiClient
    queries: Mapping[str, QueryDefinition] = field(default_factory=lambda: dict(QUERIES))
    mutations: Mapping[str, MutationDefinition] = field(default_factory=lambda: dict(MUTATIONS))
    _results: dict[str, QueryResult] = field(default_factory=dict, init=False, repr=False)
    _subscribers: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _issued_seq: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _listeners: list[Listener] = field(default_factory=list, init=False, repr=False)
    _selectors: dict[str, EntitySelectors[ApiCache]] = field(default_factory=dict, init=False, repr=False)
    _tags: TagRegistry = field(default_factory=TagRegistry, init=False, repr=False)
    closed: bool = field(default=False, init=False)

    def __enter__(self) -> ApiCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Drops every subscription and cached snapshot."""
        self._results.clear()
        self._subscribers.clear()
        self._issued_seq.clear()
        self._listeners.clear()
        self._tags.clear()
        self._selectors.clear()
        self.closed = True

    def _ensure_open(self) -> None:
        if self.closed:
            raise RuntimeError("api cache is closed")

    def _query(self, query_name: str) -> QueryDefinition:
        try:
            return self.queries[query_name]
        except KeyError as exc:
            raise KeyError(f"unknown query: {query_name}") from exc

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def select(self, query_name: str) -> QueryResult:
        self._query(query_name)
        return self._results.get(query_name, QueryResult())

    def selectors(self, query_name: str) -> EntitySelectors[ApiCache]:
        """Memoized selectors over the query's normalized snapshot."""
        selectors = self._selectors.get(query_name)
        if selectors is None:
            definition = self._query(query_name)
            selectors = definition.adapter.get_selectors(lambda cache: cache.select(query_name).data)
            self._selectors[query_name] = selectors
        return selectors

    def subscribe(self, query_name: str) -> Subscription:
        self._ensure_open()
        self._query(query_name)
        self._subscribers[query_name] = self._subscribers.get(query_name, 0) + 1
        if self.select(query_name).status == "uninitialized":
            self.fetch(query_name)
        return Subscription(cache=self, query_name=query_name)

    def _release(self, query_name: str) -> None:
        remaining = self._subscribers.get(query_name, 0) - 1
        if remaining > 0:
            self._subscribers[query_name] = remaining
            return
        self._subscribers.pop(query_name, None)

    def is_subscribed(self, query_name: str) -> bool:
        return self._subscribers.get(query_name, 0) > 0

    def fetch(self, query_name: str) -> QueryResult:
        self._ensure_open()
        definition = self._query(query_name)
        seq = self._issued_seq.get(query_name, 0) + 1
        self._issued_seq[query_name] = seq

        try:
            response = self.client.request("GET", definition.path)
        except TransportError as exc:
            # The request never resolved: keep whatever snapshot we had.
            previous = self.select(query_name)
            result = QueryResult(
                status="rejected",
                data=previous.data,
                error=str(exc),
                provided_tags=previous.provided_tags or frozenset({list_tag(definition.tag_type)}),
                request_seq=seq,
            )
            return self._apply(query_name, result)

        return self._apply(query_name, self._result_from_response(definition, response, seq))

    def _result_from_response(self, definition: QueryDefinition, response: ApiResponse, seq: int) -> QueryResult:
        failed = response.status_code != 200 or response.has_error_flag
        payload = response.payload
        if not failed and payload is not None and not isinstance(payload, list):
            failed = True
        if failed:
            # An explicit error answer empties the collection.
            error = f"{definition.path} answered {response.status_code}"
            if isinstance(payload, dict):
                detail = payload.get("error") or payload.get("message")
                if detail:
                    error = f"{error}: {detail}"
            return QueryResult(
                status="rejected",
                data=definition.adapter.get_initial_state(),
                error=error,
                provided_tags=frozenset({list_tag(definition.tag_type)}),
                request_seq=seq,
            )

        records = [item for item in payload or [] if isinstance(item, Mapping)]
        data = definition.adapter.set_all(records)
        return QueryResult(
            status="fulfilled",
            data=data,
            provided_tags=definition.provided_tags(data.ids),
            request_seq=seq,
        )

    def _apply(self, query_name: str, result: QueryResult) -> QueryResult:
        current = self._results.get(query_name)
        if self.closed:
            return result
        if current is not None and current.request_seq > result.request_seq:
            logger.info("stale query response discarded", extra={"detail": query_name})
            return current
        self._results[query_name] = result
        self._tags.register(query_name, result.provided_tags)
        for listener in list(self._listeners):
            listener(query_name, result)
        return result

    def invalidate(self, tags: Iterable[Tag]) -> list[str]:
        """Refetches every subscribed query that provided one of ``tags``."""
        self._ensure_open()
        refetched: list[str] = []
        for query_name in self._tags.dependents(tags):
            if self.is_subscribed(query_name):
                self.fetch(query_name)
                refetched.append(query_name)
        return refetched

    def mutate(self, mutation_name: str, arg: Mapping[str, Any] | None = None) -> MutationResult:
        self._ensure_open()
        try:
            definition = self.mutations[mutation_name]
        except KeyError as exc:
            raise KeyError(f"unknown mutation: {mutation_name}") from exc
        body = dict(arg or {})

        try:
            response = self.client.request(
                definition.method,
                definition.build_path(body),
                json=body if definition.send_body else None,
                headers=definition.build_headers(),
            )
        except TransportError as exc:
            return MutationResult(ok=False, status_code=None, error=str(exc))

        if not 200 <= response.status_code < 300:
            detail = None
            if isinstance(response.payload, dict):
                detail = response.payload.get("error") or response.payload.get("message")
            return MutationResult(
                ok=False,
                status_code=response.status_code,
                payload=response.payload,
                error=detail or f"{definition.method} answered {response.status_code}",
            )

        tags = tuple(definition.invalidates(body, response.payload))
        self.invalidate(tags)
        return MutationResult(
            ok=True,
            status_code=response.status_code,
            payload=response.payload,
            invalidated=tags,
        )

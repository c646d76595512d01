"""Normalized entity collections and memoized selectors."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
import logging
from types import MappingProxyType
from typing import Any, Generic, TypeVar

logger = logging.getLogger("client")

Entity = dict[str, Any]
RootT = TypeVar("RootT")
ResultT = TypeVar("ResultT")

STORE_ID_FIELD = "_id"
CACHE_ID_FIELD = "id"


@dataclass(frozen=True)
class NormalizedState:
    ids: tuple[str, ...] = ()
    entities: Mapping[str, Entity] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.ids)


EMPTY_STATE = NormalizedState()


def normalize_record(raw: Mapping[str, Any], *, id_field: str = STORE_ID_FIELD) -> Entity:
    """Copies a raw record, exposing its store identifier as ``id``."""
    record = dict(raw)
    if id_field in record:
        record[CACHE_ID_FIELD] = record[id_field]
    return record


def create_selector(
    *inputs: Callable[[RootT], Any],
    combiner: Callable[..., ResultT],
) -> Callable[[RootT], ResultT]:
    """Single-entry memoization on the identity of every input value."""
    last_args: tuple[Any, ...] | None = None
    last_result: Any = None

    def selector(root: RootT) -> ResultT:
        nonlocal last_args, last_result
        args = tuple(select(root) for select in inputs)
        if last_args is not None and len(args) == len(last_args) and all(
            current is previous for current, previous in zip(args, last_args)
        ):
            return last_result
        last_result = combiner(*args)
        last_args = args
        return last_result

    return selector


@dataclass(frozen=True)
class EntitySelectors(Generic[RootT]):
    select_ids: Callable[[RootT], tuple[str, ...]]
    select_entities: Callable[[RootT], Mapping[str, Entity]]
    select_all: Callable[[RootT], list[Entity]]
    select_total: Callable[[RootT], int]
    select_by_id: Callable[[RootT, str], Entity | None]


@dataclass(frozen=True)
class EntityAdapter:
    """Builds normalized collections keyed by ``select_id``."""

    select_id: Callable[[Mapping[str, Any]], Any] = lambda record: record.get(CACHE_ID_FIELD)
    id_field: str = STORE_ID_FIELD

    def get_initial_state(self) -> NormalizedState:
        return EMPTY_STATE

    def set_all(self, records: Iterable[Mapping[str, Any]]) -> NormalizedState:
        """Replaces the whole collection; later duplicates overwrite earlier ones in place."""
        ids: list[str] = []
        entities: dict[str, Entity] = {}
        for raw in records:
            record = normalize_record(raw, id_field=self.id_field)
            record_id = self.select_id(record)
            if record_id is None:
                logger.warning("record without identifier skipped")
                continue
            key = str(record_id)
            if key not in entities:
                ids.append(key)
            entities[key] = record
        return NormalizedState(ids=tuple(ids), entities=MappingProxyType(entities))

    def get_selectors(self, select_state: Callable[[RootT], NormalizedState | None]) -> EntitySelectors[RootT]:
        def _state(root: RootT) -> NormalizedState:
            state = select_state(root)
            return state if state is not None else EMPTY_STATE

        def select_ids(root: RootT) -> tuple[str, ...]:
            return _state(root).ids

        def select_entities(root: RootT) -> Mapping[str, Entity]:
            return _state(root).entities

        select_all = create_selector(
            select_ids,
            select_entities,
            combiner=lambda ids, entities: [entities[item_id] for item_id in ids],
        )

        def select_total(root: RootT) -> int:
            return len(_state(root).ids)

        def select_by_id(root: RootT, record_id: str) -> Entity | None:
            return _state(root).entities.get(record_id)

        return EntitySelectors(
            select_ids=select_ids,
            select_entities=select_entities,
            select_all=select_all,
            select_total=select_total,
            select_by_id=select_by_id,
        )

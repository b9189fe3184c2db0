"""Query one dataset as a list of entities.

Every query first makes sure the cache is filled, then reads the memoized
entities of its kind. Predicate maps combine with logical AND; a compiled
regex matches against the text form of the field, anything else must be
equal.

    leagues = Collection(League, controller)
    leagues.where({"hardcore": True})
    leagues.find({"name": re.compile("metamorph", re.I)})
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from core.lazy import LazyCell
from core.predicates import compile_predicates, matches_all
from core.records import Entity

log = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class Collection(Generic[E]):
    def __init__(self, entity_cls: Type[E], controller):
        self.entity_cls = entity_cls
        self.controller = controller
        self._entities: LazyCell[List[E]] = LazyCell()

    @property
    def dataset(self) -> str:
        return self.entity_cls.dataset

    def _raw_records(self) -> List[Mapping[str, Any]]:
        return self.controller.fetch_dataset(self.dataset) or []

    def _materialize(self) -> List[E]:
        records = self._raw_records()
        log.info("Loading %d %s records", len(records), self.dataset)
        client = self.controller.client
        return [self.entity_cls(raw, client=client) for raw in records]

    def all(self) -> List[E]:
        """Every entity of this kind in source order; empty when nothing is cached."""
        self.controller.refresh()
        return list(self._entities.get_or_set(self._materialize, keep=bool))

    def count(self) -> int:
        self.controller.refresh()
        if self._entities.is_set:
            return len(self._entities.peek())
        return len(self._raw_records())

    def where(self, params: Optional[Mapping[str, Any]] = None) -> List[E]:
        """Entities matching every predicate in ``params``."""
        predicates = compile_predicates(params)
        return [e for e in self.all() if matches_all(predicates, e.get)]

    def find(self, params: Optional[Mapping[str, Any]] = None) -> Optional[E]:
        """First entity matching every predicate, or ``None``."""
        predicates = compile_predicates(params)
        return next((e for e in self.all() if matches_all(predicates, e.get)), None)

    def first(self) -> Optional[E]:
        return self.find()

    def reset(self) -> None:
        """Forget the memoized entities so the next query reads the cache again."""
        self._entities.reset()

"""
Entity kinds exposed by poe.watch.

Each kind declares the fields of its known schema as typed accessors; any
other key of the raw record is still reachable through :class:`Entity`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, List, Mapping, Optional, Union

from core.errors import ConfigurationError
from core.lazy import LazyCell
from core.records import Entity, field

log = logging.getLogger(__name__)

_PRICE_FIELDS = (
    "mean", "median", "mode", "min", "max", "exalted", "total", "daily", "current", "accepted",
)


class League(Entity):
    """A poe.watch league (``Standard``, ``Hardcore Metamorph``...)."""

    dataset = "leagues"

    id = field()
    name = field()
    display = field()
    hardcore = field(False)
    active = field(False)
    upcoming = field(False)
    event = field(False)
    challenge = field(False)
    start = field()
    end = field()


class Category(Entity):
    """Item category with its groups."""

    dataset = "categories"

    id = field()
    name = field()
    display = field()
    groups = field(())


@dataclass
class PriceData:
    """Price statistics of one item in one league."""

    name: str
    id: Optional[int] = None
    display: Optional[str] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    mode: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    exalted: Optional[float] = None
    total: Optional[int] = None
    daily: Optional[int] = None
    current: Optional[int] = None
    accepted: Optional[int] = None
    extra: Dict[str, Any] = dc_field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PriceData":
        known = {"name", "id", "display", *_PRICE_FIELDS}
        return cls(
            name=str(raw.get("name", "")),
            **{k: raw[k] for k in known - {"name"} if k in raw},
            extra={k: v for k, v in raw.items() if k not in known},
        )


class Item(Entity):
    """An item from the ``itemdata`` dataset, with on-demand price detail."""

    dataset = "item_data"

    id = field()
    name = field()
    type = field()
    frame = field()
    category = field()
    group = field()
    icon = field()
    tier = field()
    lvl = field()
    quality = field()
    corrupted = field()
    links = field()
    ilvl = field()
    var = field()
    stack_size = field()

    def __init__(self, raw: Mapping[str, Any], client: Any = None):
        super().__init__(raw, client=client)
        self._prices: LazyCell[List[PriceData]] = LazyCell()

    def prices(self) -> List[PriceData]:
        """Per-league prices, fetched once per instance."""
        return self._prices.get_or_set(self._fetch_prices)

    def _fetch_prices(self) -> List[PriceData]:
        if self._client is None:
            raise ConfigurationError("Item has no poe.watch client attached")
        data = self._client.fetch_item(self.id)
        leagues = data.get("leagues") or []
        log.debug("Fetched %d league prices for item id=%s", len(leagues), self.id)
        return [PriceData.from_dict(entry) for entry in leagues]

    def price_for_leagues(self, name_or_pattern: Union[str, "re.Pattern[str]"]) -> List[PriceData]:
        """All league prices whose name matches; strings match case-insensitively."""
        regex = re.compile(name_or_pattern, re.IGNORECASE) if isinstance(name_or_pattern, str) else name_or_pattern
        return [data for data in self.prices() if regex.search(data.name)]

    def price_for_league(self, name_or_pattern: Union[str, "re.Pattern[str]"]) -> Optional[PriceData]:
        """First league price by exact (case-insensitive) name or by pattern."""
        for data in self.prices():
            if isinstance(name_or_pattern, str):
                if data.name.lower() == name_or_pattern.lower():
                    return data
            elif name_or_pattern.search(data.name):
                return data
        return None

"""Bulk dataset refresh for the poe.watch cache.

The three bulk datasets (item data, categories, leagues) are refreshed
together: if any of their cache keys is missing the whole cache counts as
expired and all three are fetched again. Only one refresh may run at a time;
a second caller gets :class:`RefreshInProgress` instead of waiting.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from core.errors import ConfigurationError, RefreshInProgress
from utils.constants import BULK_APIS, DEFAULT_EXPIRY, KEY_PREFIX

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    name: str
    key: str
    url: str


class CacheRefreshController:
    """Keeps the bulk datasets present in the cache store."""

    def __init__(
        self,
        store,
        client,
        ttl: int = DEFAULT_EXPIRY,
        key_prefix: str = KEY_PREFIX,
        distributed_lock: bool = False,
        lock_ttl: int = 120,
    ):
        self._store = store
        self.client = client
        self.ttl = ttl
        self.key_prefix = key_prefix
        self.distributed_lock = distributed_lock
        self.lock_ttl = lock_ttl
        self._updating = threading.Lock()
        self.datasets: List[Dataset] = [
            Dataset(name, self.redis_key(name), client.bulk_url(name)) for name in BULK_APIS
        ]

    @property
    def store(self):
        if self._store is None:
            raise ConfigurationError(
                "You need to configure a cache store, e.g. CacheRefreshController(MemoryStore(), client)"
            )
        return self._store

    @store.setter
    def store(self, store) -> None:
        self._store = store

    def redis_key(self, name: str) -> str:
        """Cache key of a dataset, e.g. ``poe_watch_item_data``."""
        return f"{self.key_prefix}{name}"

    @property
    def lock_key(self) -> str:
        return self.redis_key("refresh_lock")

    @property
    def updating(self) -> bool:
        return self._updating.locked()

    def ready(self) -> bool:
        """True when every dataset key is present."""
        return not self.has_expired()

    def has_expired(self) -> bool:
        """True when any dataset key is missing."""
        store = self.store
        return not all(store.exists(ds.key) for ds in self.datasets)

    def refresh(self, ttl: Optional[int] = None) -> bool:
        """Fetch all datasets when the cache is not ready.

        Returns ``True`` after a full refresh and ``False`` when the cache was
        already filled. Raises :class:`RefreshInProgress` if another refresh
        is running and :class:`RemoteFetchError` if a fetch fails; datasets
        stored earlier in the same refresh are kept.
        """
        expiry = self.ttl if ttl is None else ttl
        store = self.store
        if self.updating:
            raise RefreshInProgress("An update is already in progress")
        if self.ready():
            return False
        with self._refresh_guard():
            # another caller may have filled the cache before we got the guard
            if self.ready():
                return False
            with self._store_lock():
                self._fill(store, expiry)
            return True

    def _fill(self, store, expiry: int) -> None:
        log.info("Refreshing poe.watch datasets (ttl=%ss)", expiry)
        for ds in self.datasets:
            raw_response = self.client.request(ds.url)
            store.set(ds.key, raw_response)
            store.expire(ds.key, expiry)
            log.debug("Stored %s (%d bytes) under %s", ds.name, len(raw_response), ds.key)
        log.info("poe.watch datasets refreshed")

    @contextmanager
    def _refresh_guard(self) -> Iterator[None]:
        if not self._updating.acquire(blocking=False):
            raise RefreshInProgress("An update is already in progress")
        try:
            yield
        finally:
            self._updating.release()

    @contextmanager
    def _store_lock(self) -> Iterator[None]:
        if not self.distributed_lock:
            yield
            return
        if not self.store.acquire_lock(self.lock_key, self.lock_ttl):
            raise RefreshInProgress("An update is already in progress in another process")
        try:
            yield
        finally:
            self.store.release_lock(self.lock_key)

    def fetch_dataset(self, name: str) -> Optional[Any]:
        """Parsed JSON of a cached dataset, or ``None`` when it is not cached."""
        data = self.store.get(self.redis_key(name))
        return json.loads(data) if data else None

    def items(self) -> List[Dict[str, Any]]:
        return self.fetch_dataset("item_data") or []

    def categories(self) -> List[Dict[str, Any]]:
        return self.fetch_dataset("categories") or []

    def leagues(self) -> List[Dict[str, Any]]:
        return self.fetch_dataset("leagues") or []

    def clear(self) -> None:
        """Drop every dataset key from the store."""
        store = self.store
        for ds in self.datasets:
            store.delete(ds.key)
        log.info("Cleared poe.watch datasets")

    def memory_footprint(self) -> Dict[str, float]:
        """Size in kilobytes of each cached dataset; missing datasets are left out."""
        store = self.store
        footprint: Dict[str, float] = {}
        for ds in self.datasets:
            if not store.exists(ds.key):
                continue
            size = store.size_of(ds.key)
            if size is not None:
                footprint[ds.name] = size / 1024.0
        return footprint

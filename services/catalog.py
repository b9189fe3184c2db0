"""Wire the store, client, refresh controller and collections together."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from core.errors import ConfigurationError
from datasources.poewatch import PoeWatchClient
from engine.config import ConfigManager
from logging_config import configure_logging
from models import Category, Item, League
from services.cache_store import MemoryStore, RedisStore
from services.query import Collection
from services.refresh import CacheRefreshController

log = logging.getLogger(__name__)


def build_store(cache_config: Dict[str, Any]):
    backend = cache_config.get("backend", "memory")
    if backend == "memory":
        return MemoryStore()
    if backend == "redis":
        url = cache_config.get("redis_url")
        if not url:
            raise ConfigurationError("cache.redis_url must be set for the redis backend")
        log.info("Using redis cache store at %s", url)
        return RedisStore.from_url(url)
    raise ConfigurationError(f"Unknown cache backend: {backend!r}")


class Catalog:
    """Entry point: ``catalog.items``, ``catalog.leagues`` and ``catalog.categories``."""

    def __init__(self, controller: CacheRefreshController):
        self.controller = controller
        self.items: Collection[Item] = Collection(Item, controller)
        self.leagues: Collection[League] = Collection(League, controller)
        self.categories: Collection[Category] = Collection(Category, controller)

    @classmethod
    def from_config(
        cls,
        config: Union[ConfigManager, Dict[str, Any], None] = None,
        store=None,
        client: Optional[PoeWatchClient] = None,
        setup_logging: bool = False,
    ) -> "Catalog":
        if config is None:
            config = ConfigManager()
        if isinstance(config, ConfigManager):
            errors = config.validate_config()
            if errors:
                raise ConfigurationError("Invalid configuration: " + "; ".join(errors))
            config = config.get_config()
        defaults = ConfigManager().get_default_config()
        if setup_logging:
            configure_logging(config.get("logging", {}).get("level", "INFO"))
        cache_config = {**defaults["cache"], **config.get("cache", {})}

        if store is None:
            store = build_store(cache_config)
        if client is None:
            client = PoeWatchClient(config)
        controller = CacheRefreshController(
            store,
            client,
            ttl=int(cache_config["ttl_seconds"]),
            key_prefix=cache_config["key_prefix"],
            distributed_lock=bool(cache_config["distributed_lock"]),
            lock_ttl=int(cache_config["lock_ttl_seconds"]),
        )
        return cls(controller)

    def refresh(self, ttl: Optional[int] = None) -> bool:
        return self.controller.refresh(ttl)

    def reset(self) -> None:
        """Clear the cached datasets and the memoized entities."""
        self.controller.clear()
        for collection in (self.items, self.leagues, self.categories):
            collection.reset()

"""Data source clients for the poe.watch cache."""

# Delay heavy imports to avoid circular dependencies
__all__ = ["PoeWatchClient", "RemoteFetchError"]

def __getattr__(name):  # pragma: no cover - simple lazy loader
    if name in __all__:
        from .poewatch import PoeWatchClient, RemoteFetchError
        globals().update({"PoeWatchClient": PoeWatchClient, "RemoteFetchError": RemoteFetchError})
        return globals()[name]
    raise AttributeError(name)

"""Exception hierarchy shared by the cache, client and query layers."""

from __future__ import annotations

from typing import Optional


class PoeWatchError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PoeWatchError):
    """The cache store (or another collaborator) has not been configured."""


class RefreshInProgress(PoeWatchError):
    """A bulk refresh is already running; retry later or read what is cached."""


class RemoteFetchError(PoeWatchError):
    """Network failure or non-success status from poe.watch."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


__all__ = [
    "PoeWatchError",
    "ConfigurationError",
    "RefreshInProgress",
    "RemoteFetchError",
]

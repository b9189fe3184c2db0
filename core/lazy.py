from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_UNSET = object()


class LazyCell(Generic[T]):
    """Compute-once, read-many holder.

    ``get_or_set`` runs ``factory`` at most once per successful fill. When
    ``keep`` rejects the result the cell stays empty and the next call
    computes again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._value = _UNSET

    @property
    def is_set(self) -> bool:
        return self._value is not _UNSET

    def peek(self) -> Optional[T]:
        value = self._value
        return None if value is _UNSET else value

    def get_or_set(self, factory: Callable[[], T], keep: Callable[[T], bool] = lambda v: True) -> T:
        value = self._value
        if value is not _UNSET:
            return value
        with self._lock:
            if self._value is not _UNSET:
                return self._value
            value = factory()
            if keep(value):
                self._value = value
            return value

    def reset(self) -> None:
        with self._lock:
            self._value = _UNSET

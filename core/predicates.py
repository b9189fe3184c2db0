"""Attribute predicates used by ``where``/``find``.

A predicate map holds field name -> expected value. Plain values become
:class:`Exact`, compiled regular expressions become :class:`Pattern`; both
can also be passed explicitly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Tuple, Union


@dataclass(frozen=True)
class Exact:
    value: Any

    def matches(self, actual: Any) -> bool:
        # True == 1 in Python; a bool only equals a bool
        if isinstance(actual, bool) != isinstance(self.value, bool):
            return False
        return actual == self.value


@dataclass(frozen=True)
class Pattern:
    regex: "re.Pattern[str]"

    @classmethod
    def of(cls, pattern: Union[str, "re.Pattern[str]"], flags: int = 0) -> "Pattern":
        if isinstance(pattern, re.Pattern):
            return cls(pattern)
        return cls(re.compile(pattern, flags))

    def matches(self, actual: Any) -> bool:
        if actual is None:
            return False
        return self.regex.search(str(actual)) is not None


Predicate = Union[Exact, Pattern]


def as_predicate(expected: Any) -> Predicate:
    if isinstance(expected, (Exact, Pattern)):
        return expected
    if isinstance(expected, re.Pattern):
        return Pattern(expected)
    return Exact(expected)


def compile_predicates(params: Mapping[str, Any] | None) -> List[Tuple[str, Predicate]]:
    return [(key, as_predicate(value)) for key, value in (params or {}).items()]


def matches_all(
    predicates: List[Tuple[str, Predicate]], lookup: Callable[[str], Any]
) -> bool:
    """True when every ``(field, predicate)`` pair holds for ``lookup(field)``."""
    return all(pred.matches(lookup(key)) for key, pred in predicates)


__all__ = ["Exact", "Pattern", "Predicate", "as_predicate", "compile_predicates", "matches_all"]

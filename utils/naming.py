"""Field name normalisation for raw poe.watch records."""

from __future__ import annotations

import re
from functools import lru_cache

_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL = re.compile(r"([a-z\d])([A-Z])")
_SEPARATORS = re.compile(r"[-\s.]+")


@lru_cache(maxsize=1024)
def snakify(name: str) -> str:
    """Convert ``flavourText`` / ``FlavourText`` / ``flavour-text`` to ``flavour_text``.

    Already snake-cased names come back unchanged.
    """
    out = _ACRONYM.sub(r"\1_\2", str(name))
    out = _CAMEL.sub(r"\1_\2", out)
    out = _SEPARATORS.sub("_", out)
    return out.lower()


__all__ = ["snakify"]

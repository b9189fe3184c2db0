"""Shared constants for the poe.watch cache."""

from __future__ import annotations

API_BASE = "https://api.poe.watch"

# Bulk endpoint paths, keyed by the dataset name used in cache keys.
BULK_APIS = {
    "item_data": "itemdata",
    "categories": "categories",
    "leagues": "leagues",
}

# Per-item detail endpoint path; takes ``?id=<item id>``.
ITEM_API = "item"

DEFAULT_EXPIRY = 45 * 60  # 45 minutes

KEY_PREFIX = "poe_watch_"

# (connect, read) seconds
DEFAULT_TIMEOUT = (5, 30)

__all__ = ["API_BASE", "BULK_APIS", "ITEM_API", "DEFAULT_EXPIRY", "KEY_PREFIX", "DEFAULT_TIMEOUT"]

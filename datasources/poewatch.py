"""
poe.watch API client.

Fetches the bulk datasets (item data, categories, leagues) and per-item price
detail. Every call is a plain GET with a bounded timeout; connection failures
and non-2xx responses surface as :class:`RemoteFetchError`.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple, Union

import requests

from core.errors import RemoteFetchError
from datasources.http import DEFAULT_USER_AGENT, new_session
from utils.constants import API_BASE, BULK_APIS, DEFAULT_TIMEOUT, ITEM_API


class PoeWatchClient:
    """Client for the poe.watch API."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, session: Optional[requests.Session] = None):
        """Initialize the client with the ``api`` section of the configuration."""
        self.config = config or {}
        self.logger = logging.getLogger(__name__)

        api_config = self.config.get('api', {})
        self.base_url = api_config.get('base_url', API_BASE).rstrip('/')
        self.timeout = _as_timeout(api_config.get('timeout_seconds', DEFAULT_TIMEOUT))

        if session is None:
            session = new_session(
                retries=int(api_config.get('retries', 0)),
                user_agent=api_config.get("user_agent", DEFAULT_USER_AGENT),
            )
        self.session = session

    def bulk_url(self, name: str) -> str:
        """Return the bulk endpoint for a dataset name (``item_data`` -> ``/itemdata``)."""
        return f"{self.base_url}/{BULK_APIS.get(name, name)}"

    @property
    def item_url(self) -> str:
        return f"{self.base_url}/{ITEM_API}"

    def request(self, url: str, params: Optional[Dict[str, Any]] = None,
                parse: bool = False) -> Union[str, Any]:
        """GET ``url`` and return the body as text, or parsed JSON when ``parse``."""
        try:
            self.logger.debug(f"GET {url} params={params}")
            response = self.session.get(url, params=params or None, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request to {url} failed: {e}")
            raise RemoteFetchError(f"Couldn't connect to poe.watch: {e}", url=url) from e

        status = response.status_code
        if not 200 <= status < 300:
            self.logger.error(f"poe.watch returned HTTP {status} for {url}")
            raise RemoteFetchError(
                f"Couldn't connect to poe.watch (HTTP {status})", url=url, status_code=status
            )

        if not parse:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            self.logger.error(f"Failed to parse JSON response from {url}: {e}")
            raise RemoteFetchError(f"Invalid JSON response: {e}", url=url, status_code=status) from e

    def fetch_item(self, item_id: Any) -> Dict[str, Any]:
        """Return the parsed detail document for one item."""
        data = self.request(self.item_url, {"id": item_id}, parse=True)
        if not isinstance(data, dict):
            raise RemoteFetchError(
                f"Unexpected item payload for id={item_id}: {json.dumps(data)[:80]}",
                url=self.item_url,
            )
        return data

    def close(self):
        """Close the HTTP session."""
        if self.session is not None and hasattr(self.session, "close"):
            self.session.close()


def _as_timeout(value: Any) -> Tuple[float, float]:
    if isinstance(value, (int, float)):
        return (float(value), float(value))
    connect, read = value
    return (float(connect), float(read))


__all__ = ["PoeWatchClient", "RemoteFetchError"]

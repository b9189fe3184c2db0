import json
import logging
import types
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import pytest
from requests import exceptions as rqexc

from core.errors import RemoteFetchError
from datasources.http import new_session
from datasources.poewatch import PoeWatchClient


class DummyResp:
    def __init__(self, status, text=""):
        self.status_code = status
        self.text = text

    def json(self):
        return json.loads(self.text)


def make_client(resp=None, exc=None, config=None):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        if exc:
            raise exc
        return resp

    return PoeWatchClient(config or {}, session=types.SimpleNamespace(get=fake_get)), calls


def test_request_returns_raw_body():
    client, calls = make_client(DummyResp(200, '[{"id": 1}]'))
    assert client.request(client.bulk_url("item_data")) == '[{"id": 1}]'
    assert calls == [("https://api.poe.watch/itemdata", None, (5.0, 30.0))]


def test_request_parses_when_asked():
    client, calls = make_client(DummyResp(200, '{"leagues": []}'))
    assert client.request(client.item_url, {"id": 7}, parse=True) == {"leagues": []}
    assert calls[0][:2] == ("https://api.poe.watch/item", {"id": 7})


def test_non_success_status_is_remote_error(caplog):
    client, _ = make_client(DummyResp(404, "not found"))
    with caplog.at_level(logging.ERROR):
        with pytest.raises(RemoteFetchError) as exc:
            client.request(client.bulk_url("leagues"))
    assert exc.value.status_code == 404
    assert exc.value.url == "https://api.poe.watch/leagues"
    assert "HTTP 404" in caplog.text


def test_connection_failure_is_remote_error():
    client, _ = make_client(exc=rqexc.ConnectionError("boom"))
    with pytest.raises(RemoteFetchError) as exc:
        client.request(client.bulk_url("leagues"))
    assert exc.value.status_code is None


def test_timeout_is_remote_error():
    client, _ = make_client(exc=rqexc.Timeout("slow"))
    with pytest.raises(RemoteFetchError):
        client.request(client.bulk_url("categories"))


def test_invalid_json_is_remote_error():
    client, _ = make_client(DummyResp(200, "<html>"))
    with pytest.raises(RemoteFetchError):
        client.fetch_item(1)


def test_fetch_item_requires_object():
    client, _ = make_client(DummyResp(200, "[]"))
    with pytest.raises(RemoteFetchError):
        client.fetch_item(1)


def test_config_overrides_base_url_and_timeout():
    config = {"api": {"base_url": "https://example.test/", "timeout_seconds": 3}}
    client, calls = make_client(DummyResp(200, "[]"), config=config)
    client.request(client.bulk_url("leagues"))
    assert calls == [("https://example.test/leagues", None, (3.0, 3.0))]


def test_session_sends_json_headers():
    session = new_session()
    assert session.headers["Content-Type"] == "application/json"
    assert session.headers["Accept"] == "application/json"
    adapter = session.get_adapter("https://api.poe.watch")
    assert adapter.max_retries.total == 0

import json
import re
import types
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import pytest

from core.predicates import Exact, Pattern
from datasources.poewatch import PoeWatchClient
from models import Category, Item, League
from services.cache_store import MemoryStore
from services.query import Collection
from services.refresh import CacheRefreshController

LEAGUES = [
    {"id": 1, "name": "Standard", "display": "Standard", "hardcore": False, "active": True},
    {"id": 2, "name": "Hardcore", "display": "Hardcore", "hardcore": True, "active": True},
    {"id": 3, "name": "Metamorph", "display": "Metamorph", "hardcore": False, "active": True},
    {"id": 4, "name": "Hardcore Metamorph", "display": "HC Metamorph", "hardcore": True, "active": False},
]


def no_network(url, params=None, timeout=None):
    raise AssertionError(f"unexpected request to {url}")


def seeded(leagues=LEAGUES, items=(), categories=()):
    store = MemoryStore()
    store.set("poe_watch_leagues", json.dumps(list(leagues)))
    store.set("poe_watch_item_data", json.dumps(list(items)))
    store.set("poe_watch_categories", json.dumps(list(categories)))
    client = PoeWatchClient({}, session=types.SimpleNamespace(get=no_network))
    return CacheRefreshController(store, client), store


def test_all_materializes_in_source_order():
    controller, _ = seeded()
    leagues = Collection(League, controller).all()
    assert [l.name for l in leagues] == ["Standard", "Hardcore", "Metamorph", "Hardcore Metamorph"]
    assert all(isinstance(l, League) for l in leagues)


def test_all_is_memoized():
    controller, store = seeded()
    collection = Collection(League, controller)
    first = collection.all()
    store.set("poe_watch_leagues", json.dumps([{"id": 9, "name": "Other"}]))
    second = collection.all()
    assert [l.id for l in second] == [l.id for l in first]
    assert second[0] is first[0]

    collection.reset()
    assert [l.name for l in collection.all()] == ["Other"]


def test_where_combines_predicates_with_and():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    result = leagues.where({"hardcore": True, "active": True})
    assert [l.name for l in result] == ["Hardcore"]


def test_where_without_predicates_returns_everything():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    assert leagues.where({}) == leagues.all()
    assert leagues.where() == leagues.all()


def test_pattern_versus_exact():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    assert leagues.find({"name": re.compile("meta", re.I)}).name == "Metamorph"
    assert leagues.find({"name": "metamorph"}) is None
    assert leagues.find({"name": "Metamorph"}).id == 3
    assert [l.id for l in leagues.where({"name": re.compile("Metamorph$")})] == [3, 4]


def test_explicit_predicate_objects():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    assert leagues.find({"id": Exact(2)}).name == "Hardcore"
    assert leagues.find({"display": Pattern.of("^HC")}).id == 4


def test_pattern_matches_text_form_of_numbers():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    assert [l.name for l in leagues.where({"id": re.compile("^[34]$")})] == ["Metamorph", "Hardcore Metamorph"]


def test_missing_field_never_matches_pattern():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    assert leagues.where({"nonexistent": re.compile(".*")}) == []
    assert len(leagues.where({"nonexistent": None})) == len(LEAGUES)


def test_predicate_keys_accept_wire_names():
    items = [{"id": 1, "name": "Chaos Orb", "stackSize": 10}, {"id": 2, "name": "Exalted Orb", "stackSize": 20}]
    controller, _ = seeded(items=items)
    collection = Collection(Item, controller)
    assert collection.find({"stackSize": 20}).name == "Exalted Orb"
    assert collection.find({"stack_size": 10}).name == "Chaos Orb"


def test_boolean_predicate_name():
    controller, _ = seeded()
    leagues = Collection(League, controller)
    assert [l.id for l in leagues.where({"is_hardcore": True})] == [2, 4]


def test_empty_dataset_is_tolerated():
    controller, _ = seeded(leagues=[])
    leagues = Collection(League, controller)
    assert leagues.all() == []
    assert leagues.count() == 0
    assert leagues.find({"name": "Standard"}) is None


def test_count_without_materializing(monkeypatch):
    controller, _ = seeded()
    leagues = Collection(League, controller)
    monkeypatch.setattr(leagues, "_materialize", lambda: pytest.fail("materialized"))
    assert leagues.count() == 4


def test_count_uses_memoized_entities():
    controller, store = seeded()
    leagues = Collection(League, controller)
    leagues.all()
    store.set("poe_watch_leagues", "[]")
    assert leagues.count() == 4


def test_queries_refresh_first():
    controller, store = seeded()
    store.delete("poe_watch_categories")
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append(url)
        return types.SimpleNamespace(status_code=200, text=json.dumps([{"id": 5, "name": "gem"}]))

    controller.client.session = types.SimpleNamespace(get=fake_get)
    categories = Collection(Category, controller)
    assert [c.name for c in categories.all()] == ["gem"]
    assert len(calls) == 3


def test_first():
    controller, _ = seeded()
    assert Collection(League, controller).first().name == "Standard"


def test_boolean_fields_do_not_match_integers():
    controller, _ = seeded(leagues=[{"name": "A", "hardcore": True}, {"name": "B", "hardcore": False}])
    leagues = Collection(League, controller)
    assert leagues.where({"hardcore": 1}) == []
    assert leagues.where({"hardcore": 0}) == []
    assert [l.name for l in leagues.where({"hardcore": True})] == ["A"]


def test_missing_schema_field_matches_its_default():
    controller, _ = seeded(leagues=[{"id": 1, "name": "A"}, {"id": 2, "name": "B", "hardcore": True}])
    leagues = Collection(League, controller)
    assert [l.name for l in leagues.where({"hardcore": False})] == ["A"]
    assert [l.name for l in leagues.where({"is_hardcore": False})] == ["A"]

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from rebridge import Rebridge
from rebridge.stores import MemoryHashStore


@pytest.fixture
def client(db):
    import app as app_module

    return TestClient(app_module.create_app(db))


def test_set_and_read_nested_fields(client, stored):
    r = client.get("/documents/foo/bar")
    assert r.status_code == 200
    assert r.json() == {"value": None}

    r = client.put("/documents/foo/bar/baz", json={"value": {"n": 1}})
    assert r.status_code == 200
    assert r.json() == {"value": {"n": 1}}
    assert stored("foo") == {"bar": {"baz": {"n": 1}}}

    assert client.get("/documents/foo/bar/baz/n").json() == {"value": 1}
    assert client.get("/documents/foo").json() == {"value": {"bar": {"baz": {"n": 1}}}}


def test_set_whole_root_document(client, stored):
    r = client.put("/documents/config", json={"value": [1, 2]})
    assert r.status_code == 200
    assert stored("config") == [1, 2]


def test_delete_field(client, stored):
    client.put("/documents/foo/bar", json={"value": 1})

    r = client.delete("/documents/foo/bar")
    assert r.status_code == 200
    assert r.json() == {"deleted": True}
    assert stored("foo") == {}

    assert client.delete("/documents/foo/bar").json() == {"deleted": False}


def test_push_and_pop(client, stored):
    assert client.post("/push/list", json={"value": 1}).json() == {"length": 1}
    assert client.post("/push/list", json={"value": 2}).json() == {"length": 2}
    assert client.post("/pop/list").json() == {"value": 2}
    assert stored("list") == [1]

    assert client.post("/push/todo/items", json={"value": "x"}).json() == {"length": 1}
    assert stored("todo") == {"items": ["x"]}


def test_reserved_names_are_plain_path_segments(client, stored):
    r = client.put("/documents/words/set", json={"value": "assign"})
    assert r.status_code == 200
    assert stored("words") == {"set": "assign"}


def test_error_mapping(client, store):
    assert client.put("/documents/set", json={"value": 1}).status_code == 400

    client.put("/documents/doc/n", json={"value": 1})
    r = client.post("/push/doc/n", json={"value": 2})
    assert r.status_code == 409

    assert client.post("/pop/empty").status_code == 409

    asyncio.run(store.hset("rebridge", "broken", b"{oops"))
    assert client.get("/documents/broken").status_code == 500

    assert client.put("/documents/foo", json={}).status_code == 422


def test_default_app_builds_from_settings(clean_env):
    import app as app_module

    application = app_module.create_app()
    assert isinstance(application.state.rebridge, Rebridge)


class _UnreachableStore(MemoryHashStore):
    async def hget(self, namespace, key):
        raise ConnectionError("Error 111 connecting to localhost:6379")

    async def hset(self, namespace, key, value):
        raise ConnectionError("Error 111 connecting to localhost:6379")


class _AlwaysConflictingStore(MemoryHashStore):
    async def hset_if_version(self, namespace, key, value, version):
        return False


class _ClosableStore(MemoryHashStore):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_unreachable_store_is_503():
    import app as app_module

    client = TestClient(app_module.create_app(Rebridge(_UnreachableStore())))
    assert client.get("/documents/foo").status_code == 503
    assert client.put("/documents/foo/bar", json={"value": 1}).status_code == 503


def test_write_conflict_is_409():
    import app as app_module

    db = Rebridge(_AlwaysConflictingStore(), optimistic=True, max_retries=0)
    client = TestClient(app_module.create_app(db))
    r = client.post("/push/list", json={"value": 1})
    assert r.status_code == 409


def test_app_closes_the_store_it_built(clean_env, monkeypatch):
    import app as app_module

    store = _ClosableStore()
    monkeypatch.setattr(app_module, "create_store", lambda settings: store)

    with TestClient(app_module.create_app()) as client:
        assert client.put("/documents/foo", json={"value": 1}).status_code == 200
        assert store.closed is False
    assert store.closed is True


def test_app_leaves_injected_stores_open():
    import app as app_module

    store = _ClosableStore()
    with TestClient(app_module.create_app(Rebridge(store))):
        pass
    assert store.closed is False

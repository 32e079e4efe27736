"""Tests for the key-value storage backends."""

import pytest

from storage import LocalStorage, MemoryStorage


@pytest.fixture(params=["memory", "local"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryStorage()
    return LocalStorage(str(tmp_path / "kv"))


def test_get_missing_key_returns_none(backend):
    assert backend.get("tasks") is None
    assert "tasks" not in backend


def test_set_replaces_and_remove_deletes(backend):
    backend.set("notes", "first")
    backend.set("notes", "second")
    assert backend.get("notes") == "second"
    assert "notes" in backend

    backend.remove("notes")
    assert backend.get("notes") is None
    # Removing twice is harmless.
    backend.remove("notes")


def test_keys_lists_stored_entries(backend):
    backend.set("tasks", "[]")
    backend.set("tasks.version", "1")
    assert sorted(backend.keys()) == ["tasks", "tasks.version"]


def test_local_storage_survives_reopen(tmp_path):
    directory = str(tmp_path / "kv")
    LocalStorage(directory).set("userProfile", '{"name": "Ada"}')

    reopened = LocalStorage(directory)

    assert reopened.get("userProfile") == '{"name": "Ada"}'


def test_local_storage_rejects_unusable_key(tmp_path):
    store = LocalStorage(str(tmp_path / "kv"))
    with pytest.raises(ValueError):
        store.set("../", "x")


def test_local_storage_leaves_no_temp_files(tmp_path):
    directory = tmp_path / "kv"
    store = LocalStorage(str(directory))
    store.set("tasks", "[]")
    assert [p.name for p in directory.iterdir()] == ["tasks.json"]

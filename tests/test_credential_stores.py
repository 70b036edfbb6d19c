"""Tests for the JSON-file and in-memory credential stores."""

import json
import os

import pytest

from adapters.local.json_file_credential_store import JsonFileCredentialStore
from adapters.local.memory_credential_store import InMemoryCredentialStore
from domain.models import Credential

pytestmark = pytest.mark.unit


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryCredentialStore()
    return JsonFileCredentialStore(str(tmp_path / "keys.json"))


class TestStoreContract:
    def test_starts_empty(self, any_store):
        assert any_store.list_all() == []

    def test_add_exists_list(self, any_store):
        any_store.add("a", "secret-a")
        any_store.add("b", "secret-b")

        assert any_store.exists("a")
        assert not any_store.exists("zzz")
        assert any_store.list_all() == [
            Credential(id="a", secret="secret-a"),
            Credential(id="b", secret="secret-b"),
        ]

    def test_delete(self, any_store):
        any_store.add("a", "secret-a")
        any_store.delete("a")

        assert not any_store.exists("a")
        assert any_store.list_all() == []

    def test_delete_unknown_is_noop(self, any_store):
        any_store.delete("never-added")
        assert any_store.list_all() == []


class TestJsonFileCredentialStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "keys.json"
        JsonFileCredentialStore(str(path)).add("a", "secret-a")

        reopened = JsonFileCredentialStore(str(path))
        assert reopened.list_all() == [Credential(id="a", secret="secret-a")]

    def test_file_layout(self, tmp_path):
        path = tmp_path / "keys.json"
        store = JsonFileCredentialStore(str(path))
        store.add("a", "secret-a")

        assert json.loads(path.read_text()) == {"keys": [{"id": "a", "key": "secret-a"}]}

    def test_creates_missing_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "keys.json"
        JsonFileCredentialStore(str(path)).add("a", "secret-a")

        assert path.exists()

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text("{not json")

        assert JsonFileCredentialStore(str(path)).list_all() == []

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileCredentialStore(str(tmp_path / "keys.json"))
        store.add("a", "secret-a")
        store.delete("a")

        assert [p.name for p in tmp_path.iterdir()] == ["keys.json"]

    def test_skips_entries_with_non_string_fields(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({"keys": [
            {"id": "bad", "key": 12345678901},
            {"id": 7, "key": "secret-seven"},
            {"id": "good", "key": "secret-good"},
        ]}))

        assert JsonFileCredentialStore(str(path)).list_all() == [Credential(id="good", secret="secret-good")]

    def test_failed_write_leaves_add_unapplied(self, tmp_path, monkeypatch):
        path = tmp_path / "keys.json"
        store = JsonFileCredentialStore(str(path))

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail_replace)
        with pytest.raises(OSError):
            store.add("a", "secret-a")

        assert not store.exists("a")
        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_failed_write_leaves_delete_unapplied(self, tmp_path, monkeypatch):
        path = tmp_path / "keys.json"
        store = JsonFileCredentialStore(str(path))
        store.add("a", "secret-a")

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail_replace)
        with pytest.raises(OSError):
            store.delete("a")

        assert store.exists("a")
        assert json.loads(path.read_text()) == {"keys": [{"id": "a", "key": "secret-a"}]}

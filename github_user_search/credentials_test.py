"""Unit tests for credential stores."""

import json
from unittest.mock import MagicMock

from .credentials import TOKEN_KEY, FileCredentialStore, MemoryCredentialStore, default_store


def describe_MemoryCredentialStore():
    def it_gets_and_sets():
        store = MemoryCredentialStore({TOKEN_KEY: "abc"})
        assert store.get(TOKEN_KEY) == "abc"
        store.set(TOKEN_KEY, "")
        assert store.get(TOKEN_KEY) == ""
        assert store.get("missing") is None


def describe_FileCredentialStore():
    def it_returns_none_when_file_is_missing(tmp_path):
        assert FileCredentialStore(tmp_path / "token.json").get(TOKEN_KEY) is None

    def it_persists_values(tmp_path):
        path = tmp_path / "nested" / "token.json"
        FileCredentialStore(path).set(TOKEN_KEY, "secret")

        assert json.loads(path.read_text()) == {TOKEN_KEY: "secret"}
        assert FileCredentialStore(path).get(TOKEN_KEY) == "secret"

    def it_ignores_corrupt_files(tmp_path):
        path = tmp_path / "token.json"
        path.write_text("{not json")
        store = FileCredentialStore(path)
        assert store.get(TOKEN_KEY) is None
        store.set(TOKEN_KEY, "fresh")
        assert store.get(TOKEN_KEY) == "fresh"


def describe_default_store():
    def it_seeds_memory_store_from_settings():
        store = default_store(MagicMock(token_file=None, github_token="env-token"))
        assert isinstance(store, MemoryCredentialStore)
        assert store.get(TOKEN_KEY) == "env-token"

    def it_uses_token_file_when_configured(tmp_path):
        path = tmp_path / "token.json"
        store = default_store(MagicMock(token_file=path, github_token="env-token"))
        assert isinstance(store, FileCredentialStore)
        assert store.get(TOKEN_KEY) == "env-token"

    def it_does_not_overwrite_a_cleared_token(tmp_path):
        path = tmp_path / "token.json"
        path.write_text(json.dumps({TOKEN_KEY: ""}))
        store = default_store(MagicMock(token_file=path, github_token="env-token"))
        assert store.get(TOKEN_KEY) == ""

"""Key/value credential stores for the GitHub access token."""

import json
from pathlib import Path
from typing import Protocol

TOKEN_KEY = "github_token"


class CredentialStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryCredentialStore:
    """In-process credential store."""

    def __init__(self, values: dict | None = None):
        self._values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileCredentialStore:
    """Credential store backed by a JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f)


def default_store(settings) -> CredentialStore:
    """File store if ``token_file`` is configured, else memory seeded from settings."""
    if settings.token_file:
        store = FileCredentialStore(settings.token_file)
        if settings.github_token and store.get(TOKEN_KEY) is None:
            store.set(TOKEN_KEY, settings.github_token)
        return store
    values = {TOKEN_KEY: settings.github_token} if settings.github_token else {}
    return MemoryCredentialStore(values)

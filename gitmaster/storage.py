"""Keyed persistence for repository snapshots.

Nothing in here raises to the caller: bad keys, oversized snapshots, corrupt
files and backend failures are logged and turned into ``False``/``None``.
"""
import json
import re
from pathlib import Path
from typing import Any, Mapping, Protocol

from loguru import logger
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, ValidationError

from .config import Settings, get_settings
from .models import RepoState

PERSISTED_FIELDS = (
    "commits",
    "branches",
    "tags",
    "HEAD",
    "stagingArea",
    "workingDirectory",
    "commandHistory",
    "lastOutput",
    "colorIndex",
)

MAX_TEXT_LENGTH = 10000

_KEY_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")


class StoredCommit(BaseModel):
    """Minimum shape a loaded commit must have before it is trusted."""

    model_config = ConfigDict(extra="allow")

    hash: StrictStr
    message: StrictStr
    author: StrictStr
    timestamp: StrictInt | StrictFloat


class Backend(Protocol):
    def read(self, key: str) -> str | None: ...
    def write(self, key: str, data: str) -> None: ...
    def delete(self, key: str) -> None: ...


class MemoryBackend:
    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self.items.get(key)

    def write(self, key: str, data: str) -> None:
        self.items[key] = data

    def delete(self, key: str) -> None:
        self.items.pop(key, None)


class DirectoryBackend:
    """One JSON file per key inside ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text()

    def write(self, key: str, data: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(data)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def sanitize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    value = re.sub(r"[<>]", "", value)
    value = re.sub(r"javascript:", "", value, flags=re.IGNORECASE)
    value = re.sub(r"on\w+=", "", value, flags=re.IGNORECASE)
    return value[:MAX_TEXT_LENGTH]


def is_valid_key(key: Any) -> bool:
    return isinstance(key, str) and 0 < len(key) < 100 and _KEY_PATTERN.fullmatch(key) is not None


class ScenarioStore:
    def __init__(self, backend: Backend | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.backend = backend if backend is not None else MemoryBackend()

    def _storage_key(self, key: str) -> str:
        return f"{self.settings.STORAGE_PREFIX}{key}"

    def save(self, key: str, snapshot: Mapping[str, Any] | RepoState) -> bool:
        if not is_valid_key(key):
            logger.error("Invalid scenario key: {!r}", key)
            return False
        if isinstance(snapshot, RepoState):
            snapshot = snapshot.model_dump(mode="json")
        to_save = {field: snapshot[field] for field in PERSISTED_FIELDS if field in snapshot}
        to_save["lastOutput"] = sanitize_string(snapshot.get("lastOutput"))
        try:
            serialized = json.dumps(to_save)
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize scenario {}: {}", key, e)
            return False
        if len(serialized) > self.settings.MAX_SNAPSHOT_SIZE:
            logger.error("Scenario {} too large to save ({} bytes)", key, len(serialized))
            return False
        try:
            self.backend.write(self._storage_key(key), serialized)
        except OSError as e:
            logger.error("Failed to save scenario {}: {}", key, e)
            return False
        return True

    def load(self, key: str) -> dict[str, Any] | None:
        if not is_valid_key(key):
            logger.error("Invalid scenario key: {!r}", key)
            return None
        try:
            saved = self.backend.read(self._storage_key(key))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to load scenario {}: {}", key, e)
            return None
        if not saved:
            return None
        if not (saved.startswith("{") and saved.endswith("}")):
            logger.error("Invalid storage format for scenario {}", key)
            return None
        try:
            parsed = json.loads(saved)
        except json.JSONDecodeError as e:
            logger.error("Corrupt scenario {}: {}", key, e)
            return None

        commits = parsed.get("commits")
        if isinstance(commits, dict):
            for commit_key, commit in commits.items():
                try:
                    StoredCommit.model_validate(commit)
                except ValidationError:
                    logger.error("Invalid commit data in scenario {}: {}", key, commit_key)
                    return None
        return parsed

    def clear(self, key: str) -> None:
        if not is_valid_key(key):
            logger.error("Invalid scenario key: {!r}", key)
            return
        try:
            self.backend.delete(self._storage_key(key))
        except OSError as e:
            logger.error("Failed to clear scenario {}: {}", key, e)

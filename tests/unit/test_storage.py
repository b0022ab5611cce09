# Unit tests for gitmaster/storage.py

import json

import pytest

from gitmaster.config import Settings
from gitmaster.storage import DirectoryBackend, ScenarioStore, is_valid_key, sanitize_string


class TestKeys:

    @pytest.mark.parametrize("key", ["level-1", "intro_2", "A"])
    def test_accepts_identifiers(self, key):
        assert is_valid_key(key)

    @pytest.mark.parametrize("key", ["", "../etc", "has space", "x" * 100, None, 42, "level1\n", "level1 "])
    def test_rejects_everything_else(self, key):
        assert not is_valid_key(key)

    def test_invalid_key_has_no_side_effects(self, store, repo_with_commit):
        assert store.save("bad key", repo_with_commit.snapshot()) is False
        assert store.backend.items == {}
        assert store.load("bad key") is None


class TestSanitize:

    def test_strips_markup_and_handlers(self):
        assert sanitize_string('<b onclick=alert(1)>hi</b> javascript:x') == "b alert(1)hi/b x"

    def test_truncates(self):
        assert len(sanitize_string("a" * 20000)) == 10000

    def test_non_string_becomes_empty(self):
        assert sanitize_string(None) == ""


class TestSave:

    def test_stores_under_prefixed_key(self, store, repo_with_commit):
        assert store.save("level-1", repo_with_commit.snapshot())
        assert list(store.backend.items) == ["gitmaster-level-level-1"]

    def test_sanitizes_last_output(self, store, repo_with_commit):
        snapshot = repo_with_commit.snapshot()
        snapshot["lastOutput"] = "<script>"
        store.save("level-1", snapshot)
        assert store.load("level-1")["lastOutput"] == "script"

    def test_rejects_oversized_snapshot(self, repo_with_commit, tmp_path):
        tiny = ScenarioStore(settings=Settings(MAX_SNAPSHOT_SIZE=100, STORAGE_DIR=tmp_path))
        assert tiny.save("level-1", repo_with_commit.snapshot()) is False
        assert tiny.backend.items == {}

    def test_accepts_repo_state(self, store, repo_with_commit):
        assert store.save("level-1", repo_with_commit.state)
        assert store.load("level-1") == repo_with_commit.snapshot()


class TestLoad:

    def test_round_trip(self, store, repo_with_commit):
        snapshot = repo_with_commit.snapshot()
        store.save("level-1", snapshot)
        assert store.load("level-1") == snapshot

    def test_missing_key(self, store):
        assert store.load("level-1") is None

    def test_corrupt_json(self, store):
        store.backend.items["gitmaster-level-level-1"] = "{not json}"
        assert store.load("level-1") is None

    def test_non_object_payload(self, store):
        store.backend.items["gitmaster-level-level-1"] = "invalid json"
        assert store.load("level-1") is None

    def test_rejects_commit_without_numeric_timestamp(self, store, repo_with_commit):
        snapshot = repo_with_commit.snapshot()
        snapshot["commits"]["c000001"]["timestamp"] = "yesterday"
        store.backend.items["gitmaster-level-level-1"] = json.dumps(snapshot)
        assert store.load("level-1") is None

    def test_rejects_commit_missing_author(self, store, repo_with_commit):
        snapshot = repo_with_commit.snapshot()
        del snapshot["commits"]["c000002"]["author"]
        store.backend.items["gitmaster-level-level-1"] = json.dumps(snapshot)
        assert store.load("level-1") is None


class TestClear:

    def test_removes_snapshot(self, store, repo_with_commit):
        store.save("level-1", repo_with_commit.snapshot())
        store.clear("level-1")
        assert store.load("level-1") is None

    def test_clear_missing_is_fine(self, store):
        store.clear("level-1")


class TestDirectoryBackend:

    def test_round_trip_on_disk(self, settings, repo_with_commit):
        store = ScenarioStore(DirectoryBackend(settings.STORAGE_DIR), settings)
        store.save("level-1", repo_with_commit.snapshot())
        assert (settings.STORAGE_DIR / "gitmaster-level-level-1.json").exists()
        assert store.load("level-1") == repo_with_commit.snapshot()
        store.clear("level-1")
        assert not (settings.STORAGE_DIR / "gitmaster-level-level-1.json").exists()

    def test_undecodable_file_loads_as_none(self, settings):
        store = ScenarioStore(DirectoryBackend(settings.STORAGE_DIR), settings)
        settings.STORAGE_DIR.mkdir(parents=True)
        (settings.STORAGE_DIR / "gitmaster-level-level-1.json").write_bytes(b'{"a": "\xff"}')
        assert store.load("level-1") is None

    def test_newline_key_writes_nothing(self, settings, repo_with_commit):
        store = ScenarioStore(DirectoryBackend(settings.STORAGE_DIR), settings)
        assert store.save("level1\n", repo_with_commit.snapshot()) is False
        assert not settings.STORAGE_DIR.exists()

    def test_unwritable_directory_is_logged(self, tmp_path, repo_with_commit, settings):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = ScenarioStore(DirectoryBackend(blocker / "sub"), settings)
        assert store.save("level-1", repo_with_commit.snapshot()) is False

# Shared pytest fixtures for gitmaster tests

import itertools

import pytest
from loguru import logger

from gitmaster.config import Settings
from gitmaster.repository import Repository
from gitmaster.storage import MemoryBackend, ScenarioStore


def sequential_hashes():
    # c000001, c000002, ... so assertions can name commits up front
    counter = itertools.count(1)
    return lambda: f"c{next(counter):06d}"


def ticking_clock(start=1_700_000_000_000, step=1000):
    counter = itertools.count()
    return lambda: start + step * next(counter)


@pytest.fixture
def settings(tmp_path):
    return Settings(STORAGE_DIR=tmp_path / "scenarios")


@pytest.fixture
def repo(settings):
    # Empty repository, `init` not run yet
    return Repository(settings, hash_factory=sequential_hashes(), clock=ticking_clock())


@pytest.fixture
def initialized_repo(repo):
    repo.init()
    return repo


@pytest.fixture
def repo_with_commit(initialized_repo):
    # main at c000002, whose parent is the root c000001
    initialized_repo.modify_file("README.md", "second version")
    initialized_repo.add("all")
    assert initialized_repo.commit("Second commit")
    return initialized_repo


@pytest.fixture
def diverged_repo(initialized_repo):
    # main and feature each have one commit on top of the root
    repo = initialized_repo
    repo.branch("feature")
    repo.checkout("feature")
    repo.create_file("feature.txt", "feature work")
    repo.add("all")
    repo.commit("Feature commit")
    repo.checkout("main")
    repo.modify_file("README.md", "main work")
    repo.add("all")
    repo.commit("Main commit")
    return repo


@pytest.fixture
def store(settings):
    return ScenarioStore(MemoryBackend(), settings)


@pytest.fixture
def find_commit():
    # Looks a commit up by its message
    def find(repo, message):
        for commit in repo.state.commits.values():
            if commit.message == message:
                return commit
        raise KeyError(message)
    return find


@pytest.fixture(autouse=True)
def quiet_logs():
    # main.main() installs a stderr sink; drop sinks so later tests never write to a closed capture
    logger.remove()
    yield
    logger.remove()

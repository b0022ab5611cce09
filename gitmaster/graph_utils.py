from collections import deque
from typing import Iterator, Mapping

from .models import Commit, RepoState
from .repo_utils import current_commit_hash

def is_ancestor(commits: Mapping[str, Commit], ancestor_hash: str, descendant_hash: str) -> bool:
    """Breadth-first search from descendant over every parent; True once ancestor is reached.

    A commit counts as its own ancestor. Parents missing from ``commits`` are skipped.
    """
    if descendant_hash not in commits:
        return False
    queue = deque([descendant_hash])
    seen: set[str] = set()
    while queue:
        commit_hash = queue.popleft()
        if commit_hash in seen:
            continue
        seen.add(commit_hash)
        if commit_hash == ancestor_hash:
            return True
        for parent_hash in commits[commit_hash].parents:
            if parent_hash in commits and parent_hash not in seen:
                queue.append(parent_hash)
    return False

def first_parent_chain(commits: Mapping[str, Commit], start_hash: str | None) -> Iterator[Commit]:
    seen: set[str] = set()
    commit_hash = start_hash
    while commit_hash and commit_hash in commits and commit_hash not in seen:
        seen.add(commit_hash)
        commit = commits[commit_hash]
        yield commit
        commit_hash = commit.parents[0] if commit.parents else None

def on_first_parent_chain(commits: Mapping[str, Commit], target_hash: str, start_hash: str) -> bool:
    return any(commit.hash == target_hash for commit in first_parent_chain(commits, start_hash))

def log_commits(state: RepoState) -> list[Commit]:
    return list(first_parent_chain(state.commits, current_commit_hash(state)))

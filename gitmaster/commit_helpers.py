import random
import string
import time
from typing import Callable, TypeAlias

from .errors import GitMasterError
from .models import Commit, FileStructure, RepoState
from .repo_utils import current_commit_hash

HashFactory: TypeAlias = Callable[[], str]
Clock: TypeAlias = Callable[[], int]

_HASH_ALPHABET = string.ascii_lowercase + string.digits

def random_hash_factory(length: int = 7) -> HashFactory:
    def new_hash() -> str:
        return "".join(random.choices(_HASH_ALPHABET, k=length))
    return new_hash

def now_ms() -> int:
    return time.time_ns() // 1_000_000

def get_new_commit_hash(state: RepoState, hash_factory: HashFactory) -> str:
    # short ids can collide, so keep drawing until the hash is free
    for _ in range(100):
        commit_hash = hash_factory()
        if commit_hash not in state.commits and commit_hash not in state.branches:
            return commit_hash
    raise GitMasterError("fatal: unable to allocate a unique commit hash")

def get_commit_info(state: RepoState, commit_hash: str) -> Commit:
    commit = state.commits.get(commit_hash)
    if commit is None:
        raise GitMasterError(f"fatal: '{commit_hash}' is not a valid commit")
    return commit

def snapshot_tree(files: FileStructure) -> FileStructure:
    """Copy of a working directory as a commit tree: deleted entries dropped, the rest unmodified."""
    return {
        path: entry.model_copy(update={"status": "unmodified"})
        for path, entry in files.items()
        if entry.status != "deleted"
    }

def copy_tree(tree: FileStructure) -> FileStructure:
    return {path: entry.model_copy(deep=True) for path, entry in tree.items()}

def create_commit(
    state: RepoState,
    message: str,
    parents: list[str],
    tree: FileStructure,
    author: str,
    hash_factory: HashFactory,
    clock: Clock,
) -> Commit:
    for parent_hash in parents:
        get_commit_info(state, parent_hash)
    commit = Commit(
        hash=get_new_commit_hash(state, hash_factory),
        parents=parents,
        message=message,
        author=author,
        timestamp=clock(),
        tree=tree,
    )
    state.commits[commit.hash] = commit
    return commit

def commit_from_commit_or_branch(state: RepoState, branch_name_or_commit_hash: str) -> str:
    branch = state.branches.get(branch_name_or_commit_hash)
    if branch is not None:
        return branch.headCommitHash
    if branch_name_or_commit_hash in state.commits:
        return branch_name_or_commit_hash
    raise GitMasterError(f"fatal: '{branch_name_or_commit_hash}' is not a valid commit")

def parent_of_current(state: RepoState) -> list[str]:
    commit_hash = current_commit_hash(state)
    return [commit_hash] if commit_hash else []

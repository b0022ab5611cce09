from .errors import GitMasterError, ScenarioError
from .models import Commit, HeadInfo, RepoState

def get_current_branch(state: RepoState) -> str | None:
    if state.HEAD.type == "branch":
        return state.HEAD.ref
    return None

def current_commit_hash(state: RepoState) -> str | None:
    """Hash HEAD resolves to, or None when nothing has been committed yet."""
    if state.HEAD.type == "detached":
        return state.HEAD.ref
    branch = state.branches.get(state.HEAD.ref)
    if branch is None:
        return None
    return branch.headCommitHash

def require_current_commit_hash(state: RepoState) -> str:
    commit_hash = current_commit_hash(state)
    if commit_hash is None:
        raise GitMasterError(f"fatal: Not a valid object name: '{state.HEAD.ref}'.")
    return commit_hash

def get_head_commit(state: RepoState) -> Commit | None:
    commit_hash = current_commit_hash(state)
    if commit_hash is None:
        return None
    return state.commits.get(commit_hash)

def update_head(state: RepoState, new_head_info: HeadInfo) -> None:
    state.HEAD = new_head_info

def describe_head(state: RepoState) -> str:
    if state.HEAD.type == "branch":
        return f"On branch {state.HEAD.ref}"
    return f"HEAD detached at {state.HEAD.ref[:7]}"

def verify_state(state: RepoState) -> None:
    """Check the graph invariants of a state that did not come from our own actions."""
    for key, commit in state.commits.items():
        if key != commit.hash:
            raise ScenarioError(f"commit stored under '{key}' has hash '{commit.hash}'")
        for parent_hash in commit.parents:
            if parent_hash not in state.commits:
                raise ScenarioError(f"commit {commit.hash} has unknown parent {parent_hash}")
    for name, branch in state.branches.items():
        if name != branch.name:
            raise ScenarioError(f"branch stored under '{name}' is named '{branch.name}'")
        if branch.headCommitHash not in state.commits:
            raise ScenarioError(f"branch '{name}' points at unknown commit {branch.headCommitHash}")
    for name, commit_hash in state.tags.items():
        if commit_hash not in state.commits:
            raise ScenarioError(f"tag '{name}' points at unknown commit {commit_hash}")
    if state.HEAD.type == "branch":
        if state.branches and state.HEAD.ref not in state.branches:
            raise ScenarioError(f"HEAD names unknown branch '{state.HEAD.ref}'")
    elif state.HEAD.ref not in state.commits:
        raise ScenarioError(f"HEAD points at unknown commit {state.HEAD.ref}")
    stray = set(state.stagingArea) - set(state.workingDirectory)
    if stray:
        raise ScenarioError(f"staged paths missing from the working directory: {', '.join(sorted(stray))}")

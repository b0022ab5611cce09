from .errors import GitMasterError
from .models import Branch, HeadInfo, RepoState
from .repo_utils import require_current_commit_hash, update_head
from .commit_helpers import copy_tree, get_commit_info

BRANCH_COLORS = [
    "hsl(199, 89%, 48%)",  # sky, reserved for the default branch
    "hsl(280, 68%, 60%)",  # purple
    "hsl(142, 76%, 36%)",  # green
    "hsl(38, 92%, 50%)",   # amber
    "hsl(0, 84%, 60%)",    # red
    "hsl(172, 66%, 50%)",  # teal
]

def get_next_color(state: RepoState) -> str:
    color = BRANCH_COLORS[state.colorIndex % len(BRANCH_COLORS)]
    state.colorIndex += 1
    return color

def update_branch_head(state: RepoState, branch_name: str, new_commit_hash: str) -> None:
    branch = state.branches.get(branch_name)
    if branch is None:
        raise GitMasterError(f"fatal: '{branch_name}' is not a valid branch")
    branch.headCommitHash = new_commit_hash

def create_branch(state: RepoState, branch_name: str, start_commit: str | None = None) -> Branch:
    if branch_name in state.branches:
        raise GitMasterError(f"fatal: A branch named '{branch_name}' already exists")
    if start_commit is None:
        start_commit = require_current_commit_hash(state)
    branch = Branch(name=branch_name, headCommitHash=start_commit, color=get_next_color(state))
    state.branches[branch_name] = branch
    return branch

def switch_branch(state: RepoState, branch_name: str) -> None:
    branch = state.branches.get(branch_name)
    if branch is None:
        raise GitMasterError(f"fatal: '{branch_name}' is not a valid branch")
    commit = get_commit_info(state, branch.headCommitHash)
    update_head(state, HeadInfo(type="branch", ref=branch_name))
    state.workingDirectory = copy_tree(commit.tree)

def detach_head(state: RepoState, commit_hash: str) -> None:
    commit = get_commit_info(state, commit_hash)
    update_head(state, HeadInfo(type="detached", ref=commit_hash))
    state.workingDirectory = copy_tree(commit.tree)

def checkout_ref(state: RepoState, ref: str) -> str:
    """Point HEAD at a branch (preferred) or a commit and return the message to show."""
    if ref in state.branches:
        switch_branch(state, ref)
        message = f"Switched to branch '{ref}'"
    elif ref in state.commits:
        detach_head(state, ref)
        message = f"HEAD is now at {ref[:7]} (detached)"
    else:
        raise GitMasterError(f"error: pathspec '{ref}' did not match any file(s) known to git")
    state.stagingArea = {}
    return message

def list_branches(state: RepoState) -> list[str]:
    return list(state.branches.keys())

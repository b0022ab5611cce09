from .errors import GitMasterError
from .models import FileStructure, RepoState
from .repo_utils import get_current_branch
from .branching import update_branch_head
from .commit_helpers import Clock, HashFactory, copy_tree, create_commit, get_commit_info
from .graph_utils import on_first_parent_chain

def union_trees(ours: FileStructure, theirs: FileStructure) -> FileStructure:
    """Path-wise union of two trees. On collisions the incoming side wins, no content merge."""
    merged = copy_tree(ours)
    merged.update(copy_tree(theirs))
    return merged

def merge_branch(
    state: RepoState,
    source_branch: str,
    author: str,
    hash_factory: HashFactory,
    clock: Clock,
) -> str:
    """Merge ``source_branch`` into the checked-out branch and return the message to show."""
    source = state.branches.get(source_branch)
    if source is None:
        raise GitMasterError(f"fatal: '{source_branch}' is not a valid branch")
    current_branch = get_current_branch(state)
    if current_branch is None:
        raise GitMasterError("Cannot merge into detached HEAD state")
    target = state.branches.get(current_branch)
    if target is None:
        raise GitMasterError(f"fatal: Not a valid object name: '{current_branch}'.")

    source_commit = get_commit_info(state, source.headCommitHash)
    target_commit = get_commit_info(state, target.headCommitHash)

    if on_first_parent_chain(state.commits, target_commit.hash, source_commit.hash):
        update_branch_head(state, current_branch, source_commit.hash)
        state.workingDirectory = copy_tree(source_commit.tree)
        return f"Fast-forward merge: {current_branch} -> {source_branch}"

    merged_tree = union_trees(target_commit.tree, source_commit.tree)
    merge_commit = create_commit(
        state,
        message=f"Merge branch '{source_branch}' into {current_branch}",
        parents=[target_commit.hash, source_commit.hash],
        tree=merged_tree,
        author=author,
        hash_factory=hash_factory,
        clock=clock,
    )
    update_branch_head(state, current_branch, merge_commit.hash)
    state.workingDirectory = copy_tree(merged_tree)
    return "Merge made by the 'ort' strategy"

from .errors import GitMasterError, ScenarioError
from .models import Branch, Commit, FileEntry, HeadInfo, MergeResult, RepoState, StatusReport
from .repository import Repository
from .commands import execute_command
from .graph_utils import is_ancestor

__all__ = [
    "Branch",
    "Commit",
    "FileEntry",
    "GitMasterError",
    "HeadInfo",
    "MergeResult",
    "RepoState",
    "Repository",
    "ScenarioError",
    "StatusReport",
    "execute_command",
    "is_ancestor",
]

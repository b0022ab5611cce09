"""In-memory repository state machine.

Every mutating action works on a deep copy of the current state and swaps the
copy in only when the action succeeds, so observers never see half-applied
transitions. Rejected actions only update ``lastOutput``.
"""
from typing import Any, Callable, Literal, Mapping, TypeAlias, TypeVar

from loguru import logger
from pydantic import ValidationError

from .config import Settings, get_settings
from .errors import GitMasterError, ScenarioError
from .models import Branch, Commit, FileEntry, HeadInfo, MergeResult, RepoState, StatusReport
from .repo_utils import current_commit_hash, get_current_branch, get_head_commit, verify_state
from .commit_helpers import (
    Clock,
    HashFactory,
    commit_from_commit_or_branch,
    copy_tree,
    create_commit,
    get_commit_info,
    now_ms,
    parent_of_current,
    random_hash_factory,
    snapshot_tree,
)
from .branching import (
    BRANCH_COLORS,
    checkout_ref,
    create_branch,
    list_branches,
    update_branch_head,
)
from .staging_helpers import (
    clear_statuses,
    create_file,
    delete_file,
    get_status,
    modify_file,
    stage_files,
)
from .merging import merge_branch
from .graph_utils import log_commits

T = TypeVar("T")

Listener: TypeAlias = Callable[[RepoState], None]
ResetMode: TypeAlias = Literal["soft", "hard"]


class Repository:
    def __init__(
        self,
        settings: Settings | None = None,
        hash_factory: HashFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.hash_factory = hash_factory or random_hash_factory(self.settings.HASH_LENGTH)
        self.clock = clock or now_ms
        self._listeners: list[Listener] = []
        self._state = self._initial_state()

    # -- state plumbing -------------------------------------------------

    @property
    def state(self) -> RepoState:
        """The live state. Treat it as read-only; use ``snapshot()`` for a detached copy."""
        return self._state

    @property
    def last_output(self) -> str:
        return self._state.lastOutput

    def _initial_state(self) -> RepoState:
        return RepoState(HEAD=HeadInfo(type="branch", ref=self.settings.DEFAULT_BRANCH))

    def _publish(self, new_state: RepoState) -> None:
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def _report(self, message: str) -> None:
        self._publish(self._state.model_copy(update={"lastOutput": message}))

    def _transition(self, action: str, mutate: Callable[[RepoState], T]) -> tuple[bool, T | None]:
        draft = self._state.model_copy(deep=True)
        try:
            result = mutate(draft)
        except GitMasterError as e:
            logger.info("{} rejected: {}", action, e)
            self._report(str(e))
            return False, None
        logger.debug("{} -> {}", action, draft.lastOutput)
        self._publish(draft)
        return True, result

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every transition. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- actions ----------------------------------------------------------

    def init(self) -> None:
        default_branch = self.settings.DEFAULT_BRANCH
        readme_path = self.settings.README_PATH

        def apply(state: RepoState) -> None:
            readme = FileEntry(path=readme_path, content=self.settings.README_CONTENT)
            root = create_commit(
                state,
                message="Initial commit",
                parents=[],
                tree={readme_path: readme},
                author=self.settings.AUTHOR,
                hash_factory=self.hash_factory,
                clock=self.clock,
            )
            state.branches[default_branch] = Branch(
                name=default_branch, headCommitHash=root.hash, color=BRANCH_COLORS[0]
            )
            state.HEAD = HeadInfo(type="branch", ref=default_branch)
            state.workingDirectory = copy_tree(root.tree)
            state.stagingArea = {}
            state.lastOutput = "Initialized empty Git repository"
            state.commandHistory.append("git init")

        self._transition("init", apply)

    def add(self, files: Literal["all"] | list[str]) -> None:
        def apply(state: RepoState) -> None:
            paths = list(state.workingDirectory) if files == "all" else list(files)
            stage_files(state, paths)
            state.lastOutput = f"Added {len(paths)} file(s) to staging area"
            state.commandHistory.append(f"git add {'.' if files == 'all' else ' '.join(files)}")

        self._transition("add", apply)

    def modify_file(self, path: str, content: str | None = None) -> None:
        if path not in self._state.workingDirectory:
            return

        def apply(state: RepoState) -> None:
            modify_file(state, path, content)
            state.lastOutput = f"Modified file: {path}"

        self._transition("modify_file", apply)

    def create_file(self, path: str, content: str = "") -> bool:
        def apply(state: RepoState) -> None:
            create_file(state, path, content)
            state.lastOutput = f"Created file: {path}"

        ok, _ = self._transition("create_file", apply)
        return ok

    def delete_file(self, path: str) -> bool:
        def apply(state: RepoState) -> None:
            delete_file(state, path)
            state.lastOutput = f"Deleted file: {path}"

        ok, _ = self._transition("delete_file", apply)
        return ok

    def commit(self, message: str) -> bool:
        def apply(state: RepoState) -> None:
            if not state.stagingArea:
                raise GitMasterError("Nothing to commit (no staged changes)")
            new_commit = create_commit(
                state,
                message=message,
                parents=parent_of_current(state),
                tree=snapshot_tree(state.workingDirectory),
                author=self.settings.AUTHOR,
                hash_factory=self.hash_factory,
                clock=self.clock,
            )
            branch_name = get_current_branch(state)
            if branch_name is not None and branch_name in state.branches:
                update_branch_head(state, branch_name, new_commit.hash)
            elif branch_name is not None:
                # first commit on an unborn branch creates it
                state.branches[branch_name] = Branch(
                    name=branch_name, headCommitHash=new_commit.hash, color=BRANCH_COLORS[0]
                )
            else:
                # detached: only HEAD remembers the new commit
                state.HEAD = HeadInfo(type="detached", ref=new_commit.hash)
            clear_statuses(state)
            state.lastOutput = f"[{state.HEAD.ref} {new_commit.short_hash}] {message}"
            state.commandHistory.append(f'git commit -m "{message}"')

        ok, _ = self._transition("commit", apply)
        return ok

    def checkout(self, ref: str) -> bool:
        def apply(state: RepoState) -> None:
            state.lastOutput = checkout_ref(state, ref)
            state.commandHistory.append(f"git checkout {ref}")

        ok, _ = self._transition("checkout", apply)
        return ok

    def branch(self, name: str) -> bool:
        def apply(state: RepoState) -> None:
            create_branch(state, name)
            state.lastOutput = f"Created branch '{name}'"
            state.commandHistory.append(f"git branch {name}")

        ok, _ = self._transition("branch", apply)
        return ok

    def list_branches(self) -> list[str]:
        return list_branches(self._state)

    def merge(self, source_branch: str) -> MergeResult:
        def apply(state: RepoState) -> None:
            state.lastOutput = merge_branch(
                state,
                source_branch,
                author=self.settings.AUTHOR,
                hash_factory=self.hash_factory,
                clock=self.clock,
            )
            state.commandHistory.append(f"git merge {source_branch}")

        ok, _ = self._transition("merge", apply)
        return MergeResult(success=ok, conflict=False)

    def reset(self, mode: ResetMode = "soft", ref: str | None = None) -> bool:
        """Move the current branch to the first parent of ``ref`` (default: HEAD).

        ``hard`` also restores the working directory from that parent and empties
        the staging area. ``soft`` leaves both alone. A detached HEAD is never moved.
        """
        def apply(state: RepoState) -> None:
            if mode not in ("soft", "hard"):
                raise GitMasterError(f"fatal: unknown reset mode '{mode}'")
            target_hash = commit_from_commit_or_branch(state, ref) if ref else current_commit_hash(state)
            if target_hash is None:
                raise GitMasterError("fatal: 'HEAD' is not a valid commit")
            target = get_commit_info(state, target_hash)
            if not target.parents:
                raise GitMasterError("Cannot reset: this is the root commit")
            parent = get_commit_info(state, target.parents[0])

            branch_name = get_current_branch(state)
            if branch_name is not None:
                update_branch_head(state, branch_name, parent.hash)

            if mode == "hard":
                state.workingDirectory = copy_tree(parent.tree)
                state.stagingArea = {}
                state.lastOutput = f"HEAD is now at {parent.short_hash}"
            else:
                state.lastOutput = "Unstaged changes after reset:\n\t" + "\n\t".join(state.workingDirectory)
            state.commandHistory.append(f"git reset --{mode} HEAD~1")

        ok, _ = self._transition("reset", apply)
        return ok

    def tag(self, name: str | None = None) -> list[str]:
        """Create a tag at HEAD, or list tags when no name is given."""
        if name is None:
            def apply(state: RepoState) -> None:
                state.lastOutput = "\n".join(state.tags) if state.tags else "No tags found"
                state.commandHistory.append("git tag")

            self._transition("tag", apply)
            return list(self._state.tags)

        commit_hash = current_commit_hash(self._state)
        if commit_hash is None:
            return list(self._state.tags)

        def apply(state: RepoState) -> None:
            state.tags[name] = commit_hash
            state.lastOutput = f"Created tag '{name}' at {commit_hash[:7]}"
            state.commandHistory.append(f"git tag {name}")

        self._transition("tag", apply)
        return list(self._state.tags)

    # -- queries ----------------------------------------------------------

    def log(self) -> list[Commit]:
        return log_commits(self._state)

    def status(self) -> StatusReport:
        return get_status(self._state)

    def get_current_branch(self) -> str | None:
        return get_current_branch(self._state)

    def get_head_commit(self) -> Commit | None:
        return get_head_commit(self._state)

    def report(self, message: str) -> None:
        """Show ``message`` as the latest output without touching anything else."""
        self._report(message)

    # -- lifecycle --------------------------------------------------------

    def reset_state(self) -> None:
        self._publish(self._initial_state())

    def snapshot(self) -> dict[str, Any]:
        return self._state.model_dump(mode="json")

    def load_scenario(self, scenario: Mapping[str, Any]) -> None:
        """Merge a (partial) snapshot into the live state.

        The merged result is validated before it replaces the current state;
        a malformed scenario raises ScenarioError and changes nothing.
        """
        unknown = set(scenario) - set(RepoState.model_fields)
        if unknown:
            raise ScenarioError(f"unknown scenario fields: {', '.join(sorted(unknown))}")
        merged = {**self.snapshot(), **scenario}
        try:
            new_state = RepoState.model_validate(merged)
        except ValidationError as e:
            raise ScenarioError(f"invalid scenario: {e.error_count()} validation error(s)") from e
        verify_state(new_state)
        logger.debug("loaded scenario with {} commit(s)", len(new_state.commits))
        self._publish(new_state)

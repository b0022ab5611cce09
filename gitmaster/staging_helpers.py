from .errors import GitMasterError
from .models import FileEntry, RepoState, StatusReport

MODIFIED_MARKER = "\n// Modified"

def stage_files(state: RepoState, paths: list[str]) -> int:
    """Stage every listed path that has changes. Returns how many were staged."""
    staged = 0
    for path in paths:
        entry = state.workingDirectory.get(path)
        if entry is None or entry.status == "unmodified":
            continue
        if entry.status == "deleted":
            # a staged deletion keeps its status so the next commit drops the path
            state.stagingArea[path] = entry.model_copy()
        else:
            state.stagingArea[path] = entry.model_copy(update={"status": "staged"})
            entry.status = "staged"
        staged += 1
    return staged

def modify_file(state: RepoState, path: str, content: str | None = None) -> bool:
    entry = state.workingDirectory.get(path)
    if entry is None:
        return False
    if content is not None:
        entry.content = content
    else:
        entry.content += MODIFIED_MARKER
    if entry.status != "added":
        entry.status = "modified"
    return True

def create_file(state: RepoState, path: str, content: str = "") -> None:
    if path in state.workingDirectory:
        raise GitMasterError(f"fatal: '{path}' already exists")
    state.workingDirectory[path] = FileEntry(path=path, content=content, status="added")

def delete_file(state: RepoState, path: str) -> None:
    entry = state.workingDirectory.get(path)
    if entry is None:
        raise GitMasterError(f"fatal: pathspec '{path}' did not match any files")
    entry.status = "deleted"

def clear_statuses(state: RepoState) -> None:
    state.stagingArea = {}
    state.workingDirectory = {
        path: entry.model_copy(update={"status": "unmodified"})
        for path, entry in state.workingDirectory.items()
        if entry.status != "deleted"
    }

def get_status(state: RepoState) -> StatusReport:
    report = StatusReport()
    for path, entry in state.workingDirectory.items():
        if entry.status == "staged":
            report.staged.append(path)
        elif entry.status == "modified":
            report.modified.append(path)
        elif entry.status == "added":
            report.untracked.append(path)
        elif entry.status == "deleted":
            report.deleted.append(path)
    return report

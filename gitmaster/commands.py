import time
from typing import Callable, TypeAlias

from .models import Commit
from .repository import Repository
from .repo_utils import describe_head

Handler: TypeAlias = Callable[[Repository, list[str]], None]

HEAD_ALIASES = {"HEAD", "HEAD~1", "HEAD^"}

def strip_quotes(text: str) -> str:
    if text[:1] in ("'", '"'):
        text = text[1:]
    if text[-1:] in ("'", '"'):
        text = text[:-1]
    return text

def init(repo: Repository, args: list[str]) -> None:
    repo.init()

def add(repo: Repository, args: list[str]) -> None:
    if not args:
        repo.report("Nothing specified, nothing added.")
    elif args[0] == ".":
        repo.add("all")
    else:
        repo.add(args)

def commit(repo: Repository, args: list[str]) -> None:
    if len(args) < 2 or args[0] != "-m":
        repo.report('Usage: git commit -m "message"')
        return
    message = strip_quotes(" ".join(args[1:]))
    repo.commit(message)

def checkout(repo: Repository, args: list[str]) -> None:
    if args[:1] == ["-b"]:
        if len(args) < 2:
            repo.report("error: switch `b' requires a value")
            return
        if repo.branch(args[1]):
            repo.checkout(args[1])
    elif args:
        repo.checkout(args[0])
    else:
        repo.report("Usage: git checkout [-b] <branch|commit>")

def branch(repo: Repository, args: list[str]) -> None:
    if args:
        repo.branch(args[0])
        return
    current = repo.get_current_branch()
    lines = [f"* {name}" if name == current else f"  {name}" for name in repo.list_branches()]
    repo.report("\n".join(lines))

def merge(repo: Repository, args: list[str]) -> None:
    if not args:
        repo.report("Usage: git merge <branch>")
        return
    repo.merge(args[0])

def reset(repo: Repository, args: list[str]) -> None:
    mode = "hard" if "--hard" in args else "soft"
    refs = [arg for arg in args if not arg.startswith("--")]
    unknown = [arg for arg in args if arg.startswith("--") and arg not in ("--hard", "--soft")]
    if unknown:
        repo.report(f"error: unknown option `{unknown[0][2:]}'")
        return
    ref = refs[0] if refs and refs[0] not in HEAD_ALIASES else None
    repo.reset(mode, ref)

def log(repo: Repository, args: list[str]) -> None:
    commits = repo.log()
    if "--oneline" in args:
        repo.report("\n".join(f"{c.short_hash} {c.message}" for c in commits))
        return
    repo.report("\n\n".join(format_log_entry(c) for c in commits))

def format_log_entry(commit: Commit) -> str:
    lines = [f"commit {commit.hash}"]
    if commit.is_merge:
        lines.append("Merge: " + " ".join(parent[:7] for parent in commit.parents))
    lines.append(f"Author: {commit.author}")
    lines.append(f"Date: {time.ctime(commit.timestamp / 1000)}")
    return "\n".join(lines) + f"\n\n    {commit.message}"

def status(repo: Repository, args: list[str]) -> None:
    report = repo.status()
    output = describe_head(repo.state) + "\n"
    if report.staged:
        output += "\nChanges to be committed:\n" + "\n".join(f"  staged: {f}" for f in report.staged)
    if report.modified:
        output += "\nChanges not staged:\n" + "\n".join(f"  modified: {f}" for f in report.modified)
    if report.deleted:
        output += "\nDeleted files:\n" + "\n".join(f"  deleted: {f}" for f in report.deleted)
    if report.untracked:
        output += "\nUntracked files:\n" + "\n".join(f"  {f}" for f in report.untracked)
    if report.clean:
        output += "\nnothing to commit, working tree clean"
    repo.report(output)

def tag(repo: Repository, args: list[str]) -> None:
    repo.tag(args[0] if args else None)

def map_command(command: str) -> Handler | None:
    commandsMap: dict[str, Handler] = {
        "init": init,
        "add": add,
        "commit": commit,
        "checkout": checkout,
        "branch": branch,
        "merge": merge,
        "reset": reset,
        "log": log,
        "status": status,
        "tag": tag,
    }
    return commandsMap.get(command)

def execute_command(repo: Repository, command_line: str) -> str:
    """Run one ``git <subcommand> [args]`` line against ``repo`` and return its output."""
    parts = command_line.split()
    if not parts:
        return ""
    if parts[0] != "git":
        repo.report(f"Command not found: {parts[0]}")
        return repo.last_output
    git_command = parts[1] if len(parts) > 1 else ""
    handler = map_command(git_command)
    if handler is None:
        repo.report(f"git: '{git_command}' is not a git command")
        return repo.last_output
    handler(repo, parts[2:])
    return repo.last_output

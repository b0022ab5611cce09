import sys
from pathlib import Path

import argparse
from loguru import logger

from gitmaster.config import get_settings
from gitmaster.commands import execute_command
from gitmaster.errors import ScenarioError
from gitmaster.repository import Repository
from gitmaster.storage import DirectoryBackend, ScenarioStore

PROMPT = "$ "

def run_file_command(repo: Repository, parts: list[str]) -> str | None:
    """Simulated editor actions for the prompt. Returns None when ``parts`` is not one of them."""
    if not parts or parts[0] not in ("edit", "touch", "rm"):
        return None
    if len(parts) < 2:
        return f"usage: {parts[0]} <path>"
    command, path = parts[0], parts[1]
    content = " ".join(parts[2:]) if len(parts) > 2 else None
    if command == "edit":
        if path not in repo.state.workingDirectory:
            return f"{path}: no such file"
        repo.modify_file(path, content)
    elif command == "touch":
        repo.create_file(path, content or "")
    else:
        repo.delete_file(path)
    return repo.last_output

def run_line(repo: Repository, line: str) -> str:
    output = run_file_command(repo, line.split())
    if output is None:
        output = execute_command(repo, line)
    return output

def interactive(repo: Repository) -> None:
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return
        if line.strip() in ("exit", "quit"):
            return
        output = run_line(repo, line)
        if output:
            print(output)

def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="gitmaster: an in-memory git playground")
    parser.add_argument("-c", "--command", action="append", default=[], help="Run a command and exit (repeatable)")
    parser.add_argument("-s", "--scenario", help="Resume and save progress under this scenario key")
    parser.add_argument("--store-dir", type=Path, default=settings.STORAGE_DIR, help="Directory holding saved scenarios")
    parser.add_argument("--fresh", action="store_true", help="Discard saved progress for the scenario first")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Log level for diagnostics on stderr")

    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    repo = Repository(settings)
    store = ScenarioStore(DirectoryBackend(args.store_dir), settings)

    if args.scenario:
        if args.fresh:
            store.clear(args.scenario)
        saved = store.load(args.scenario)
        if saved is not None:
            try:
                repo.load_scenario(saved)
            except ScenarioError as e:
                logger.warning("Ignoring saved scenario {}: {}", args.scenario, e)
        repo.subscribe(lambda state: store.save(args.scenario, state))

    if args.command:
        for line in args.command:
            output = run_line(repo, line)
            if output:
                print(output)
    else:
        interactive(repo)


if __name__ == "__main__":
    main()

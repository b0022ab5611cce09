# Integration tests for complete gitmaster workflows driven through the command line surface

import sys

import pytest

import main
from gitmaster.commands import execute_command
from gitmaster.graph_utils import is_ancestor
from gitmaster.repository import Repository
from gitmaster.storage import DirectoryBackend, ScenarioStore


def run(repo, *lines):
    return [execute_command(repo, line) for line in lines]


class TestFeatureBranchWorkflow:

    def test_branch_commit_merge(self, repo):
        run(repo, "git init", "git checkout -b feature")
        repo.create_file("feature.py", "print('hi')")
        run(repo, "git add .", 'git commit -m "Add feature"', "git checkout main")
        repo.modify_file("README.md", "docs")
        run(repo, "git add README.md", 'git commit -m "Docs"')

        output = execute_command(repo, "git merge feature")

        assert output == "Merge made by the 'ort' strategy"
        head = repo.get_head_commit()
        feature_head = repo.state.branches["feature"].headCommitHash
        assert is_ancestor(repo.state.commits, feature_head, head.hash)
        assert not is_ancestor(repo.state.commits, head.hash, feature_head)
        assert set(repo.state.workingDirectory) == {"README.md", "feature.py"}
        assert repo.status().clean

    def test_fast_forward_then_tag(self, repo):
        run(repo, "git init", "git branch hotfix", "git checkout hotfix")
        repo.modify_file("README.md")
        run(repo, "git add .", "git commit -m fix", "git checkout main")

        assert execute_command(repo, "git merge hotfix") == "Fast-forward merge: main -> hotfix"
        assert repo.state.branches["main"].headCommitHash == repo.state.branches["hotfix"].headCommitHash
        assert len(repo.state.commits) == 2

        execute_command(repo, "git tag v1.0")
        assert repo.state.tags["v1.0"] == repo.state.branches["main"].headCommitHash


class TestTimeTravel:

    def test_detached_checkout_and_back(self, repo):
        run(repo, "git init")
        repo.modify_file("README.md", "v2")
        run(repo, "git add .", "git commit -m v2")
        root = repo.log()[-1].hash

        assert execute_command(repo, f"git checkout {root}") == f"HEAD is now at {root[:7]} (detached)"
        assert repo.state.HEAD.type == "detached"
        assert repo.state.workingDirectory["README.md"].content.startswith("# My Project")

        execute_command(repo, "git checkout main")
        assert repo.state.workingDirectory["README.md"].content == "v2"

    def test_undo_with_hard_reset(self, repo):
        run(repo, "git init")
        for n in range(3):
            repo.modify_file("README.md", f"v{n}")
            run(repo, "git add .", f"git commit -m v{n}")
        run(repo, "git reset --hard", "git reset --hard")
        assert [c.message for c in repo.log()] == ["v0", "Initial commit"]
        assert repo.state.workingDirectory["README.md"].content == "v0"


class TestPersistence:

    def test_resume_saved_progress(self, settings):
        store = ScenarioStore(DirectoryBackend(settings.STORAGE_DIR), settings)
        first = Repository(settings)
        first.subscribe(lambda state: store.save("level-3", state))
        run(first, "git init", "git checkout -b feature")

        second = Repository(settings)
        second.load_scenario(store.load("level-3"))

        assert second.state == first.state
        assert second.get_current_branch() == "feature"
        second.branch("next")
        first.branch("next")
        assert second.state.branches["next"].color == first.state.branches["next"].color


class TestMainEntryPoint:

    def test_one_shot_commands(self, monkeypatch, capsys, settings):
        monkeypatch.setattr(sys, "argv", [
            "main.py", "--store-dir", str(settings.STORAGE_DIR),
            "-c", "git init", "-c", "edit README.md hello", "-c", "git add .", "-c", "git status",
        ])
        main.main()
        out = capsys.readouterr().out
        assert "Initialized empty Git repository" in out
        assert "Modified file: README.md" in out
        assert "staged: README.md" in out

    def test_scenario_is_saved_and_resumed(self, monkeypatch, capsys, settings):
        base = ["main.py", "--store-dir", str(settings.STORAGE_DIR), "-s", "level-1"]
        monkeypatch.setattr(sys, "argv", base + ["-c", "git init", "-c", "git branch feature"])
        main.main()
        monkeypatch.setattr(sys, "argv", base + ["-c", "git branch"])
        main.main()
        assert capsys.readouterr().out.endswith("* main\n  feature\n")

    def test_fresh_discards_saved_progress(self, monkeypatch, capsys, settings):
        base = ["main.py", "--store-dir", str(settings.STORAGE_DIR), "-s", "level-1"]
        monkeypatch.setattr(sys, "argv", base + ["-c", "git init"])
        main.main()
        monkeypatch.setattr(sys, "argv", base + ["--fresh", "-c", "git log"])
        main.main()
        assert capsys.readouterr().out == "Initialized empty Git repository\n"

    @pytest.mark.parametrize("line, expected", [
        ("touch notes.txt", "Created file: notes.txt"),
        ("rm README.md", "Deleted file: README.md"),
        ("edit missing.txt", "missing.txt: no such file"),
        ("edit", "usage: edit <path>"),
    ])
    def test_file_commands(self, initialized_repo, line, expected):
        assert main.run_line(initialized_repo, line) == expected

    def test_interactive_prompt(self, monkeypatch, capsys, initialized_repo):
        lines = iter(["git branch feature", "exit"])
        monkeypatch.setattr("builtins.input", lambda prompt: next(lines))
        main.interactive(initialized_repo)
        assert "Created branch 'feature'" in capsys.readouterr().out

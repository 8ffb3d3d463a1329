"""Shared fixtures: a throwaway git repository with a known two-commit history."""

import shutil
import subprocess

import pytest

_GIT_IDENTITY = [
    "-c",
    "user.name=Test User",
    "-c",
    "user.email=test@example.com",
    "-c",
    "commit.gpgsign=false",
]


def git(repo, *args):
    return subprocess.run(
        ["git", *_GIT_IDENTITY, *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    ).stdout


@pytest.fixture
def git_repo(tmp_path):
    """Repository whose last commit modifies app.py and deletes legacy.py.

    History:
      1. "Initial commit"  adds app.py, legacy.py, notes.md
      2. "Update app"      modifies app.py, deletes legacy.py
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")

    (repo / "app.py").write_text("def greet():\n    return 'hello'\n")
    (repo / "legacy.py").write_text("def old():\n    pass\n")
    (repo / "notes.md").write_text("# Notes\n")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "Initial commit")

    (repo / "app.py").write_text("def greet(name):\n    return f'hello {name}'\n")
    (repo / "legacy.py").unlink()
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", "Update app")

    return repo

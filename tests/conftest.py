"""Pytest fixtures for reposync tests."""
import subprocess
from pathlib import Path
from typing import Dict, List

import pytest

from reposync.git.executor import GitExecutor


def git(repo_path: Path, *args: str) -> str:
    """Run git in repo_path and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo_path: Path, name: str, content: str, message: str) -> str:
    """Add and commit one file; return the new HEAD SHA."""
    (repo_path / name).write_text(content)
    git(repo_path, "add", name)
    git(repo_path, "commit", "-m", message)
    return git(repo_path, "rev-parse", "HEAD")


class RecordingExecutor(GitExecutor):
    """GitExecutor that remembers every argument vector it ran."""

    def __init__(self):
        super().__init__()
        self.calls: List[List[str]] = []

    def run(self, repo_dir, args, **kwargs):
        self.calls.append(list(args))
        return super().run(repo_dir, args, **kwargs)

    def run_interactive(self, repo_dir, args, **kwargs):
        self.calls.append(list(args))
        return super().run_interactive(repo_dir, args, **kwargs)

    def count(self, *args: str) -> int:
        return sum(1 for call in self.calls if call == list(args))


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    """Give git a committer identity independent of the host config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


@pytest.fixture
def upstream_repo(tmp_path: Path) -> Dict[str, any]:
    """Create an upstream repository with branches and tags.

    Layout:
        master:  A.h                   (tag v1.0)
        dev:     A.h + B.h
        release: A.h + C.h             (tag v2)

    Returns dict with:
        - path: Path to repo (master checked out)
        - main_sha, dev_sha, release_sha: branch tip SHAs
    """
    repo_path = tmp_path / "upstream"
    repo_path.mkdir()

    git(repo_path, "init")
    git(repo_path, "symbolic-ref", "HEAD", "refs/heads/master")
    git(repo_path, "config", "user.email", "test@example.com")
    git(repo_path, "config", "user.name", "Test User")

    main_sha = commit_file(repo_path, "A.h", "#include <iostream>\n", "Initial commit")
    git(repo_path, "tag", "v1.0")

    git(repo_path, "checkout", "-b", "dev")
    dev_sha = commit_file(repo_path, "B.h", "#include <vector>\n", "Add B.h on dev")

    git(repo_path, "checkout", "master")
    git(repo_path, "checkout", "-b", "release")
    release_sha = commit_file(repo_path, "C.h", "#include <map>\n", "Add C.h on release")
    git(repo_path, "tag", "v2")

    git(repo_path, "checkout", "master")

    return {
        "path": repo_path,
        "main_sha": main_sha,
        "dev_sha": dev_sha,
        "release_sha": release_sha,
    }


@pytest.fixture
def cloned_repo(tmp_path: Path, upstream_repo) -> Path:
    """Clone upstream_repo (master checked out, dev/release only at origin)."""
    clone_path = tmp_path / "clone"
    subprocess.run(
        ["git", "clone", "-b", "master", str(upstream_repo["path"]), str(clone_path)],
        capture_output=True,
        check=True,
    )
    return clone_path


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()

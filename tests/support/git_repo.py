"""Helpers for building throwaway git repositories in tests."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(repo: Path, *args: str, env: dict[str, str] | None = None) -> str:
    """Run a git command in ``repo`` and return stdout."""
    full_env = {**os.environ, **_GIT_ENV, "HOME": str(repo), **(env or {})}
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        env=full_env,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def init_repo(path: Path) -> Path:
    """Create an empty repository that ignores .env files."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "config", "commit.gpgsign", "false")
    (path / ".gitignore").write_text(".env\n.env.*\n", encoding="utf-8")
    return path


def commit_all(repo: Path, message: str, date: str | None = None) -> str:
    """
    Stage everything and commit; returns the new commit id.

    ``date`` (e.g. '2020-01-01T12:00:00') sets both author and committer date.
    """
    env = {"GIT_AUTHOR_DATE": date, "GIT_COMMITTER_DATE": date} if date else None
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message, env=env)
    return git(repo, "rev-parse", "HEAD").strip()

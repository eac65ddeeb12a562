"""
Git access for secret-scanner.

The git binary is treated as a black box: every query runs `git` in a
subprocess and parses NUL-separated output. Failures are reported as
NotARepositoryError; git's error text is logged, never interpreted.
"""

import logging
import os
import subprocess
from pathlib import Path

from secret_scanner.core.errors import NotARepositoryError

logger = logging.getLogger(__name__)


def _split_null_separated(output: bytes) -> list[str]:
    """Split `-z` output into non-empty entries."""
    return [
        entry.decode("utf-8", errors="surrogateescape").strip()
        for entry in output.split(b"\x00")
        if entry.strip()
    ]


def decode_text(data: bytes) -> str | None:
    """
    Decode blob bytes as UTF-8 text.

    Returns:
        Text, or None if the data contains NUL bytes or is not valid UTF-8
    """
    if b"\x00" in data:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class GitClient:
    """Narrow wrapper over the git command line."""

    def __init__(self, git_binary: str = "git"):
        self._git = git_binary

    def _run(self, args: list[str], cwd: Path) -> bytes:
        """Run a git command and return its stdout."""
        logger.debug(f"Running git {' '.join(args)} in {cwd}")
        try:
            result = subprocess.run(
                [self._git, *args],
                cwd=cwd,
                capture_output=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise NotARepositoryError(f"git executable not found: {self._git}") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            logger.debug(f"git {' '.join(args)} failed ({e.returncode}): {stderr}")
            raise NotARepositoryError("Not inside a git repository.") from e
        return result.stdout

    def repo_root(self, cwd: Path) -> Path | None:
        """Return the top-level directory of the repository containing ``cwd``."""
        try:
            output = self._run(["rev-parse", "--show-toplevel"], Path(cwd))
        except NotARepositoryError:
            return None
        except OSError as e:
            logger.debug(f"Cannot run git in {cwd}: {e}")
            return None
        return Path(output.decode("utf-8", errors="surrogateescape").strip()).resolve()

    def require_repo_root(self, cwd: Path) -> Path:
        """Like repo_root, but raises NotARepositoryError when there is none."""
        root = self.repo_root(cwd)
        if root is None:
            raise NotARepositoryError("Not inside a git repository.")
        return root

    def staged_files(self, repo_root: Path) -> list[Path]:
        """Files added, copied or modified in the index. Deletions are excluded."""
        output = self._run(
            ["diff", "--cached", "--name-only", "--diff-filter=ACM", "-z"], repo_root
        )
        return [repo_root / name for name in _split_null_separated(output)]

    def tracked_files(self, repo_root: Path, include_untracked: bool = False) -> list[Path]:
        """
        Tracked files, optionally followed by untracked files that are not ignored.
        """
        tracked = [
            repo_root / name
            for name in _split_null_separated(self._run(["ls-files", "-z"], repo_root))
        ]
        if not include_untracked:
            return tracked

        untracked = [
            repo_root / name
            for name in _split_null_separated(
                self._run(["ls-files", "-z", "--others", "--exclude-standard"], repo_root)
            )
        ]
        return tracked + untracked

    def commit_list(self, repo_root: Path, since: str | None = None) -> list[str]:
        """
        Commits reachable from HEAD, oldest first in topological order.

        Args:
            repo_root: Repository top-level directory
            since: Optional date accepted by `git rev-list --since`

        Returns:
            Commit ids; empty for a repository without commits
        """
        try:
            self._run(["rev-parse", "--verify", "--quiet", "HEAD"], repo_root)
        except NotARepositoryError:
            logger.debug(f"No commits yet in {repo_root}")
            return []

        args = ["rev-list", "--topo-order", "--reverse", "HEAD"]
        if since:
            args.append(f"--since={since}")
        output = self._run(args, repo_root)
        return [line.strip() for line in output.decode("ascii").splitlines() if line.strip()]

    def commit_files(self, repo_root: Path, commit: str) -> list[Path]:
        """Files a commit added, copied or modified (the root commit included)."""
        output = self._run(
            [
                "diff-tree",
                "--root",
                "--no-commit-id",
                "--name-only",
                "-r",
                "-z",
                "--diff-filter=ACM",
                commit,
            ],
            repo_root,
        )
        return [repo_root / name for name in _split_null_separated(output)]

    def read_blob(self, repo_root: Path, ref: str, path: Path) -> str | None:
        """
        Read a file's content from a commit, or from the index when ``ref`` is empty.

        Returns:
            Text content, or None if the blob is missing, binary or undecodable
        """
        try:
            rel = Path(os.path.normpath(path)).relative_to(repo_root).as_posix()
        except ValueError:
            logger.debug(f"Path outside repository: {path}")
            return None

        try:
            data = self._run(["show", f"{ref}:{rel}"], repo_root)
        except NotARepositoryError:
            logger.debug(f"Cannot read blob {ref}:{rel}")
            return None
        return decode_text(data)

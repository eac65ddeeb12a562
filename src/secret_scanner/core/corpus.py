"""
FileCorpusProvider: produces candidate files for each source kind.

Version-control queries go through GitClient. Content for staged files is read
from the index and content for history files from the commit that introduced
them, because the working tree may have diverged from both.
"""

import logging
from pathlib import Path
from typing import Iterable

from secret_scanner.core.models import CandidateFile, SourceKind
from secret_scanner.core.path_utils import expand_globs
from secret_scanner.infrastructure.git_client import GitClient, decode_text

logger = logging.getLogger(__name__)


def read_text_file(path: Path) -> str | None:
    """
    Read a file from disk as UTF-8 text without newline translation.

    Returns:
        Text content, or None if the file is missing, unreadable, not valid
        UTF-8 or contains a NUL byte
    """
    try:
        data = Path(path).read_bytes()
    except PermissionError as e:
        logger.debug(f"Permission denied reading file: {path} - {e}")
        return None
    except OSError as e:
        logger.debug(f"Error reading file: {path} - {e}")
        return None

    content = decode_text(data)
    if content is None:
        logger.debug(f"Skipping binary or non-UTF-8 file: {path}")
    return content


class FileCorpusProvider:
    """
    Candidate file source for one invocation.

    Attributes:
        cwd: Working directory of the invocation
    """

    def __init__(self, cwd: Path, git_client: GitClient | None = None):
        self.cwd = Path(cwd).resolve()
        self._git = git_client or GitClient()
        self._repo_root: Path | None = None

    @property
    def repo_root(self) -> Path:
        """Repository root for ``cwd``; raises NotARepositoryError outside a repository."""
        if self._repo_root is None:
            self._repo_root = self._git.require_repo_root(self.cwd)
        return self._repo_root

    def staged(self) -> list[CandidateFile]:
        """Files added, copied or modified in the index."""
        return [
            CandidateFile(path=path, source_kind=SourceKind.STAGED)
            for path in self._git.staged_files(self.repo_root)
        ]

    def working_tree(self, include_untracked: bool = False) -> list[CandidateFile]:
        """Tracked files, plus untracked-but-not-ignored files when requested."""
        return [
            CandidateFile(path=path, source_kind=SourceKind.WORKING_TREE)
            for path in self._git.tracked_files(self.repo_root, include_untracked)
        ]

    def history(self, since: str | None = None) -> list[CandidateFile]:
        """
        Every file each commit reachable from HEAD introduced or modified.

        Commits are visited oldest first. A path changed by several commits
        yields one candidate per commit.
        """
        candidates: list[CandidateFile] = []
        commits = self._git.commit_list(self.repo_root, since)
        logger.debug(f"Walking {len(commits)} commits")

        for commit in commits:
            for path in self._git.commit_files(self.repo_root, commit):
                candidates.append(
                    CandidateFile(path=path, source_kind=SourceKind.HISTORY, commit=commit)
                )
        return candidates

    def paths(
        self, patterns: Iterable[str], ignore: Iterable[str] = ()
    ) -> list[CandidateFile]:
        """Expand explicit paths or globs against the filesystem, relative to ``cwd``."""
        return [
            CandidateFile(path=path, source_kind=SourceKind.PATHS)
            for path in expand_globs(self.cwd, patterns, ignore=ignore)
        ]

    def all(
        self, include_untracked: bool = False, since: str | None = None
    ) -> list[CandidateFile]:
        """Staged, then working-tree, then history candidates. Never deduplicated."""
        return self.staged() + self.working_tree(include_untracked) + self.history(since)

    def read(self, candidate: CandidateFile) -> str | None:
        """
        Read a candidate's content from the location its provenance implies.

        Returns:
            Text content, or None when it cannot be scanned
        """
        if candidate.source_kind is SourceKind.STAGED:
            return self._git.read_blob(self.repo_root, "", candidate.path)
        if candidate.source_kind is SourceKind.HISTORY:
            return self._git.read_blob(self.repo_root, candidate.commit or "HEAD", candidate.path)
        return read_text_file(candidate.path)

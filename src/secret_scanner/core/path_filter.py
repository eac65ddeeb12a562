"""
PathFilter: decides which candidate paths may be scanned or redacted.
"""

import logging
from pathlib import Path
from typing import Iterable

from secret_scanner.core.config import ScannerConfig
from secret_scanner.core.path_utils import compile_globs, to_match_path

logger = logging.getLogger(__name__)

# Env files are the source of secrets, never a target
ENV_FILE_MARKER = ".env"


def is_binary_path(path: Path | str, binary_extensions: Iterable[str]) -> bool:
    """Check if a path has one of the configured binary extensions."""
    suffix = Path(path).suffix.lower()
    return bool(suffix) and suffix in {ext.lower() for ext in binary_extensions}


class PathFilter:
    """
    Applies allow-list, ignore-list and env-file exclusion to candidate paths.

    A path is dropped when it:
    - matches any ``allow_file_globs`` pattern (intentionally committed
      examples that must never be reported), or
    - matches any ``ignore_file_globs`` pattern, or
    - contains '.env' anywhere in its path.

    Globs use gitignore wildmatch semantics with dot files included and are
    evaluated against the path relative to ``root`` (see path_utils).
    """

    def __init__(self, config: ScannerConfig, root: Path):
        self._root = Path(root).resolve()
        self._allow = compile_globs(config.allow_file_globs)
        self._ignore = compile_globs(config.ignore_file_globs)

    def is_excluded(self, path: Path | str) -> bool:
        """Check whether a single path should be dropped."""
        if ENV_FILE_MARKER in str(path):
            return True

        rel = to_match_path(path, self._root)
        if self._allow is not None and self._allow.match_file(rel):
            return True
        if self._ignore is not None and self._ignore.match_file(rel):
            return True
        return False

    def filter(self, paths: Iterable[Path]) -> list[Path]:
        """Return the paths that survive filtering, preserving order."""
        kept = []
        for path in paths:
            if self.is_excluded(path):
                logger.debug(f"Filtered out: {path}")
                continue
            kept.append(path)
        return kept

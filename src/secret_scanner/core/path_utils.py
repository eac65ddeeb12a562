"""
Path and glob utilities for secret-scanner.

Ignore and allow globs use gitignore wildmatch syntax through pathspec.
Explicit path globs are matched segment by segment with fnmatch, so they only
select files whose own path fits. Patterns are always evaluated against
POSIX paths relative to a root directory, so the same pattern behaves
identically whether a caller holds absolute or relative paths.
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

import pathspec

logger = logging.getLogger(__name__)

_GLOB_MAGIC = frozenset("*?[")


def has_magic(pattern: str) -> bool:
    """Check if a pattern contains glob metacharacters."""
    return any(ch in _GLOB_MAGIC for ch in pattern)


def compile_globs(patterns: Iterable[str]) -> pathspec.PathSpec | None:
    """
    Compile gitignore-style patterns into a PathSpec.

    Returns:
        PathSpec, or None when there are no usable patterns
    """
    lines = [p.strip() for p in patterns if p and p.strip()]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, lines)


def to_match_path(path: Path | str, root: Path) -> str:
    """
    Convert a path into the string form globs are matched against.

    Paths under ``root`` become root-relative POSIX paths. Paths outside it
    keep their absolute form without the leading separator, so
    `**/`-prefixed patterns still apply to them.
    """
    path = Path(path)
    if not path.is_absolute():
        path = root / path
    path = Path(os.path.normpath(path))

    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix().lstrip("/")


def _anchor(pattern: str) -> str:
    """Anchor a user glob to the root, the way shell-style globs behave."""
    while pattern.startswith("./"):
        pattern = pattern[2:]
    if pattern.startswith("/") or pattern.startswith("**/"):
        return pattern
    return "/" + pattern


def _match_segments(pattern_parts: list[str], path_parts: list[str]) -> bool:
    """Segment-wise glob match; '**' spans zero or more whole segments."""
    if not pattern_parts:
        return not path_parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_segments(rest, path_parts[i:]) for i in range(len(path_parts) + 1))
    if not path_parts:
        return False
    return fnmatch.fnmatchcase(path_parts[0], head) and _match_segments(rest, path_parts[1:])


def glob_matches_file(pattern: str, rel_path: str) -> bool:
    """
    Check whether a root-relative file path matches an anchored glob.

    Unlike gitignore matching, a pattern that matches a directory does not
    match the files inside it: '**/*.js' matches 'lib/app.js' but not
    'chart.js/README.md'.
    """
    pattern_parts = [p for p in _anchor(pattern).split("/") if p]
    return _match_segments(pattern_parts, rel_path.split("/"))


def _is_ignored(spec: pathspec.PathSpec | None, rel_path: str, is_dir: bool = False) -> bool:
    if spec is None:
        return False
    if is_dir:
        return spec.match_file(rel_path + "/") or spec.match_file(rel_path + "/_")
    return spec.match_file(rel_path)


def walk_files(
    root: Path,
    start: Path | None = None,
    max_depth: int | None = None,
    ignore: pathspec.PathSpec | None = None,
) -> Iterator[Path]:
    """
    Yield paths of regular files under ``start``.

    Symlinks (to files or directories) are never followed or yielded.
    Directories matching ``ignore`` are pruned. Output is sorted per
    directory so traversal order is deterministic.

    Args:
        root: Directory ignore patterns are evaluated against
        start: Directory to walk (defaults to root)
        max_depth: Maximum number of path segments below ``start`` to yield
        ignore: Optional spec of paths to prune
    """
    start = start or root
    if not start.is_dir() or start.is_symlink():
        return

    def _on_error(e: OSError) -> None:
        logger.debug(f"Error accessing directory: {e.filename} - {e}")

    for dirpath, dirnames, filenames in os.walk(start, followlinks=False, onerror=_on_error):
        current = Path(dirpath)
        depth = len(current.relative_to(start).parts)

        kept_dirs = []
        for d in sorted(dirnames):
            child = current / d
            if child.is_symlink():
                logger.debug(f"Skipping symlink: {child}")
                continue
            if max_depth is not None and depth + 1 >= max_depth:
                continue
            if _is_ignored(ignore, to_match_path(child, root), is_dir=True):
                continue
            kept_dirs.append(d)
        dirnames[:] = kept_dirs

        if max_depth is not None and depth + 1 > max_depth:
            continue

        for name in sorted(filenames):
            file_path = current / name
            if file_path.is_symlink() or not file_path.is_file():
                continue
            yield file_path


def expand_globs(
    root: Path,
    patterns: Iterable[str],
    ignore: Iterable[str] = (),
) -> list[Path]:
    """
    Expand path/glob patterns against the filesystem under ``root``.

    - Literal paths are taken as is: a file contributes itself, a directory
      contributes every file beneath it.
    - Globs are anchored at ``root`` ('*.py' matches top-level files only;
      use '**/*.py' for any depth). Dot files are matched. A glob selects a
      file only when the file's own path matches, never because a parent
      directory name does.
    - Symlinks are not followed.
    - Results are unique, in pattern order, then sorted walk order.

    Args:
        root: Base directory for relative patterns
        patterns: Paths or glob patterns
        ignore: gitignore-style patterns excluded from the results

    Returns:
        Absolute, normalized file paths
    """
    root = Path(root).resolve()
    ignore_spec = compile_globs(ignore)
    results: list[Path] = []
    seen: set[Path] = set()

    for raw in patterns:
        pattern = raw.strip()
        if not pattern:
            continue

        if not has_magic(pattern):
            candidate = Path(os.path.normpath(root / pattern))
            if candidate.is_symlink():
                logger.debug(f"Skipping symlink (follow_symlinks=False): {candidate}")
                matches: list[Path] = []
            elif candidate.is_file():
                matches = [candidate]
            elif candidate.is_dir():
                matches = list(walk_files(root, start=candidate, ignore=ignore_spec))
            else:
                logger.debug(f"Path does not exist: {candidate}")
                matches = []
        else:
            anchored = _anchor(pattern)
            segments = anchored.lstrip("/").split("/")
            prefix: list[str] = []
            for segment in segments:
                if has_magic(segment):
                    break
                prefix.append(segment)
            recursive = any("**" in segment for segment in segments)
            max_depth = None if recursive else len(segments) - len(prefix)
            matches = [
                path
                for path in walk_files(
                    root, start=root.joinpath(*prefix), max_depth=max_depth, ignore=ignore_spec
                )
                if glob_matches_file(anchored, to_match_path(path, root))
            ]

        for match in matches:
            if _is_ignored(ignore_spec, to_match_path(match, root)):
                continue
            absolute = Path(os.path.normpath(match))
            if absolute in seen:
                continue
            seen.add(absolute)
            results.append(absolute)

    return results

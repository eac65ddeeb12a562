"""
Redaction service: rewrites leaked secret values in place.

Every occurrence of a secret is replaced with a placeholder that keeps the
first characters of the value and names the env var it came from, e.g.
``abcd********** (env var: API_KEY)``. History is never a target; only files
on disk (tracked files or explicit paths) are rewritten.
"""

import logging
import re
from pathlib import Path
from typing import Sequence

from secret_scanner.core.config import ScannerConfig
from secret_scanner.core.corpus import FileCorpusProvider, read_text_file
from secret_scanner.core.env_secrets import load_env_secrets
from secret_scanner.core.errors import RedactionWriteError
from secret_scanner.core.models import CandidateFile, SecretValue
from secret_scanner.core.path_filter import PathFilter, is_binary_path

from .models import RedactionResult, RedactionSummary

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 4
MASK = "**********"


def redacted_placeholder(secret: SecretValue) -> str:
    """Build the placeholder that replaces a secret's value."""
    return f"{secret.value[:PREFIX_LENGTH]}{MASK} (env var: {secret.key})"


def _annotation_pattern(secrets: Sequence[SecretValue]) -> re.Pattern[str] | None:
    """Match the ' (env var: KEY)' suffix left behind by earlier redactions."""
    keys = sorted({secret.key for secret in secrets}, key=len, reverse=True)
    if not keys:
        return None
    return re.compile(r" \(env var: (?:" + "|".join(re.escape(k) for k in keys) + r")\)")


def _replace_outside(
    content: str, value: str, replacement: str, annotation: re.Pattern[str] | None
) -> tuple[str, bool]:
    """Replace ``value`` everywhere except inside existing annotations."""
    spans = [m.span() for m in annotation.finditer(content)] if annotation else []
    pieces: list[str] = []
    found = False
    last = 0
    for start, end in spans + [(len(content), len(content))]:
        segment = content[last:start]
        if value in segment:
            found = True
            segment = segment.replace(value, replacement)
        pieces.append(segment)
        pieces.append(content[start:end])
        last = end
    return "".join(pieces), found


def redact_content(content: str, secrets: Sequence[SecretValue]) -> tuple[str, list[str]]:
    """
    Replace every occurrence of every secret found in ``content``.

    Secrets are applied in universe order, each against the output of the
    previous replacement, so the result is deterministic for a given universe.
    Text inside an existing ``(env var: KEY)`` annotation is never touched, so
    a key that contains its own value cannot be redacted twice.

    Returns:
        Tuple of (new content, distinct redacted keys in first-seen order)
    """
    annotation = _annotation_pattern(secrets)
    keys: list[str] = []
    for secret in secrets:
        if not secret.value or secret.value not in content:
            continue
        content, found = _replace_outside(
            content, secret.value, redacted_placeholder(secret), annotation
        )
        if found and secret.key not in keys:
            keys.append(secret.key)
    return content, keys


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_bytes(content.encode("utf-8"))
    except OSError as e:
        raise RedactionWriteError(f"Failed to write redacted content to {path}: {e}") from e


def redact_files(
    files: Sequence[CandidateFile],
    secrets: Sequence[SecretValue],
    config: ScannerConfig,
    apply: bool,
) -> tuple[int, list[RedactionResult]]:
    """
    Redact secrets in files on disk.

    Binary-extension, unreadable and NUL-containing files are skipped and not
    counted. Each file is read once. With ``apply`` False the new content is
    discarded, but the returned results are the same as for an applied run.

    Returns:
        Tuple of (files_scanned, results)

    Raises:
        RedactionWriteError: If writing a file fails while applying
    """
    files_scanned = 0
    results: list[RedactionResult] = []

    for candidate in files:
        if is_binary_path(candidate.path, config.binary_extensions):
            continue

        content = read_text_file(candidate.path)
        if content is None:
            continue

        files_scanned += 1
        new_content, keys = redact_content(content, secrets)
        if not keys:
            continue

        results.append(RedactionResult(file_path=candidate.path, keys=keys))
        if apply:
            _write_text(candidate.path, new_content)
            logger.info(f"Redacted {len(keys)} secret(s) in {candidate.path}")
        else:
            logger.debug(f"Would redact {keys} in {candidate.path}")

    return files_scanned, results


class RedactionService:
    """Runs redactions for one working directory and configuration."""

    def __init__(
        self,
        cwd: Path,
        config: ScannerConfig,
        corpus: FileCorpusProvider | None = None,
    ):
        self._cwd = Path(cwd).resolve()
        self._config = config
        self._corpus = corpus or FileCorpusProvider(self._cwd)

    def _run(
        self,
        mode: str,
        candidates: Sequence[CandidateFile],
        secrets: Sequence[SecretValue],
        filter_root: Path,
        apply: bool,
    ) -> RedactionSummary:
        path_filter = PathFilter(self._config, filter_root)
        kept = [c for c in candidates if not path_filter.is_excluded(c.path)]
        files_scanned, results = redact_files(kept, secrets, self._config, apply)
        return RedactionSummary(
            mode=mode,
            root_dir=self._cwd,
            applied=apply,
            files_scanned=files_scanned,
            secret_count=len(secrets),
            results=results,
        )

    def redact_working_tree(
        self, apply: bool = False, include_untracked: bool = False
    ) -> RedactionSummary:
        """Redact tracked files (and optionally untracked ones) on disk."""
        secrets = load_env_secrets(self._cwd, self._config)
        candidates = self._corpus.working_tree(include_untracked)
        return self._run("all", candidates, secrets, self._corpus.repo_root, apply)

    def redact_paths(self, patterns: Sequence[str], apply: bool = False) -> RedactionSummary:
        """Redact explicit paths or globs relative to the working directory."""
        secrets = load_env_secrets(self._cwd, self._config)
        candidates = self._corpus.paths(patterns, ignore=self._config.ignore_file_globs)
        return self._run("paths", candidates, secrets, self._cwd, apply)

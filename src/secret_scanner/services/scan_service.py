"""
Scan service: literal secret matching over candidate files.

Each scan mode builds the secret universe, asks the corpus provider for
candidates, filters them and matches content against every secret.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence

from secret_scanner.core.config import ScannerConfig
from secret_scanner.core.corpus import FileCorpusProvider
from secret_scanner.core.env_secrets import count_env_files, load_env_secrets
from secret_scanner.core.models import CandidateFile, SecretValue
from secret_scanner.core.path_filter import PathFilter, is_binary_path

from .models import Finding, Match, ScanSummary

logger = logging.getLogger(__name__)

ReadFile = Callable[[CandidateFile], str | None]


def find_matches(content: str, secrets: Sequence[SecretValue]) -> list[Match]:
    """Return one Match per secret whose value occurs in ``content``, in universe order."""
    return [
        Match(key=secret.key, env_file=secret.source_file)
        for secret in secrets
        if secret.value and secret.value in content
    ]


def scan_files(
    files: Sequence[CandidateFile],
    secrets: Sequence[SecretValue],
    config: ScannerConfig,
    read_file: ReadFile,
    max_workers: int = 1,
) -> tuple[int, list[Finding]]:
    """
    Match every readable text file against the secret universe.

    Files with a binary extension are skipped without being read. Files whose
    content cannot be read, or that contain a NUL byte, are skipped too.
    Neither kind counts toward ``files_scanned``.

    Args:
        files: Candidates, already path-filtered
        secrets: Secret universe
        config: Scanner configuration (binary extensions)
        read_file: Content reader; returns None for unscannable files
        max_workers: Number of reader threads; results keep input order

    Returns:
        Tuple of (files_scanned, findings)
    """
    readable = [f for f in files if not is_binary_path(f.path, config.binary_extensions)]
    skipped = len(files) - len(readable)
    if skipped:
        logger.debug(f"Skipped {skipped} files with binary extensions")

    if max_workers > 1 and len(readable) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            contents = list(executor.map(read_file, readable))
    else:
        contents = [read_file(f) for f in readable]

    files_scanned = 0
    findings: list[Finding] = []

    for candidate, content in zip(readable, contents):
        if content is None or "\x00" in content:
            continue

        files_scanned += 1
        matches = find_matches(content, secrets)
        if matches:
            findings.append(
                Finding(
                    file_path=candidate.path,
                    matches=matches,
                    source=candidate.source_kind,
                    commit=candidate.commit,
                )
            )

    return files_scanned, findings


class ScanService:
    """
    Runs scans for one working directory and configuration.

    The secret universe is loaded from env files under ``cwd`` on every call,
    so nothing is cached between invocations.
    """

    def __init__(
        self,
        cwd: Path,
        config: ScannerConfig,
        corpus: FileCorpusProvider | None = None,
    ):
        self._cwd = Path(cwd).resolve()
        self._config = config
        self._corpus = corpus or FileCorpusProvider(self._cwd)

    def load_secrets(self) -> list[SecretValue]:
        """Build the secret universe for this invocation."""
        return load_env_secrets(self._cwd, self._config)

    def _summary(self, mode: str, secrets: Sequence[SecretValue]) -> ScanSummary:
        return ScanSummary(
            mode=mode,
            root_dir=self._cwd,
            env_file_count=count_env_files(secrets),
            secret_count=len(secrets),
        )

    def _scan_candidates(
        self,
        candidates: Sequence[CandidateFile],
        secrets: Sequence[SecretValue],
        filter_root: Path,
    ) -> tuple[int, list[Finding]]:
        path_filter = PathFilter(self._config, filter_root)
        kept = [c for c in candidates if not path_filter.is_excluded(c.path)]
        logger.debug(f"{len(kept)} of {len(candidates)} candidates left after filtering")
        return scan_files(
            kept,
            secrets,
            self._config,
            self._corpus.read,
            max_workers=self._config.max_workers,
        )

    def _run(
        self,
        mode: str,
        candidates: Sequence[CandidateFile],
        secrets: Sequence[SecretValue],
        filter_root: Path,
    ) -> ScanSummary:
        summary = self._summary(mode, secrets)
        summary.files_scanned, summary.findings = self._scan_candidates(
            candidates, secrets, filter_root
        )
        logger.info(
            f"Scan ({mode}): {summary.files_scanned} files scanned, "
            f"{len(summary.findings)} findings"
        )
        return summary

    def scan_staged(self, secrets: Sequence[SecretValue] | None = None) -> ScanSummary:
        """Scan files staged in the index, reading their index content."""
        secrets = self.load_secrets() if secrets is None else secrets
        candidates = self._corpus.staged()
        return self._run("staged", candidates, secrets, self._corpus.repo_root)

    def scan_working_tree(
        self,
        include_untracked: bool = False,
        secrets: Sequence[SecretValue] | None = None,
    ) -> ScanSummary:
        """Scan tracked files (and optionally untracked ones) as they are on disk."""
        secrets = self.load_secrets() if secrets is None else secrets
        candidates = self._corpus.working_tree(include_untracked)
        return self._run("working-tree", candidates, secrets, self._corpus.repo_root)

    def scan_history(
        self,
        since: str | None = None,
        secrets: Sequence[SecretValue] | None = None,
    ) -> ScanSummary:
        """Scan every file version introduced by commits reachable from HEAD."""
        secrets = self.load_secrets() if secrets is None else secrets
        candidates = self._corpus.history(since)
        return self._run("history", candidates, secrets, self._corpus.repo_root)

    def scan_paths(self, patterns: Sequence[str]) -> ScanSummary:
        """Scan explicit paths or globs relative to the working directory."""
        secrets = self.load_secrets()
        candidates = self._corpus.paths(patterns, ignore=self._config.ignore_file_globs)
        return self._run("paths", candidates, secrets, self._cwd)

    def scan_all(self, include_untracked: bool = False, since: str | None = None) -> ScanSummary:
        """
        Staged, working-tree and history scans against one shared universe.

        Counts are summed and findings concatenated in that order. The same
        file may be reported once per source; nothing is deduplicated.
        """
        secrets = self.load_secrets()
        parts = [
            self.scan_staged(secrets=secrets),
            self.scan_working_tree(include_untracked, secrets=secrets),
            self.scan_history(since, secrets=secrets),
        ]

        summary = self._summary("all", secrets)
        for part in parts:
            summary.files_scanned += part.files_scanned
            summary.findings.extend(part.findings)
        return summary

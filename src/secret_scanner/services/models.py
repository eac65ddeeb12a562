"""
Result models for scan and redaction runs.

`to_dict()` produces the JSON shape consumed by reporters and CI tooling
(camelCase keys, `ok` flag).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from secret_scanner.core.models import SourceKind


@dataclass(frozen=True)
class Match:
    """One secret key found inside one file."""

    key: str
    env_file: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "envFile": self.env_file}


@dataclass
class Finding:
    """
    A file (with provenance) containing at least one secret.

    Attributes:
        file_path: Absolute path of the file
        matches: Matches in secret universe order
        source: Corpus the file came from
        commit: Commit id for history findings
    """

    file_path: Path
    matches: list[Match]
    source: SourceKind
    commit: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filePath": str(self.file_path),
            "matches": [m.to_dict() for m in self.matches],
            "source": self.source.value,
        }
        if self.commit is not None:
            data["commit"] = self.commit
        return data


@dataclass
class ScanSummary:
    """Aggregate result of a scan."""

    mode: str
    root_dir: Path
    files_scanned: int = 0
    env_file_count: int = 0
    secret_count: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.findings

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "mode": self.mode,
            "rootDir": str(self.root_dir),
            "filesScanned": self.files_scanned,
            "envFileCount": self.env_file_count,
            "secretCount": self.secret_count,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass
class RedactionResult:
    """Distinct keys redacted in one file, in first-seen order."""

    file_path: Path
    keys: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"filePath": str(self.file_path), "keys": list(self.keys)}


@dataclass
class RedactionSummary:
    """Aggregate result of a redaction run (dry run or applied)."""

    mode: str
    root_dir: Path
    applied: bool
    files_scanned: int = 0
    secret_count: int = 0
    results: list[RedactionResult] = field(default_factory=list)

    @property
    def files_changed(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return not self.results

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "mode": self.mode,
            "rootDir": str(self.root_dir),
            "applied": self.applied,
            "filesScanned": self.files_scanned,
            "filesChanged": self.files_changed,
            "secretCount": self.secret_count,
            "results": [r.to_dict() for r in self.results],
        }

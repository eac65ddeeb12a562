"""Tests for ScanService and the literal matcher."""

from dataclasses import replace
from pathlib import Path

import pytest

from secret_scanner.core.config import ScannerConfig
from secret_scanner.core.corpus import FileCorpusProvider
from secret_scanner.core.models import CandidateFile, SecretValue, SourceKind
from secret_scanner.services import Match, ScanService, find_matches, scan_files


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path):
    _write(tmp_path / ".env", "API_KEY=secretvalue123\nPORT=3000\n")
    return tmp_path


class FakeCorpus(FileCorpusProvider):
    """In-memory corpus with fixed candidates per source kind."""

    def __init__(self, cwd: Path, contents: dict[CandidateFile, str]):
        super().__init__(cwd)
        self._repo_root = self.cwd
        self._contents = contents

    def _of(self, kind: SourceKind) -> list[CandidateFile]:
        return [c for c in self._contents if c.source_kind is kind]

    def staged(self):
        return self._of(SourceKind.STAGED)

    def working_tree(self, include_untracked=False):
        return self._of(SourceKind.WORKING_TREE)

    def history(self, since=None):
        return self._of(SourceKind.HISTORY)

    def read(self, candidate):
        return self._contents.get(candidate)


class TestFindMatches:
    def test_matches_follow_universe_order(self):
        secrets = [
            SecretValue(".env", "B_KEY", "second-value"),
            SecretValue(".env", "A_KEY", "first-value"),
        ]

        matches = find_matches("first-value then second-value", secrets)

        assert [m.key for m in matches] == ["B_KEY", "A_KEY"]

    def test_same_value_under_two_keys_reports_both(self):
        secrets = [
            SecretValue(".env", "PRIMARY_TOKEN", "shared-token-1"),
            SecretValue(".env.local", "BACKUP_TOKEN", "shared-token-1"),
        ]

        matches = find_matches("token = 'shared-token-1'", secrets)

        assert matches == [
            Match(key="PRIMARY_TOKEN", env_file=".env"),
            Match(key="BACKUP_TOKEN", env_file=".env.local"),
        ]

    def test_one_match_per_secret_regardless_of_occurrences(self):
        secrets = [SecretValue(".env", "API_KEY", "secretvalue123")]

        matches = find_matches("secretvalue123 secretvalue123", secrets)

        assert len(matches) == 1


class TestScanFiles:
    def test_binary_extension_never_read(self, tmp_path):
        png = CandidateFile(tmp_path / "logo.png", SourceKind.PATHS)
        reads = []

        def read_file(candidate):
            reads.append(candidate)
            return "secretvalue123"

        files_scanned, findings = scan_files(
            [png], [SecretValue(".env", "API_KEY", "secretvalue123")], ScannerConfig(), read_file
        )

        assert reads == []
        assert files_scanned == 0
        assert findings == []

    def test_unreadable_and_nul_content_are_not_counted(self, tmp_path):
        files = [
            CandidateFile(tmp_path / "a.txt", SourceKind.PATHS),
            CandidateFile(tmp_path / "b.txt", SourceKind.PATHS),
            CandidateFile(tmp_path / "c.txt", SourceKind.PATHS),
        ]
        contents = {files[0]: None, files[1]: "bin\x00secretvalue123", files[2]: "clean"}

        files_scanned, findings = scan_files(
            files,
            [SecretValue(".env", "API_KEY", "secretvalue123")],
            ScannerConfig(),
            contents.get,
        )

        assert files_scanned == 1
        assert findings == []

    def test_thread_pool_keeps_input_order(self, tmp_path):
        files = [CandidateFile(tmp_path / f"f{i}.txt", SourceKind.PATHS) for i in range(20)]
        secrets = [SecretValue(".env", "API_KEY", "secretvalue123")]

        files_scanned, findings = scan_files(
            files,
            secrets,
            ScannerConfig(),
            lambda c: "uses secretvalue123",
            max_workers=4,
        )

        assert files_scanned == 20
        assert [f.file_path for f in findings] == [f.path for f in files]


class TestScanPaths:
    def test_reports_file_containing_secret(self, project):
        _write(project / "src" / "config.ts", 'export const key = "secretvalue123";\n')

        summary = ScanService(project, ScannerConfig()).scan_paths(["src/config.ts"])

        assert summary.mode == "paths"
        assert summary.files_scanned == 1
        assert summary.secret_count == 1
        assert summary.env_file_count == 1
        assert len(summary.findings) == 1
        finding = summary.findings[0]
        assert finding.file_path == (project / "src" / "config.ts").resolve()
        assert finding.matches == [Match(key="API_KEY", env_file=".env")]
        assert finding.source is SourceKind.PATHS
        assert not summary.ok

    def test_clean_file_is_ok(self, project):
        _write(project / "src" / "app.ts", "console.log('hello');\n")

        summary = ScanService(project, ScannerConfig()).scan_paths(["src/**/*.ts"])

        assert summary.ok
        assert summary.files_scanned == 1

    def test_binary_file_is_never_reported(self, project):
        (project / "assets").mkdir()
        (project / "assets" / "logo.png").write_bytes(b"secretvalue123")

        summary = ScanService(project, ScannerConfig()).scan_paths(["assets"])

        assert summary.ok
        assert summary.files_scanned == 0

    def test_env_files_and_ignored_dirs_are_not_targets(self, project):
        _write(project / "node_modules" / "lib" / "index.js", "secretvalue123")
        _write(project / "docs" / "sample.env.md", "secretvalue123")

        summary = ScanService(project, ScannerConfig()).scan_paths(["**/*"])

        assert summary.ok

    def test_allow_globs_suppress_findings(self, project):
        _write(project / "examples" / "demo.ts", "secretvalue123")
        config = replace(ScannerConfig(), allow_file_globs=["examples/**"])

        summary = ScanService(project, config).scan_paths(["examples"])

        assert summary.ok

    def test_empty_universe_reports_nothing(self, tmp_path):
        _write(tmp_path / "app.ts", "secretvalue123")

        summary = ScanService(tmp_path, ScannerConfig()).scan_paths(["app.ts"])

        assert summary.ok
        assert summary.secret_count == 0
        assert summary.files_scanned == 1


class TestScanAll:
    def test_counts_are_summed_and_findings_concatenated(self, project):
        path = (project / "src" / "config.ts").resolve()
        staged = CandidateFile(path, SourceKind.STAGED)
        working = CandidateFile(path, SourceKind.WORKING_TREE)
        old = CandidateFile(path, SourceKind.HISTORY, commit="a" * 40)
        clean = CandidateFile((project / "README.md").resolve(), SourceKind.WORKING_TREE)
        corpus = FakeCorpus(
            project,
            {
                staged: "key = secretvalue123",
                working: "key = secretvalue123",
                clean: "nothing here",
                old: "key = secretvalue123",
            },
        )
        service = ScanService(project, ScannerConfig(), corpus=corpus)

        parts = [service.scan_staged(), service.scan_working_tree(), service.scan_history()]
        summary = service.scan_all()

        assert summary.mode == "all"
        assert summary.files_scanned == sum(p.files_scanned for p in parts) == 4
        assert [f.source for f in summary.findings] == [
            SourceKind.STAGED,
            SourceKind.WORKING_TREE,
            SourceKind.HISTORY,
        ]
        assert summary.findings[2].commit == "a" * 40
        assert summary.secret_count == 1

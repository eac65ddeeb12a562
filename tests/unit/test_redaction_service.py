"""Tests for RedactionService and placeholder rewriting."""

from pathlib import Path

import pytest

from secret_scanner.core.config import ScannerConfig
from secret_scanner.core.errors import RedactionWriteError
from secret_scanner.core.models import SecretValue
from secret_scanner.services import RedactionService, redact_content, redacted_placeholder


@pytest.fixture
def project(tmp_path):
    (tmp_path / ".env").write_text("API_KEY=secretvalue123\nDB_PASSWORD=hunter2hunter2\n", encoding="utf-8")
    (tmp_path / "src").mkdir()
    return tmp_path


def test_placeholder_keeps_prefix_and_names_key():
    secret = SecretValue(".env", "API_KEY", "secretvalue123")

    assert redacted_placeholder(secret) == "secr********** (env var: API_KEY)"


def test_redact_content_replaces_every_occurrence():
    secrets = [SecretValue(".env", "API_KEY", "secretvalue123")]

    content, keys = redact_content("a=secretvalue123\nb=secretvalue123\n", secrets)

    assert content == (
        "a=secr********** (env var: API_KEY)\n"
        "b=secr********** (env var: API_KEY)\n"
    )
    assert keys == ["API_KEY"]


def test_redact_content_reports_each_key_once():
    secrets = [
        SecretValue(".env", "API_KEY", "secretvalue123"),
        SecretValue(".env.local", "API_KEY", "othersecret456"),
    ]

    _, keys = redact_content("secretvalue123 othersecret456", secrets)

    assert keys == ["API_KEY"]


def test_redact_content_without_secrets_is_unchanged():
    assert redact_content("plain text", []) == ("plain text", [])


def test_dry_run_matches_apply_without_writing(project):
    target = project / "src" / "config.ts"
    original = 'const key = "secretvalue123";\nconst pw = "hunter2hunter2";\n'
    target.write_text(original, encoding="utf-8")
    service = RedactionService(project, ScannerConfig())

    dry = service.redact_paths(["src"], apply=False)

    assert target.read_text(encoding="utf-8") == original
    assert not dry.applied

    applied = service.redact_paths(["src"], apply=True)

    assert applied.applied
    assert [r.to_dict() for r in dry.results] == [r.to_dict() for r in applied.results]
    assert dry.results[0].keys == ["API_KEY", "DB_PASSWORD"]
    assert target.read_text(encoding="utf-8") == (
        'const key = "secr********** (env var: API_KEY)";\n'
        'const pw = "hunt********** (env var: DB_PASSWORD)";\n'
    )


def test_second_apply_is_a_no_op(project):
    target = project / "src" / "config.ts"
    target.write_text("token: secretvalue123\n", encoding="utf-8")
    service = RedactionService(project, ScannerConfig())

    first = service.redact_paths(["src/config.ts"], apply=True)
    after_first = target.read_bytes()
    second = service.redact_paths(["src/config.ts"], apply=True)

    assert first.files_changed == 1
    assert second.ok
    assert second.files_scanned == 1
    assert target.read_bytes() == after_first


def test_line_endings_are_preserved(project):
    target = project / "src" / "settings.ini"
    target.write_bytes(b"[auth]\r\ntoken=secretvalue123\r\n")

    RedactionService(project, ScannerConfig()).redact_paths(["src/settings.ini"], apply=True)

    assert target.read_bytes() == b"[auth]\r\ntoken=secr********** (env var: API_KEY)\r\n"


def test_env_and_binary_files_are_left_alone(project):
    (project / "src" / "image.png").write_bytes(b"secretvalue123")
    env_before = (project / ".env").read_bytes()

    summary = RedactionService(project, ScannerConfig()).redact_paths(["**/*"], apply=True)

    assert summary.ok
    assert (project / ".env").read_bytes() == env_before
    assert (project / "src" / "image.png").read_bytes() == b"secretvalue123"


def test_write_failure_raises(project, monkeypatch):
    target = project / "src" / "config.ts"
    target.write_text("secretvalue123", encoding="utf-8")

    def fail(self, data):
        raise PermissionError("read-only file system")

    monkeypatch.setattr(Path, "write_bytes", fail)

    with pytest.raises(RedactionWriteError):
        RedactionService(project, ScannerConfig()).redact_paths(["src/config.ts"], apply=True)


def test_summary_json_shape(project):
    (project / "src" / "config.ts").write_text("secretvalue123", encoding="utf-8")

    data = RedactionService(project, ScannerConfig()).redact_paths(["src"]).to_dict()

    assert data["ok"] is False
    assert data["mode"] == "paths"
    assert data["applied"] is False
    assert data["filesScanned"] == 1
    assert data["filesChanged"] == 1
    assert data["secretCount"] == 2
    assert data["results"][0]["keys"] == ["API_KEY"]


def test_key_containing_its_own_value_is_redacted_once():
    secrets = [SecretValue(".env", "MY_SECRET_TOKEN_1", "SECRET_TOKEN_1")]

    once, keys = redact_content("x=SECRET_TOKEN_1\n", secrets)
    twice, keys_again = redact_content(once, secrets)

    assert once == "x=SECR********** (env var: MY_SECRET_TOKEN_1)\n"
    assert keys == ["MY_SECRET_TOKEN_1"]
    assert twice == once
    assert keys_again == []


def test_glob_redaction_skips_files_inside_matching_directory(project):
    (project / "src" / "app.js").write_text("secretvalue123\n", encoding="utf-8")
    notes = project / "lib.js" / "NOTES.md"
    notes.parent.mkdir()
    notes.write_text("secretvalue123\n", encoding="utf-8")

    summary = RedactionService(project, ScannerConfig()).redact_paths(["**/*.js"], apply=True)

    assert [r.file_path.name for r in summary.results] == ["app.js"]
    assert notes.read_text(encoding="utf-8") == "secretvalue123\n"

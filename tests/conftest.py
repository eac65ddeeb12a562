"""Shared pytest fixtures."""

import pytest


@pytest.fixture(autouse=True)
def isolated_config_env(tmp_path_factory, monkeypatch):
    """Keep user-level config and env overrides from leaking into tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))
    for var in (
        "SECRET_SCANNER_CONFIG",
        "SECRET_SCANNER_MIN_SECRET_LENGTH",
        "SECRET_SCANNER_MAX_WORKERS",
        "SECRET_SCANNER_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)

"""
Core Layer - Configuration, secret universe and path filtering.

FileCorpusProvider lives in secret_scanner.core.corpus and is imported from
there; it depends on the infrastructure layer.
"""

from secret_scanner.core.config import (
    LoadedConfig,
    ScannerConfig,
    load_config,
    write_default_config,
)
from secret_scanner.core.env_secrets import (
    filter_secrets,
    find_env_files,
    load_env_secrets,
    parse_env_content,
    parse_env_file,
)
from secret_scanner.core.errors import (
    ConfigError,
    NotARepositoryError,
    RedactionWriteError,
    SecretScannerError,
)
from secret_scanner.core.models import CandidateFile, SecretValue, SourceKind
from secret_scanner.core.path_filter import PathFilter, is_binary_path

__all__ = [
    # Config
    "ScannerConfig",
    "LoadedConfig",
    "load_config",
    "write_default_config",
    # Errors
    "SecretScannerError",
    "ConfigError",
    "NotARepositoryError",
    "RedactionWriteError",
    # Models
    "SecretValue",
    "SourceKind",
    "CandidateFile",
    # Secret universe
    "parse_env_content",
    "parse_env_file",
    "filter_secrets",
    "find_env_files",
    "load_env_secrets",
    # Filtering
    "PathFilter",
    "is_binary_path",
]

"""
Configuration module for secret-scanner.

Supports loading from JSON/YAML files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.

Resolution order (later wins, key by key):
    1. defaults.yaml shipped with the package
    2. user config ($XDG_CONFIG_HOME/secret-scanner/config.json)
    3. project config (secret-scanner.config.json in the working directory)

An explicit config path (argument or SECRET_SCANNER_CONFIG) replaces steps 2-3.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from secret_scanner.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None

PROJECT_CONFIG_FILES = (
    "secret-scanner.config.json",
    ".secret-scanner.json",
    ".secret-scanner.yaml",
)

CONFIG_ENV_VAR = "SECRET_SCANNER_CONFIG"

# Keys left out of the file written by `init`
INIT_EXCLUDED_KEYS = ("envFiles", "maxWorkers", "logLevel")

# camelCase keys used by secret-scanner.config.json
_CAMEL_TO_SNAKE = {
    "envFiles": "env_files",
    "envFileGlobs": "env_file_globs",
    "envFileExcludes": "env_file_excludes",
    "ignoreFileGlobs": "ignore_file_globs",
    "allowFileGlobs": "allow_file_globs",
    "minSecretLength": "min_secret_length",
    "commonValues": "common_values",
    "binaryExtensions": "binary_extensions",
    "maxWorkers": "max_workers",
    "logLevel": "log_level",
}
_SNAKE_TO_CAMEL = {snake: camel for camel, snake in _CAMEL_TO_SNAKE.items()}

_LIST_FIELDS = frozenset([
    "env_files",
    "env_file_globs",
    "env_file_excludes",
    "ignore_file_globs",
    "allow_file_globs",
    "common_values",
    "binary_extensions",
])
_INT_FIELDS = frozenset(["min_secret_length", "max_workers"])
_STR_FIELDS = frozenset(["log_level"])


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    value = _load_defaults().get(key, fallback)
    # Hand out copies so callers never share the cached lists
    return list(value) if isinstance(value, list) else value


@dataclass(frozen=True)
class ScannerConfig:
    """Fully resolved configuration for one scan or redact invocation."""

    env_files: list[str] = field(default_factory=lambda: _get_default("env_files", []))
    env_file_globs: list[str] = field(
        default_factory=lambda: _get_default("env_file_globs", [".env", ".env.*"])
    )
    env_file_excludes: list[str] = field(
        default_factory=lambda: _get_default("env_file_excludes", [".env.example"])
    )
    ignore_file_globs: list[str] = field(
        default_factory=lambda: _get_default(
            "ignore_file_globs",
            [
                "**/node_modules/**",
                "**/.git/**",
                "**/.next/**",
                "**/dist/**",
                "**/build/**",
                "**/coverage/**",
                "**/.turbo/**",
            ],
        )
    )
    allow_file_globs: list[str] = field(
        default_factory=lambda: _get_default("allow_file_globs", [])
    )
    min_secret_length: int = field(default_factory=lambda: _get_default("min_secret_length", 8))
    common_values: list[str] = field(
        default_factory=lambda: _get_default(
            "common_values",
            ["true", "false", "null", "undefined", "localhost", "development", "production"],
        )
    )
    binary_extensions: list[str] = field(
        default_factory=lambda: _get_default(
            "binary_extensions", [".png", ".jpg", ".jpeg", ".gif", ".pdf", ".zip"]
        )
    )
    max_workers: int = field(default_factory=lambda: _get_default("max_workers", 1))
    log_level: str = field(default_factory=lambda: _get_default("log_level", "WARNING"))

    def __post_init__(self) -> None:
        if self.min_secret_length < 0:
            raise ConfigError(
                f"min_secret_length must be >= 0, got {self.min_secret_length}"
            )
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")

    def merged(self, data: dict[str, Any]) -> "ScannerConfig":
        """
        Return a copy with values from ``data`` applied.

        A key replaces the current value only when its type fits: lists of
        strings for list fields, integers for numeric fields. Anything else is
        ignored, matching how partially written config files are tolerated.
        """
        updates: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = _CAMEL_TO_SNAKE.get(raw_key, raw_key)
            if key in _LIST_FIELDS:
                if isinstance(value, list) and all(isinstance(v, str) for v in value):
                    updates[key] = list(value)
                else:
                    logger.warning(f"Ignoring config key '{raw_key}': expected a list of strings")
            elif key in _INT_FIELDS:
                if isinstance(value, int) and not isinstance(value, bool):
                    updates[key] = value
                else:
                    logger.warning(f"Ignoring config key '{raw_key}': expected an integer")
            elif key in _STR_FIELDS:
                if isinstance(value, str):
                    updates[key] = value
            else:
                logger.debug(f"Ignoring unknown config key: {raw_key}")

        return replace(self, **updates) if updates else self

    def with_env_overrides(self) -> "ScannerConfig":
        """
        Return a copy with environment variable overrides applied.

        Environment variables follow the pattern: SECRET_SCANNER_<KEY>
        Examples:
            - SECRET_SCANNER_MIN_SECRET_LENGTH
            - SECRET_SCANNER_MAX_WORKERS
            - SECRET_SCANNER_LOG_LEVEL
        """
        env_mappings = {
            "SECRET_SCANNER_MIN_SECRET_LENGTH": ("min_secret_length", int),
            "SECRET_SCANNER_MAX_WORKERS": ("max_workers", int),
            "SECRET_SCANNER_LOG_LEVEL": ("log_level", str),
        }

        updates: dict[str, Any] = {}
        for env_var, (key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            try:
                updates[key] = converter(value)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from e

        return replace(self, **updates) if updates else self

    def to_dict(self, exclude: Iterable[str] = ()) -> dict[str, Any]:
        """Convert configuration to a dictionary using the on-disk camelCase keys."""
        skipped = set(exclude)
        data = {_SNAKE_TO_CAMEL.get(k, k): v for k, v in asdict(self).items()}
        return {k: v for k, v in data.items() if k not in skipped}

    def to_json(self, exclude: Iterable[str] = ()) -> str:
        """Serialize configuration to a JSON string."""
        return json.dumps(self.to_dict(exclude), indent=2)

    def to_yaml(self, exclude: Iterable[str] = ()) -> str:
        """Serialize configuration to a YAML string."""
        return yaml.dump(self.to_dict(exclude), default_flow_style=False, sort_keys=False)

    def save(self, path: Path | str, exclude: Iterable[str] = ()) -> None:
        """
        Save configuration to a file.

        YAML is written for .yaml/.yml paths and JSON for anything else, the
        same rule read_config_file uses when loading.

        Args:
            path: Path to save the configuration
            exclude: camelCase keys to leave out of the file
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml(exclude)
        else:
            content = self.to_json(exclude) + "\n"

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@dataclass(frozen=True)
class LoadedConfig:
    """Resolved configuration plus the files it was read from."""

    config: ScannerConfig
    sources: list[Path] = field(default_factory=list)


def read_config_file(path: Path | str) -> dict[str, Any]:
    """Read a JSON or YAML config file into a dictionary."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) if content.strip() else {}
        else:
            data = json.loads(content) if content.strip() else {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file: {path}")
    return data


def user_config_path() -> Path:
    """Location of the per-user config file."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "secret-scanner" / "config.json"
    return Path.home() / ".config" / "secret-scanner" / "config.json"


def find_project_config(cwd: Path) -> Path | None:
    """Return the first project config file present in ``cwd``."""
    for name in PROJECT_CONFIG_FILES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    cwd: Path | str,
    config_path: Optional[Path | str] = None,
    apply_env: bool = True,
) -> LoadedConfig:
    """
    Load configuration for an invocation rooted at ``cwd``.

    Args:
        cwd: Working directory; project config and relative paths resolve here.
        config_path: Optional explicit config file. Falls back to the
            SECRET_SCANNER_CONFIG environment variable.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        LoadedConfig with the merged configuration and its source files

    Raises:
        ConfigError: If an explicit config file is missing or any file is malformed
    """
    cwd = Path(cwd)
    config = ScannerConfig()
    sources: list[Path] = []

    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        resolved = (cwd / explicit).resolve()
        config = config.merged(read_config_file(resolved))
        sources.append(resolved)
    else:
        user_path = user_config_path()
        if user_path.is_file():
            config = config.merged(read_config_file(user_path))
            sources.append(user_path)

        project_path = find_project_config(cwd)
        if project_path is not None:
            config = config.merged(read_config_file(project_path))
            sources.append(project_path)

    if apply_env:
        config = config.with_env_overrides()

    logger.debug(f"Loaded config from {[str(s) for s in sources] or 'defaults'}")
    return LoadedConfig(config=config, sources=sources)


def write_default_config(path: Path | str, force: bool = False) -> Path:
    """
    Write the default configuration to ``path``.

    Raises:
        FileExistsError: If the file exists and ``force`` is False
    """
    path = Path(path)
    if path.exists() and not force:
        raise FileExistsError(f"Config already exists at {path}. Use --force to overwrite.")

    ScannerConfig().save(path, exclude=INIT_EXCLUDED_KEYS)
    return path


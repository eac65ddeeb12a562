"""
Secret universe builder.

Reads `.env`-style files and decides which values are worth looking for in
the rest of the tree. Only literal values are collected; there is no pattern
or entropy based detection.
"""

import logging
from pathlib import Path
from typing import Iterable

from secret_scanner.core.config import ScannerConfig
from secret_scanner.core.errors import ConfigError
from secret_scanner.core.models import SecretValue
from secret_scanner.core.path_utils import expand_globs

logger = logging.getLogger(__name__)

LOCALHOST_PREFIXES = ("http://localhost", "https://localhost")


def _strip_quotes(value: str) -> str:
    """Remove exactly one layer of matching straight quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_content(content: str, source_file: str) -> list[SecretValue]:
    """
    Parse env file text into (key, value) entries.

    Blank lines and '#' comments are skipped. Each remaining line is split on
    the first '=', both sides are trimmed and one layer of quotes is removed
    from the value. Lines without '=' or with an empty key are ignored.

    Args:
        content: Raw env file text
        source_file: Name recorded on every entry

    Returns:
        Entries in line order, unfiltered (empty values included)
    """
    entries: list[SecretValue] = []

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep or not key:
            continue

        entries.append(
            SecretValue(source_file=source_file, key=key, value=_strip_quotes(value.strip()))
        )

    return entries


def parse_env_file(path: Path) -> list[SecretValue]:
    """Parse an env file from disk. Entries are tagged with the file's base name."""
    content = path.read_text(encoding="utf-8")
    return parse_env_content(content, path.name)


def is_secret_value(value: str, config: ScannerConfig, common: set[str] | None = None) -> bool:
    """Check whether a parsed value qualifies as a secret under the filter policy."""
    if not value or len(value) < config.min_secret_length:
        return False
    if common is None:
        common = {v.lower() for v in config.common_values}
    if value.lower() in common:
        return False
    # str.isdigit() accepts non-ASCII digits; only 0-9 count as numeric here
    if value.isascii() and value.isdigit():
        return False
    if value.startswith(LOCALHOST_PREFIXES):
        return False
    return True


def filter_secrets(values: Iterable[SecretValue], config: ScannerConfig) -> list[SecretValue]:
    """Keep only the entries whose value qualifies as a secret, preserving order."""
    common = {v.lower() for v in config.common_values}
    return [entry for entry in values if is_secret_value(entry.value, config, common)]


def find_env_files(root: Path, config: ScannerConfig) -> list[Path]:
    """
    Resolve the env files for an invocation.

    An explicit ``env_files`` list wins and is returned as given (resolved
    against root, not checked for existence). Otherwise ``env_file_globs`` are
    expanded under root, dot files included, minus ``env_file_excludes``.
    """
    root = Path(root).resolve()

    if config.env_files:
        return [(root / env_file).resolve() for env_file in config.env_files]

    return expand_globs(root, config.env_file_globs, ignore=config.env_file_excludes)


def load_env_secrets(root: Path, config: ScannerConfig) -> list[SecretValue]:
    """
    Build the secret universe for ``root``.

    Returns:
        Secrets in env-file discovery order, then line order. Duplicate keys
        and values across or within files are all kept.

    Raises:
        ConfigError: If a resolved env file does not exist or cannot be read
    """
    values: list[SecretValue] = []

    for env_file in find_env_files(root, config):
        if not env_file.is_file():
            raise ConfigError(f"Env file not found: {env_file}")
        try:
            parsed = parse_env_file(env_file)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read env file {env_file}: {e}") from e
        logger.debug(f"Parsed {len(parsed)} entries from {env_file}")
        values.extend(parsed)

    secrets = filter_secrets(values, config)
    logger.info(f"Loaded {len(secrets)} secrets from {len(values)} env entries")
    return secrets


def count_env_files(secrets: Iterable[SecretValue]) -> int:
    """Number of distinct env files contributing at least one secret."""
    return len({secret.source_file for secret in secrets})

"""Exception types for secret-scanner."""


class SecretScannerError(Exception):
    """Base exception for secret-scanner errors."""

    pass


class ConfigError(SecretScannerError):
    """Configuration is invalid or a referenced file is missing."""

    pass


class NotARepositoryError(SecretScannerError):
    """A git-backed operation was attempted outside a repository."""

    pass


class RedactionWriteError(SecretScannerError, OSError):
    """Writing redacted content back to disk failed."""

    pass

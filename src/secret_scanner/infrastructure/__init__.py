"""
Infrastructure Layer - External tool adapters.
"""

from secret_scanner.infrastructure.git_client import GitClient, decode_text

__all__ = ["GitClient", "decode_text"]

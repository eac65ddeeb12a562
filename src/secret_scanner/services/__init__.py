"""
Services Layer - Scan and redaction orchestration.
"""

from secret_scanner.services.models import (
    Finding,
    Match,
    RedactionResult,
    RedactionSummary,
    ScanSummary,
)
from secret_scanner.services.redaction_service import (
    RedactionService,
    redact_content,
    redact_files,
    redacted_placeholder,
)
from secret_scanner.services.scan_service import ScanService, find_matches, scan_files

__all__ = [
    # Models
    "Match",
    "Finding",
    "ScanSummary",
    "RedactionResult",
    "RedactionSummary",
    # Scan
    "ScanService",
    "scan_files",
    "find_matches",
    # Redaction
    "RedactionService",
    "redact_files",
    "redact_content",
    "redacted_placeholder",
]

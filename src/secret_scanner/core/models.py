"""
Data models shared by the secret universe builder and the file corpus.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class SecretValue:
    """
    One candidate secret extracted from one env file.

    Attributes:
        source_file: Base name of the env file the value came from (e.g. '.env')
        key: Variable name on the left of '='
        value: Unquoted value; never empty once it passed the secret filter
    """

    source_file: str
    key: str
    value: str


class SourceKind(str, Enum):
    """Where a candidate file's content comes from."""

    STAGED = "staged"
    WORKING_TREE = "working-tree"
    HISTORY = "history"
    PATHS = "paths"


@dataclass(frozen=True)
class CandidateFile:
    """
    A file to scan plus its provenance.

    The same path may appear several times with different provenance
    (staged and working-tree, or once per commit in history). These are
    distinct candidates and are never merged.

    Attributes:
        path: Absolute path of the file in the working tree
        source_kind: Corpus the file was taken from
        commit: Commit id, only set for history candidates
    """

    path: Path
    source_kind: SourceKind
    commit: str | None = None

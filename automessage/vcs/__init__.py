"""Local repository introspection for automessage."""

from automessage.vcs.models import (
    SHORT_SHA_LENGTH,
    CommitRecord,
    FileStatus,
    StagedFile,
    abbreviate_sha,
)
from automessage.vcs.reader import AUTOMESSAGE_IDENTITY, RepositoryReader

__all__ = [
    "AUTOMESSAGE_IDENTITY",
    "CommitRecord",
    "FileStatus",
    "RepositoryReader",
    "SHORT_SHA_LENGTH",
    "StagedFile",
    "abbreviate_sha",
]

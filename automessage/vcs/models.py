"""Pydantic models for facts extracted from a local repository."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

SHORT_SHA_LENGTH = 8


def abbreviate_sha(sha: str, length: int = SHORT_SHA_LENGTH) -> str:
    """Abbreviate a SHA without assuming it is at least `length` characters."""
    return sha[: min(length, len(sha))]


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    UNKNOWN = "unknown"


class StagedFile(BaseModel):
    """A changed path between the index and the working tree."""

    model_config = ConfigDict(frozen=True)

    path: str
    status: FileStatus


class CommitRecord(BaseModel):
    """One commit, resolved and flattened for prompt building."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(description="Full hex object id")
    message: str
    author: str
    timestamp: str = Field(description="Committer time, ISO 8601")
    files_changed: tuple[str, ...] = ()

    @property
    def short_sha(self) -> str:
        return abbreviate_sha(self.sha)

    @property
    def subject(self) -> str:
        """First line of the message."""
        stripped = self.message.strip()
        return stripped.splitlines()[0] if stripped else ""

"""Pydantic models for drafter results."""

from pydantic import BaseModel, ConfigDict

from automessage.vcs.models import StagedFile


class CommitDraft(BaseModel):
    """A generated commit message and the changes it describes."""

    model_config = ConfigDict(frozen=True)

    message: str
    files: tuple[StagedFile, ...]

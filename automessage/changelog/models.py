"""Pydantic models for changelog sections."""

from pydantic import BaseModel, ConfigDict


class ChangelogSection(BaseModel):
    """The unit merged into a changelog document."""

    model_config = ConfigDict(frozen=True)

    version_label: str
    iso_date: str
    body: str

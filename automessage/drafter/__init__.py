"""Drafter subsystem: builds prompts and turns generations into artifacts."""

from automessage.drafter.composer import ComposerSettings, RequestComposer
from automessage.drafter.drafter import MessageDrafter
from automessage.drafter.models import CommitDraft

__all__ = [
    "CommitDraft",
    "ComposerSettings",
    "MessageDrafter",
    "RequestComposer",
]

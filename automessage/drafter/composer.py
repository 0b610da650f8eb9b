"""RequestComposer: turns repository facts into GenerationRequests.

Composition is pure: no network, no filesystem, and the same inputs always
produce the same request.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from automessage.config.models import AutoMessageConfig
from automessage.drafter import prompts
from automessage.llm.models import GenerationRequest
from automessage.vcs.models import CommitRecord, StagedFile

COMMIT_MAX_TOKENS = 150
COMMIT_MULTI_LINE_MAX_TOKENS = 300
TAG_MAX_TOKENS = 300
CHANGELOG_MAX_TOKENS = 500
TEMPERATURE = 0.7


class ComposerSettings(BaseModel):
    """The slice of configuration the composer needs, passed by value."""

    model_config = ConfigDict(frozen=True)

    language: str = "en-US"
    default_instruction: str | None = None
    emoji: bool = False
    multi_line: bool = False
    max_diff_chars: int = 12_000

    @classmethod
    def from_config(cls, config: AutoMessageConfig) -> ComposerSettings:
        return cls(
            language=config.language,
            default_instruction=config.prompt,
            emoji=config.emoji,
            multi_line=config.multi_line,
            max_diff_chars=config.max_diff_chars,
        )


class RequestComposer:
    """Builds the commit, tag and changelog prompt shapes."""

    def __init__(self, settings: ComposerSettings | None = None) -> None:
        self.settings = settings or ComposerSettings()

    def commit_request(
        self,
        files: Sequence[StagedFile],
        diff: str,
        custom_instruction: str | None = None,
        max_length: int = 72,
    ) -> GenerationRequest:
        s = self.settings
        if s.multi_line:
            breaking_rule = prompts.MULTI_LINE_BREAKING_RULE
            shape_rule = prompts.MULTI_LINE_SHAPE_RULE.format(max_length=max_length)
        else:
            breaking_rule = prompts.SINGLE_LINE_BREAKING_RULE
            shape_rule = prompts.SINGLE_LINE_SHAPE_RULE
        system = prompts.COMMIT_SYSTEM_PROMPT.format(
            prefix_rule=prompts.GITMOJI_PREFIX_RULE if s.emoji else prompts.CONVENTIONAL_PREFIX_RULE,
            breaking_rule=breaking_rule,
            shape_rule=shape_rule,
            language_rule=prompts.language_rule(s.language, "commit message"),
        )

        file_list = "\n".join(f"- {f.path} ({f.status.value})" for f in files) or "(none)"
        user = (
            f"{self._instruction('commit', custom_instruction)}\n\n"
            f"Files changed:\n{file_list}\n\n"
            f"Diff:\n{_truncate(diff, s.max_diff_chars)}"
        )
        return GenerationRequest(
            system_instruction=system,
            user_content=user,
            max_output_tokens=COMMIT_MULTI_LINE_MAX_TOKENS if s.multi_line else COMMIT_MAX_TOKENS,
            temperature=TEMPERATURE,
        )

    def tag_request(
        self,
        tag_name: str,
        commit: CommitRecord,
        custom_instruction: str | None = None,
    ) -> GenerationRequest:
        system = prompts.TAG_SYSTEM_PROMPT.format(
            language_rule=prompts.language_rule(self.settings.language, "tag message"),
        )
        files = "\n".join(f"- {path}" for path in commit.files_changed) or "(none)"
        user = (
            f"{self._instruction('tag', custom_instruction)}\n\n"
            f"Tag name: {tag_name}\n"
            f"Commit SHA: {commit.sha}\n"
            f"Commit message: {commit.message.strip()}\n"
            f"Author: {commit.author}\n"
            f"Date: {commit.timestamp}\n"
            f"Files changed:\n{files}"
        )
        return GenerationRequest(
            system_instruction=system,
            user_content=user,
            max_output_tokens=TAG_MAX_TOKENS,
            temperature=TEMPERATURE,
        )

    def changelog_request(
        self,
        commits: Sequence[CommitRecord],
        custom_instruction: str | None = None,
    ) -> GenerationRequest:
        system = prompts.CHANGELOG_SYSTEM_PROMPT.format(
            language_rule=prompts.language_rule(self.settings.language, "changelog"),
        )
        user = (
            f"{self._instruction('changelog', custom_instruction)}\n\n"
            f"Commits:\n{render_commit_list(commits)}"
        )
        return GenerationRequest(
            system_instruction=system,
            user_content=user,
            max_output_tokens=CHANGELOG_MAX_TOKENS,
            temperature=TEMPERATURE,
        )

    def _instruction(self, kind: str, custom_instruction: str | None) -> str:
        """Custom override, else configured default, else the built-in one."""
        return (
            custom_instruction
            or self.settings.default_instruction
            or prompts.DEFAULT_INSTRUCTIONS[kind]
        )


def render_commit_list(commits: Sequence[CommitRecord]) -> str:
    """One `- <sha>: <message> (<date>) by <author>` line per commit."""
    return "\n".join(
        f"- {c.short_sha}: {' '.join(c.message.split())} ({c.timestamp}) by {c.author}"
        for c in commits
    )


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... (diff truncated, {len(text) - limit} more characters)"

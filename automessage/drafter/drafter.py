"""MessageDrafter: coordinates reader, composer and client for each artifact."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date

from automessage.changelog.models import ChangelogSection
from automessage.changelog.template import build_templated_body
from automessage.changelog.version import derive_version_label
from automessage.drafter.composer import RequestComposer
from automessage.drafter.models import CommitDraft
from automessage.errors import ConfigurationError, GenerationFailed
from automessage.llm.client import GenerationClient
from automessage.vcs.models import CommitRecord
from automessage.vcs.reader import RepositoryReader

logger = logging.getLogger(__name__)


class MessageDrafter:
    """Drafts commit messages, tag messages and changelog sections.

    Pipeline (templated changelogs need no client):
        RepositoryReader → RequestComposer → GenerationClient → artifact
    """

    def __init__(
        self,
        reader: RepositoryReader,
        composer: RequestComposer,
        client: GenerationClient | None = None,
        client_factory: Callable[[], GenerationClient] | None = None,
    ) -> None:
        self.reader = reader
        self.composer = composer
        self._client = client
        self._client_factory = client_factory

    @property
    def client(self) -> GenerationClient:
        if self._client is None and self._client_factory is not None:
            self._client = self._client_factory()
        if self._client is None:
            raise ConfigurationError("No generation client configured for this drafter")
        return self._client

    async def draft_commit_message(
        self,
        custom_instruction: str | None = None,
        max_length: int = 72,
    ) -> CommitDraft | None:
        """Generate a message for the pending changes, or None when there are none."""
        files = self.reader.list_staged_files()
        if not files:
            logger.info("no staged changes; skipping generation")
            return None

        diff = self.reader.staged_diff_text()
        request = self.composer.commit_request(files, diff, custom_instruction, max_length)
        message = await self.client.generate(request)
        return CommitDraft(message=message, files=tuple(files))

    async def draft_tag_message(
        self,
        tag_name: str,
        reference: str = "HEAD",
        custom_instruction: str | None = None,
    ) -> str:
        commit = self.reader.resolve_commit(reference)
        request = self.composer.tag_request(tag_name, commit, custom_instruction)
        return await self.client.generate(request)

    def collect_commits(self, count: int, range_expr: str | None = None) -> list[CommitRecord]:
        """Commits for a changelog: an explicit range wins over the last `count`."""
        if range_expr:
            return self.reader.commits_in_range(range_expr)
        return self.reader.recent_commits(count)

    async def draft_changelog_section(
        self,
        commits: Sequence[CommitRecord],
        *,
        templated: bool = False,
        fallback: bool = True,
        today: date | None = None,
        custom_instruction: str | None = None,
    ) -> ChangelogSection | None:
        """Build a section from `commits`, or None when the list is empty.

        templated=True skips the remote call. Otherwise a failed or empty
        generation falls back to the templated body unless fallback=False,
        in which case GenerationFailed propagates.
        """
        if not commits:
            logger.info("no commits selected; skipping changelog")
            return None

        if templated:
            body = build_templated_body(commits)
        else:
            request = self.composer.changelog_request(commits, custom_instruction)
            try:
                body = await self.client.generate(request)
            except GenerationFailed as e:
                if not fallback:
                    raise
                logger.warning("changelog generation failed, using template: %s", e)
                body = build_templated_body(commits)
            else:
                if not body and fallback:
                    logger.warning("changelog generation was empty, using template")
                    body = build_templated_body(commits)

        return ChangelogSection(
            version_label=derive_version_label(commits),
            iso_date=(today or date.today()).isoformat(),
            body=body,
        )

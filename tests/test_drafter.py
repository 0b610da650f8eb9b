"""Tests for MessageDrafter against a real repository and a mocked provider."""

from datetime import date
from pathlib import Path

import pytest

from automessage.changelog import build_templated_body
from automessage.drafter import CommitDraft, MessageDrafter, RequestComposer
from automessage.errors import ConfigurationError, TransportError
from automessage.llm import GenerationClient, LLMError
from automessage.vcs import FileStatus, RepositoryReader
from conftest import make_response


async def _no_sleep(_delay):
    return None


@pytest.fixture
def drafter(git_repo, mock_llm_provider):
    client = GenerationClient(mock_llm_provider, max_attempts=2, sleep=_no_sleep)
    return MessageDrafter(RepositoryReader(git_repo.working_tree_dir), RequestComposer(), client)


# ---------------------------------------------------------------------------
# Commit messages
# ---------------------------------------------------------------------------


class TestDraftCommitMessage:
    async def test_no_changes_skips_generation(self, drafter, mock_llm_provider):
        assert await drafter.draft_commit_message() is None
        mock_llm_provider.generate.assert_not_awaited()

    async def test_client_factory_not_called_without_changes(self, git_repo):
        def factory():
            raise ConfigurationError("Missing API key")

        drafter = MessageDrafter(
            RepositoryReader(git_repo.working_tree_dir), RequestComposer(), client_factory=factory
        )
        assert await drafter.draft_commit_message() is None

    async def test_client_factory_called_once(self, git_repo, mock_llm_provider):
        calls = []

        def factory():
            calls.append(1)
            return GenerationClient(mock_llm_provider, max_attempts=1, sleep=_no_sleep)

        drafter = MessageDrafter(
            RepositoryReader(git_repo.working_tree_dir), RequestComposer(), client_factory=factory
        )
        (Path(git_repo.working_tree_dir) / "new.py").write_text("x = 1\n")
        await drafter.draft_commit_message()
        await drafter.draft_tag_message("v1.0.0")
        assert len(calls) == 1

    async def test_drafts_from_working_tree(self, drafter, git_repo, mock_llm_provider):
        (Path(git_repo.working_tree_dir) / "new.py").write_text("x = 1\n")

        draft = await drafter.draft_commit_message("Keep it short.")

        assert isinstance(draft, CommitDraft)
        assert draft.message == "feat: add generated message"
        assert [(f.path, f.status) for f in draft.files] == [("new.py", FileStatus.ADDED)]
        user = mock_llm_provider.generate.call_args.kwargs["user"]
        assert user.startswith("Keep it short.\n\n")
        assert "+x = 1" in user

    async def test_does_not_touch_repository(self, drafter, git_repo):
        (Path(git_repo.working_tree_dir) / "new.py").write_text("x = 1\n")
        head = git_repo.head.commit.hexsha
        await drafter.draft_commit_message()
        assert git_repo.head.commit.hexsha == head
        assert git_repo.untracked_files == ["new.py"]


# ---------------------------------------------------------------------------
# Tag messages
# ---------------------------------------------------------------------------


class TestDraftTagMessage:
    async def test_describes_reference(self, drafter, git_repo, mock_llm_provider):
        mock_llm_provider.generate.return_value = make_response("Release v0.2.0")

        message = await drafter.draft_tag_message("v0.2.0", "HEAD~1")

        assert message == "Release v0.2.0"
        user = mock_llm_provider.generate.call_args.kwargs["user"]
        assert "Tag name: v0.2.0" in user
        assert f"Commit SHA: {git_repo.commit('HEAD~1').hexsha}" in user
        assert "Commit message: feat: add app entry point" in user


# ---------------------------------------------------------------------------
# Changelog sections
# ---------------------------------------------------------------------------


class TestDraftChangelogSection:
    def test_collect_recent(self, drafter):
        assert len(drafter.collect_commits(2)) == 2

    def test_collect_range_wins(self, drafter):
        commits = drafter.collect_commits(1, "HEAD~2..HEAD")
        assert [c.subject for c in commits] == ["fix: correct greeting", "feat: add app entry point"]

    async def test_empty_list_returns_none(self, drafter, mock_llm_provider):
        assert await drafter.draft_changelog_section([]) is None
        mock_llm_provider.generate.assert_not_awaited()

    async def test_generated_section(self, drafter, sample_commits, mock_llm_provider):
        mock_llm_provider.generate.return_value = make_response("### Added\n\n- changelog")

        section = await drafter.draft_changelog_section(
            sample_commits, today=date(2024, 3, 4)
        )

        assert section.body == "### Added\n\n- changelog"
        assert section.iso_date == "2024-03-04"
        assert section.version_label == "0.1.0"

    async def test_templated_section_skips_client(self, git_repo, sample_commits):
        drafter = MessageDrafter(
            RepositoryReader(git_repo.working_tree_dir), RequestComposer(), None
        )
        section = await drafter.draft_changelog_section(sample_commits, templated=True)
        assert section.body == build_templated_body(sample_commits)

    async def test_failure_falls_back_to_template(
        self, drafter, sample_commits, mock_llm_provider
    ):
        mock_llm_provider.generate.side_effect = LLMError(
            "openai", "generate", RuntimeError("down")
        )
        section = await drafter.draft_changelog_section(sample_commits)
        assert section.body == build_templated_body(sample_commits)

    async def test_empty_generation_falls_back(self, drafter, sample_commits, mock_llm_provider):
        mock_llm_provider.generate.return_value = make_response("")
        section = await drafter.draft_changelog_section(sample_commits)
        assert section.body == build_templated_body(sample_commits)

    async def test_failure_without_fallback_raises(
        self, drafter, sample_commits, mock_llm_provider
    ):
        mock_llm_provider.generate.side_effect = LLMError(
            "openai", "generate", RuntimeError("down")
        )
        with pytest.raises(TransportError):
            await drafter.draft_changelog_section(sample_commits, fallback=False)

    async def test_missing_client_raises(self, git_repo, sample_commits):
        drafter = MessageDrafter(
            RepositoryReader(git_repo.working_tree_dir), RequestComposer(), None
        )
        with pytest.raises(ConfigurationError):
            await drafter.draft_changelog_section(sample_commits)

"""Tests for the automessage CLI commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from automessage.cli import app
from automessage.config import user_config_path
from automessage.llm import GenerationClient, LLMError
from conftest import make_response

runner = CliRunner()


async def _no_sleep(_delay):
    return None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_client(mock_llm_provider):
    """Patch client construction at the CLI import site."""
    client = GenerationClient(mock_llm_provider, max_attempts=1, sleep=_no_sleep)
    with patch("automessage.cli.create_generation_client", return_value=client):
        yield client


@pytest.fixture()
def repo_dir(git_repo):
    return str(git_repo.working_tree_dir)


# ---------------------------------------------------------------------------
# commit
# ---------------------------------------------------------------------------


class TestCommitCommand:
    def test_no_changes(self, fake_client, repo_dir, mock_llm_provider):
        result = runner.invoke(app, ["--repo", repo_dir, "commit"])
        assert result.exit_code == 0
        assert "No staged changes" in result.output
        mock_llm_provider.generate.assert_not_awaited()

    def test_prints_message_without_committing(self, fake_client, repo_dir, git_repo):
        (Path(repo_dir) / "new.py").write_text("x = 1\n")
        head = git_repo.head.commit.hexsha

        result = runner.invoke(app, ["--repo", repo_dir, "commit"])

        assert result.exit_code == 0
        assert "feat: add generated message" in result.output
        assert git_repo.head.commit.hexsha == head

    def test_commit_all_creates_commit(self, fake_client, repo_dir, git_repo):
        (Path(repo_dir) / "new.py").write_text("x = 1\n")

        result = runner.invoke(app, ["--repo", repo_dir, "commit", "--commit", "--all"])

        assert result.exit_code == 0, result.output
        head = git_repo.head.commit
        assert head.message == "feat: add generated message"
        assert "new.py" in head.stats.files
        assert head.hexsha[:8] in result.output

    def test_empty_generation_is_an_error(
        self, fake_client, repo_dir, git_repo, mock_llm_provider
    ):
        (Path(repo_dir) / "new.py").write_text("x = 1\n")
        mock_llm_provider.generate.return_value = make_response("  ")
        head = git_repo.head.commit.hexsha

        result = runner.invoke(app, ["--repo", repo_dir, "commit", "--commit", "--all"])

        assert result.exit_code == 1
        assert "empty commit message" in result.output
        assert git_repo.head.commit.hexsha == head

    def test_generation_failure_exits_1(
        self, fake_client, repo_dir, mock_llm_provider
    ):
        (Path(repo_dir) / "new.py").write_text("x = 1\n")
        mock_llm_provider.generate.side_effect = LLMError(
            "openai", "generate", RuntimeError("boom")
        )
        result = runner.invoke(app, ["--repo", repo_dir, "commit"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_not_a_repository(self, fake_client, tmp_path):
        result = runner.invoke(app, ["--repo", str(tmp_path), "commit"])
        assert result.exit_code == 1
        assert "Not a git repository" in result.output

    def test_missing_api_key(self, repo_dir):
        (Path(repo_dir) / "new.py").write_text("x = 1\n")
        result = runner.invoke(app, ["--repo", repo_dir, "commit"])
        assert result.exit_code == 1
        assert "Missing API key" in result.output

    def test_no_changes_without_api_key(self, repo_dir):
        result = runner.invoke(app, ["--repo", repo_dir, "commit"])
        assert result.exit_code == 0, result.output
        assert "No staged changes" in result.output


# ---------------------------------------------------------------------------
# tag
# ---------------------------------------------------------------------------


class TestTagCommand:
    def test_preview(self, fake_client, repo_dir, git_repo, mock_llm_provider):
        mock_llm_provider.generate.return_value = make_response("Release v1.0.0")
        result = runner.invoke(app, ["--repo", repo_dir, "tag", "v1.0.0"])
        assert result.exit_code == 0
        assert "Release v1.0.0" in result.output
        assert "v1.0.0" not in [t.name for t in git_repo.tags]

    def test_annotated(self, fake_client, repo_dir, git_repo, mock_llm_provider):
        mock_llm_provider.generate.return_value = make_response("Release v1.0.0")
        result = runner.invoke(app, ["--repo", repo_dir, "tag", "v1.0.0", "--annotated"])
        assert result.exit_code == 0, result.output
        assert git_repo.tags["v1.0.0"].tag.message == "Release v1.0.0"

    def test_existing_tag(self, fake_client, repo_dir, git_repo):
        git_repo.create_tag("v1.0.0")
        result = runner.invoke(app, ["--repo", repo_dir, "tag", "v1.0.0", "--annotated"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_unknown_reference(self, fake_client, repo_dir):
        result = runner.invoke(
            app, ["--repo", repo_dir, "tag", "v1.0.0", "--reference", "nope"]
        )
        assert result.exit_code == 1
        assert "Cannot resolve" in result.output


# ---------------------------------------------------------------------------
# changelog
# ---------------------------------------------------------------------------


class TestChangelogCommand:
    def test_template_writes_file_without_client(self, repo_dir, tmp_path):
        out = tmp_path / "CHANGELOG.md"
        result = runner.invoke(
            app, ["--repo", repo_dir, "changelog", "--template", "--output", str(out)]
        )
        assert result.exit_code == 0, result.output
        text = out.read_text()
        assert text.startswith("# Changelog\n\n")
        assert "## [0.1.0] - " in text
        assert "### Added" in text
        assert "### Fixed" in text

    def test_generated_and_appended(self, fake_client, repo_dir, tmp_path, mock_llm_provider):
        out = tmp_path / "CHANGELOG.md"
        out.write_text("# Changelog\n\n## [v0.0.1] - 2024-01-01\n\n- old\n")
        mock_llm_provider.generate.return_value = make_response("### Fixes\n\n- greeting")

        result = runner.invoke(
            app,
            ["--repo", repo_dir, "changelog", "-n", "1", "--output", str(out), "--append"],
        )

        assert result.exit_code == 0, result.output
        text = out.read_text()
        assert text.index("### Fixes") < text.index("## [v0.0.1]")
        assert "- old\n" in text

    def test_write_uses_configured_path(self, repo_dir):
        result = runner.invoke(app, ["--repo", repo_dir, "changelog", "--template", "--write"])
        assert result.exit_code == 0, result.output
        assert (Path(repo_dir) / "CHANGELOG.md").read_text().startswith("# Changelog")

    def test_no_fallback_fails(self, fake_client, repo_dir, tmp_path, mock_llm_provider):
        mock_llm_provider.generate.side_effect = LLMError(
            "openai", "generate", RuntimeError("down")
        )
        out = tmp_path / "CHANGELOG.md"
        result = runner.invoke(
            app, ["--repo", repo_dir, "changelog", "--no-fallback", "--output", str(out)]
        )
        assert result.exit_code == 1
        assert not out.exists()

    def test_empty_range(self, repo_dir):
        result = runner.invoke(
            app, ["--repo", repo_dir, "changelog", "--template", "--range", "HEAD..HEAD"]
        )
        assert result.exit_code == 0
        assert "No commits found" in result.output

    def test_zero_commits_selects_nothing(self, repo_dir):
        result = runner.invoke(app, ["--repo", repo_dir, "changelog", "--template", "-n", "0"])
        assert result.exit_code == 0
        assert "No commits found" in result.output

    def test_malformed_range(self, repo_dir):
        result = runner.invoke(
            app, ["--repo", repo_dir, "changelog", "--template", "--range", "HEAD"]
        )
        assert result.exit_code == 1
        assert "Invalid range" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show_masks_api_key(self, tmp_path):
        cfg = tmp_path / "c.yaml"
        cfg.write_text("llm:\n  api_key: sk-secret\n")
        result = runner.invoke(app, ["--config", str(cfg), "config", "show"])
        assert result.exit_code == 0
        assert "sk-secret" not in result.output
        assert "***" in result.output

    def test_init_writes_user_config(self):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert user_config_path().exists()

    def test_init_local_refuses_overwrite(self):
        Path("automessage.yaml").write_text("language: fr-FR\n")
        result = runner.invoke(app, ["config", "init", "--local"])
        assert result.exit_code == 1
        assert Path("automessage.yaml").read_text() == "language: fr-FR\n"

    def test_init_local_force(self):
        Path("automessage.yaml").write_text("language: fr-FR\n")
        result = runner.invoke(app, ["config", "init", "--local", "--force"])
        assert result.exit_code == 0
        assert "provider" in Path("automessage.yaml").read_text()

    def test_set_value(self):
        result = runner.invoke(app, ["config", "set", "llm.provider", "deepseek"])
        assert result.exit_code == 0, result.output
        data = yaml.safe_load(user_config_path().read_text())
        assert data == {"llm": {"provider": "deepseek"}}

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "nope", "1", "--local"])
        assert result.exit_code == 1
        assert not Path("automessage.yaml").exists()


def test_json_log_formatter():
    import json
    import logging

    from automessage.cli import _json_formatter

    record = logging.LogRecord("automessage.vcs", logging.WARNING, __file__, 1, "x=%d", (3,), None)
    payload = json.loads(_json_formatter().format(record))
    assert payload["level"] == "warning"
    assert payload["logger"] == "automessage.vcs"
    assert payload["event"] == "x=3"
    assert "timestamp" in payload

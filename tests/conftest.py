"""Shared test fixtures for automessage."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from git import Actor, Repo

from automessage.config.models import AutoMessageConfig, Provider
from automessage.llm.base import LLMProvider
from automessage.llm.models import LLMConfig, LLMResponse, TokenUsage
from automessage.vcs.models import CommitRecord

TEST_AUTHOR = Actor("Test Author", "author@example.com")


def commit_file(repo: Repo, name: str, content: str, message: str) -> str:
    """Write `name` into the work tree, stage it and commit. Returns the SHA."""
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    repo.index.add([name])
    return repo.index.commit(message, author=TEST_AUTHOR, committer=TEST_AUTHOR).hexsha


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path_factory):
    """Keep user config, project config and provider keys out of tests."""
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    for var in (
        "GAM_API_KEY",
        "GAM_PROVIDER",
        "GAM_BASE_URL",
        "GAM_MODEL",
        "GAM_LANGUAGE",
        "OPENAI_API_KEY",
        "DEEPSEEK_API_KEY",
        "MOONSHOT_API_KEY",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def empty_repo(tmp_path):
    """A freshly initialised repository with an unborn HEAD."""
    repo = Repo.init(tmp_path / "repo")
    with repo.config_writer() as cw:
        cw.set_value("user", "name", TEST_AUTHOR.name)
        cw.set_value("user", "email", TEST_AUTHOR.email)
    return repo


@pytest.fixture
def git_repo(empty_repo):
    """Repository with three commits: a root commit, a feature and a fix."""
    commit_file(empty_repo, "README.md", "# Demo\n", "Initial commit")
    commit_file(empty_repo, "src/app.py", "print('hi')\n", "feat: add app entry point")
    commit_file(empty_repo, "src/app.py", "print('hello')\n", "fix: correct greeting")
    return empty_repo


@pytest.fixture
def sample_commits():
    """Newest first, like RepositoryReader returns them."""
    return [
        CommitRecord(
            sha="c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3",
            message="fix: handle empty diff\n\nNo longer crashes.",
            author="Ada",
            timestamp="2024-03-03T10:00:00+00:00",
            files_changed=("src/diff.py",),
        ),
        CommitRecord(
            sha="b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2",
            message="feat: add changelog command",
            author="Grace",
            timestamp="2024-03-02T10:00:00+00:00",
            files_changed=("src/cli.py", "README.md"),
        ),
        CommitRecord(
            sha="a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1",
            message="docs: describe configuration",
            author="Linus",
            timestamp="2024-03-01T10:00:00+00:00",
            files_changed=("docs/config.md",),
        ),
    ]


def make_response(content: str) -> LLMResponse:
    return LLMResponse(
        content=content,
        usage=TokenUsage(input_tokens=100, output_tokens=20),
        model="test-model",
    )


@pytest.fixture
def mock_llm_provider():
    provider = MagicMock(spec=LLMProvider)
    provider.config = LLMConfig(
        provider=Provider.OPENAI,
        model="test-model",
        base_url="https://api.openai.com/v1",
        api_key="sk-test",
    )
    provider.generate = AsyncMock(return_value=make_response("feat: add generated message"))
    return provider


@pytest.fixture
def sample_config():
    return AutoMessageConfig()

"""RepositoryReader: extracts staged changes and commit history through GitPython."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from git import NULL_TREE, Actor, Commit, Repo
from git.diff import Diff
from git.exc import (
    BadName,
    BadObject,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from automessage.errors import (
    CommitNotFoundError,
    InvalidRangeError,
    RepositoryError,
    TagExistsError,
)
from automessage.vcs.models import CommitRecord, FileStatus, StagedFile

logger = logging.getLogger(__name__)

# Identity stamped on commits and tags created by the tool.
AUTOMESSAGE_IDENTITY = Actor("Git AutoMessage", "automessage@git")

_CHANGE_TYPES: dict[str, FileStatus] = {
    "A": FileStatus.ADDED,
    "M": FileStatus.MODIFIED,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
    "C": FileStatus.COPIED,
}

_ORIGIN_MARKERS = ("+", "-", " ")


@contextmanager
def _git_errors(action: str) -> Iterator[None]:
    """Re-raise git command failures as RepositoryError."""
    try:
        yield
    except GitCommandError as e:
        detail = (e.stderr or "").strip() or str(e)
        raise RepositoryError(f"git {action} failed: {detail}") from e


class RepositoryReader:
    """Read-mostly view of one local repository.

    Every query returns fresh value objects; nothing is cached between calls.
    The only writers are create_commit, create_annotated_tag and stage_files.
    """

    def __init__(self, path: str | Path = ".") -> None:
        self.path = Path(path)
        try:
            self._repo = Repo(self.path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryError(f"Not a git repository: {self.path}") from e
        if self._repo.bare:
            raise RepositoryError(f"Bare repositories have no working tree: {self.path}")
        self.root = Path(self._repo.working_tree_dir)

    # -- staged changes ----------------------------------------------------

    def list_staged_files(self) -> list[StagedFile]:
        """Changed paths between the index and the working tree, untracked included."""
        with _git_errors("diff"):
            deltas = self._repo.index.diff(None)
            untracked = self._repo.untracked_files

        files = [
            StagedFile(
                path=delta.b_path or delta.a_path,
                status=_CHANGE_TYPES.get(delta.change_type, FileStatus.UNKNOWN),
            )
            for delta in deltas
        ]
        files.extend(StagedFile(path=p, status=FileStatus.ADDED) for p in untracked)
        logger.debug("found %d changed path(s) in %s", len(files), self.root)
        return files

    def staged_diff_text(self) -> str:
        """Render the index-to-working-tree diff as unified patch text."""
        with _git_errors("diff"):
            deltas = self._repo.index.diff(None, create_patch=True)
            untracked = self._repo.untracked_files

        chunks: list[str] = []
        for delta in deltas:
            chunks.extend(_render_delta(delta))
        for path in untracked:
            chunks.extend(self._render_untracked(path))
        return "".join(chunks)

    def stage_files(self, files: Iterable[StagedFile]) -> None:
        """Bring the index in line with the working tree for the given paths."""
        to_add: list[str] = []
        to_remove: list[str] = []
        for f in files:
            (to_remove if f.status == FileStatus.DELETED else to_add).append(f.path)

        with _git_errors("add"):
            index = self._repo.index
            if to_add:
                index.add(to_add)
            if to_remove:
                index.remove(to_remove, working_tree=False)
        logger.info("staged %d path(s), removed %d", len(to_add), len(to_remove))

    def _render_untracked(self, path: str) -> list[str]:
        try:
            data = (self.root / path).read_bytes()
        except OSError as e:
            raise RepositoryError(f"Cannot read untracked file {path}: {e}") from e
        lines = [
            f"diff --git a/{path} b/{path}\n",
            "new file mode 100644\n",
        ]
        if b"\0" in data:
            lines.append(f"Binary files /dev/null and b/{path} differ\n")
            return lines

        content = data.splitlines(keepends=True)
        lines += ["--- /dev/null\n", f"+++ b/{path}\n"]
        if not content:
            return lines
        lines.append(f"@@ -0,0 +1,{len(content)} @@\n")
        lines.extend("+" + _decode_line(raw) for raw in content)
        if not content[-1].endswith(b"\n"):
            lines.append("\n\\ No newline at end of file\n")
        return lines

    # -- history -----------------------------------------------------------

    def resolve_commit(self, reference: str) -> CommitRecord:
        """Resolve a ref, SHA or symbolic name to a CommitRecord."""
        return self._to_record(self._resolve(reference))

    def recent_commits(self, count: int) -> list[CommitRecord]:
        """Up to `count` commits reachable from HEAD, newest first."""
        if count <= 0:
            return []
        self._require_head()
        with _git_errors("rev-list"):
            commits = list(self._repo.iter_commits("HEAD", max_count=count))
        return [self._to_record(c) for c in commits]

    def commits_in_range(self, range_expr: str) -> list[CommitRecord]:
        """Commits reachable from `end` but not from `start` in a `start..end` expression."""
        parts = range_expr.split("..")
        if "..." in range_expr or len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidRangeError(range_expr)

        start = self._resolve(parts[0])
        end = self._resolve(parts[1])
        with _git_errors("rev-list"):
            commits = list(self._repo.iter_commits(f"{start.hexsha}..{end.hexsha}"))
        logger.debug("range %s holds %d commit(s)", range_expr, len(commits))
        return [self._to_record(c) for c in commits]

    # -- writes ------------------------------------------------------------

    def create_commit(self, message: str) -> str:
        """Commit the current index as a child of HEAD. Returns the new SHA."""
        self._require_head()
        try:
            commit = self._repo.index.commit(
                message,
                author=AUTOMESSAGE_IDENTITY,
                committer=AUTOMESSAGE_IDENTITY,
            )
        except (GitCommandError, OSError, ValueError) as e:
            raise RepositoryError(f"Failed to create commit: {e}") from e
        logger.info("created commit %s", commit.hexsha)
        return commit.hexsha

    def create_annotated_tag(self, name: str, message: str, reference: str = "HEAD") -> None:
        """Create an annotated tag `name` pointing at `reference`."""
        if any(tag.name == name for tag in self._repo.tags):
            raise TagExistsError(name)

        commit = self._resolve(reference)
        with _git_errors("tag"), self._repo.git.custom_environment(
            GIT_COMMITTER_NAME=AUTOMESSAGE_IDENTITY.name,
            GIT_COMMITTER_EMAIL=AUTOMESSAGE_IDENTITY.email,
        ):
            self._repo.create_tag(name, ref=commit, message=message)
        logger.info("created annotated tag %s at %s", name, commit.hexsha)

    # -- helpers -----------------------------------------------------------

    def _require_head(self) -> None:
        if not self._repo.head.is_valid():
            raise RepositoryError(f"Repository at {self.root} has no commits yet (unborn HEAD)")

    def _resolve(self, reference: str) -> Commit:
        try:
            return self._repo.commit(reference)
        except (BadName, BadObject, GitCommandError, ValueError) as e:
            raise CommitNotFoundError(reference) from e

    def _to_record(self, commit: Commit) -> CommitRecord:
        with _git_errors("diff-tree"):
            if commit.parents:
                deltas = commit.parents[0].diff(commit)
            else:
                deltas = commit.diff(NULL_TREE)
        return CommitRecord(
            sha=commit.hexsha,
            message=commit.message,
            author=commit.author.name or "Unknown",
            timestamp=commit.committed_datetime.isoformat(),
            files_changed=tuple(d.b_path or d.a_path for d in deltas),
        )


def _decode_line(raw: bytes) -> str:
    """Decode one diff line; undecodable content collapses to an empty line."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return "\n"


def _render_delta(delta: Diff) -> list[str]:
    a_path = delta.a_path or delta.b_path
    b_path = delta.b_path or delta.a_path
    lines = [
        f"diff --git a/{a_path} b/{b_path}\n",
        "--- /dev/null\n" if delta.new_file else f"--- a/{a_path}\n",
        "+++ /dev/null\n" if delta.deleted_file else f"+++ b/{b_path}\n",
    ]
    body = delta.diff or b""
    if isinstance(body, str):
        body = body.encode("utf-8")
    for raw in body.splitlines(keepends=True):
        marker = raw[:1].decode("ascii", errors="replace")
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError:
            lines.append((marker if marker in _ORIGIN_MARKERS else "") + "\n")
    if body and not body.endswith(b"\n"):
        lines.append("\n")
    return lines

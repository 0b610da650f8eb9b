"""Deterministic changelog body grouped by conventional-commit type.

Alternate path to the LLM summary: no remote call, built only from commit
metadata.
"""

from __future__ import annotations

from collections.abc import Sequence

from automessage.vcs.models import CommitRecord

# (message prefix, heading); first match wins, unmatched commits go to OTHER_HEADING.
CATEGORIES: list[tuple[str, str]] = [
    ("feat", "Added"),
    ("fix", "Fixed"),
    ("docs", "Documentation"),
]
OTHER_HEADING = "Other Changes"


def categorize(commit: CommitRecord) -> str:
    subject = commit.subject.lower()
    for prefix, heading in CATEGORIES:
        if subject.startswith(prefix):
            return heading
    return OTHER_HEADING


def build_templated_body(commits: Sequence[CommitRecord]) -> str:
    """Group commits under `### <heading>` blocks, keeping input order within each."""
    groups: dict[str, list[str]] = {heading: [] for _, heading in CATEGORIES}
    groups[OTHER_HEADING] = []
    for commit in commits:
        groups[categorize(commit)].append(
            f"- {commit.short_sha} ({commit.subject}) - {commit.author}"
        )

    blocks = [
        f"### {heading}\n\n" + "\n".join(entries)
        for heading, entries in groups.items()
        if entries
    ]
    return "\n\n".join(blocks)

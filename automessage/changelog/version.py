"""Heuristic version label for a changelog section.

This is not semantic-version computation: it looks for a "version vX" or
"release vX" phrase in commit messages and otherwise guesses from the
commit types. Existing tags are never inspected.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from automessage.vcs.models import CommitRecord

FEATURE_FALLBACK = "0.1.0"
FIX_FALLBACK = "0.0.1"

_KEYWORDS = frozenset({"version", "release"})
_EDGE_PUNCTUATION = re.compile(r"^[^0-9A-Za-z]+|[^0-9A-Za-z]+$")
_TRAILING_PUNCTUATION = re.compile(r"[^0-9A-Za-z]+$")


def derive_version_label(commits: Sequence[CommitRecord]) -> str:
    """Pick a version label from commit messages; the last match in `commits` wins."""
    label = None
    for commit in commits:
        found = _explicit_version(commit.message)
        if found is not None:
            label = found
    if label is not None:
        return label
    return _fallback_version(commits)


def _explicit_version(message: str) -> str | None:
    words = message.split()
    for word, following in zip(words, words[1:]):
        if _EDGE_PUNCTUATION.sub("", word).lower() not in _KEYWORDS:
            continue
        if len(following) < 2 or following[:1] not in ("v", "V"):
            continue
        return _TRAILING_PUNCTUATION.sub("", following)
    return None


def _fallback_version(commits: Sequence[CommitRecord]) -> str:
    # "fix" commits and unclassified history both land on FIX_FALLBACK.
    messages = [c.message.strip().lower() for c in commits]
    if any(m.startswith("feat") for m in messages):
        return FEATURE_FALLBACK
    return FIX_FALLBACK

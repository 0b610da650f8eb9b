"""Pure merge of a changelog section into existing changelog text."""

from __future__ import annotations

from automessage.changelog.models import ChangelogSection

STANDARD_HEADER = (
    "# Changelog\n\n"
    "All notable changes to this project will be documented in this file.\n\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),\n"
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).\n\n"
)


def render_section(section: ChangelogSection) -> str:
    """Render `## [<version>] - <date>` followed by a blank line and the body."""
    return f"## [{section.version_label}] - {section.iso_date}\n\n{section.body.rstrip()}"


def merge_section(existing: str, section: ChangelogSection, append: bool) -> str:
    """Return new document text with `section` merged into `existing`.

    append=False discards `existing` and starts from STANDARD_HEADER.
    append=True inserts the section right after the header block (the
    first blank line that follows a `#` line) and keeps every original
    line. Without a `#` line the existing text is kept, unchanged, below
    the section. The result always ends with a newline.
    """
    rendered = render_section(section)
    if not append:
        return STANDARD_HEADER + rendered + "\n"

    lines = existing.splitlines()
    if not any(line.startswith("#") for line in lines):
        if not existing:
            return rendered + "\n"
        merged_text = rendered + "\n\n" + existing
        return merged_text if merged_text.endswith("\n") else merged_text + "\n"

    section_lines = rendered.splitlines()
    boundary = _header_end(lines)
    if boundary is None:
        # No blank line closes the header: append after everything.
        merged = list(lines)
        if merged and merged[-1].strip():
            merged.append("")
        merged.extend(section_lines)
    else:
        rest = lines[boundary:]
        merged = lines[:boundary] + section_lines
        if rest and rest[0].strip():
            merged.append("")
        merged.extend(rest)
    return "\n".join(merged) + "\n"


def _header_end(lines: list[str]) -> int | None:
    """Index just past the first blank line that directly follows a `#` line."""
    for i, line in enumerate(lines):
        if i > 0 and not line.strip() and lines[i - 1].startswith("#"):
            return i + 1
    return None

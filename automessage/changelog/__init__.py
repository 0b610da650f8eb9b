"""Changelog sections: version labels, templated bodies and document merging."""

from automessage.changelog.document import STANDARD_HEADER, merge_section, render_section
from automessage.changelog.models import ChangelogSection
from automessage.changelog.template import build_templated_body
from automessage.changelog.version import derive_version_label
from automessage.changelog.writer import ChangelogWriter

__all__ = [
    "ChangelogSection",
    "ChangelogWriter",
    "STANDARD_HEADER",
    "build_templated_body",
    "derive_version_label",
    "merge_section",
    "render_section",
]

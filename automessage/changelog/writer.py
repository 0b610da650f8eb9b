"""ChangelogWriter: read-compute-overwrite of the changelog file."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from automessage.changelog.document import merge_section
from automessage.changelog.models import ChangelogSection
from automessage.errors import DocumentMergeError

logger = logging.getLogger(__name__)


class ChangelogWriter:
    """Merges sections into one changelog file on disk.

    The file is read in full, the new text is computed in memory, and only
    then is it swapped in via a temporary file and os.replace.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str:
        if not self.path.exists():
            return ""
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentMergeError(f"Cannot read {self.path}: {e}") from e

    def write(self, section: ChangelogSection, *, append: bool) -> Path:
        """Merge `section` into the file and return its path."""
        existing = self.read() if append else ""
        if not append and self.path.exists():
            logger.info("replacing existing changelog %s", self.path)
        content = merge_section(existing, section, append)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise DocumentMergeError(f"Cannot write {self.path}: {e}") from e

        logger.info("wrote %s (%d bytes)", self.path, len(content))
        return self.path

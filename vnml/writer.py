"""
VNml Writer - Serializes VNmlDocument to .vnml format.

The whole document is rewritten on every save:
  banner, then per section: comments, name, values (each preceded by
  its comments), and one blank line.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from vnml.spec import (
    COMMENT_PREFIX, CURRENT_BANNER, EXTENSION, KEY_SEPARATOR, VALUE_INDENT, wrap_value,
)

if TYPE_CHECKING:
    from vnml.document import VNmlDocument


class VNmlWriter:

    @staticmethod
    def serialize(doc: VNmlDocument) -> str:
        """Serialize a VNmlDocument to text. Does not mutate the document."""
        lines = [CURRENT_BANNER]
        for section in doc.sections:
            lines.extend(f"{COMMENT_PREFIX}{c}" for c in section.comments)
            lines.append(section.name)
            for entry in section.values:
                lines.extend(f"{VALUE_INDENT}{COMMENT_PREFIX}{c}" for c in entry.comments)
                lines.append(f"{VALUE_INDENT}{entry.key}{KEY_SEPARATOR}{wrap_value(entry.value)}")
            lines.append("")
        return "\n".join(lines) + "\n"

    @staticmethod
    def write(doc: VNmlDocument, path: str | Path) -> int:
        """Write a VNmlDocument to a file atomically. Returns bytes written.

        Writes to a temp file in the target directory, then renames it
        over the target so readers never see a partial file.
        """
        data = VNmlWriter.serialize(doc).encode("utf-8")
        dir_name = os.path.dirname(os.path.abspath(path)) or "."
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=EXTENSION + ".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return len(data)

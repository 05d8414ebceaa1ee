"""
VNml Reader - Line-oriented parser for .vnml files.

Parsing rules:
  - The first line must be a recognized version banner (an empty file is legal)
  - Comment lines accumulate until the next section header or value line
  - Blank lines are skipped without dropping pending comments
  - A line without a leading tab opens a section; one with a tab is a value
  - Leading tabs of a value line are indentation, never part of the key
  - Undecodable bytes are replaced with U+FFFD rather than rejected
  - Section names must be unique within the file
"""

from __future__ import annotations

from pathlib import Path

from vnml.errors import FormatError
from vnml.document import VNmlSection, VNmlValue
from vnml.spec import (
    VERSION_BANNERS,
    KEY_SEPARATOR,
    VALUE_INDENT,
    comment_text,
    is_blank_line,
    is_comment_line,
    is_value_line,
    unwrap_value,
)


def _split_lines(text: str) -> list[str]:
    # Accept a UTF-8 BOM and CRLF/CR line endings written by other tools
    if text.startswith("\ufeff"):
        text = text[1:]
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class VNmlReader:
    """
    .vnml parser.

    Usage:
        sections = VNmlReader.read("settings.vnml")

    Most callers go through ``VNmlDocument.load`` instead, which merges
    the parsed sections into an existing document.
    """

    @staticmethod
    def is_vnml(path: str | Path) -> bool:
        """Check whether a file starts with a known version banner."""
        with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
            first = f.readline().rstrip("\r\n")
        return first in VERSION_BANNERS

    @classmethod
    def read(cls, path: str | Path) -> list[VNmlSection]:
        """Parse a .vnml file into its sections."""
        with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
            text = f.read()
        return cls.parse(text)

    @staticmethod
    def parse(text: str) -> list[VNmlSection]:
        """Parse VNml text into its sections, in file order."""
        lines = _split_lines(text)
        if not lines:
            return []
        if lines[0] not in VERSION_BANNERS:
            raise FormatError(f"Unrecognized version banner: {lines[0]!r}", 1)

        sections: list[VNmlSection] = []
        seen: set[str] = set()
        current: VNmlSection | None = None
        pending: list[str] = []

        for number, line in enumerate(lines[1:], start=2):
            if is_comment_line(line):
                pending.append(comment_text(line))
                continue

            if is_blank_line(line):
                continue

            if not is_value_line(line):
                if line in seen:
                    raise FormatError(f"Duplicate section: {line!r}", number)
                seen.add(line)
                current = VNmlSection(line, comments=pending)
                sections.append(current)
                pending = []
                continue

            if current is None:
                raise FormatError("Value line outside of any section", number)
            body = line.lstrip(VALUE_INDENT)
            if KEY_SEPARATOR not in body:
                raise FormatError(f"Missing {KEY_SEPARATOR!r} in value line", number)
            key, raw = body.split(KEY_SEPARATOR, 1)
            current.values.append(VNmlValue(key, unwrap_value(raw), pending))
            pending = []

        return sections

"""
VNml Document - In-memory representation of a .vnml file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from vnml.errors import FormatError
from vnml.hexbytes import bytes_to_hex, hex_to_bytes, text_to_hex
from vnml.spec import (
    COMMENT_PREFIX,
    EMPTY_HEX,
    KEY_SEPARATOR,
    NAMESPACE_SEPARATOR,
    VALUE_INDENT,
    WILDCARD,
    has_line_break,
    is_binary_key,
    trim_end_count,
)

logger = logging.getLogger(__name__)

# Default namespace for documents created without an explicit one
NAMESPACE_ENV = "VNML_NAMESPACE"


@dataclass
class VNmlValue:
    """A single key/value entry of a section."""
    key: str
    value: str
    comments: list[str] = field(default_factory=list)


@dataclass
class VNmlSection:
    """A named, ordered group of values."""
    name: str
    comments: list[str] = field(default_factory=list)
    values: list[VNmlValue] = field(default_factory=list)

    def find(self, key: str) -> VNmlValue | None:
        """Last entry stored under ``key``; later entries shadow earlier ones."""
        for entry in reversed(self.values):
            if entry.key == key:
                return entry
        return None


def _matches(text: str, mask: str, wildcard: bool) -> bool:
    return text.startswith(mask) if wildcard else text == mask


def _check_comment(comment: str) -> None:
    if has_line_break(comment):
        raise ValueError(f"Comment must be a single line: {comment!r}")


class VNmlDocument:
    """
    In-memory representation of a .vnml file.

    Usage:
        doc = VNmlDocument(namespace="app")
        doc["window", "width"] = 800
        doc["window", "BIN:state"] = b"\\x01\\x02"
        doc.set_comment("window", None, "Main window geometry")
        doc.save("settings.vnml")

    Section names are qualified with the namespace on every lookup, so
    ``doc["window", "width"]`` addresses the section ``app:window``.
    """

    def __init__(self, namespace: str | None = None) -> None:
        self.sections: list[VNmlSection] = []
        self._namespace = ""
        if namespace is None:
            namespace = os.environ.get(NAMESPACE_ENV, "")
        self.namespace = namespace

    @property
    def namespace(self) -> str:
        """The section-name prefix, ``"<ns>:"``, or ``""`` when unset."""
        if not self._namespace:
            return ""
        return self._namespace + NAMESPACE_SEPARATOR

    @namespace.setter
    def namespace(self, value: str) -> None:
        # Whitespace is not allowed anywhere in a namespace
        self._namespace = "".join(value.split())

    def _qualify(self, name: str) -> str:
        return self.namespace + name

    def _find_section(self, qualified: str) -> VNmlSection | None:
        for section in self.sections:
            if section.name == qualified:
                return section
        return None

    def get_section(self, name: str) -> VNmlSection | None:
        """Section ``name`` in the current namespace, or None."""
        return self._find_section(self._qualify(name))

    def _find_value(self, name: str, value_name: str) -> VNmlValue | None:
        section = self.get_section(name)
        if section is None:
            return None
        return section.find(value_name)

    # ------------------------------------------------------------------
    # Load / Save
    # ------------------------------------------------------------------

    def load(self, path: str | Path) -> bool:
        """Merge the sections of a .vnml file into this document.

        Returns False when the file does not exist or cannot be read.
        Raises FormatError for a malformed file; the document is left
        unchanged in that case. Sections already in memory are kept.
        """
        from vnml.reader import VNmlReader

        path = Path(path)
        if not path.exists():
            logger.debug("No VNml file at %s, nothing loaded", path)
            return False
        try:
            sections = VNmlReader.read(path)
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return False
        self._merge(sections)
        logger.debug("Loaded %d sections from %s", len(sections), path)
        return True

    def loads(self, text: str) -> None:
        """Merge the sections of VNml text into this document."""
        from vnml.reader import VNmlReader
        self._merge(VNmlReader.parse(text))

    def _merge(self, sections: list[VNmlSection]) -> None:
        for section in sections:
            if self._find_section(section.name) is not None:
                raise FormatError(f"Duplicate section: {section.name!r}")
        self.sections.extend(sections)

    def save(self, path: str | Path) -> int:
        """Write the whole document to a .vnml file. Returns bytes written."""
        from vnml.writer import VNmlWriter
        nbytes = VNmlWriter.write(self, path)
        logger.debug("Saved %d sections to %s", len(self.sections), path)
        return nbytes

    def dumps(self) -> str:
        """Serialize this document to VNml text."""
        from vnml.writer import VNmlWriter
        return VNmlWriter.serialize(self)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_sections(self, mask: str) -> None:
        """Delete sections of the current namespace matching ``mask``.

        ``"*"`` clears the whole document, every namespace included.
        A trailing ``*`` deletes all sections starting with the rest of
        the mask; otherwise only the exact name is deleted.
        """
        if mask == WILDCARD:
            self.sections.clear()
            return

        wildcard = mask.endswith(WILDCARD)
        mask = self._qualify(trim_end_count(mask, WILDCARD))
        if not mask:
            return

        self.sections[:] = [
            s for s in self.sections if not _matches(s.name, mask, wildcard)
        ]

    def delete_values(self, section: str, mask: str) -> None:
        """Delete values of ``section`` whose keys match ``mask``.

        The masking rule is the one of ``delete_sections``. A section left
        without values is deleted as well.
        """
        wildcard = mask.endswith(WILDCARD)
        mask = trim_end_count(mask, WILDCARD)
        if not mask:
            return

        entry = self.get_section(section)
        if entry is None:
            return
        entry.values[:] = [
            v for v in entry.values if not _matches(v.key, mask, wildcard)
        ]
        if not entry.values:
            self.sections.remove(entry)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def set_comment(self, name: str, value_name: str | None, *comments: str) -> bool:
        """Replace the comments of a section (``value_name=None``) or of a value.

        Returns False if the section or value does not exist.
        """
        for comment in comments:
            _check_comment(comment)

        section = self.get_section(name)
        if section is None:
            return False
        if value_name is None:
            section.comments[:] = comments
            return True
        entry = section.find(value_name)
        if entry is None:
            return False
        entry.comments[:] = comments
        return True

    def get_comment(self, name: str, value_name: str | None) -> list[str] | None:
        """Comments of a section (``value_name=None``) or of a value.

        A value without comments yields None, like a missing one.
        """
        section = self.get_section(name)
        if section is None:
            return None
        if value_name is None:
            return list(section.comments)
        entry = section.find(value_name)
        if entry is None or not entry.comments:
            return None
        return list(entry.comments)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def __getitem__(self, key: tuple[str, str]) -> str | bytes | None:
        """``doc[name, value_name]``: the stored text, or bytes for ``BIN:`` keys.

        Returns None when the value does not exist or, for ``BIN:`` keys,
        holds the empty hex string or text that is not valid hex.
        """
        name, value_name = key
        entry = self._find_value(name, value_name)
        if entry is None:
            return None
        if is_binary_key(value_name):
            if entry.value == EMPTY_HEX:
                return None
            try:
                return hex_to_bytes(entry.value)
            except ValueError:
                logger.debug("Invalid hex in %s/%s: %r", name, value_name, entry.value)
                return None
        return entry.value

    def get(self, name: str, value_name: str, default: object = None) -> object:
        """Like ``doc[name, value_name]`` with ``default`` for missing values."""
        value = self[name, value_name]
        return default if value is None else value

    def __setitem__(self, key: tuple[str, str], value: object) -> None:
        """``doc[name, value_name] = value``.

        Replaces every entry stored under ``value_name`` with a single new
        one that inherits their comments. Assigning None only deletes.
        The section is created on demand.
        """
        name, value_name = key
        qualified = self._qualify(name)
        text = None
        if value is not None:
            self._check_names(qualified, value_name)
            text = self._encode(value_name, value)

        section = self._find_section(qualified)
        carried: list[str] = []
        if section is not None:
            kept = []
            for entry in section.values:
                if entry.key == value_name:
                    carried.extend(entry.comments)
                else:
                    kept.append(entry)
            section.values[:] = kept

        if text is None:
            return
        if section is None:
            section = VNmlSection(qualified)
            self.sections.append(section)
        section.values.append(VNmlValue(value_name, text, carried))

    @staticmethod
    def _encode(value_name: str, value: object) -> str:
        if is_binary_key(value_name):
            if isinstance(value, (bytes, bytearray, memoryview)):
                return bytes_to_hex(bytes(value))
            return text_to_hex(str(value))
        text = str(value)
        if has_line_break(text):
            raise ValueError(f"Value of {value_name!r} must be a single line")
        return text

    @staticmethod
    def _check_names(section: str, value_name: str) -> None:
        if not section.strip(" \t"):
            raise ValueError("Section name cannot be empty")
        if has_line_break(section) or has_line_break(value_name):
            raise ValueError("Section and value names must be single line")
        if section.startswith(VALUE_INDENT) or section.lstrip(" \t").startswith(COMMENT_PREFIX):
            raise ValueError(f"Invalid section name: {section!r}")
        if (KEY_SEPARATOR in value_name or value_name.startswith(VALUE_INDENT)
                or value_name.lstrip(" \t").startswith(COMMENT_PREFIX)):
            raise ValueError(f"Invalid value name: {value_name!r}")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def section_names(self) -> list[str]:
        """Fully qualified names of all sections, in save order."""
        return [s.name for s in self.sections]

    def items(self, name: str) -> list[tuple[str, str]]:
        """(key, stored text) pairs of a section, in save order."""
        section = self.get_section(name)
        if section is None:
            return []
        return [(v.key, v.value) for v in section.values]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get_section(name) is not None

    def __len__(self) -> int:
        return len(self.sections)

    def __repr__(self) -> str:
        return f"VNmlDocument(namespace={self.namespace!r}, sections={self.section_names()})"

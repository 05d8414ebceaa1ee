"""
VNml Format Specification v1.0
==============================

Layout:
    -- VNml v.1.0. --            <- Version banner (must be the first line)
    ;<section comment>           <- Comment lines attach to the next entry
    <namespace:>sectionName      <- Section header (no leading tab)
    	;<value comment>         <- Value comment (one leading tab)
    	key=[value]              <- Value line (one leading tab)
                                 <- Blank line closes every section on save

Design Decisions:
    - One banner per format version; unknown banners are rejected on load
    - Comment lines may be indented with spaces or tabs before the ``;``
    - Blank lines are skipped and do not drop pending comments
    - Values are wrapped in one ``[`` ``]`` pair on disk, stripped once on load
    - Keys prefixed ``BIN:`` carry binary payloads as ``0x``-prefixed hex text
    - Section names are unique in a file; keys inside a section are not
"""

# Version banners, oldest first. The writer always emits the last one.
BANNER_V10 = "-- VNml v.1.0. --"
VERSION_BANNERS = (BANNER_V10,)
CURRENT_BANNER = VERSION_BANNERS[-1]

COMMENT_PREFIX = ";"
VALUE_INDENT = "\t"
VALUE_OPEN = "["
VALUE_CLOSE = "]"
KEY_SEPARATOR = "="
NAMESPACE_SEPARATOR = ":"
WILDCARD = "*"

# Keys with this prefix hold hex-encoded binary payloads
BIN_PREFIX = "BIN:"
# Hex text of an empty byte string, read back as "no value"
EMPTY_HEX = "0x"

EXTENSION = ".vnml"

_BLANK_CHARS = " \t"


def trim_start_count(text: str, char: str, count: int = 1) -> str:
    """Remove up to ``count`` leading occurrences of ``char``."""
    while count > 0 and text:
        if text[0] == char:
            text = text[1:]
        count -= 1
    return text


def trim_end_count(text: str, char: str, count: int = 1) -> str:
    """Remove up to ``count`` trailing occurrences of ``char``."""
    while count > 0 and text:
        if text[-1] == char:
            text = text[:-1]
        count -= 1
    return text


def is_blank_line(line: str) -> bool:
    return line.strip(_BLANK_CHARS) == ""


def is_comment_line(line: str) -> bool:
    return line.strip(_BLANK_CHARS).startswith(COMMENT_PREFIX)


def comment_text(line: str) -> str:
    """Text of a comment line without its indentation and ``;`` marker."""
    return trim_start_count(line.lstrip(_BLANK_CHARS), COMMENT_PREFIX)


def is_value_line(line: str) -> bool:
    return line.startswith(VALUE_INDENT)


def wrap_value(value: str) -> str:
    return f"{VALUE_OPEN}{value}{VALUE_CLOSE}"


def unwrap_value(raw: str) -> str:
    return trim_end_count(trim_start_count(raw, VALUE_OPEN), VALUE_CLOSE)


def is_binary_key(key: str) -> bool:
    return key.startswith(BIN_PREFIX)


def has_line_break(text: str) -> bool:
    return "\n" in text or "\r" in text

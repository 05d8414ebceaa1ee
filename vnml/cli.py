"""
VNml CLI - Command-line interface for .vnml files.

Commands:
  vnml show      - Print sections, values and comments of a .vnml file
  vnml get       - Print a single value
  vnml set       - Set a value (creates the file and section if needed)
  vnml delete    - Delete sections, or values of one section, by mask
  vnml validate  - Check that a file parses
  vnml identify  - Quick check of the version banner
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from vnml.document import VNmlDocument
from vnml.errors import FormatError
from vnml.hexbytes import HEX_PREFIX, bytes_to_hex, hex_to_bytes
from vnml.spec import is_binary_key

logger = logging.getLogger(__name__)


def _open(path: str, namespace: str | None, must_exist: bool = True) -> VNmlDocument:
    doc = VNmlDocument(namespace=namespace)
    if must_exist and not Path(path).is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        doc.load(path)
    except FormatError as e:
        print(f"Error: {path}: {e}", file=sys.stderr)
        sys.exit(1)
    return doc


def cmd_show(args: argparse.Namespace) -> None:
    """Print the whole document, namespaces included."""
    doc = _open(args.path, "")
    for section in doc.sections:
        for comment in section.comments:
            print(f"  ; {comment}")
        print(f"[{section.name}]")
        for entry in section.values:
            for comment in entry.comments:
                print(f"      ; {comment}")
            print(f"    {entry.key} = {entry.value}")
        print()
    print(f"{len(doc)} section(s)")


def cmd_get(args: argparse.Namespace) -> None:
    doc = _open(args.path, args.namespace)
    value = doc.get(args.section, args.key, args.default)
    if value is None:
        print(f"Error: {args.section}/{args.key} not found", file=sys.stderr)
        sys.exit(1)
    if isinstance(value, bytes):
        value = bytes_to_hex(value)
    print(value)


def cmd_set(args: argparse.Namespace) -> None:
    doc = _open(args.path, args.namespace, must_exist=False)
    value: str | bytes = args.value
    if is_binary_key(args.key) and args.value.startswith(HEX_PREFIX):
        value = hex_to_bytes(args.value)
    try:
        doc[args.section, args.key] = value
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if args.comment:
        doc.set_comment(args.section, args.key, *args.comment)
    nbytes = doc.save(args.path)
    logger.info("Wrote %s (%d bytes)", args.path, nbytes)


def cmd_delete(args: argparse.Namespace) -> None:
    doc = _open(args.path, args.namespace)
    before = sum(len(s.values) for s in doc.sections), len(doc)
    if args.section is not None:
        doc.delete_values(args.section, args.mask)
    else:
        doc.delete_sections(args.mask)
    after = sum(len(s.values) for s in doc.sections), len(doc)
    doc.save(args.path)
    print(f"Deleted {before[1] - after[1]} section(s), {before[0] - after[0]} value(s)")


def cmd_validate(args: argparse.Namespace) -> None:
    doc = _open(args.path, "")
    values = sum(len(s.values) for s in doc.sections)
    print(f"VALID: {len(doc)} section(s), {values} value(s)")


def cmd_identify(args: argparse.Namespace) -> None:
    from vnml.reader import VNmlReader

    path = Path(args.path)
    if not path.is_file():
        print(f"Error: File not found: {args.path}", file=sys.stderr)
        sys.exit(1)
    if VNmlReader.is_vnml(path):
        print(f"{args.path}: VNml")
    else:
        print(f"{args.path}: not VNml")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    from vnml import __version__

    parser = argparse.ArgumentParser(
        prog="vnml",
        description="VNml - hierarchical, comment-preserving configuration files.",
    )
    parser.add_argument("--version", action="version", version=f"vnml {__version__}")
    parser.add_argument("-n", "--namespace", default=None,
                        help="Section namespace (or set VNML_NAMESPACE env var)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    p_show = sub.add_parser("show", help="Print a .vnml file")
    p_show.add_argument("path", help="Path to .vnml file")

    p_get = sub.add_parser("get", help="Print a value")
    p_get.add_argument("path", help="Path to .vnml file")
    p_get.add_argument("section", help="Section name")
    p_get.add_argument("key", help="Value name (BIN: prefix for binary)")
    p_get.add_argument("-d", "--default", help="Printed when the value is missing")

    p_set = sub.add_parser("set", help="Set a value")
    p_set.add_argument("path", help="Path to .vnml file")
    p_set.add_argument("section", help="Section name")
    p_set.add_argument("key", help="Value name (BIN: prefix for binary)")
    p_set.add_argument("value", help="Value; 0x-prefixed hex for BIN: keys")
    p_set.add_argument("-c", "--comment", action="append", help="Comment line (repeatable)")

    p_delete = sub.add_parser("delete", help="Delete sections or values by mask")
    p_delete.add_argument("path", help="Path to .vnml file")
    p_delete.add_argument("mask", help="Name, name prefix ending in *, or * for everything")
    p_delete.add_argument("-s", "--section", help="Delete values of this section instead")

    p_validate = sub.add_parser("validate", help="Validate a .vnml file")
    p_validate.add_argument("path", help="Path to .vnml file")

    p_identify = sub.add_parser("identify", help="Quick check if a file is VNml")
    p_identify.add_argument("path", help="Path to file")

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='[%(asctime)s] %(levelname)s: %(message)s')

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "show": cmd_show,
        "get": cmd_get,
        "set": cmd_set,
        "delete": cmd_delete,
        "validate": cmd_validate,
        "identify": cmd_identify,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()

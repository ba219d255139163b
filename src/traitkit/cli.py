"""Command line tool for checking declaration files."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from traitkit.errors import ObjectModelError
from traitkit.loader import load_file
from traitkit.registry import Registry


def format_value(value: Any, max_width: int = 40) -> str:
    """Format a field value for display."""
    if callable(value):
        text = f"<function {getattr(value, '__name__', '?')}>"
    else:
        text = repr(value)
    if len(text) > max_width:
        text = text[: max_width - 3] + "..."
    return text


def print_graph(registry: Registry) -> None:
    """Print one row per declared name: kind, supers and ancestors."""
    names = registry.list_names()
    if not names:
        print("(no declarations)")
        return

    rows = []
    for name in names:
        rows.append(
            {
                "name": name,
                "kind": registry.kind_of(name).value,
                "supers": ", ".join(registry.record(name).supers) or "-",
                "ancestors": ", ".join(registry.ancestors(name)) or "-",
            }
        )

    columns = ["name", "kind", "supers", "ancestors"]
    widths = {col: max(len(col), *(len(row[col]) for row in rows)) for col in columns}
    print(" | ".join(col.ljust(widths[col]) for col in columns))
    print("-+-".join("-" * widths[col] for col in columns))
    for row in rows:
        print(" | ".join(row[col].ljust(widths[col]) for col in columns))
    print(f"\n({len(rows)} declaration{'s' if len(rows) != 1 else ''})")


def describe(registry: Registry, name: str) -> None:
    """Print the members and relationships of a single name."""
    definition = registry.get_or_raise(name)
    record = registry.record(name)

    print(f"{registry.kind_of(name).value} {name}")
    print(f"  supers:     {', '.join(record.supers) or '-'}")
    print(f"  ancestors:  {', '.join(registry.ancestors(name)) or '-'}")
    print(f"  subclasses: {', '.join(registry.subclasses_of(name)) or '-'}")
    print(f"  accessors:  {'enabled' if definition.accessors_enabled else 'disabled'}")
    if not definition.fields:
        print("  fields:     -")
        return
    print("  fields:")
    for key, value in definition.fields.items():
        origin = " (inherited)" if key in record.shadowed_keys else ""
        print(f"    {key} = {format_value(value)}{origin}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Load class declaration files and print the class graph"
    )
    arg_parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="Declaration files, loaded in order into one registry",
    )
    arg_parser.add_argument(
        "-d", "--describe",
        type=str,
        metavar="NAME",
        help="Describe a single class or trait instead of printing the graph",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = arg_parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s - %(levelname)s - %(message)s",
        )

    for file_path in args.files:
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            return 1

    registry = Registry()
    try:
        for file_path in args.files:
            load_file(registry, file_path)
        if args.describe:
            describe(registry, args.describe)
        else:
            print_graph(registry)
    except (SyntaxError, ObjectModelError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

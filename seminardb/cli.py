"""
CLI (Command Line Interface).

Usage:

    seminardb <world-size> <command-file>
    seminardb 128 commands.txt
    cat commands.txt | seminardb 128 -

The world size must be a positive power of two so that the location tree
can halve its cells cleanly. All results are printed to stdout, diagnostics
to stderr.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, TextIO

from seminardb.commands import INT_TOKEN, read_commands
from seminardb.database import SeminarDB
from seminardb.sink import ConsoleSink, SeminarSink

USAGE = "command usage : {world-size} {command-file}"


class _Parser(argparse.ArgumentParser):
    """
    argparse exits with status 2 on bad arguments; this tool uses 1 and
    prints its own usage line.
    """

    def error(self, message: str) -> None:  # type: ignore[override]
        print(USAGE)
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser.
    """
    parser = _Parser(prog="seminardb", description="Seminar database", usage=USAGE)
    parser.add_argument("world_size", type=str, help="Size of the square world (power of two, e.g. 128)")
    parser.add_argument("command_file", type=str, help="Path of the command file, or - for stdin")
    return parser


def _parse_world_size(raw: str) -> Optional[int]:
    """
    Return the world size or None if it is not a positive power of two.
    """
    if not INT_TOKEN.fullmatch(raw):
        return None
    size = int(raw)
    if size <= 0 or size & (size - 1):
        return None
    return size


def run(world_size: int, stream: TextIO, sink: SeminarSink) -> int:
    """
    Process every command in `stream` against a fresh database.
    Returns the number of commands processed.
    """
    db = SeminarDB(world_size, sink)
    return db.run(read_commands(stream))


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, runs the command file,
    and exits via SystemExit with a return code.
    """
    args = build_parser().parse_args(argv)
    sink = ConsoleSink()

    world_size = _parse_world_size(args.world_size)
    if world_size is None:
        sink.eprintln("error: world-size must be a positive power of two")
        raise SystemExit(1)

    if args.command_file == "-":
        run(world_size, sys.stdin, sink)
        raise SystemExit(0)

    path = Path(args.command_file)
    try:
        with path.open(encoding="utf-8") as fh:
            run(world_size, fh, sink)
    except (OSError, UnicodeDecodeError):
        sink.eprintln(f"error: cannot read command file {path}")
        raise SystemExit(1)

    raise SystemExit(0)

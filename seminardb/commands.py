"""
Command file reading (text -> Command objects).

Grammar (whitespace separated, one command per line):

    insert <id>                 followed by four body lines:
                                  <title>
                                  <date> <length> <x> <y> <cost>
                                  <keyword> <keyword> ...
                                  <description>
    delete <id>
    search ID <id>
    search cost <low> <high>
    search date <low> <high>
    search keyword <word>
    search location <x> <y> <radius>
    print ID|cost|date|keyword|location

Lines with fewer than two tokens are skipped. Anything that cannot be
turned into a command becomes an InvalidCommand carrying the diagnostic
line, so one bad line never stops the rest of the file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from seminardb.model import Seminar

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT16_MIN, INT16_MAX = -(2**15), 2**15 - 1

TREE_KINDS = ("ID", "cost", "date", "keyword", "location")

INSERT_BODY_LINES = 4

INT_TOKEN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class InsertCommand:
    seminar: Seminar


@dataclass(frozen=True)
class DeleteCommand:
    seminar_id: int


@dataclass(frozen=True)
class SearchCommand:
    kind: str
    args: Tuple[Union[int, str], ...]


@dataclass(frozen=True)
class PrintCommand:
    kind: str


@dataclass(frozen=True)
class InvalidCommand:
    message: str


Command = Union[InsertCommand, DeleteCommand, SearchCommand, PrintCommand, InvalidCommand]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_int(token: str, lo: int = INT32_MIN, hi: int = INT32_MAX) -> int:
    """
    Parse a plain signed decimal integer and check its range.
    Raises ValueError for anything else, including `1_000` and padded tokens.
    """
    if not INT_TOKEN.fullmatch(token):
        raise ValueError(f"Not an integer: {token!r}")
    value = int(token)
    if not (lo <= value <= hi):
        raise ValueError(f"Value out of range: {token!r}")
    return value


def parse_seminar(seminar_id: int, body: list[str]) -> Seminar:
    """
    Build a Seminar from the four body lines of an insert command.
    Raises ValueError if the body is malformed.
    """
    if len(body) != INSERT_BODY_LINES:
        raise ValueError("Incomplete insert record")

    title_line, logistics_line, keywords_line, desc_line = body

    logistics = logistics_line.split()
    if len(logistics) < 5:
        raise ValueError(f"Invalid logistics line: {logistics_line!r}")

    date = logistics[0]
    length = _parse_int(logistics[1])
    x = _parse_int(logistics[2], INT16_MIN, INT16_MAX)
    y = _parse_int(logistics[3], INT16_MIN, INT16_MAX)
    cost = _parse_int(logistics[4])

    return Seminar(
        id=seminar_id,
        title=title_line.rstrip("\r\n"),
        date=date,
        length=length,
        x=x,
        y=y,
        cost=cost,
        keywords=tuple(keywords_line.split()),
        description=desc_line.strip(),
    )


def parse_search(tokens: list[str]) -> Command:
    """
    Turn the tokens after 'search' into a SearchCommand.
    """
    kind, args = tokens[0], tokens[1:]
    if kind not in TREE_KINDS:
        return InvalidCommand("error: invalid search type")

    try:
        if kind == "ID" and len(args) == 1:
            return SearchCommand(kind, (_parse_int(args[0]),))
        if kind == "cost" and len(args) == 2:
            return SearchCommand(kind, (_parse_int(args[0]), _parse_int(args[1])))
        if kind == "date" and len(args) == 2:
            return SearchCommand(kind, (args[0], args[1]))
        if kind == "keyword" and len(args) == 1:
            return SearchCommand(kind, (args[0],))
        if kind == "location" and len(args) == 3:
            x, y, radius = (_parse_int(a) for a in args)
            if radius >= 0:
                return SearchCommand(kind, (x, y, radius))
    except ValueError:
        pass

    return InvalidCommand("error: invalid search arguments")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def read_commands(lines: Iterable[str]) -> Iterator[Command]:
    """
    Yield one Command per command line in `lines`.

    `lines` can be an open file, sys.stdin or a plain list of strings.
    Insert commands consume their four body lines from the same iterator.
    """
    it = iter(lines)

    for line in it:
        tokens = line.split()
        if len(tokens) < 2:
            continue

        verb = tokens[0]

        if verb == "insert":
            body = _take(it, INSERT_BODY_LINES)
            try:
                seminar_id = _parse_int(tokens[1])
                yield InsertCommand(parse_seminar(seminar_id, body))
            except ValueError:
                yield InvalidCommand(f"error: invalid insert record for ID {tokens[1]}")

        elif verb == "delete":
            try:
                yield DeleteCommand(_parse_int(tokens[1]))
            except ValueError:
                yield InvalidCommand("error: invalid delete arguments")

        elif verb == "search":
            yield parse_search(tokens[1:])

        elif verb == "print":
            kind = tokens[1]
            if kind in TREE_KINDS:
                yield PrintCommand(kind)
            else:
                yield InvalidCommand("error: invalid print type")

        else:
            yield InvalidCommand(f"error: invalid command {{{verb}}}")


def _take(it: Iterator[str], n: int) -> list[str]:
    out: list[str] = []
    for _ in range(n):
        line: Optional[str] = next(it, None)
        if line is None:
            break
        out.append(line)
    return out

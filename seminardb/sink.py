"""
Output sinks.

The database never prints directly. Everything it reports goes through a
sink, so the CLI can write to the terminal while tests simply collect lines.
"""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console


class SeminarSink:
    """
    Receives the text produced by the database.
    """

    def println(self, msg: str = "") -> None:
        raise NotImplementedError

    def eprintln(self, msg: str) -> None:
        raise NotImplementedError


class ConsoleSink(SeminarSink):
    """
    Writes results to stdout and diagnostics to stderr through rich consoles.

    Results go straight to the console's file: rich rendering expands tabs,
    and a title or description must come out byte-for-byte as stored.
    Diagnostics are rendered by rich with markup, emoji and highlighting off.
    """

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.err_console = err_console or Console(stderr=True, highlight=False, soft_wrap=True)

    def println(self, msg: str = "") -> None:
        out = self.console.file
        out.write(f"{msg}\n")
        out.flush()

    def eprintln(self, msg: str) -> None:
        self.err_console.print(msg, markup=False, emoji=False, style="red")


class MemorySink(SeminarSink):
    """
    Collects output in memory, one entry per physical line.
    """

    def __init__(self) -> None:
        self.lines: List[str] = []
        self.errors: List[str] = []

    def println(self, msg: str = "") -> None:
        self.lines.extend(msg.split("\n"))

    def eprintln(self, msg: str) -> None:
        self.errors.extend(msg.split("\n"))

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n" if self.lines else ""

    def clear(self) -> None:
        self.lines.clear()
        self.errors.clear()

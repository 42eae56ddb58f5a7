"""
Central data model definitions used across the project.

This module defines the canonical structure of Seminar objects so that:
- the command reader, the trees and the database share the same field names
- seminars stay immutable once they are admitted into the database
- every index can hold the same Seminar object without copying it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Generic, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True, eq=False)
class Seminar:
    """
    Represents one seminar as read from an insert command.

    Two seminars are equal when they have the same ID.
    """

    id: int
    title: str
    date: str
    length: int
    x: int
    y: int
    cost: int
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    description: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Seminar):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def render(self) -> str:
        """
        Multi-line text block printed after inserts and searches.
        """
        return (
            f"ID: {self.id}, Title: {self.title}\n"
            f"Date: {self.date}, Length: {self.length}, X: {self.x}, Y: {self.y}, Cost: {self.cost}\n"
            f"Description: {self.description}\n"
            f"Keywords: {', '.join(self.keywords)}"
        )

    def __str__(self) -> str:
        return self.render()


@dataclass
class Record(Generic[K, V]):
    """
    Key/value pair stored in every search tree node.
    """

    key: K
    value: V


@dataclass
class VisitCounter:
    """
    Accumulator for the number of tree nodes visited by a search.

    Empty subtrees count as visits too.
    """

    count: int = 0

    def visit(self) -> None:
        self.count += 1

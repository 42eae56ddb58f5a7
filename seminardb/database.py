"""
Seminar database (coordinator).

Keeps five indexes over the same live seminars consistent:

    ID        BinarySearchTree[int, Seminar]   unique keys
    cost      BinarySearchTree[int, Seminar]   duplicate keys
    date      BinarySearchTree[str, Seminar]   duplicate keys
    keyword   BinarySearchTree[str, Seminar]   one entry per keyword
    location  BinTree over [0, world_size)^2

Rules:
- an insert either reaches every index or none of them
- a delete is committed by the ID index and then cascades to the others,
  using the removed seminar's own attributes as keys
- user-level failures never raise; they are written to the sink
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from seminardb.bintree import BinTree
from seminardb.bst import BinarySearchTree
from seminardb.commands import (
    Command,
    DeleteCommand,
    InsertCommand,
    InvalidCommand,
    PrintCommand,
    SearchCommand,
)
from seminardb.model import Seminar, VisitCounter
from seminardb.sink import SeminarSink


class SeminarDB:
    def __init__(self, world_size: int, sink: SeminarSink) -> None:
        self.world_size = world_size
        self.sink = sink
        self.id_tree: BinarySearchTree[int, Seminar] = BinarySearchTree()
        self.cost_tree: BinarySearchTree[int, Seminar] = BinarySearchTree()
        self.date_tree: BinarySearchTree[str, Seminar] = BinarySearchTree()
        self.keyword_tree: BinarySearchTree[str, Seminar] = BinarySearchTree()
        self.location_tree = BinTree(world_size, world_size)

    def __len__(self) -> int:
        return len(self.id_tree)

    def __contains__(self, seminar_id: object) -> bool:
        return isinstance(seminar_id, int) and self.id_tree.search(seminar_id) is not None

    def get(self, seminar_id: int) -> Optional[Seminar]:
        return self.id_tree.search(seminar_id)

    def seminars(self) -> List[Seminar]:
        """
        Live seminars in ascending ID order.
        """
        return self.id_tree.values()

    def _in_world(self, seminar: Seminar) -> bool:
        return 0 <= seminar.x < self.world_size and 0 <= seminar.y < self.world_size

    # ------------------------------------------------------------------
    # Insert / delete
    # ------------------------------------------------------------------

    def insert(self, seminar: Seminar) -> bool:
        if not self._in_world(seminar):
            self.sink.println(f"Insert FAILED - Bad x, y coordinates: {seminar.x}, {seminar.y}")
            return False

        if not self.id_tree.insert_unique(seminar.id, seminar):
            self.sink.println(f"Insert FAILED - There is already a record with ID {seminar.id}")
            return False

        self.cost_tree.insert(seminar.cost, seminar)
        self.date_tree.insert(seminar.date, seminar)
        for keyword in seminar.keywords:
            self.keyword_tree.insert(keyword, seminar)
        self.location_tree.insert(seminar)

        self.sink.println(f"Successfully inserted record with ID {seminar.id}")
        self.sink.println(seminar.render())
        return True

    def delete(self, seminar_id: int) -> bool:
        seminar = self.id_tree.remove(seminar_id)
        if seminar is None:
            self.sink.println(f"Delete FAILED -- There is no record with ID {seminar_id}")
            return False

        self.cost_tree.remove_value(seminar.cost, seminar)
        self.date_tree.remove_value(seminar.date, seminar)
        for keyword in seminar.keywords:
            self.keyword_tree.remove_value(keyword, seminar)
        self.location_tree.remove(seminar.id, seminar.x, seminar.y)

        self.sink.println(f"Record with ID {seminar_id} successfully deleted from the database")
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_id(self, seminar_id: int) -> Optional[Seminar]:
        seminar = self.id_tree.search(seminar_id)
        if seminar is None:
            self.sink.println(f"Search FAILED -- There is no record with ID {seminar_id}")
        else:
            self.sink.println(f"Found record with ID {seminar_id}")
            self.sink.println(seminar.render())
        return seminar

    def search_cost(self, low: int, high: int) -> List[Seminar]:
        counter = VisitCounter()
        found = self.cost_tree.range_search(low, high, counter)
        self.sink.println(f"Seminars with cost in range {low} to {high}:")
        self._print_seminars(found)
        self.sink.println(f"{counter.count} nodes visited in this search")
        return found

    def search_date(self, low: str, high: str) -> List[Seminar]:
        counter = VisitCounter()
        found = self.date_tree.range_search(low, high, counter)
        self.sink.println(f"Seminars with date in range {low} to {high}:")
        self._print_seminars(found)
        self.sink.println(f"{counter.count} nodes visited in this search")
        return found

    def search_keyword(self, keyword: str) -> List[Seminar]:
        found = self.keyword_tree.multi_search(keyword)
        self.sink.println(f"Seminars matching keyword {keyword}:")
        self._print_seminars(found)
        return found

    def search_location(self, x: int, y: int, radius: int) -> List[Seminar]:
        counter = VisitCounter()
        found = self.location_tree.search(x, y, radius, counter)
        self.sink.println(f"Seminars within {radius} units of {x}, {y}:")
        for s in found:
            self.sink.println(f"Found a record with key value {s.id} at {s.x}, {s.y}")
        self.sink.println(f"{counter.count} nodes visited in this search")
        return found

    def _print_seminars(self, seminars: Iterable[Seminar]) -> None:
        for s in seminars:
            self.sink.println(s.render())

    # ------------------------------------------------------------------
    # Print
    # ------------------------------------------------------------------

    def print_tree(self, kind: str) -> bool:
        println = self.sink.println
        if kind == "ID":
            println("ID Tree:")
            self.id_tree.dump(println)
        elif kind == "cost":
            println("Cost Tree:")
            self.cost_tree.dump(println)
        elif kind == "date":
            println("Date Tree:")
            self.date_tree.dump(println)
        elif kind == "keyword":
            println("Keyword Tree:")
            self.keyword_tree.dump(println)
        elif kind == "location":
            println("Location Tree:")
            self.location_tree.dump(println)
        else:
            self.sink.eprintln("error: invalid print type")
            return False
        return True

    # ------------------------------------------------------------------
    # Command dispatch
    # ------------------------------------------------------------------

    def execute(self, command: Command) -> None:
        if isinstance(command, InsertCommand):
            self.insert(command.seminar)
        elif isinstance(command, DeleteCommand):
            self.delete(command.seminar_id)
        elif isinstance(command, SearchCommand):
            self._execute_search(command)
        elif isinstance(command, PrintCommand):
            self.print_tree(command.kind)
        elif isinstance(command, InvalidCommand):
            self.sink.eprintln(command.message)

    def _execute_search(self, command: SearchCommand) -> None:
        kind, args = command.kind, command.args
        if kind == "ID":
            self.search_id(*args)
        elif kind == "cost":
            self.search_cost(*args)
        elif kind == "date":
            self.search_date(*args)
        elif kind == "keyword":
            self.search_keyword(*args)
        elif kind == "location":
            self.search_location(*args)
        else:
            self.sink.eprintln("error: invalid search type")

    def run(self, commands: Iterable[Command]) -> int:
        """
        Execute commands in order. Returns the number of commands processed.
        """
        n = 0
        for command in commands:
            self.execute(command)
            n += 1
        return n

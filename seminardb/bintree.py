"""
Bin tree: spatial index over the seminar world.

The world [0, x_max) x [0, y_max) is split in half again and again, on x at
even depths and on y at odd depths. Each node covers one such cell:

- EMPTY         the cell holds nothing (one shared instance)
- InternalNode  the cell is split, left = west/south half, right = east/north
- LeafNode      the cell holds seminars that all sit on the same (x, y)

A point lying exactly on a split line belongs to the right (east/north) half.
"""

from __future__ import annotations

from typing import Callable, List, NamedTuple, Optional, Union

from seminardb.model import Seminar, VisitCounter

INDENT = "  "


class Cell(NamedTuple):
    """
    Centre and size of the region covered by a node.
    """

    cx: int
    cy: int
    width: int
    height: int

    def child(self, level: int, right: bool) -> "Cell":
        if level % 2 == 0:
            dx = self.width // 4
            return Cell(self.cx + dx if right else self.cx - dx, self.cy, self.width // 2, self.height)
        dy = self.height // 4
        return Cell(self.cx, self.cy + dy if right else self.cy - dy, self.width, self.height // 2)


class _EmptyNode:
    __slots__ = ()

    def describe(self) -> str:
        return "E"

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = _EmptyNode()


class InternalNode:
    __slots__ = ("left", "right")

    def __init__(self, left: "BTNode" = EMPTY, right: "BTNode" = EMPTY) -> None:
        self.left = left
        self.right = right

    def describe(self) -> str:
        return "I"


class LeafNode:
    """
    Bucket of seminars sharing one coordinate, kept in ascending ID order.
    """

    __slots__ = ("seminars",)

    def __init__(self, seminar: Seminar) -> None:
        self.seminars: List[Seminar] = [seminar]

    @property
    def x(self) -> int:
        return self.seminars[0].x

    @property
    def y(self) -> int:
        return self.seminars[0].y

    def holds_point(self, x: int, y: int) -> bool:
        return self.x == x and self.y == y

    def add(self, seminar: Seminar) -> None:
        pos = 0
        while pos < len(self.seminars) and seminar.id > self.seminars[pos].id:
            pos += 1
        self.seminars.insert(pos, seminar)

    def remove(self, seminar_id: int) -> bool:
        for i, s in enumerate(self.seminars):
            if s.id == seminar_id:
                del self.seminars[i]
                return True
        return False

    def is_empty(self) -> bool:
        return not self.seminars

    def describe(self) -> str:
        ids = " ".join(str(s.id) for s in self.seminars)
        return f"Leaf with {len(self.seminars)} objects: {ids}"


BTNode = Union[_EmptyNode, InternalNode, LeafNode]


class BinTree:
    """
    Alternating-axis binary space partition of seminars by location.
    """

    def __init__(self, x_max: int, y_max: int) -> None:
        if x_max <= 0 or y_max <= 0:
            raise ValueError("error: worldSize must be greater than 0.")
        self.x_max = x_max
        self.y_max = y_max
        self._root: BTNode = EMPTY

    @property
    def root(self) -> BTNode:
        return self._root

    def _root_cell(self) -> Cell:
        return Cell(self.x_max // 2, self.y_max // 2, self.x_max, self.y_max)

    def is_empty(self) -> bool:
        return self._root is EMPTY

    # ------------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------------

    def insert(self, seminar: Seminar) -> None:
        if not (0 <= seminar.x < self.x_max and 0 <= seminar.y < self.y_max):
            raise ValueError(f"Point ({seminar.x}, {seminar.y}) lies outside the world")
        self._root = self._insert(self._root, seminar, self._root_cell(), 0)

    def _insert(self, node: BTNode, seminar: Seminar, cell: Cell, level: int) -> BTNode:
        if node is EMPTY:
            return LeafNode(seminar)

        if isinstance(node, LeafNode):
            if node.holds_point(seminar.x, seminar.y):
                node.add(seminar)
                return node

            # split: move the old bucket and the new seminar one level down
            internal = InternalNode()
            for existing in node.seminars:
                self._insert_below(internal, existing, cell, level)
            self._insert_below(internal, seminar, cell, level)
            return internal

        assert isinstance(node, InternalNode)
        self._insert_below(node, seminar, cell, level)
        return node

    def _insert_below(self, node: InternalNode, seminar: Seminar, cell: Cell, level: int) -> None:
        if self._goes_right(seminar.x, seminar.y, cell, level):
            node.right = self._insert(node.right, seminar, cell.child(level, True), level + 1)
        else:
            node.left = self._insert(node.left, seminar, cell.child(level, False), level + 1)

    @staticmethod
    def _goes_right(x: int, y: int, cell: Cell, level: int) -> bool:
        if level % 2 == 0:
            return x >= cell.cx
        return y >= cell.cy

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self, seminar_id: int, x: int, y: int) -> None:
        """
        Remove the seminar with `seminar_id` from the leaf at (x, y).

        Leaves that run empty become EMPTY, and an internal node left with
        two EMPTY children becomes EMPTY as well.
        """
        self._root = self._remove(self._root, seminar_id, x, y, self._root_cell(), 0)

    def _remove(self, node: BTNode, seminar_id: int, x: int, y: int, cell: Cell, level: int) -> BTNode:
        if node is EMPTY:
            return node

        if isinstance(node, LeafNode):
            node.remove(seminar_id)
            return EMPTY if node.is_empty() else node

        assert isinstance(node, InternalNode)
        if self._goes_right(x, y, cell, level):
            node.right = self._remove(node.right, seminar_id, x, y, cell.child(level, True), level + 1)
        else:
            node.left = self._remove(node.left, seminar_id, x, y, cell.child(level, False), level + 1)

        if node.left is EMPTY and node.right is EMPTY:
            return EMPTY
        return node

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, x: int, y: int, radius: int, counter: Optional[VisitCounter] = None) -> List[Seminar]:
        """
        Return every seminar within `radius` of (x, y), boundary included.

        `counter` is incremented for every node entered, EMPTY included.
        """
        if counter is None:
            counter = VisitCounter()
        results: List[Seminar] = []
        self._search(self._root, x, y, radius, self._root_cell(), 0, results, counter)
        return results

    def _search(
        self,
        node: BTNode,
        x: int,
        y: int,
        radius: int,
        cell: Cell,
        level: int,
        results: List[Seminar],
        counter: VisitCounter,
    ) -> None:
        counter.visit()
        if node is EMPTY:
            return

        if isinstance(node, LeafNode):
            radius_sq = radius * radius
            for s in node.seminars:
                if (s.x - x) ** 2 + (s.y - y) ** 2 <= radius_sq:
                    results.append(s)
            return

        assert isinstance(node, InternalNode)
        split = cell.cx if level % 2 == 0 else cell.cy
        q = x if level % 2 == 0 else y
        if q - radius <= split:
            self._search(node.left, x, y, radius, cell.child(level, False), level + 1, results, counter)
        # a point on the split line at distance exactly `radius` lives on the right
        if q + radius >= split:
            self._search(node.right, x, y, radius, cell.child(level, True), level + 1, results, counter)

    def find(self, x: int, y: int) -> List[Seminar]:
        """
        Seminars stored exactly at (x, y), following the same descent as insert.
        """
        node = self._root
        cell = self._root_cell()
        level = 0
        while isinstance(node, InternalNode):
            right = self._goes_right(x, y, cell, level)
            node = node.right if right else node.left
            cell = cell.child(level, right)
            level += 1
        if isinstance(node, LeafNode) and node.holds_point(x, y):
            return list(node.seminars)
        return []

    def leaves(self) -> List[LeafNode]:
        out: List[LeafNode] = []
        stack: List[BTNode] = [self._root]
        while stack:
            node = stack.pop()
            if isinstance(node, LeafNode):
                out.append(node)
            elif isinstance(node, InternalNode):
                stack.append(node.right)
                stack.append(node.left)
        return out

    # ------------------------------------------------------------------
    # Dump
    # ------------------------------------------------------------------

    def dump(self, println: Callable[[str], None]) -> None:
        """
        Pre-order print (node, left, right), two spaces per level.
        """
        self._dump(self._root, 0, println)

    def _dump(self, node: BTNode, level: int, println: Callable[[str], None]) -> None:
        println(f"{INDENT * level}{node.describe()}")
        if isinstance(node, InternalNode):
            self._dump(node.left, level + 1, println)
            self._dump(node.right, level + 1, println)

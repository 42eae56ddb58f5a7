"""
Ordered search tree (unbalanced binary search tree).

One class covers the three ways the database uses a tree:
- unique keys (insert_unique), e.g. the ID index
- duplicate keys (insert), e.g. the cost, date and keyword indexes
- range and multi-value scans over either kind

Duplicates always descend into the LEFT subtree, so for every node:
    left keys <= node key < right keys

No balancing is done on purpose: print output shows the exact tree shape,
which depends only on the order of inserts and deletes. Keys inserted in
sorted order build a chain as deep as the tree is large, so every walk
below is a loop with an explicit stack rather than a recursion.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from seminardb.model import Record, VisitCounter

K = TypeVar("K")
V = TypeVar("V")

INDENT = "  "


class _Node(Generic[K, V]):
    __slots__ = ("data", "left", "right")

    def __init__(self, key: K, value: V) -> None:
        self.data: Record[K, V] = Record(key, value)
        self.left: Optional[_Node[K, V]] = None
        self.right: Optional[_Node[K, V]] = None


def _compare(a: Any, b: Any) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


class BinarySearchTree(Generic[K, V]):
    """
    Comparison-ordered binary search tree mapping keys to values.
    """

    def __init__(self) -> None:
        self._root: Optional[_Node[K, V]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._root is None

    # ------------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------------

    def insert(self, key: K, value: V) -> None:
        """
        Insert unconditionally. Equal keys go to the left subtree.
        """
        new = _Node(key, value)
        self._size += 1
        if self._root is None:
            self._root = new
            return

        node = self._root
        while True:
            if _compare(key, node.data.key) <= 0:
                if node.left is None:
                    node.left = new
                    return
                node = node.left
            else:
                if node.right is None:
                    node.right = new
                    return
                node = node.right

    def insert_unique(self, key: K, value: V) -> bool:
        """
        Insert only if no node has an equal key.

        Returns True if the record was added, False on a key collision
        (the tree is left untouched in that case).
        """
        if self._root is None:
            self._root = _Node(key, value)
            self._size += 1
            return True

        node = self._root
        while True:
            c = _compare(key, node.data.key)
            if c == 0:
                return False
            if c < 0:
                if node.left is None:
                    node.left = _Node(key, value)
                    break
                node = node.left
            else:
                if node.right is None:
                    node.right = _Node(key, value)
                    break
                node = node.right

        self._size += 1
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, key: K) -> Optional[V]:
        """
        Return the value of the first node on the descent path whose key
        equals `key`, or None.
        """
        node = self._root
        while node is not None:
            c = _compare(key, node.data.key)
            if c == 0:
                return node.data.value
            node = node.left if c < 0 else node.right
        return None

    def range_search(self, low: K, high: K, counter: Optional[VisitCounter] = None) -> List[V]:
        """
        Return all values with low <= key <= high in ascending key order.

        `counter` is incremented once per subtree entered, empty subtrees
        included. A subtree is entered only if it can hold keys in range:
        the left one when key >= low, the right one when key <= high.
        """
        if counter is None:
            counter = VisitCounter()
        results: List[V] = []
        stack: List[_Node[K, V]] = []

        def enter(node: Optional[_Node[K, V]]) -> None:
            # walk down the left spine of the subtree
            while True:
                counter.visit()
                if node is None:
                    return
                stack.append(node)
                if _compare(node.data.key, low) < 0:
                    return
                node = node.left

        enter(self._root)
        while stack:
            node = stack.pop()
            key = node.data.key
            if _compare(key, low) >= 0 and _compare(key, high) <= 0:
                results.append(node.data.value)
            if _compare(key, high) <= 0:
                enter(node.right)
        return results

    def multi_search(self, key: K) -> List[V]:
        """
        Return every value whose key equals `key`, in in-order sequence.
        """
        # every equal key lies on one descent path: left of an equal node
        path: List[_Node[K, V]] = []
        node = self._root
        while node is not None:
            c = _compare(key, node.data.key)
            if c == 0:
                path.append(node)
            node = node.left if c <= 0 else node.right
        return [n.data.value for n in reversed(path)]

    def values(self) -> List[V]:
        """
        All values in ascending key order.
        """
        return [record.value for record in self.records()]

    def records(self) -> List[Record[K, V]]:
        out: List[Record[K, V]] = []
        stack: List[_Node[K, V]] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            out.append(node.data)
            node = node.right
        return out

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self, key: K) -> Optional[V]:
        """
        Remove the first node found with an equal key and return its value.
        """
        parent: Optional[_Node[K, V]] = None
        node = self._root
        while node is not None:
            c = _compare(key, node.data.key)
            if c == 0:
                break
            parent = node
            node = node.left if c < 0 else node.right

        if node is None:
            return None
        removed = node.data
        self._replace(parent, node, self._unlink(node))
        self._size -= 1
        return removed.value

    def remove_value(self, key: K, value: V) -> bool:
        """
        Remove one node whose key equals `key` and whose value equals `value`.

        Equal keys with a different value are skipped by continuing into the
        left subtree, where the remaining duplicates live.
        """
        parent: Optional[_Node[K, V]] = None
        node = self._root
        while node is not None:
            c = _compare(key, node.data.key)
            if c == 0 and node.data.value == value:
                break
            parent = node
            node = node.left if c <= 0 else node.right

        if node is None:
            return False
        self._replace(parent, node, self._unlink(node))
        self._size -= 1
        return True

    def _replace(
        self,
        parent: Optional[_Node[K, V]],
        old: _Node[K, V],
        new: Optional[_Node[K, V]],
    ) -> None:
        if parent is None:
            self._root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new

    def _unlink(self, node: _Node[K, V]) -> Optional[_Node[K, V]]:
        """
        Return the subtree that replaces `node` once it is removed.

        A node with two children takes over the record of the maximum of its
        left subtree, and that donor node is removed from the left subtree.
        """
        if node.left is None:
            return node.right
        if node.right is None:
            return node.left

        donor_parent = node
        donor = node.left
        while donor.right is not None:
            donor_parent = donor
            donor = donor.right

        if donor_parent is node:
            node.left = donor.left
        else:
            donor_parent.right = donor.left
        node.data = donor.data
        return node

    # ------------------------------------------------------------------
    # Dump
    # ------------------------------------------------------------------

    def dump(self, println: Callable[[str], None]) -> None:
        """
        Print the tree sideways: right subtree, node, left subtree, two
        spaces of indentation per level, `null` for empty subtrees.
        """
        if self._root is None:
            println("This tree is empty")
            return

        # (node, level, children already scheduled)
        stack: List[Tuple[Optional[_Node[K, V]], int, bool]] = [(self._root, 0, False)]
        while stack:
            node, level, expanded = stack.pop()
            if node is None:
                println(f"{INDENT * level}null")
            elif expanded:
                println(f"{INDENT * level}{node.data.key}")
            else:
                stack.append((node.left, level + 1, False))
                stack.append((node, level, True))
                stack.append((node.right, level + 1, False))

        println(f"Number of records: {self._size}")

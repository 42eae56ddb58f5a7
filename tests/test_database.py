"""
Tests for the seminar database (all indexes together).

Database contract:
- insert reaches every index or none
- delete cascades from the ID index to every other index
- every failure is reported as one line, nothing raises
"""

import random
import unittest
from collections import Counter

from seminardb.commands import InvalidCommand, PrintCommand, SearchCommand, read_commands
from seminardb.database import SeminarDB
from seminardb.model import Seminar
from seminardb.sink import MemorySink


def _sem(
    seminar_id: int,
    x: int = 10,
    y: int = 10,
    cost: int = 100,
    date: str = "202401011200",
    keywords: tuple[str, ...] = ("k",),
) -> Seminar:
    return Seminar(seminar_id, f"Seminar {seminar_id}", date, 30, x, y, cost, keywords, "desc")


def _dumps(db: SeminarDB) -> list[str]:
    sink = MemorySink()
    saved, db.sink = db.sink, sink
    for kind in ("ID", "cost", "date", "keyword", "location"):
        db.print_tree(kind)
    db.sink = saved
    return sink.lines


class DatabaseTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.sink = MemorySink()
        self.db = SeminarDB(128, self.sink)


class TestInsert(DatabaseTestCase):
    def test_success_output(self) -> None:
        self.assertTrue(self.db.insert(_sem(1, keywords=("a", "b"))))
        self.assertEqual(
            self.sink.lines,
            [
                "Successfully inserted record with ID 1",
                "ID: 1, Title: Seminar 1",
                "Date: 202401011200, Length: 30, X: 10, Y: 10, Cost: 100",
                "Description: desc",
                "Keywords: a, b",
            ],
        )
        self.assertEqual(len(self.db), 1)
        self.assertIn(1, self.db)

    def test_bad_coordinates_rejected(self) -> None:
        self.assertFalse(self.db.insert(_sem(1, x=-1, y=40)))
        self.assertEqual(self.sink.lines, ["Insert FAILED - Bad x, y coordinates: -1, 40"])
        self.assertEqual(len(self.db), 0)
        self.assertTrue(self.db.location_tree.is_empty())

    def test_world_boundaries(self) -> None:
        self.assertTrue(self.db.insert(_sem(1, x=0, y=0)))
        self.assertTrue(self.db.insert(_sem(2, x=127, y=127)))
        self.sink.clear()
        self.assertFalse(self.db.insert(_sem(3, x=128, y=5)))
        self.assertFalse(self.db.insert(_sem(4, x=5, y=128)))
        self.assertEqual(
            self.sink.lines,
            [
                "Insert FAILED - Bad x, y coordinates: 128, 5",
                "Insert FAILED - Bad x, y coordinates: 5, 128",
            ],
        )

    def test_duplicate_id_touches_no_index(self) -> None:
        self.db.insert(_sem(1, x=10, y=10, cost=5))
        before = _dumps(self.db)
        self.sink.clear()

        self.assertFalse(self.db.insert(_sem(1, x=90, y=90, cost=6)))
        self.assertEqual(self.sink.lines, ["Insert FAILED - There is already a record with ID 1"])
        self.assertEqual(_dumps(self.db), before)
        self.assertEqual(len(self.db.cost_tree), 1)

    def test_coincident_seminars_share_a_leaf(self) -> None:
        self.db.insert(_sem(2, x=10, y=10))
        self.db.insert(_sem(1, x=10, y=10))
        self.db.insert(_sem(3, x=70, y=10))
        self.sink.clear()

        self.db.print_tree("location")
        self.assertEqual(
            self.sink.lines,
            [
                "Location Tree:",
                "I",
                "  Leaf with 2 objects: 1 2",
                "  Leaf with 1 objects: 3",
            ],
        )


class TestDelete(DatabaseTestCase):
    def test_delete_missing(self) -> None:
        self.assertFalse(self.db.delete(42))
        self.assertEqual(self.sink.lines, ["Delete FAILED -- There is no record with ID 42"])

    def test_delete_cascades_including_repeated_keywords(self) -> None:
        self.db.insert(_sem(1, keywords=("a", "b", "a")))
        self.assertEqual(len(self.db.keyword_tree), 3)
        self.sink.clear()

        self.assertTrue(self.db.delete(1))
        self.assertEqual(self.sink.lines, ["Record with ID 1 successfully deleted from the database"])
        self.assertEqual(
            _dumps(self.db),
            [
                "ID Tree:",
                "This tree is empty",
                "Cost Tree:",
                "This tree is empty",
                "Date Tree:",
                "This tree is empty",
                "Keyword Tree:",
                "This tree is empty",
                "Location Tree:",
                "E",
            ],
        )

    def test_delete_removes_only_that_seminar_from_shared_keys(self) -> None:
        self.db.insert(_sem(1, x=1, y=1, cost=50, keywords=("a",)))
        self.db.insert(_sem(2, x=2, y=2, cost=50, keywords=("a",)))
        self.db.insert(_sem(3, x=3, y=3, cost=50, keywords=("a",)))

        self.db.delete(2)
        self.assertEqual([s.id for s in self.db.keyword_tree.multi_search("a")], [3, 1])
        self.assertEqual(sorted(s.id for s in self.db.cost_tree.multi_search(50)), [1, 3])
        self.assertEqual([s.id for s in self.db.location_tree.search(2, 2, 0)], [])

    def test_insert_delete_round_trip(self) -> None:
        for i, cost in enumerate((50, 100, 150, 200)):
            self.db.insert(_sem(i + 10, x=i * 20, y=5, cost=cost, keywords=("x", f"k{i}")))
        before = _dumps(self.db)

        self.db.insert(_sem(99, x=15, y=90, cost=120, keywords=("x", "y")))
        self.db.delete(99)
        self.assertEqual(_dumps(self.db), before)

    def test_id_can_be_reused_after_delete(self) -> None:
        self.db.insert(_sem(1, x=5, y=5))
        self.db.delete(1)
        self.assertTrue(self.db.insert(_sem(1, x=6, y=6)))
        self.assertEqual(self.db.get(1).x, 6)


class TestSearch(DatabaseTestCase):
    def test_search_id(self) -> None:
        self.db.insert(_sem(1))
        self.sink.clear()

        self.db.search_id(1)
        self.db.search_id(2)
        self.assertEqual(self.sink.lines[0], "Found record with ID 1")
        self.assertEqual(self.sink.lines[1], "ID: 1, Title: Seminar 1")
        self.assertEqual(self.sink.lines[-1], "Search FAILED -- There is no record with ID 2")

    def test_search_cost_range(self) -> None:
        for i, cost in enumerate((100, 50, 150, 200)):
            self.db.insert(_sem(i + 1, x=i, y=i, cost=cost))
        self.sink.clear()

        found = self.db.search_cost(75, 175)
        self.assertEqual([s.cost for s in found], [100, 150])
        self.assertEqual(self.sink.lines[0], "Seminars with cost in range 75 to 175:")
        self.assertEqual(len(self.sink.lines), 1 + 2 * 4 + 1)
        self.assertEqual(self.sink.lines[-1], "7 nodes visited in this search")

    def test_search_date_range(self) -> None:
        self.db.insert(_sem(1, x=1, date="0610051600"))
        self.db.insert(_sem(2, x=2, date="0610071600"))
        self.db.insert(_sem(3, x=3, date="0611011200"))
        self.sink.clear()

        found = self.db.search_date("0610000000", "0610312359")
        self.assertEqual([s.id for s in found], [1, 2])
        self.assertEqual(self.sink.lines[0], "Seminars with date in range 0610000000 to 0610312359:")
        self.assertTrue(self.sink.lines[-1].endswith("nodes visited in this search"))

    def test_search_keyword(self) -> None:
        self.db.insert(_sem(1, x=1, keywords=("HCI", "VT")))
        self.db.insert(_sem(2, x=2, keywords=("Graphics",)))
        self.sink.clear()

        found = self.db.search_keyword("HCI")
        self.assertEqual([s.id for s in found], [1])
        self.assertEqual(self.sink.lines[0], "Seminars matching keyword HCI:")
        self.assertEqual(len(self.sink.lines), 5)

    def test_search_location(self) -> None:
        self.db.insert(_sem(1, x=10, y=10))
        self.sink.clear()

        self.db.search_location(13, 14, 5)
        self.db.search_location(13, 14, 4)
        self.assertEqual(
            self.sink.lines,
            [
                "Seminars within 5 units of 13, 14:",
                "Found a record with key value 1 at 10, 10",
                "1 nodes visited in this search",
                "Seminars within 4 units of 13, 14:",
                "1 nodes visited in this search",
            ],
        )

    def test_searches_on_empty_database(self) -> None:
        self.db.search_cost(0, 100)
        self.db.search_date("0", "9")
        self.db.search_keyword("x")
        self.db.search_location(1, 1, 1)
        self.assertEqual(
            self.sink.lines,
            [
                "Seminars with cost in range 0 to 100:",
                "1 nodes visited in this search",
                "Seminars with date in range 0 to 9:",
                "1 nodes visited in this search",
                "Seminars matching keyword x:",
                "Seminars within 1 units of 1, 1:",
                "1 nodes visited in this search",
            ],
        )


class TestPrintAndDispatch(DatabaseTestCase):
    def test_print_id_tree(self) -> None:
        self.db.insert(_sem(2, x=1))
        self.db.insert(_sem(1, x=2))
        self.sink.clear()

        self.db.print_tree("ID")
        self.assertEqual(
            self.sink.lines,
            ["ID Tree:", "  null", "2", "    null", "  1", "    null", "Number of records: 2"],
        )

    def test_invalid_print_type(self) -> None:
        self.assertFalse(self.db.print_tree("title"))
        self.assertEqual(self.sink.errors, ["error: invalid print type"])
        self.assertEqual(self.sink.lines, [])

    def test_execute_commands(self) -> None:
        self.db.execute(InvalidCommand("error: invalid command {foo}"))
        self.db.execute(SearchCommand("ID", (3,)))
        self.db.execute(PrintCommand("cost"))
        self.assertEqual(self.sink.errors, ["error: invalid command {foo}"])
        self.assertEqual(
            self.sink.lines,
            ["Search FAILED -- There is no record with ID 3", "Cost Tree:", "This tree is empty"],
        )

    def test_run_command_file(self) -> None:
        text = (
            "insert 3\nT3\n0610051600 90 10 10 45\nA B\nD3\n"
            "insert 3\nT3b\n0610051600 90 20 20 45\nA\nD3b\n"
            "search keyword A\n"
            "delete 3\n"
            "search keyword A\n"
        )
        n = self.db.run(read_commands(text.splitlines(keepends=True)))
        self.assertEqual(n, 5)
        self.assertIn("Insert FAILED - There is already a record with ID 3", self.sink.lines)
        self.assertEqual(self.sink.lines[-1], "Seminars matching keyword A:")
        self.assertEqual(len(self.db), 0)


class TestSortedInput(unittest.TestCase):
    def test_ascending_ids_costs_and_dates(self) -> None:
        n = 1500
        sink = MemorySink()
        db = SeminarDB(1024, sink)
        for i in range(n):
            self.assertTrue(db.insert(_sem(i, x=i % 1024, y=i // 1024, cost=i, date=f"2024{i:06d}")))

        sink.clear()
        found = db.search_cost(0, n - 1)
        self.assertEqual([s.id for s in found], list(range(n)))
        self.assertEqual(sink.lines[-1], f"{2 * n + 1} nodes visited in this search")
        self.assertEqual(len(db.search_date("2024", "2025")), n)

        sink.clear()
        db.print_tree("cost")
        self.assertEqual(sink.lines[-1], f"Number of records: {n}")

        for i in reversed(range(n)):
            self.assertTrue(db.delete(i))
        self.assertEqual(len(db), 0)
        self.assertTrue(db.cost_tree.is_empty())
        self.assertTrue(db.location_tree.is_empty())


class TestIndexesStayConsistent(unittest.TestCase):
    """
    Random insert/delete workload checked against a plain dict of live seminars.
    """

    def test_random_workload(self) -> None:
        rng = random.Random(1234)
        db = SeminarDB(64, MemorySink())
        live: dict[int, Seminar] = {}
        words = ["a", "b", "c", "d"]

        for step in range(400):
            if live and rng.random() < 0.35:
                sid = rng.choice(sorted(live))
                self.assertTrue(db.delete(sid))
                del live[sid]
            else:
                sid = rng.randrange(1000)
                s = _sem(
                    sid,
                    x=rng.randrange(0, 64, 7),
                    y=rng.randrange(0, 64, 5),
                    cost=rng.randrange(0, 10) * 10,
                    date=f"2024{rng.randrange(1, 13):02d}01",
                    keywords=tuple(rng.choice(words) for _ in range(rng.randrange(0, 4))),
                )
                inserted = db.insert(s)
                self.assertEqual(inserted, sid not in live)
                if inserted:
                    live[sid] = s

        self.assertEqual([s.id for s in db.seminars()], sorted(live))
        self.assertEqual(len(db.id_tree), len(live))
        self.assertEqual(Counter(s.id for s in db.cost_tree.values()), Counter(live))
        self.assertEqual(Counter(s.id for s in db.date_tree.values()), Counter(live))

        expected_kw = Counter((kw, s.id) for s in live.values() for kw in s.keywords)
        got_kw = Counter((r.key, r.value.id) for r in db.keyword_tree.records())
        self.assertEqual(got_kw, expected_kw)

        leaves = db.location_tree.leaves()
        self.assertEqual(sorted(s.id for leaf in leaves for s in leaf.seminars), sorted(live))
        coords = [(leaf.x, leaf.y) for leaf in leaves]
        self.assertEqual(len(coords), len(set(coords)))
        for s in live.values():
            self.assertIn(s.id, [t.id for t in db.location_tree.find(s.x, s.y)])

        for lo, hi in ((0, 30), (40, 40), (85, 200)):
            got = sorted(s.id for s in db.cost_tree.range_search(lo, hi))
            self.assertEqual(got, sorted(s.id for s in live.values() if lo <= s.cost <= hi))

        for qx, qy, r in ((0, 0, 10), (32, 32, 15), (63, 10, 0), (20, 20, 40)):
            got = {s.id for s in db.location_tree.search(qx, qy, r)}
            expected = {s.id for s in live.values() if (s.x - qx) ** 2 + (s.y - qy) ** 2 <= r * r}
            self.assertEqual(got, expected)


if __name__ == "__main__":
    unittest.main()

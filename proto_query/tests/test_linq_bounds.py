import itertools
import unittest

from ..exceptions import ProtoValidationException
from ..linq import from_collection


class TestLinqBounds(unittest.TestCase):
    def test_skip(self):
        self.assertEqual(from_collection([1, 2, 3, 4, 5]).skip(2).to_list(), [3, 4, 5])

    def test_take(self):
        self.assertEqual(from_collection([1, 2, 3, 4, 5]).take(2).to_list(), [1, 2])

    def test_take_more_than_available(self):
        self.assertEqual(from_collection([1, 2]).take(10).to_list(), [1, 2])

    def test_zero_unsets_bounds(self):
        q = from_collection([1, 2, 3]).skip(2).take(1)
        self.assertEqual(q.to_list(), [3])
        self.assertEqual(q.skip(0).take(0).to_list(), [1, 2, 3])

    def test_negative_bounds_are_rejected(self):
        with self.assertRaises(ProtoValidationException):
            from_collection([1]).skip(-1)
        with self.assertRaises(ProtoValidationException):
            from_collection([1]).take(-3)

    def test_skip_counts_examined_elements_before_filters(self):
        # skip(2) drops 1 and 2 even though 1 would not pass the filter
        res = from_collection([1, 2, 3, 4, 5, 6]).where(lambda x: x % 2 == 0).skip(2).to_list()
        self.assertEqual(res, [4, 6])

    def test_take_counts_accepted_elements(self):
        res = from_collection([1, 2, 3, 4, 5, 6]).where(lambda x: x % 2 == 0).take(2).to_list()
        self.assertEqual(res, [2, 4])

    def test_take_is_prefix_of_unbounded_result(self):
        data = [7, 1, 8, 2, 9, 3]
        full = from_collection(data).where(lambda x: x > 1).to_list()
        for n in range(1, len(data) + 1):
            self.assertEqual(from_collection(data).where(lambda x: x > 1).take(n).to_list(), full[:n])

    def test_take_while_stops_permanently(self):
        self.assertEqual(from_collection([1, 2, 5, 1]).take_while(lambda x: x < 4).to_list(), [1, 2])

    def test_take_while_ignores_filters(self):
        # the failing element is filtered out anyway, traversal still stops there
        res = from_collection([1, 2, 5, 1]).where(lambda x: x != 5).take_while(lambda x: x < 4).to_list()
        self.assertEqual(res, [1, 2])

    def test_skip_while_suppresses_every_matching_element(self):
        res = from_collection([1, 2, 5, 1, 6]).skip_while(lambda x: x < 4).to_list()
        self.assertEqual(res, [5, 6])

    def test_skip_while_runs_before_offset(self):
        # 1 and 2 are skipped by the predicate, offset then drops 5
        res = from_collection([1, 2, 5, 6, 7]).skip_while(lambda x: x < 4).skip(1).to_list()
        self.assertEqual(res, [6, 7])

    def test_take_while_checked_before_skip_while(self):
        res = from_collection([1, 2, 3]).skip_while(lambda x: x == 1).take_while(lambda x: x < 3).to_list()
        self.assertEqual(res, [2])

    def test_later_skip_while_replaces_earlier(self):
        res = from_collection([1, 2, 3]).skip_while(lambda x: x == 1).skip_while(lambda x: x == 3).to_list()
        self.assertEqual(res, [1, 2])

    def test_limit_reached_stops_before_examining_more(self):
        pulled = []

        def source():
            for i in itertools.count():
                pulled.append(i)
                yield i
        res = from_collection(source()).take(3).to_list()
        self.assertEqual(res, [0, 1, 2])
        # one extra element is pulled to detect the limit
        self.assertEqual(pulled, [0, 1, 2, 3])

    def test_infinite_source_with_take_while(self):
        res = from_collection(itertools.count(1)).where(lambda x: x % 3 == 0).take_while(lambda x: x < 20).to_list()
        self.assertEqual(res, [3, 6, 9, 12, 15, 18])

    def test_counters_reset_between_traversals(self):
        q = from_collection([1, 2, 3, 4, 5]).skip(1).take(2)
        self.assertEqual(q.to_list(), [2, 3])
        self.assertEqual(q.to_list(), [2, 3])
        self.assertEqual(q.count(), 2)

    def test_streaming_is_lazy(self):
        pulled = []

        def source():
            for i in range(100):
                pulled.append(i)
                yield i
        it = iter(from_collection(source()).where(lambda x: x % 10 == 0))
        self.assertEqual(next(it), 0)
        self.assertEqual(next(it), 10)
        self.assertEqual(pulled[-1], 10)


if __name__ == '__main__':
    unittest.main()

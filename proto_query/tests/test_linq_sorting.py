import unittest

from ..exceptions import ProtoValidationException
from ..fields import F
from ..linq import from_collection


class TestLinqSorting(unittest.TestCase):
    def setUp(self):
        self.products = [
            {"id": 1, "category": "B", "price": 10},
            {"id": 2, "category": "A", "price": 20},
            {"id": 3, "category": "B", "price": 5},
            {"id": 4, "category": "A", "price": 20},
            {"id": 5, "category": "C", "price": 1},
        ]

    def ids(self, q):
        return [r["id"] for r in q]

    def test_order_by_ascending(self):
        self.assertEqual(from_collection([3, 1, 2]).order_by(lambda x: x).to_list(), [1, 2, 3])

    def test_order_by_descending(self):
        self.assertEqual(from_collection([3, 1, 2]).order_by_descending(lambda x: x).to_list(), [3, 2, 1])

    def test_order_by_is_stable(self):
        res = self.ids(from_collection(self.products).order_by(F.category))
        self.assertEqual(res, [2, 4, 1, 3, 5])

    def test_order_by_descending_is_stable(self):
        res = self.ids(from_collection(self.products).order_by_descending(F.price))
        self.assertEqual(res, [2, 4, 1, 3, 5])

    def test_last_registered_key_dominates(self):
        data = [{"a": 1, "b": 2}, {"a": 1, "b": 1}]
        res = from_collection(data).order_by(lambda x: x["a"]).order_by_descending(lambda x: x["b"]).to_list()
        self.assertEqual(res, [{"a": 1, "b": 2}, {"a": 1, "b": 1}])

    def test_earlier_keys_break_ties(self):
        # primary: category (last registered), tie break: price descending
        res = self.ids(from_collection(self.products).order_by_descending(F.price).order_by(F.category))
        self.assertEqual(res, [2, 4, 1, 3, 5])
        res = self.ids(from_collection(self.products).order_by(F.price).order_by(F.category))
        self.assertEqual(res, [2, 4, 3, 1, 5])

    def test_comparator(self):
        res = from_collection(["bbb", "a", "cc"]).order_by_comparator(lambda a, b: len(a) - len(b)).to_list()
        self.assertEqual(res, ["a", "cc", "bbb"])

    def test_comparators_apply_before_keys(self):
        # the key rule was registered first but key rules always run last
        res = (from_collection(["bb", "a", "ab", "c"])
               .order_by(lambda s: len(s))
               .order_by_comparator(lambda a, b: (a > b) - (a < b))
               .to_list())
        self.assertEqual(res, ["a", "c", "ab", "bb"])

    def test_sort_applies_after_filters_and_bounds(self):
        res = from_collection([9, 1, 8, 2, 7, 3]).where(lambda x: x > 1).take(3).order_by(lambda x: x).to_list()
        self.assertEqual(res, [2, 8, 9])

    def test_non_callable_order_rejected(self):
        with self.assertRaises(ProtoValidationException):
            from_collection([1]).order_by("price")
        with self.assertRaises(ProtoValidationException):
            from_collection([1]).order_by_comparator(None)
        with self.assertRaises(TypeError):
            from_collection([1]).order_by_descending(42)

    def test_sort_after_select_orders_projected_values(self):
        res = from_collection(self.products).select(F.price).order_by(lambda p: p).to_list()
        self.assertEqual(res, [1, 5, 10, 20, 20])

    def test_select_after_sort_sorts_projected_values(self):
        # the buffer holds projected elements, so the key sees the projection
        res = from_collection([3, 1, 2]).order_by(lambda x: x).select(lambda x: -x).to_list()
        self.assertEqual(res, [-3, -2, -1])

    def test_order_then_select_keys_read_projected_values(self):
        q = (from_collection(self.products)
             .order_by_descending(F.cost)
             .select({"id": F.id, "cost": F.price}))
        self.assertEqual(self.ids(q), [2, 4, 1, 3, 5])
        # a key written for source rows finds nothing on the projection
        q = (from_collection(self.products)
             .order_by_descending(F.price)
             .select({"id": F.id, "cost": F.price}))
        self.assertEqual(self.ids(q), [1, 2, 3, 4, 5])
        res = from_collection(self.products).select({"id": F.id, "cost": F.price}).order_by(F.cost).to_list()
        self.assertEqual([r["cost"] for r in res], [1, 5, 10, 20, 20])

    def test_none_keys_sort_last(self):
        rows = [{"id": 1, "age": 3}, {"id": 2}, {"id": 3, "age": 1}, {"id": 4, "age": None}]
        self.assertEqual([r["id"] for r in from_collection(rows).order_by(F.age)], [3, 1, 2, 4])
        self.assertEqual([r["id"] for r in from_collection(rows).order_by_descending(F.age)], [1, 3, 2, 4])

    def test_empty_sorted_query(self):
        self.assertEqual(from_collection([]).order_by(lambda x: x).to_list(), [])


if __name__ == '__main__':
    unittest.main()

import unittest
from datetime import datetime

from ..fields import F, Field, Predicate
from ..linq import from_collection


class User:
    def __init__(self, name, age, profile=None):
        self.name = name
        self.age = age
        self.profile = profile


class TestFields(unittest.TestCase):
    def setUp(self):
        self.rows = [
            {"id": 1, "age": 9, "country": "ES", "name": "Alice", "tags": ["a", "b"]},
            {"id": 2, "age": 10, "country": "AR", "name": "Bob", "tags": []},
            {"id": 3, "age": 15, "country": "US", "name": "Carol", "tags": ["b"]},
            {"id": 4, "age": 20, "country": "AR", "name": "Dan", "tags": None},
            {"id": 5, "age": None, "country": "ES", "name": "Eve", "tags": ["c"]},
        ]

    def ids(self, q):
        return [r["id"] for r in q]

    def test_field_is_a_selector(self):
        self.assertIsInstance(F.age, Field)
        self.assertEqual(F.age({"age": 3}), 3)
        self.assertEqual(F.profile.city(User("x", 1, {"city": "Rome"})), "Rome")
        self.assertIsNone(F.profile.city(User("x", 1)))
        self.assertEqual(F["tags"][0]({"tags": ["z"]}), "z")

    def test_comparisons(self):
        self.assertEqual(self.ids(from_collection(self.rows).where(F.age >= 15)), [3, 4])
        self.assertEqual(self.ids(from_collection(self.rows).where(F.age < 10)), [1])
        self.assertEqual(self.ids(from_collection(self.rows).where(F.country == "ES")), [1, 5])
        self.assertEqual(self.ids(from_collection(self.rows).where(F.country != "ES")), [2, 3, 4])

    def test_none_never_orders(self):
        self.assertEqual(self.ids(from_collection(self.rows).where(~(F.age > 0))), [5])

    def test_composition(self):
        q = from_collection(self.rows).where((F.age >= 10) & F.country.in_(["ES", "AR"]))
        self.assertEqual(self.ids(q), [2, 4])
        q = from_collection(self.rows).where((F.country == "US") | F.age.is_none())
        self.assertEqual(self.ids(q), [3, 5])
        self.assertIsInstance((F.age > 1) & (lambda r: True), Predicate)

    def test_between(self):
        self.assertEqual(self.ids(from_collection(self.rows).where(F.age.between(10, 20))), [2, 3, 4])
        self.assertEqual(self.ids(from_collection(self.rows).where(F.age.between(10, 20, inclusive=False))), [3])

    def test_between_dates(self):
        data = [{"d": datetime(2024, 1, day)} for day in range(1, 5)]
        self.assertEqual(from_collection(data).where(F.d.between(datetime(2024, 1, 2), datetime(2024, 1, 3))).count(), 2)

    def test_string_and_container_predicates(self):
        self.assertEqual(self.ids(from_collection(self.rows).where(F.name.startswith("C"))), [3])
        self.assertEqual(self.ids(from_collection(self.rows).where(F.name.endswith("e"))), [1, 5])
        self.assertEqual(self.ids(from_collection(self.rows).where(F.tags.contains("b"))), [1, 3])

    def test_fields_as_keys_and_selectors(self):
        res = (from_collection(self.rows)
               .not_null(F.age)
               .select({"name": F.name, "age": F.age})
               .order_by_descending(F.age)
               .to_column(F.name))
        self.assertEqual(res, ["Dan", "Carol", "Bob", "Alice"])
        res = from_collection(self.rows).order_by(F.age).select(F.name).to_list()
        self.assertEqual(res, ["Alice", "Bob", "Carol", "Dan", "Eve"])

    def test_repr(self):
        self.assertEqual(repr(F.user.name), "F.user.name")
        self.assertEqual(repr(F.age > 3), "F.age > 3")


if __name__ == '__main__':
    unittest.main()

import math
import unittest

from proforma_engine import AssumptionSet, coerce_number


class TestCoerceNumber(unittest.TestCase):
    def test_numbers_pass_through(self):
        self.assertEqual(coerce_number(5), 5.0)
        self.assertEqual(coerce_number(2.5), 2.5)
        self.assertEqual(coerce_number(-3), -3.0)

    def test_numeric_strings_are_parsed(self):
        self.assertEqual(coerce_number("19"), 19.0)
        self.assertEqual(coerce_number(" 2.9 "), 2.9)

    def test_garbage_becomes_zero(self):
        for value in ("abc", "", None, [], {}, object(), float("nan"), float("inf"), -math.inf, "nan"):
            self.assertEqual(coerce_number(value), 0.0, msg=repr(value))

    def test_booleans(self):
        self.assertEqual(coerce_number(True), 1.0)
        self.assertEqual(coerce_number(False), 0.0)


class TestAssumptionSet(unittest.TestCase):
    def test_missing_reads_zero(self):
        a = AssumptionSet({"price": 19})
        self.assertEqual(a.get("price"), 19.0)
        self.assertEqual(a.get("missing"), 0.0)
        self.assertEqual(a.rate("missing"), 0.0)

    def test_rate_divides_by_100(self):
        self.assertEqual(AssumptionSet({"growth": 25}).rate("growth"), 0.25)

    def test_with_override_leaves_original_untouched(self):
        original = AssumptionSet({"price": 19, "growth": 25})
        edited = original.with_override("price", "29")

        self.assertEqual(original["price"], 19.0)
        self.assertEqual(edited["price"], 29.0)
        self.assertEqual(edited["growth"], 25.0)

    def test_with_overrides_empty_returns_same(self):
        a = AssumptionSet({"price": 19})
        self.assertIs(a.with_overrides(None), a)
        self.assertIs(a.with_overrides({}), a)

    def test_hash_and_equality_by_value(self):
        a = AssumptionSet({"x": 1, "y": "2"})
        b = AssumptionSet({"y": 2.0, "x": 1.0})
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def test_to_dict_round_trip(self):
        a = AssumptionSet({"x": "1.5", "y": None})
        self.assertEqual(a.to_dict(), {"x": 1.5, "y": 0.0})
        self.assertEqual(AssumptionSet.from_dict(a.to_dict()), a)

"""
tests/test_fallback.py
=======================
Ordered fallback chain tests.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from callnote.fallback import Outcome, OutcomeKind, StrategiesExhausted, run_in_order


class CountingStrategy:

    def __init__(self, outcome: Outcome):
        self.outcome = outcome
        self.calls = 0

    def __call__(self) -> Outcome:
        self.calls += 1
        return self.outcome


class TestRunInOrder(unittest.TestCase):

    def test_first_success_wins(self):
        first = CountingStrategy(Outcome.success("a"))
        second = CountingStrategy(Outcome.success("b"))

        self.assertEqual(run_in_order([("first", first), ("second", second)]), ("first", "a"))
        self.assertEqual(second.calls, 0)

    def test_skip_moves_to_next(self):
        skipping = CountingStrategy(Outcome.skip("not applicable"))
        succeeding = CountingStrategy(Outcome.success(42))

        name, value = run_in_order([("skip", skipping), ("ok", succeeding)])

        self.assertEqual((name, value), ("ok", 42))
        self.assertEqual((skipping.calls, succeeding.calls), (1, 1))

    def test_fatal_stops_chain(self):
        error = KeyError("boom")
        later = CountingStrategy(Outcome.success("never"))

        with self.assertRaises(KeyError) as ctx:
            run_in_order([("bad", CountingStrategy(Outcome.fatal(error))), ("later", later)])

        self.assertIs(ctx.exception, error)
        self.assertEqual(later.calls, 0)

    def test_all_skipped(self):
        strategies = [
            ("a", CountingStrategy(Outcome.skip("r1"))),
            ("b", CountingStrategy(Outcome.skip("r2"))),
        ]
        with self.assertRaises(StrategiesExhausted) as ctx:
            run_in_order(strategies)
        self.assertEqual(ctx.exception.skipped, [("a", "r1"), ("b", "r2")])

    def test_custom_exhausted_factory(self):
        class NothingWorked(Exception):
            def __init__(self, skipped):
                super().__init__(len(skipped))
                self.skipped = skipped

        with self.assertRaises(NothingWorked):
            run_in_order([("a", lambda: Outcome.skip("r"))], exhausted=NothingWorked)

    def test_empty_chain_is_exhausted(self):
        with self.assertRaises(StrategiesExhausted):
            run_in_order([])

    def test_outcome_tags(self):
        self.assertIs(Outcome.success(1).kind, OutcomeKind.SUCCESS)
        self.assertIs(Outcome.skip("x").kind, OutcomeKind.SKIP)
        self.assertIs(Outcome.fatal(ValueError("x")).kind, OutcomeKind.FATAL)


if __name__ == "__main__":
    unittest.main()

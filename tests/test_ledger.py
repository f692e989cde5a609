"""Tests for the accounting core: rdl.core.ledger and rdl.core.categories."""

import random
import unittest

from fake_clock import FakeClock


def _make_ledger():
    from rdl.core.categories import CategorySet
    from rdl.core.ledger import TimerLedger
    clock = FakeClock()
    return TimerLedger(CategorySet.default(), clock), clock


# ──────────────────────────────────────────────────────────────────────────
# categories.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestCategorySet(unittest.TestCase):

    def test_default_categories_keep_order(self):
        from rdl.core.categories import CategorySet
        cats = CategorySet.default()
        self.assertEqual(cats.categories, ["Weather", "Road Type", "Lighting", "Traffic", "Speed"])
        self.assertEqual(cats.conditions("Traffic"), ("Flow", "Jam"))

    def test_key_validates(self):
        from rdl.core.categories import CategorySet, ConditionKey
        from rdl.core.errors import UnknownCondition
        cats = CategorySet.default()
        self.assertEqual(cats.key("Weather", "Rain"), ConditionKey("Weather", "Rain"))
        with self.assertRaises(UnknownCondition):
            cats.key("Weather", "Hail")
        with self.assertRaises(UnknownCondition):
            cats.key("Mood", "Happy")

    def test_keys_with_dashes_do_not_collide(self):
        """'A-B' + 'C' and 'A' + 'B-C' are different keys even though the labels match."""
        from rdl.core.categories import CategorySet, ConditionKey
        cats = CategorySet({"A-B": ["C"], "A": ["B-C"]})
        k1 = cats.key("A-B", "C")
        k2 = cats.key("A", "B-C")
        self.assertEqual(k1.label, k2.label)
        self.assertNotEqual(k1, k2)
        self.assertIn(k1, cats)
        self.assertNotIn(ConditionKey("A-B", "B-C"), cats)

    def test_rejects_bad_mappings(self):
        from rdl.core.categories import CategorySet
        with self.assertRaises(ValueError):
            CategorySet({})
        with self.assertRaises(ValueError):
            CategorySet({"Weather": []})
        with self.assertRaises(ValueError):
            CategorySet({"Weather": ["Rain", "Rain"]})
        with self.assertRaises(ValueError):
            CategorySet({"Weather": ["Rain, heavy"]})
        with self.assertRaises(ValueError):
            CategorySet({"Road,Type": ["City"]})
        with self.assertRaises(ValueError):
            CategorySet({"Weather": ["Fog\nbank"]})


# ──────────────────────────────────────────────────────────────────────────
# ledger.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestTimerLedger(unittest.TestCase):

    def test_weather_scenario(self):
        """Sunny 0..10 s, Rain 10..25 s."""
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        sunny = ConditionKey("Weather", "Sunny")
        rain = ConditionKey("Weather", "Rain")

        r1 = ledger.toggle("Weather", "Sunny")
        self.assertTrue(r1.started)
        self.assertEqual(r1.stopped, frozenset())

        clock.advance(10)
        r2 = ledger.toggle("Weather", "Rain")
        self.assertTrue(r2.started)
        self.assertEqual(r2.stopped, frozenset({sunny}))
        self.assertEqual(ledger.running_keys(), [rain])

        clock.advance(15)
        r3 = ledger.toggle("Weather", "Rain")
        self.assertFalse(r3.started)
        self.assertEqual(r3.stopped, frozenset({rain}))
        self.assertIsNone(ledger.running_in("Weather"))

        self.assertEqual(ledger.total_elapsed(sunny), 10000)
        self.assertEqual(ledger.total_elapsed(rain), 15000)

    def test_toggle_result_carries_highlight_duration(self):
        from rdl.core.ledger import STOPPED_HIGHLIGHT_SECONDS
        ledger, _ = _make_ledger()
        result = ledger.toggle("Traffic", "Flow")
        self.assertEqual(result.highlight_seconds, STOPPED_HIGHLIGHT_SECONDS)

    def test_exclusivity_under_random_toggles(self):
        ledger, clock = _make_ledger()
        cats = ledger.categories
        all_keys = cats.keys()
        rng = random.Random(1234)
        for _ in range(500):
            key = rng.choice(all_keys)
            ledger.toggle(key.category, key.condition)
            clock.advance(ms=rng.randint(0, 5000))
            for category in cats:
                running = [k for k in cats.keys(category) if ledger.is_running(k)]
                self.assertLessEqual(len(running), 1)

    def test_categories_are_independent(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        ledger.toggle("Weather", "Fog")
        ledger.toggle("Traffic", "Jam")
        clock.advance(5)
        self.assertTrue(ledger.is_running(ConditionKey("Weather", "Fog")))
        self.assertTrue(ledger.is_running(ConditionKey("Traffic", "Jam")))
        self.assertEqual(ledger.total_elapsed(ConditionKey("Weather", "Fog")), 5000)

    def test_accumulation_is_additive(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        fog = ConditionKey("Weather", "Fog")

        ledger.toggle("Weather", "Fog")
        clock.advance(7)
        ledger.toggle("Weather", "Fog")

        # Unrelated activity in between
        ledger.toggle("Lighting", "Dawn")
        clock.advance(100)
        ledger.toggle("Speed", "0-2 mph")
        clock.advance(3)

        ledger.toggle("Weather", "Fog")
        clock.advance(4.5)
        ledger.toggle("Weather", "Fog")

        self.assertEqual(ledger.accumulated()[fog], 11500)
        self.assertEqual(ledger.total_elapsed(fog), 11500)

    def test_total_elapsed_includes_open_interval(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        city = ConditionKey("Road Type", "City")
        ledger.toggle("Road Type", "City")
        clock.advance(3)
        ledger.toggle("Road Type", "City")
        ledger.toggle("Road Type", "City")
        clock.advance(2)
        self.assertEqual(ledger.accumulated()[city], 3000)
        self.assertEqual(ledger.total_elapsed(city), 5000)

    def test_queries_do_not_mutate(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        ledger.toggle("Weather", "Sunny")
        clock.advance(2)
        ledger.toggle("Weather", "Sunny")
        ledger.toggle("Traffic", "Flow")
        clock.advance(1)

        before_acc = ledger.accumulated()
        before_running = ledger.running_keys()
        for _ in range(1000):
            ledger.total_elapsed(ConditionKey("Weather", "Sunny"))
            ledger.total_elapsed(ConditionKey("Traffic", "Flow"))
            ledger.snapshot()
        self.assertEqual(ledger.accumulated(), before_acc)
        self.assertEqual(ledger.running_keys(), before_running)

    def test_unknown_toggle_does_not_mutate(self):
        from rdl.core.errors import UnknownCondition
        ledger, _ = _make_ledger()
        ledger.toggle("Weather", "Sunny")
        with self.assertRaises(UnknownCondition):
            ledger.toggle("Weather", "Hail")
        with self.assertRaises(UnknownCondition):
            ledger.toggle("Altitude", "High")
        self.assertEqual(len(ledger.running_keys()), 1)
        self.assertEqual(ledger.accumulated(), {})

    def test_reset_category_scenario(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        jam = ConditionKey("Traffic", "Jam")
        ledger.toggle("Traffic", "Jam")
        clock.advance(20)
        ledger.toggle("Traffic", "Jam")
        self.assertEqual(ledger.total_elapsed(jam), 20000)

        ledger.reset_category("Traffic")
        self.assertEqual(ledger.total_elapsed(jam), 0)
        self.assertNotIn(jam, ledger.accumulated())

    def test_reset_category_discards_running_without_banking(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        flow = ConditionKey("Traffic", "Flow")
        ledger.toggle("Traffic", "Flow")
        clock.advance(30)
        ledger.reset_category("Traffic")
        clock.advance(30)
        self.assertFalse(ledger.is_running(flow))
        self.assertEqual(ledger.total_elapsed(flow), 0)

    def test_reset_category_leaves_other_categories(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        ledger.toggle("Traffic", "Jam")
        ledger.toggle("Weather", "Rain")
        clock.advance(8)
        ledger.toggle("Weather", "Rain")

        ledger.reset_category("Traffic")
        self.assertEqual(ledger.total_elapsed(ConditionKey("Weather", "Rain")), 8000)

    def test_reset_unknown_category(self):
        from rdl.core.errors import UnknownCondition
        ledger, _ = _make_ledger()
        with self.assertRaises(UnknownCondition):
            ledger.reset_category("Mood")

    def test_stop_all_folds_every_open_interval(self):
        from rdl.core.categories import ConditionKey
        ledger, clock = _make_ledger()
        ledger.toggle("Weather", "Cloudy")
        clock.advance(2)
        ledger.toggle("Lighting", "Day")
        clock.advance(3)

        expected = {
            ConditionKey("Weather", "Cloudy"): 5000,
            ConditionKey("Lighting", "Day"): 3000,
        }
        stopped = ledger.stop_all()

        self.assertEqual(stopped, frozenset(expected))
        self.assertEqual(ledger.running_keys(), [])
        self.assertEqual(ledger.accumulated(), expected)
        clock.advance(60)
        self.assertEqual(ledger.total_elapsed(ConditionKey("Weather", "Cloudy")), 5000)

    def test_stop_all_with_nothing_running(self):
        ledger, _ = _make_ledger()
        self.assertEqual(ledger.stop_all(), frozenset())

    def test_snapshot_matches_stop_all(self):
        ledger, clock = _make_ledger()
        ledger.toggle("Speed", "3-18 mph")
        clock.advance(4)
        ledger.toggle("Speed", "19-37 mph")
        ledger.toggle("Weather", "Snow")
        clock.advance(6)

        at = clock.now_ms()
        snapshot = ledger.snapshot(at=at)
        ledger.stop_all(at=at)
        self.assertEqual(snapshot, list(ledger.accumulated().items()))


if __name__ == "__main__":
    unittest.main()

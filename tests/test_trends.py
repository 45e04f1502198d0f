import unittest

from sheet_insights.contracts import build_profile
from sheet_insights.table import table_from_records
from sheet_insights.trends import analyse_trends, compute_trend, round_half_away


class TrendTests(unittest.TestCase):
    def test_increase_past_threshold(self):
        self.assertEqual(compute_trend([100, 150]), {"direction": "increasing", "change_percent": 50.0})

    def test_decrease_past_threshold(self):
        self.assertEqual(compute_trend([100, 94]), {"direction": "decreasing", "change_percent": -6.0})

    def test_small_change_is_stable(self):
        self.assertEqual(compute_trend([100, 97]), {"direction": "stable", "change_percent": -3.0})

    def test_zero_first_value_guard(self):
        self.assertEqual(compute_trend([0, 5]), {"direction": "stable", "change_percent": 0.0})

    def test_unparseable_cells_are_skipped_not_positions(self):
        trend = compute_trend(["n/a", "200", "", "oops", "250", None])
        self.assertEqual(trend, {"direction": "increasing", "change_percent": 25.0})

    def test_fewer_than_two_values_has_no_trend(self):
        self.assertIsNone(compute_trend(["5"]))
        self.assertIsNone(compute_trend(["a", "", None]))

    def test_change_rounds_half_away_from_zero(self):
        self.assertEqual(round_half_away(2.25), 2.3)
        self.assertEqual(round_half_away(-2.25), -2.3)
        self.assertEqual(compute_trend([3, 4])["change_percent"], 33.3)

    def test_huge_change_rounds_without_overflowing_precision(self):
        trend = compute_trend(["0.000001", "100000000000000000000000"])

        self.assertEqual(trend["direction"], "increasing")
        self.assertGreater(trend["change_percent"], 1e31)
        self.assertEqual(round_half_away(1e32), 1e32)
        self.assertEqual(round_half_away(-1.5e300), -1.5e300)

    def test_huge_change_does_not_break_the_profile(self):
        table = table_from_records([{"v": "0.000001"}, {"v": "1e24"}])
        profile = build_profile(table)

        self.assertEqual(profile["trends"]["v"]["direction"], "increasing")

    def test_analyse_trends_only_emits_numeric_columns_with_two_values(self):
        table = table_from_records(
            [
                {"Month": "Jan", "Sales": "100", "Sparse": "7"},
                {"Month": "Feb", "Sales": "120", "Sparse": ""},
            ]
        )
        trends = analyse_trends(table, ["Sales", "Sparse"])

        self.assertEqual(list(trends), ["Sales"])
        self.assertEqual(trends["Sales"]["direction"], "increasing")


if __name__ == "__main__":
    unittest.main()

import math
import unittest
from datetime import datetime

from sheet_insights.table import (
    CanonicalTable,
    normalize_rows,
    normalize_scalar,
    parse_number,
    stringify,
    table_from_grid,
    table_from_records,
)
from sheet_insights.table_view import TableViewState, apply_view, cell_text


class ParseNumberTests(unittest.TestCase):
    def test_plain_and_exponent_decimals_parse(self):
        self.assertEqual(parse_number("12"), 12.0)
        self.assertEqual(parse_number("-3.5"), -3.5)
        self.assertEqual(parse_number(".5"), 0.5)
        self.assertEqual(parse_number("1e3"), 1000.0)
        self.assertEqual(parse_number("  42  "), 42.0)
        self.assertEqual(parse_number(7), 7.0)

    def test_empty_null_bool_and_text_are_not_numbers(self):
        for value in ["", "   ", None, True, False, "abc", "12abc", "1,000", float("nan"), "\u0661\u0662", "\uff11\uff12"]:
            with self.subTest(value=value):
                self.assertIsNone(parse_number(value))


class ScalarTests(unittest.TestCase):
    def test_stringify_renders_cells_for_display_and_search(self):
        self.assertEqual(stringify(None), "")
        self.assertEqual(stringify(7.0), "7")
        self.assertEqual(stringify(7.25), "7.25")
        self.assertEqual(stringify(True), "true")

    def test_normalize_scalar_handles_nan_and_timestamps(self):
        self.assertIsNone(normalize_scalar(math.nan))
        self.assertEqual(normalize_scalar(datetime(2024, 3, 1)), "2024-03-01")
        self.assertEqual(normalize_scalar(datetime(2024, 3, 1, 9, 30)), "2024-03-01 09:30:00")


class NormalizerTests(unittest.TestCase):
    def test_records_keep_header_order_and_row_count(self):
        records = [
            {"Region": "EU", "Sales": "10", "Cost": "4"},
            {"Region": "US", "Sales": "12", "Cost": "5"},
            {"Region": "APAC", "Sales": "9", "Cost": "3"},
        ]
        table = table_from_records(records)

        self.assertEqual(table.columns, ("Region", "Sales", "Cost"))
        self.assertEqual(table.row_count, 3)
        self.assertEqual(table.rows[2]["Region"], "APAC")

    def test_grid_synthesizes_names_for_blank_header_cells(self):
        grid = [
            ["Name", "", None, "Score"],
            ["Ada", "x", "y", 10],
            ["Grace", "z"],
        ]
        table = table_from_grid(grid)

        self.assertEqual(table.columns, ("Name", "Column2", "Column3", "Score"))
        self.assertEqual(table.rows[1], {"Name": "Grace", "Column2": "z", "Column3": "", "Score": ""})

    def test_grid_width_is_longest_row(self):
        table = table_from_grid([["a"], ["1", "2", "3"]])
        self.assertEqual(table.columns, ("a", "Column2", "Column3"))

    def test_grid_with_header_only_is_empty(self):
        table = table_from_grid([["a", "b"]])
        self.assertTrue(table.is_empty)
        self.assertEqual(table.columns, ())

    def test_normalize_rows_prefers_records_and_falls_back_to_grid(self):
        from_records = normalize_rows([{"x": 1}], [["ignored"], ["grid"]])
        from_grid = normalize_rows([], [["", "b"], ["1", "2"]])

        self.assertEqual(from_records.columns, ("x",))
        self.assertEqual(from_grid.columns, ("Column1", "b"))

    def test_columns_come_from_first_row_only(self):
        table = table_from_records([{"a": 1}, {"a": 2, "late": 3}])
        self.assertEqual(table.columns, ("a",))

    def test_missing_keys_read_as_empty_string(self):
        table = CanonicalTable(columns=("a", "b"), rows=({"a": 1},))
        self.assertEqual(cell_text(table.rows[0], "b"), "")
        self.assertEqual(apply_view(table.rows, table.columns, TableViewState(search_term="1")), [{"a": 1}])


if __name__ == "__main__":
    unittest.main()

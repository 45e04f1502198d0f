import unittest

from sheet_insights.column_detector import (
    CATEGORICAL,
    NUMERIC,
    classify_columns,
    detect_column_type,
    detect_time_columns,
)
from sheet_insights.table import EMPTY_TABLE, CanonicalTable, table_from_records


class ColumnDetectorTests(unittest.TestCase):
    def setUp(self):
        self.table = table_from_records(
            [
                {"Period": "Day 1", "Region": "EU", "Sales": "100", "Mixed": "1", "Flag": True},
                {"Period": "Day 2", "Region": "US", "Sales": 150, "Mixed": "x", "Flag": False},
                {"Period": "Day 3", "Region": "EU", "Sales": " 1e2 ", "Mixed": "2", "Flag": True},
                {"Period": "Day 4", "Region": "APAC", "Sales": "-3.5", "Mixed": "y", "Flag": True},
            ]
        )

    def test_all_numeric_and_no_numeric_extremes(self):
        classification = classify_columns(self.table)

        self.assertEqual(classification["column_types"]["Sales"], NUMERIC)
        self.assertEqual(classification["column_types"]["Region"], CATEGORICAL)
        self.assertEqual(classification["column_types"]["Flag"], CATEGORICAL)

    def test_half_numeric_column_is_categorical(self):
        self.assertEqual(classify_columns(self.table)["column_types"]["Mixed"], CATEGORICAL)

    def test_coverage_must_exceed_seventy_percent(self):
        # 7 of 10 is not strictly greater than 0.7 * 10
        self.assertEqual(detect_column_type(["1"] * 7 + ["a"] * 3), CATEGORICAL)
        self.assertEqual(detect_column_type(["1"] * 8 + ["a"] * 2), NUMERIC)

    def test_missing_cells_count_against_coverage(self):
        self.assertEqual(detect_column_type(["1", "2", None, ""]), CATEGORICAL)

    def test_zero_rows_defaults_to_categorical(self):
        self.assertEqual(detect_column_type([]), CATEGORICAL)
        table = CanonicalTable(columns=("a",), rows=())
        self.assertEqual(classify_columns(table)["categorical_columns"], ["a"])

    def test_classification_partitions_columns(self):
        classification = classify_columns(self.table)
        numeric = set(classification["numeric_columns"])
        categorical = set(classification["categorical_columns"])

        self.assertFalse(numeric & categorical)
        self.assertEqual(numeric | categorical, set(self.table.columns))
        self.assertEqual(classification["numeric_columns"], ["Sales"])

    def test_classification_is_idempotent(self):
        self.assertEqual(classify_columns(self.table), classify_columns(self.table))

    def test_time_columns_use_first_row_value(self):
        table = table_from_records(
            [
                {"When": "Monday", "Label": "Sales Date", "Note": "today", "Blank": "", "Year": 2024},
                {"When": "x", "Label": "y", "Note": "birthday", "Blank": "date", "Year": 2025},
            ]
        )
        self.assertEqual(detect_time_columns(table), ["When", "Label", "Note"])

    def test_empty_table_has_no_entries(self):
        classification = classify_columns(EMPTY_TABLE)
        self.assertEqual(classification["column_types"], {})
        self.assertEqual(classification["time_columns"], [])


if __name__ == "__main__":
    unittest.main()

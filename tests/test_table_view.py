import unittest

from sheet_insights.table import table_from_records
from sheet_insights.table_view import (
    ASC,
    DESC,
    TableViewState,
    apply_view,
    default_view_state,
    toggle_sort,
    view_summary,
    with_column_filter,
    with_search,
)


def people_table():
    return table_from_records(
        [
            {"Name": "ada", "Team": "Blue", "Score": 10},
            {"Name": "Grace", "Team": "Red", "Score": "2"},
            {"Name": "Linus", "Team": "blue", "Score": 33},
            {"Name": "Barbara", "Team": "Green", "Score": 7},
            {"Name": "alan", "Team": "Red", "Score": None},
        ]
    )


class TableViewTests(unittest.TestCase):
    def setUp(self):
        self.table = people_table()

    def view(self, state):
        return apply_view(self.table.rows, self.table.columns, state)

    def test_default_state_sorts_first_column_ascending(self):
        state = default_view_state(self.table.columns)

        self.assertEqual(state, TableViewState(sort_column="Name", sort_direction=ASC))
        self.assertEqual([row["Name"] for row in self.view(state)], ["ada", "alan", "Barbara", "Grace", "Linus"])

    def test_search_matches_numbers_through_string_coercion(self):
        rows = self.view(TableViewState(search_term="7"))
        self.assertEqual([row["Name"] for row in rows], ["Barbara"])

    def test_search_is_case_insensitive_and_empty_matches_all(self):
        self.assertEqual(len(self.view(TableViewState(search_term="BLUE"))), 2)
        self.assertEqual(len(self.view(TableViewState(search_term=""))), 5)

    def test_column_filters_and_search_combine_with_and(self):
        state = TableViewState(search_term="a", column_filters=(("Team", "red"),))
        self.assertEqual([row["Name"] for row in self.view(state)], ["Grace", "alan"])

        state = with_column_filter(state, "Name", "gr")
        self.assertEqual([row["Name"] for row in self.view(state)], ["Grace"])

    def test_empty_filter_text_is_ignored(self):
        state = TableViewState(column_filters=(("Team", ""),))
        self.assertEqual(len(self.view(state)), 5)

    def test_numeric_sort_is_not_lexicographic(self):
        table = table_from_records([{"n": "10"}, {"n": "2"}, {"n": "33"}])
        rows = apply_view(table.rows, table.columns, TableViewState(sort_column="n"))
        self.assertEqual([row["n"] for row in rows], ["2", "10", "33"])

    def test_descending_sort_flips_comparator(self):
        state = TableViewState(sort_column="Score", sort_direction=DESC)
        self.assertEqual([row["Name"] for row in self.view(state)][:3], ["Linus", "ada", "Barbara"])

    def test_sort_is_stable_for_ties(self):
        state = TableViewState(sort_column="Team")
        teams = [(row["Team"], row["Name"]) for row in self.view(state)]
        self.assertEqual(
            teams,
            [("Blue", "ada"), ("blue", "Linus"), ("Green", "Barbara"), ("Red", "Grace"), ("Red", "alan")],
        )

    def test_view_is_pure(self):
        state = TableViewState(search_term="a", sort_column="Score", sort_direction=DESC)
        first = self.view(state)
        second = self.view(state)

        self.assertEqual(first, second)
        self.assertEqual(self.table.rows[0]["Name"], "ada")

    def test_toggle_sort_flips_then_resets_on_new_column(self):
        state = default_view_state(self.table.columns)
        state = toggle_sort(state, "Name")
        self.assertEqual((state.sort_column, state.sort_direction), ("Name", DESC))
        state = toggle_sort(state, "Score")
        self.assertEqual((state.sort_column, state.sort_direction), ("Score", ASC))

    def test_snapshot_helpers_return_new_states(self):
        base = TableViewState()
        searched = with_search(base, "x")

        self.assertEqual(base.search_term, "")
        self.assertEqual(searched.search_term, "x")
        self.assertEqual(with_column_filter(base, "Team", "r").filters, {"Team": "r"})

    def test_invalid_direction_is_rejected(self):
        with self.assertRaises(ValueError):
            TableViewState(sort_direction="sideways")

    def test_view_summary_line(self):
        self.assertEqual(view_summary(3, 5, 2), "3 of 5 rows · 2 columns")


if __name__ == "__main__":
    unittest.main()

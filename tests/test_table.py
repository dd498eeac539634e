"""
Table view engine tests (evdash/table.py, evdash/dsa.py).

Sort stability and the string-comparison rule, page arithmetic, navigation
clamping, and the five-button page strip.
"""

import pytest

from conftest import make_record
from evdash.dsa import intersect_sorted, merge_sort
from evdash.models import ViewState
from evdash.table import (
    clamp_page, next_page, page_window, paginate, previous_page, sort_and_paginate,
    sort_records, toggle_sort, total_pages, visible_page_numbers,
)


class TestMergeSort:
    def test_sorts(self):
        assert merge_sort([3, 1, 2]) == [1, 2, 3]
        assert merge_sort([3, 1, 2], reverse=True) == [3, 2, 1]

    @pytest.mark.parametrize("reverse", [False, True])
    def test_stable_both_directions(self, reverse):
        items = [("b", 1), ("a", 2), ("b", 3), ("a", 4), ("b", 5)]
        out = merge_sort(items, key=lambda x: x[0], reverse=reverse)
        assert [x[1] for x in out if x[0] == "a"] == [2, 4]
        assert [x[1] for x in out if x[0] == "b"] == [1, 3, 5]

    def test_does_not_modify_input(self):
        items = [2, 1]
        merge_sort(items)
        assert items == [2, 1]

    def test_intersect_sorted(self):
        assert intersect_sorted([1, 3, 5, 7], [2, 3, 4, 7, 9]) == [3, 7]
        assert intersect_sorted([], [1]) == []


class TestSortRecords:
    def test_ascending_and_descending(self, sample_records):
        asc = sort_records(sample_records, "Make", "asc")
        assert [r["Make"] for r in asc] == ["CHEVROLET", "KIA", "NISSAN", "TESLA", "TESLA", "TESLA"]
        desc = sort_records(sample_records, "Make", "desc")
        assert [r["Make"] for r in desc] == ["TESLA", "TESLA", "TESLA", "NISSAN", "KIA", "CHEVROLET"]

    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_equal_keys_keep_input_order(self, sample_records, direction):
        out = sort_records(sample_records, "Make", direction)
        assert [r["Model"] for r in out if r["Make"] == "TESLA"] == ["MODEL Y", "MODEL 3", "MODEL S"]

    def test_model_year_is_compared_as_text(self):
        records = [make_record(Model_Year=y) for y in ["2020", "999", "2019"]]
        out = sort_records(records, "Model Year", "asc")
        assert [r["Model Year"] for r in out] == ["2019", "2020", "999"]

    def test_no_column_keeps_order(self, sample_records):
        assert sort_records(sample_records, None) == sample_records

    def test_rejects_unknown_column(self, sample_records):
        with pytest.raises(ValueError):
            sort_records(sample_records, "VIN (1-10)")

    def test_rejects_unknown_direction(self, sample_records):
        with pytest.raises(ValueError):
            sort_records(sample_records, "Make", "up")

    def test_empty(self):
        assert sort_records([], "City", "desc") == []


class TestToggleSort:
    def test_new_column_starts_ascending(self):
        view = toggle_sort(ViewState(sort_column="Make", sort_direction="desc"), "City")
        assert (view.sort_column, view.sort_direction) == ("City", "asc")

    def test_same_column_flips(self):
        view = toggle_sort(ViewState(), "Make")
        assert view.sort_direction == "asc"
        view = toggle_sort(view, "Make")
        assert view.sort_direction == "desc"
        view = toggle_sort(view, "Make")
        assert view.sort_direction == "asc"

    def test_keeps_page(self):
        assert toggle_sort(ViewState(page=3), "State").page == 3


class TestPaging:
    def test_total_pages(self):
        assert total_pages(0) == 0
        assert total_pages(1) == 1
        assert total_pages(10) == 1
        assert total_pages(23) == 3

    def test_total_pages_rejects_bad_size(self):
        with pytest.raises(ValueError):
            total_pages(5, 0)

    def test_23_records(self, records_23):
        view = paginate(records_23, 3)
        assert view.total_pages == 3
        assert len(view.records) == 3
        assert view.visible_pages == [1, 2, 3]
        assert (view.first_index, view.last_index, view.total_records) == (21, 23, 23)
        assert [r["VIN (1-10)"] for r in view.records] == ["VIN0020", "VIN0021", "VIN0022"]

    def test_first_page_window(self, records_23):
        rows = page_window(records_23, 1)
        assert len(rows) == 10
        assert rows[0]["VIN (1-10)"] == "VIN0000"

    def test_page_past_end_is_empty(self, records_23):
        assert page_window(records_23, 4) == []

    def test_empty_dataset(self):
        view = paginate([], 1)
        assert view.records == []
        assert view.total_pages == 0
        assert view.visible_pages == []
        assert (view.first_index, view.last_index) == (0, 0)

    def test_sort_and_paginate(self, records_23):
        view = sort_and_paginate(records_23, ViewState(page=1, sort_column="Make", sort_direction="desc"))
        # every Make is equal, so the stable sort keeps VIN order
        assert view.records[0]["VIN (1-10)"] == "VIN0000"


class TestNavigation:
    def test_previous_never_below_one(self):
        assert previous_page(1) == 1
        assert previous_page(4) == 3

    def test_next_never_past_last(self):
        assert next_page(3, 3) == 3
        assert next_page(2, 3) == 3

    def test_next_is_noop_without_pages(self):
        assert next_page(1, 0) == 1

    def test_clamp(self):
        assert clamp_page(0, 5) == 1
        assert clamp_page(9, 5) == 5
        assert clamp_page(3, 5) == 3
        assert clamp_page(4, 0) == 1


class TestVisiblePages:
    @pytest.mark.parametrize("pages", [0, 1, 3, 5])
    def test_few_pages_show_all(self, pages):
        assert visible_page_numbers(1, pages) == list(range(1, pages + 1))

    @pytest.mark.parametrize("page, expected", [
        (1, [1, 2, 3, 4, 5]),
        (3, [1, 2, 3, 4, 5]),
        (4, [2, 3, 4, 5, 6]),
        (6, [4, 5, 6, 7, 8]),
        (7, [5, 6, 7, 8, 9]),
        (8, [6, 7, 8, 9, 10]),
        (10, [6, 7, 8, 9, 10]),
    ])
    def test_sliding_window_of_ten(self, page, expected):
        assert visible_page_numbers(page, 10) == expected

    def test_six_pages(self):
        assert visible_page_numbers(3, 6) == [1, 2, 3, 4, 5]
        assert visible_page_numbers(4, 6) == [2, 3, 4, 5, 6]

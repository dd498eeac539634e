"""
Table view engine
=================

Sorting and paging for the record table.

Sorting compares the raw string value of one column. That includes
"Model Year": "2020" < "2021" works, but a value like "999" sorts after
"2024". The table has always behaved this way and it is kept as is.

Paging uses a fixed page size and a five-button page strip that slides with
the current page.
"""

from __future__ import annotations
from dataclasses import replace
from typing import List, Optional

from .dsa import merge_sort
from .models import ASC, DESC, PAGE_SIZE, SORTABLE_COLUMNS, Dataset, PageView, ViewState

VISIBLE_PAGES = 5


def check_sort_column(column: Optional[str]) -> None:
    if column is not None and column not in SORTABLE_COLUMNS:
        raise ValueError(f"Cannot sort by {column!r}. Sortable columns: {', '.join(SORTABLE_COLUMNS)}")


def sort_records(records: Dataset, column: Optional[str], direction: str = ASC) -> Dataset:
    """Stable single-column sort on string values; `column=None` keeps input order."""
    check_sort_column(column)
    if direction not in (ASC, DESC):
        raise ValueError("direction must be 'asc' or 'desc'")
    if column is None:
        return list(records)
    return merge_sort(list(records), key=lambda r: r.get(column, ""), reverse=(direction == DESC))


def toggle_sort(view: ViewState, column: str) -> ViewState:
    """Clicking the sorted column flips direction; a new column starts ascending."""
    check_sort_column(column)
    if view.sort_column == column:
        return replace(view, sort_direction=DESC if view.sort_direction == ASC else ASC)
    return replace(view, sort_column=column, sort_direction=ASC)


# ---------------- Paging ----------------

def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return -(-count // page_size)


def page_window(records: Dataset, page: int, page_size: int = PAGE_SIZE) -> Dataset:
    start = (page - 1) * page_size
    return records[max(start, 0):max(page * page_size, 0)]


def visible_page_numbers(page: int, pages: int) -> List[int]:
    """Page buttons to show: all of them up to 5, else a sliding window of 5."""
    if pages <= VISIBLE_PAGES:
        return list(range(1, pages + 1))
    if page <= 3:
        return [1, 2, 3, 4, 5]
    if page >= pages - 2:
        return list(range(pages - 4, pages + 1))
    return list(range(page - 2, page + 3))


def previous_page(page: int) -> int:
    return max(page - 1, 1)


def next_page(page: int, pages: int) -> int:
    if pages == 0:
        return page
    return min(page + 1, pages)


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, pages)) if pages else 1


def paginate(records: Dataset, page: int, page_size: int = PAGE_SIZE) -> PageView:
    """Cut page `page` (1-based) out of `records`."""
    pages = total_pages(len(records), page_size)
    rows = page_window(records, page, page_size)
    first = (page - 1) * page_size + 1 if rows else 0
    return PageView(
        records=rows,
        page=page,
        total_pages=pages,
        visible_pages=visible_page_numbers(page, pages),
        total_records=len(records),
        first_index=first,
        last_index=first + len(rows) - 1 if rows else 0,
    )


def sort_and_paginate(records: Dataset, view: ViewState) -> PageView:
    ordered = sort_records(records, view.sort_column, view.sort_direction)
    return paginate(ordered, view.page, view.page_size)

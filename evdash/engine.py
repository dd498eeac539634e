"""
Dashboard session
=================

This is the piece the front ends talk to. It works like a tiny in-memory
analytics session:

1) Load dataset -> list of records (never modified)
2) Build facet indices over the full dataset
3) Keep ONE immutable `DashboardState` (filter selection + table view)
4) Every user event goes through `reduce()`, which returns a new state
5) Summaries, option lists and table pages are recomputed from the state

`reduce` is a pure function, so each state transition can be tested on its
own. Filter events send the table back to page 1; sort events leave the page
alone; page events are clamped to the available pages.
"""

from __future__ import annotations
import csv
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Union

from .aggregate import process_ev_data
from .filters import facet_domains, sort_domain
from .indices import FacetIndex, build_facet_index, filter_positions
from .models import (
    AggregateSummary, Dataset, FilterSelection, PageView, ViewState, FACETS, PAGE_SIZE,
)
from .table import clamp_page, next_page, previous_page, sort_and_paginate, sort_records, toggle_sort, total_pages

logger = logging.getLogger(__name__)


# ---------------- Events ----------------

@dataclass(frozen=True)
class SetFilter:
    facet: str
    value: str


@dataclass(frozen=True)
class ClearFilter:
    facet: str


@dataclass(frozen=True)
class ResetFilters:
    pass


@dataclass(frozen=True)
class SortBy:
    column: str


@dataclass(frozen=True)
class GoToPage:
    page: int


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PreviousPage:
    pass


Event = Union[SetFilter, ClearFilter, ResetFilters, SortBy, GoToPage, NextPage, PreviousPage]


@dataclass(frozen=True)
class DashboardState:
    selection: FilterSelection = field(default_factory=FilterSelection)
    view: ViewState = field(default_factory=ViewState)


def reduce(state: DashboardState, event: Event, pages: int) -> DashboardState:
    """Apply one user event. `pages` is the page count of the current filtered table."""
    if isinstance(event, SetFilter):
        selection = state.selection.with_facet(event.facet, event.value)
        return DashboardState(selection=selection, view=replace(state.view, page=1))
    if isinstance(event, ClearFilter):
        selection = state.selection.with_facet(event.facet, "")
        return DashboardState(selection=selection, view=replace(state.view, page=1))
    if isinstance(event, ResetFilters):
        return DashboardState(selection=state.selection.cleared(), view=replace(state.view, page=1))
    if isinstance(event, SortBy):
        return replace(state, view=toggle_sort(state.view, event.column))
    if isinstance(event, GoToPage):
        return replace(state, view=replace(state.view, page=clamp_page(event.page, pages)))
    if isinstance(event, NextPage):
        return replace(state, view=replace(state.view, page=next_page(state.view.page, pages)))
    if isinstance(event, PreviousPage):
        return replace(state, view=replace(state.view, page=previous_page(state.view.page)))
    raise ValueError(f"Unknown event: {event!r}")


# ---------------- Session ----------------

class Dashboard:
    """In-memory dashboard over one immutable dataset.

    Option lists come from the full dataset unless `cascading=True` is
    passed explicitly, in which case they follow the filtered subset.
    """

    def __init__(self, records: Dataset, *, cascading: bool = False, page_size: int = PAGE_SIZE,
                 dataset_path: Optional[str] = None) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.records: Dataset = records
        self.cascading = cascading
        self.dataset_path = dataset_path
        self.index: FacetIndex = build_facet_index(records)
        self.state = DashboardState(view=ViewState(page_size=page_size))
        self._filtered: Dataset = list(records)
        self._full_summary: Optional[AggregateSummary] = None
        # Stores commands that changed the state (for the report)
        self.command_log: List[str] = []

    # ---------------- Events ----------------
    def dispatch(self, event: Event) -> DashboardState:
        """Replace the state with `reduce(state, event)` and recompute the subset."""
        pages = total_pages(len(self._filtered), self.state.view.page_size)
        new_state = reduce(self.state, event, pages)
        if new_state.selection != self.state.selection:
            positions = filter_positions(self.index, new_state.selection)
            self._filtered = [self.records[i] for i in positions]
            logger.debug("selection %s -> %d records", new_state.selection, len(self._filtered))
        self.state = new_state
        return new_state

    # ---------------- Adapter interface ----------------
    @property
    def selection(self) -> FilterSelection:
        return self.state.selection

    @property
    def view(self) -> ViewState:
        return self.state.view

    @property
    def total_count(self) -> int:
        return len(self.records)

    @property
    def filtered_count(self) -> int:
        return len(self._filtered)

    @property
    def active_filter_count(self) -> int:
        return self.state.selection.active_count

    def apply_filters(self) -> Dataset:
        """The current filtered subset (a copy, in dataset order)."""
        return list(self._filtered)

    def get_summary(self) -> AggregateSummary:
        """Summary of the filtered subset."""
        if self.state.selection.is_empty:
            return self.get_full_summary()
        return process_ev_data(self._filtered)

    def get_full_summary(self) -> AggregateSummary:
        if self._full_summary is None:
            self._full_summary = process_ev_data(self.records)
        return self._full_summary

    def get_facet_domains(self) -> Dict[str, List[str]]:
        if self.cascading:
            return facet_domains(self._filtered)
        return {facet: sort_domain(facet, self.index.values(facet)) for facet in FACETS}

    def sort_and_paginate(self) -> PageView:
        return sort_and_paginate(self._filtered, self.state.view)

    def sorted_records(self) -> Dataset:
        return sort_records(self._filtered, self.state.view.sort_column, self.state.view.sort_direction)

    # ---------------- Export ----------------
    def _columns(self) -> List[str]:
        cols: Dict[str, None] = {}
        for r in self.records:
            cols.update(dict.fromkeys(r))
        return list(cols)

    def export_csv(self, path: str) -> None:
        rows = self.sorted_records()
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=self._columns(), restval="")
            w.writeheader()
            w.writerows(rows)

    def export_json(self, path: str) -> None:
        """Export the current filtered, sorted subset as a JSON array of records."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.sorted_records(), f, ensure_ascii=False, indent=2)

"""
Filter engine
=============

Two operations back the filter bar:

- `facet_domains(records)`: the option list of each facet (Make, Model Year,
  County, Electric Vehicle Type).
- `apply_filters(records, selection)`: keep the records matching EVERY set
  facet (logical AND). Unset facets match everything.

Option lists are meant to be computed from the unfiltered dataset. Picking a
Make must not shrink the Model Year dropdown; the dashboard passes the full
dataset here unless cascading option lists are asked for explicitly.
"""

from __future__ import annotations
import math
from typing import Dict, Iterable, List

from .dsa import merge_sort
from .models import FACETS, Dataset, FilterSelection


def _year_sort_key(year: str):
    # numeric years first, newest first; anything else after, alphabetical
    try:
        n = float(year)
    except ValueError:
        n = math.nan
    if math.isfinite(n):
        return (0, -n, "")
    return (1, 0.0, year)


def sort_domain(facet: str, values: Iterable[str]) -> List[str]:
    """Deduplicate and order the option list of one facet."""
    uniq = list(dict.fromkeys(v for v in values if v))
    if facet == "year":
        return merge_sort(uniq, key=_year_sort_key)
    return sorted(uniq)


def facet_domains(records: Dataset) -> Dict[str, List[str]]:
    """Option lists for the four facets, keyed make/year/county/type."""
    return {
        facet: sort_domain(facet, (str(r.get(field, "")) for r in records))
        for facet, field in FACETS.items()
    }


def matches(record, selection: FilterSelection) -> bool:
    """True when `record` satisfies every set facet of `selection`."""
    for facet, value in selection.items():
        if str(record.get(FACETS[facet], "")) != value:
            return False
    return True


def apply_filters(records: Dataset, selection: FilterSelection) -> Dataset:
    """Stable conjunctive filter. Always returns a new list."""
    if selection.is_empty:
        return list(records)
    return [r for r in records if matches(r, selection)]


def active_filter_count(selection: FilterSelection) -> int:
    return selection.active_count

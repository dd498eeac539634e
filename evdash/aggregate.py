"""
Aggregation engine
==================

`process_ev_data` turns a list of records into an `AggregateSummary`:

- totals (record count, distinct City/State pairs),
- make / model-year / vehicle-type / state / city tallies,
- the latest two model years and the year-over-year growth between them.

It is a pure function of its input. The dashboard calls it on the full
dataset and again on every filtered subset.

Bucketing rules worth remembering:
- a missing value is counted under "Unknown";
- "Unknown" is a real make (and state, and city) but NOT a real vehicle type
  or model year, so those two series drop it.
"""

from __future__ import annotations
from collections import Counter
from decimal import Decimal, ROUND_FLOOR
import math
from typing import Iterable, List, Optional

from .dsa import merge_sort
from .models import (
    AggregateSummary, CityCount, Dataset, MakeCount, StateCount, TypeCount, YearCount,
    CITY, EV_TYPE, MAKE, MODEL_YEAR, STATE, UNKNOWN,
)

TOP_MAKES = 10


def _value(record, field: str) -> str:
    return record.get(field) or UNKNOWN


def _tally(records: Dataset, field: str) -> Counter:
    # Counter keeps first-seen order, which is the tie order in every ranking
    return Counter(_value(r, field) for r in records)


def _by_count_desc(counts: Counter) -> List[tuple]:
    return merge_sort(list(counts.items()), key=lambda kv: kv[1], reverse=True)


def _year_number(year: str) -> Optional[float]:
    """Numeric value of a model year, or None when it does not parse."""
    try:
        n = float(year)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def make_counts(records: Dataset) -> List[MakeCount]:
    """Full make tally (every make, not just the top 10), count descending."""
    return [MakeCount(make=m, count=c) for m, c in _by_count_desc(_tally(records, MAKE))]


def year_series(records: Dataset) -> List[YearCount]:
    """Model years ascending; "Unknown" and non-numeric years are left out."""
    valid = [(y, c) for y, c in _tally(records, MODEL_YEAR).items()
             if y != UNKNOWN and _year_number(y) is not None]
    ordered = merge_sort(valid, key=lambda yc: _year_number(yc[0]))
    return [YearCount(year=y, count=c) for y, c in ordered]


def growth_percent(latest: Optional[YearCount], previous: Optional[YearCount]) -> int:
    """Rounded percentage change from `previous` to `latest` (0 when undefined)."""
    if latest is None or previous is None or previous.count <= 0:
        return 0
    pct = Decimal(100 * (latest.count - previous.count)) / Decimal(previous.count)
    # halves round toward +inf: 12.5 -> 13, -2.5 -> -2
    return int((pct + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def unique_city_count(records: Iterable) -> int:
    return len({(_value(r, CITY), _value(r, STATE)) for r in records})


def process_ev_data(records: Dataset) -> AggregateSummary:
    """Build the full dashboard summary for `records` (may be empty)."""
    top_makes = make_counts(records)[:TOP_MAKES]
    year_data = year_series(records)

    type_data = [TypeCount(name=t, value=c) for t, c in _tally(records, EV_TYPE).items()
                 if t != UNKNOWN]

    latest = year_data[-1] if year_data else None
    previous = year_data[-2] if len(year_data) > 1 else None

    state_data = [StateCount(state=s, count=c) for s, c in _by_count_desc(_tally(records, STATE))]
    city_data = [CityCount(city=s, count=c) for s, c in _by_count_desc(_tally(records, CITY))]

    return AggregateSummary(
        total_evs=len(records),
        top_makes=top_makes,
        year_data=year_data,
        type_data=type_data,
        unique_cities=unique_city_count(records),
        latest_year=latest,
        previous_year=previous,
        year_over_year_growth=growth_percent(latest, previous),
        state_data=state_data,
        city_data=city_data,
    )


aggregate = process_ev_data

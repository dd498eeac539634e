"""
Data model
==========

A record is one row of the Electric Vehicle Population CSV, kept as a flat
``Dict[str, str]`` so that every column of the file survives untouched.
The engines only read the handful of fields named below.

Everything *derived* from records (summaries, filter selections, table view
state) is a frozen dataclass:
- summaries are rebuilt from a full scan, never patched in place, and
- the dashboard replaces its state wholesale on every user event.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

Record = Dict[str, str]
Dataset = List[Record]

# Column names as they appear in the published CSV
VIN = "VIN (1-10)"
COUNTY = "County"
CITY = "City"
STATE = "State"
POSTAL_CODE = "Postal Code"
MODEL_YEAR = "Model Year"
MAKE = "Make"
MODEL = "Model"
EV_TYPE = "Electric Vehicle Type"
CAFV = "Clean Alternative Fuel Vehicle (CAFV) Eligibility"

# Each required column with the header spellings accepted for it
REQUIRED_COLUMNS: Tuple[Tuple[str, ...], ...] = (
    (VIN, "VIN"),
    (COUNTY,),
    (CITY,),
    (STATE,),
    (POSTAL_CODE,),
    (MODEL_YEAR,),
    (MAKE,),
    (MODEL,),
    (EV_TYPE,),
    (CAFV, "Clean Alternative Fuel Vehicle"),
)

UNKNOWN = "Unknown"

# facet name -> record field, in the order the filter bar shows them
FACETS: Dict[str, str] = {
    "make": MAKE,
    "year": MODEL_YEAR,
    "county": COUNTY,
    "type": EV_TYPE,
}

SORTABLE_COLUMNS: Tuple[str, ...] = (MAKE, MODEL, MODEL_YEAR, EV_TYPE, CITY, STATE)

ASC = "asc"
DESC = "desc"
PAGE_SIZE = 10


# -----------------------------
# Aggregate summary
# -----------------------------

@dataclass(frozen=True)
class MakeCount:
    make: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"Make": self.make, "count": self.count}


@dataclass(frozen=True)
class YearCount:
    year: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "count": self.count}


@dataclass(frozen=True)
class TypeCount:
    name: str
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class StateCount:
    state: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.state, "count": self.count}


@dataclass(frozen=True)
class CityCount:
    city: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"city": self.city, "count": self.count}


@dataclass(frozen=True)
class AggregateSummary:
    """All derived counts and rankings for one dataset (full or filtered)."""
    total_evs: int
    top_makes: List[MakeCount]
    year_data: List[YearCount]
    type_data: List[TypeCount]
    unique_cities: int
    latest_year: Optional[YearCount]
    previous_year: Optional[YearCount]
    year_over_year_growth: int
    state_data: List[StateCount]
    city_data: List[CityCount]

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape consumed by the dashboard front end (camelCase keys)."""
        return {
            "totalEVs": self.total_evs,
            "topMakes": [m.to_dict() for m in self.top_makes],
            "yearData": [y.to_dict() for y in self.year_data],
            "typeData": [t.to_dict() for t in self.type_data],
            "uniqueCities": self.unique_cities,
            "latestYear": self.latest_year.to_dict() if self.latest_year else None,
            "previousYear": self.previous_year.to_dict() if self.previous_year else None,
            "yearOverYearGrowth": self.year_over_year_growth,
            "stateData": [s.to_dict() for s in self.state_data],
            "cityData": [c.to_dict() for c in self.city_data],
        }


# -----------------------------
# Filter selection / view state
# -----------------------------

@dataclass(frozen=True)
class FilterSelection:
    """Up to four independent equality predicates; "" means unset."""
    make: str = ""
    year: str = ""
    county: str = ""
    ev_type: str = ""

    def value_for(self, facet: str) -> str:
        return getattr(self, _selection_attr(facet))

    def with_facet(self, facet: str, value: str) -> "FilterSelection":
        return replace(self, **{_selection_attr(facet): value or ""})

    def cleared(self) -> "FilterSelection":
        return FilterSelection()

    def items(self) -> List[Tuple[str, str]]:
        """(facet, value) pairs for the facets that are set, in FACETS order."""
        return [(f, self.value_for(f)) for f in FACETS if self.value_for(f)]

    @property
    def active_count(self) -> int:
        return len(self.items())

    @property
    def is_empty(self) -> bool:
        return self.active_count == 0


def _selection_attr(facet: str) -> str:
    if facet not in FACETS:
        raise ValueError(f"Unknown facet {facet!r}. Expected one of: {', '.join(FACETS)}")
    return "ev_type" if facet == "type" else facet


@dataclass(frozen=True)
class ViewState:
    """Table state: 1-based page plus the current sort column/direction."""
    page: int = 1
    sort_column: Optional[str] = None
    sort_direction: str = ASC
    page_size: int = PAGE_SIZE


@dataclass(frozen=True)
class PageView:
    """One rendered window of the table."""
    records: Dataset
    page: int
    total_pages: int
    visible_pages: List[int]
    total_records: int
    first_index: int = 0
    last_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": self.records,
            "page": self.page,
            "totalPages": self.total_pages,
            "visiblePages": self.visible_pages,
            "totalRecords": self.total_records,
            "firstIndex": self.first_index,
            "lastIndex": self.last_index,
        }

"""
Facet indices (precomputed lookup tables)
=========================================

EVDash builds one index per facet over the FULL dataset: a map from facet
value -> sorted list of record positions.

Example:
- `index.postings["make"]["TESLA"]` lists every row position with Make == TESLA.

Why sorted lists?
- Sorted position lists allow fast intersections using the two-pointer
  technique, and the result stays in dataset order.
- The keys of each map are exactly the facet's option list, taken from the
  unfiltered dataset.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List

from .dsa import intersect_sorted
from .models import FACETS, Dataset, FilterSelection


@dataclass
class FacetIndex:
    """facet name -> (value -> sorted record positions)."""
    postings: Dict[str, Dict[str, List[int]]]
    size: int

    def values(self, facet: str) -> List[str]:
        return list(self.postings[facet].keys())


def build_facet_index(records: Dataset) -> FacetIndex:
    """Build posting lists for every facet in one pass over `records`."""
    postings: Dict[str, Dict[str, List[int]]] = {facet: {} for facet in FACETS}
    for pos, r in enumerate(records):
        for facet, field in FACETS.items():
            postings[facet].setdefault(str(r.get(field, "")), []).append(pos)
    # positions are appended in scan order, so every list is already sorted
    return FacetIndex(postings=postings, size=len(records))


def filter_positions(index: FacetIndex, selection: FilterSelection) -> List[int]:
    """Positions of the records matching every set facet of `selection`."""
    ids = list(range(index.size))
    for facet, value in selection.items():
        ids = intersect_sorted(ids, index.postings[facet].get(value, []))
        if not ids:
            break
    return ids

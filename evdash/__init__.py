"""
EVDash package
==============

This package contains EVDash, an in-memory analytics engine for the
Electric Vehicle Population dataset.

- Dataset loading is in `evdash/loader.py`.
- The aggregation engine (counts, rankings, growth) is in `evdash/aggregate.py`.
- Facet filters are in `evdash/filters.py`; sorting and paging in `evdash/table.py`.
- The dashboard session (view-state reducer) is in `evdash/engine.py`.
- The JSON endpoint is in `evdash/api.py`; the terminal front end in `evdash/cli.py`.
"""

__version__ = '0.3.0'

"""
Error types
===========

Only I/O failures are errors in EVDash. The aggregation, filter and table
engines are total over any list of records: malformed fields are normalized
to "Unknown" or skipped, never raised.
"""

from __future__ import annotations
from typing import Optional


class EVDashError(Exception):
    """Base class for all EVDash errors."""


class DatasetLoadError(EVDashError):
    """The dataset could not be read or decoded."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class DataFetchError(EVDashError):
    """The dataset endpoint answered with a non-success status or was unreachable."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)

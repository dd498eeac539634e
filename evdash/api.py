"""
FastAPI application factory.

Usage:
    uvicorn evdash.api:create_app --factory       # dev server on port 8000
    EVDASH_DATA_PATH=/data/ev.csv uvicorn evdash.api:create_app --factory
    evdash --data ev.csv, then `serve`

Endpoints:
    GET /api/data      full record list (JSON array), cached for an hour
    GET /api/summary   aggregate summary of the filtered subset + facet options
    GET /api/records   one sorted page of the filtered table
    GET /health        liveness probe

The dataset is read once per process, on first request. A load failure is
answered with HTTP 500 and ``{"error": "Failed to process data"}``; the next
request tries again.
"""

from __future__ import annotations
import json
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .aggregate import process_ev_data
from .config import DashboardConfig
from .errors import DatasetLoadError
from .filters import apply_filters, facet_domains
from .loader import load_records
from .models import ASC, DESC, Dataset, FilterSelection, ViewState
from .table import clamp_page, sort_and_paginate, total_pages

logger = logging.getLogger(__name__)

LOAD_ERROR_BODY = {"error": "Failed to process data"}


class _JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def configure_logging(log_format: str = "text") -> None:
    """Attach one stream handler to the ``evdash`` logger (idempotent)."""
    root = logging.getLogger("evdash")
    if any(getattr(h, "_evdash", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    handler._evdash = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(logging.INFO)


class DatasetStore:
    """Loads the dataset lazily and keeps it for the life of the process."""

    def __init__(self, path: str, records: Optional[Dataset] = None) -> None:
        self.path = path
        self._records = records

    def get(self) -> Dataset:
        if self._records is None:
            self._records = load_records(self.path)
        return self._records


def create_app(config: Optional[DashboardConfig] = None, records: Optional[Dataset] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings; read from the environment when omitted.
        records: Preloaded dataset (skips reading `config.data_path`).
    """
    cfg = config or DashboardConfig.from_env()
    configure_logging(cfg.log_format)
    store = DatasetStore(cfg.data_path, records)
    cache_headers = {"Cache-Control": cfg.cache_control}

    app = FastAPI(
        title="EVDash API",
        summary="Electric vehicle registrations: records, summaries and table pages.",
        version=__version__,
    )
    app.state.config = cfg
    app.state.store = store

    def _load() -> Dataset:
        try:
            return store.get()
        except DatasetLoadError:
            logger.exception("API error: could not load dataset from %s", cfg.data_path)
            raise HTTPException(status_code=500, detail=LOAD_ERROR_BODY["error"])

    @app.exception_handler(HTTPException)
    async def _http_error(request, exc: HTTPException):
        if exc.status_code == 500:
            return JSONResponse(LOAD_ERROR_BODY, status_code=500)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'query')}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return JSONResponse({"error": problems or "Invalid request"}, status_code=422)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/data")
    def data() -> JSONResponse:
        return JSONResponse(_load(), headers=cache_headers)

    @app.get("/api/summary")
    def summary(
        make: str = Query("", description="Exact Make, e.g. 'TESLA'"),
        year: str = Query("", description="Exact Model Year, e.g. '2021'"),
        county: str = Query("", description="Exact County"),
        ev_type: str = Query("", alias="type", description="Exact Electric Vehicle Type"),
    ) -> JSONResponse:
        records = _load()
        selection = FilterSelection(make=make, year=year, county=county, ev_type=ev_type)
        subset = apply_filters(records, selection)
        body = process_ev_data(subset).to_dict()
        body["facets"] = facet_domains(records)
        body["activeFilters"] = selection.active_count
        body["filteredCount"] = len(subset)
        body["totalCount"] = len(records)
        return JSONResponse(body, headers=cache_headers)

    @app.get("/api/records")
    def table(
        make: str = Query(""),
        year: str = Query(""),
        county: str = Query(""),
        ev_type: str = Query("", alias="type"),
        sort: Optional[str] = Query(None, description="Sortable column, e.g. 'Model Year'"),
        direction: str = Query(ASC, pattern=f"^({ASC}|{DESC})$"),
        page: int = Query(1, ge=1),
    ) -> JSONResponse:
        records = _load()
        selection = FilterSelection(make=make, year=year, county=county, ev_type=ev_type)
        subset = apply_filters(records, selection)
        pages = total_pages(len(subset), cfg.page_size)
        view = ViewState(page=clamp_page(page, pages), sort_column=sort or None,
                         sort_direction=direction, page_size=cfg.page_size)
        try:
            result = sort_and_paginate(subset, view)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return JSONResponse(result.to_dict())

    return app


from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .analyzer import Analyzer
from .config import Settings
from .errors import (
    DefaultAnswerError,
    IncompatibleSchemaVersion,
    InvalidInput,
    ScanNotFound,
    StoreUnavailable,
    UnsupportedInput,
)
from .exporter import to_markdown
from .fetcher import Fetcher
from .history import HistoryStore, create_history_store, record_scan, scan_diff
from .log import setup_logger
from .models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ComparePayload,
    CompareRequest,
    CompareResponse,
    ErrorResponse,
    ExportRequest,
    ExportResponse,
    HistoryDiffResponse,
    HistoryListResponse,
    HistoryResponse,
)
from .urls import canonicalize

logger = logging.getLogger(__name__)

_FROM_SETTINGS = object()

_ERROR_STATUS: dict[type[DefaultAnswerError], int] = {
    InvalidInput: 400,
    ScanNotFound: 404,
    IncompatibleSchemaVersion: 409,
    UnsupportedInput: 422,
    StoreUnavailable: 503,
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump(by_alias=True))


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    store: HistoryStore | None | object = _FROM_SETTINGS,
) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logger(settings.log_level)
    history = create_history_store(settings) if store is _FROM_SETTINGS else store

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pooled client for the process; redirects are followed by the Fetcher itself.
        async with httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(settings.timeout_s),
            follow_redirects=False,
        ) as client:
            app.state.analyzer = Analyzer(Fetcher(client, settings))
            yield

    app = FastAPI(title="DefaultAnswer Agent", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.history = history

    # For local dev, this defaults to allowing http://localhost:3000.
    # In production, set DEFAULTANSWER_CORS_ORIGINS to your deployed frontend origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DefaultAnswerError)
    async def known_error_handler(request: Request, exc: DefaultAnswerError):
        status_code = next((code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)), 500)
        return _error(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            where = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
            message = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
        else:
            message = "Invalid request."
        return _error(400, message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal error while processing this request.")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze_endpoint(req: AnalyzeRequest, request: Request):
        report = await request.app.state.analyzer.analyze(req.url)
        diff = None
        if history is not None:
            # Store clients are blocking; keep them off the event loop.
            diff = await run_in_threadpool(record_scan, history, report)
        return AnalyzeResponse(**dict(report), history_diff=diff)

    @app.post("/compare", response_model=CompareResponse)
    async def compare_endpoint(req: CompareRequest, request: Request):
        report_a, report_b, comparison = await request.app.state.analyzer.analyze_pair(req.url_a, req.url_b)
        return CompareResponse(
            url_a=report_a.url,
            url_b=report_b.url,
            payload=ComparePayload(report_a=report_a, report_b=report_b, comparison=comparison),
        )

    @app.get("/history/latest", response_model=HistoryResponse)
    def history_latest(url: str = Query(..., min_length=1)):
        if history is None:
            return HistoryResponse(ok=False, error="History not configured")
        latest, previous = history.get(canonicalize(url))
        return HistoryResponse(ok=True, latest=latest, previous=previous)

    @app.get("/history/list", response_model=HistoryListResponse)
    def history_list(url: str = Query(..., min_length=1), limit: int = Query(20, ge=1, le=100)):
        if history is None:
            return HistoryListResponse(ok=False, error="History not configured")
        return HistoryListResponse(ok=True, scans=history.list_scans(canonicalize(url), limit))

    @app.get("/history/diff", response_model=HistoryDiffResponse)
    def history_diff(scan_id: str = Query(..., alias="scanId", min_length=1)):
        if history is None:
            return HistoryDiffResponse(ok=False, error="History not configured")
        current, previous, diff = scan_diff(history, scan_id)
        return HistoryDiffResponse(ok=True, current=current, previous=previous, diff=diff)

    @app.post("/export/markdown", response_model=ExportResponse)
    def export_markdown(req: ExportRequest):
        if req.comparison is not None:
            return ExportResponse(markdown=to_markdown(req.comparison))
        if req.report is not None:
            return ExportResponse(markdown=to_markdown(req.report))
        raise InvalidInput("Provide a report or a comparison to export.")

    return app


app = create_app()

"""FastAPI application exposing scan and summary endpoints."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import DEFAULT_SUMMARY_CACHE_SIZE
from ..errors import FileReadFailure, InvalidPath
from ..orchestrator import Orchestrator
from ..scanner import load_scan_config
from ..stores.summary_cache import SummaryCache
from ..summaries import FileSummary, HeuristicSummarizer


class ScanRequest(BaseModel):
    path: str


class SummarizeRequest(BaseModel):
    path: str


class SummarizeResponse(BaseModel):
    purpose: str
    responsibilities: List[str]
    relationships: str
    architectureRole: Optional[str] = None
    designPatterns: List[str] = []
    diagram: Optional[str] = None
    content: str
    hash: str


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    summarizer: HeuristicSummarizer | None = None,
    *,
    summary_cache_size: int = DEFAULT_SUMMARY_CACHE_SIZE,
) -> FastAPI:
    """Create the FastAPI application exposing archmap operations."""

    app = FastAPI(title="Archmap Service", version=__version__)
    # One cache per application instance, shared by every summarize request.
    summary_service = summarizer or HeuristicSummarizer(
        SummaryCache[FileSummary](summary_cache_size)
    )

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/scan")
    async def scan_repo(
        payload: ScanRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, orchestrator.scan, payload.path)
        return result.to_payload()

    @app.post("/summarize", response_model=SummarizeResponse)
    async def summarize_file(payload: SummarizeRequest) -> SummarizeResponse:
        loop = asyncio.get_running_loop()
        summary, content, content_hash = await loop.run_in_executor(
            None, summary_service.summarize_path, payload.path
        )
        return SummarizeResponse(**summary.to_payload(), content=content, hash=content_hash)

    @app.exception_handler(InvalidPath)
    async def invalid_path_handler(_: Any, exc: InvalidPath) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(FileReadFailure)
    async def read_failure_handler(_: Any, exc: FileReadFailure) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, config_root: Path | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    config = load_scan_config(config_root or Path.cwd())
    app = create_app(summary_cache_size=config.summaries.cache_size)
    uvicorn.run(app, host=host, port=port)

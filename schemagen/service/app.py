"""FastAPI application entrypoint for schemagen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import ConfigError, load_config, run_params_from_mapping
from ..models import RunReport
from ..orchestrator import AggregateRunError, Orchestrator
from ..specs import CorpusResolutionError


class GenerateAllRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    batch_count: Optional[int] = Field(default=None, alias="batchCount")
    batch_index: Optional[int] = Field(default=None, alias="batchIndex")
    local_path: Optional[str] = Field(default=None, alias="localPath")
    readme_files: Optional[List[str]] = Field(default=None, alias="readmeFiles")
    output_path: Optional[str] = Field(default=None, alias="outputPath")


class PackageModel(BaseModel):
    packageName: str
    result: str
    path: List[str]


class GenerateAllResponse(BaseModel):
    packages: List[PackageModel]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing schemagen operations."""

    app = FastAPI(title="SchemaGen Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Built per request so registry and autogen list are re-read from disk.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate-all", response_model=GenerateAllResponse)
    async def generate_all(
        payload: GenerateAllRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateAllResponse:
        params = run_params_from_mapping(payload.model_dump(by_alias=True, exclude_none=True))

        def _run() -> RunReport:
            return orchestrator.run(params)

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run)
        return GenerateAllResponse.model_validate(report.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(_: Any, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies are rejected like malformed CLI parameters.
        return JSONResponse(status_code=400, content={"detail": _describe_errors(exc.errors())})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AggregateRunError)
    async def aggregate_error_handler(_: Any, exc: AggregateRunError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc), "errorCount": exc.error_count},
        )

    @app.exception_handler(CorpusResolutionError)
    async def corpus_error_handler(
        _: Any, exc: CorpusResolutionError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


def _describe_errors(errors: Any) -> str:
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request parameters: " + "; ".join(messages)


def run_service(
    host: str = "0.0.0.0", port: int = 8000, config_path: Path | None = None
) -> None:  # pragma: no cover - integration path
    app = create_app(lambda: Orchestrator(load_config(config_path)))
    uvicorn.run(app, host=host, port=port)


__all__ = ["GenerateAllRequest", "GenerateAllResponse", "create_app", "run_service"]

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings, get_settings
from ..errors import ComputeLabError, ErrorCode
from ..jobs import JobFilter, JobSpec
from ..jobs.types import isoformat
from ..logging import RequestLog, generate_request_id, timed
from ..service import JobService, build_service
from .schemas import (
    DeleteJobResponse,
    ErrorResponse,
    FailJobRequest,
    HealthResponse,
    JobListResponse,
    JobResponse,
    StatsResponse,
    SubmitJobRequest,
)


def _service(request: Request) -> JobService:
    return request.app.state.service


def _now_iso(service: JobService) -> str:
    return isoformat(service.clock.now())


router = APIRouter(prefix="/api/v1")

_NOT_FOUND = {404: {"model": ErrorResponse}}
_CONFLICT = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@router.post("/jobs/submit", response_model=JobResponse, status_code=201, responses={400: {"model": ErrorResponse}})
async def submit_job(body: SubmitJobRequest, request: Request) -> dict:
    service = _service(request)
    job = await service.manager.submit_spec(JobSpec(
        toolkit=body.toolkit,
        config=body.config,
        input_files=body.input_files,
        priority=5 if body.priority is None else body.priority,
    ))
    return job.to_dict()


# Registered before /jobs/{job_id} so "list" is not taken for an id
@router.get("/jobs/list", response_model=JobListResponse)
async def list_jobs(
    request: Request,
    status: str | None = None,
    toolkit: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
) -> dict:
    service = _service(request)
    page = await service.query.list(
        JobFilter(status=status or None, toolkit=toolkit or None),
        limit=limit,
        offset=offset,
    )
    return page.to_dict()


@router.get("/jobs/{job_id}", response_model=JobResponse, responses=_NOT_FOUND)
async def get_job(job_id: str, request: Request) -> dict:
    job = await _service(request).manager.get(job_id)
    return job.to_dict()


# Returned as is: a cancelled job keeps its null fields, a deleted one has no "job" key
@router.delete("/jobs/{job_id}", responses={200: {"model": DeleteJobResponse}, **_NOT_FOUND})
async def delete_job(job_id: str, request: Request) -> dict:
    result = await _service(request).manager.delete(job_id)
    return result.to_dict()


@router.post("/jobs/{job_id}/fail", response_model=JobResponse, responses=_CONFLICT)
async def fail_job(job_id: str, body: FailJobRequest, request: Request) -> dict:
    job = await _service(request).manager.mark_failed(job_id, body.reason, body.error_code)
    return job.to_dict()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(request: Request) -> dict:
    service = _service(request)
    stats = await service.stats.stats()
    return {**stats.to_dict(), "timestamp": _now_iso(service)}


def create_app(
    settings: Settings | None = None,
    *,
    service: JobService | None = None,
) -> FastAPI:
    """Build the HTTP adapter around a job service."""
    if service is None:
        service = build_service(settings or get_settings())
    settings = service.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service.logger.info(
            "ComputeLab server started",
            version=settings.server.version,
            port=settings.server.port,
        )
        try:
            yield
        finally:
            await service.close()

    app = FastAPI(title=settings.server.title, version=settings.server.version, lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        if not settings.logging.log_requests:
            return await call_next(request)
        request_id = generate_request_id()
        with service.logger.trace_context(request_id=request_id), timed() as timer:
            response = await call_next(request)
            service.logger.log_request(RequestLog(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=timer.elapsed_ms,
            ))
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(ComputeLabError)
    async def handle_domain_error(request: Request, exc: ComputeLabError) -> JSONResponse:
        if exc.http_status >= 500:
            service.logger.log_error(exc, path=request.url.path)
        content = {"error": exc.message, "code": exc.code.value}
        fields = getattr(exc, "fields", None)
        if fields:
            content["fields"] = fields
        return JSONResponse(status_code=exc.http_status, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        content = {"error": "Invalid request body", "code": ErrorCode.INVALID_FIELD.value}
        if fields:
            content["fields"] = fields
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        service.logger.log_error(exc, "Unhandled error", path=request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> dict:
        return {
            "status": "healthy",
            "version": settings.server.version,
            "timestamp": _now_iso(service),
        }

    app.include_router(router)
    return app


__all__ = ["create_app", "router"]

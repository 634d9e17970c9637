from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SubmitJobRequest(BaseModel):
    # Required-field and type checks happen in JobSpec.validate so the error names them
    toolkit: Any = None
    config: Any = None
    input_files: Any = None
    priority: Any = None


class FailJobRequest(BaseModel):
    reason: str = Field(..., min_length=1)
    error_code: str | None = None


class JobResponse(BaseModel):
    id: str
    toolkit: str
    config: Any = None
    input_files: list[Any] = Field(default_factory=list)
    priority: int = 5
    status: str
    progress: float = 0.0
    created_at: str | None = None
    updated_at: str | None = None
    started_at: str | None = None
    completed_at: str | None = None
    queue_position: int = 1
    estimated_completion: str | None = None
    results: Any = None
    error: str | None = None
    error_code: str | None = None


class JobListResponse(BaseModel):
    total: int
    jobs: list[JobResponse] = Field(default_factory=list)


class DeleteJobResponse(BaseModel):
    message: str
    job: JobResponse | None = None


class StatsResponse(BaseModel):
    total: int
    completed: int
    running: int
    queued: int
    failed: int
    cancelled: int
    success_rate: float
    uptime: float
    timestamp: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
    code: str | None = None
    fields: list[str] | None = None

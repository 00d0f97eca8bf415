"""Pydantic response models for the HTTP front end.

WHY: FastAPI uses these schemas for response serialization and for the
generated OpenAPI documentation.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose exception objects, only names and messages
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error body."""

    detail: str = Field(description="Human-readable error message.")


class FileFailureInfo(BaseModel):
    """One file that could not be transcribed."""

    file_name: str = Field(description="Name of the uploaded file.")
    kind: str = Field(description="Error type, e.g. 'UploadError'.")
    message: str = Field(description="Error message.")


class BatchFailedResponse(BaseModel):
    """Returned when no file in the batch could be transcribed."""

    detail: str = Field(description="Summary of the failure.")
    failures: List[FileFailureInfo] = Field(description="Per-file failures.")


class StatusResponse(BaseModel):
    """Processing/idle flag of the batch orchestrator."""

    processing: bool = Field(description="True while a batch is running.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status ('ok').")
    version: str = Field(description="Package version.")

"""API request/response models"""

from __future__ import annotations

from pydantic import BaseModel


class VersionsResponse(BaseModel):
    """Available versions of a package, newest first"""

    versions: list[str]


class ErrorDetail(BaseModel):
    """Structured error payload returned in HTTPException details"""

    type: str
    message: str
    status: int | None = None  # upstream HTTP status for fetch errors
    available_versions: list[str] | None = None


class LimitsResponse(BaseModel):
    """Current extraction limits"""

    maxArchiveSize: int
    maxFiles: int
    maxFileSize: int
    maxDecompressedSize: int


class LimitsUpdateRequest(BaseModel):
    """Request to update extraction limits"""

    maxArchiveSize: int | None = None
    maxFiles: int | None = None
    maxFileSize: int | None = None
    maxDecompressedSize: int | None = None

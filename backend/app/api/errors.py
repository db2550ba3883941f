"""Translate domain errors into HTTP errors."""

from fastapi import HTTPException, status

from app.core.errors import (
    ConflictError,
    GenerationUnavailableError,
    InvalidFieldValueError,
    InvalidGenerationResultError,
    NotFoundError,
    RoadmapError,
)

STATUS_CODES: dict[type[RoadmapError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidFieldValueError: 422,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidGenerationResultError: status.HTTP_502_BAD_GATEWAY,
    GenerationUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(exc: RoadmapError) -> HTTPException:
    """Build an HTTPException whose detail names the failed operation."""
    code = STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail: dict[str, object] = {"operation": exc.operation, "message": str(exc)}
    if isinstance(exc, ConflictError):
        detail["current_version"] = exc.current_version
    return HTTPException(status_code=code, detail=detail)

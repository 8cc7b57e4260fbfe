"""
API schemas for webhook and job responses
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from fastapi import status
from fastapi.responses import JSONResponse


class ErrorResponse(BaseModel):
    """Request error body; errorCode is fixed per failure site"""
    errorCode: str = Field(..., description="Fixed identifier of the failure site")
    error: str = Field(..., description="Human-readable message")


class BatchFailure(BaseModel):
    id: str
    kind: Optional[str] = None
    error: Optional[str] = None


class ReconciliationErrorResponse(ErrorResponse):
    failures: List[BatchFailure] = []


class RefreshResponse(BaseModel):
    """Popular times refresh summary; the count reflects dispatched locations"""
    message: str
    failed: List[str] = []


def error_response(error_code: str, message: str, **extra) -> JSONResponse:
    """Build the single terminal 500 response for a failed request"""
    body = ErrorResponse(errorCode=error_code, error=message).model_dump()
    body.update(extra)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body,
    )

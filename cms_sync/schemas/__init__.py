"""
Schemas module
"""

from cms_sync.schemas.responses import (
    BatchFailure,
    ErrorResponse,
    ReconciliationErrorResponse,
    RefreshResponse,
    error_response,
)

__all__ = [
    "BatchFailure",
    "ErrorResponse",
    "ReconciliationErrorResponse",
    "RefreshResponse",
    "error_response",
]

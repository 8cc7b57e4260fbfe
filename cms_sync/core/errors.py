"""
Error types and fixed error codes for the synchronization engine

The error codes are pre-assigned per failure site and never generated at
runtime, so they can be grepped for in logs across deployments.
"""

from typing import Any, Dict, Optional


class ErrorCode:
    """Fixed error identifiers, one per failure site"""

    CREATE_UPDATE_FAILED = "6d3ed0cf-332f-4242-b730-34933aa1ab13"
    DELETE_UNSUPPORTED_KIND = "e2597ab7-641c-4448-a70f-8781a027325b"
    DELETE_FAILED = "c78f3b15-7a74-4360-ab62-079d45b5673b"
    RECONCILIATION_FAILED = "0f4b7d2e-5a61-4c3e-9d8a-2b7e41c9f603"
    POPULAR_TIMES_FAILED = "a81c94e3-27d5-4f0b-8e6c-5d39b0f7e214"


class SyncError(Exception):
    """Base class for synchronization errors"""

    error_code: Optional[str] = None

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class UnsupportedKindError(SyncError):
    """Raised when a notification names a document type we do not mirror"""

    error_code = ErrorCode.DELETE_UNSUPPORTED_KIND

    def __init__(self, kind: Any):
        super().__init__("unsupported document type", {"kind": kind})
        self.kind = kind


class ContentSourceError(SyncError):
    """Raised when the CMS cannot be queried"""


class StoreError(SyncError):
    """Raised when a document store operation fails"""


class AggregationError(SyncError):
    """Raised when popular times cannot be computed for a location"""


class InvalidImageReference(SyncError, ValueError):
    """Raised for image references that do not follow the asset id format"""

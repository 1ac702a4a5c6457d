"""
Custom exception classes for the application.

Every error carries a stable code, a human message, an HTTP status and
a details dict so routes can serialize it without special cases.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "INVALID_PERIOD_TOKEN")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# PERIODS
# ===================

class InvalidPeriodTokenError(ValidationError):
    """Period token is not one of the known tokens or a YYYY-MM month key."""

    def __init__(self, token: str):
        super().__init__(
            code="INVALID_PERIOD_TOKEN",
            message=f"Unrecognized period '{token}'",
            details={
                "provided": token,
                "valid": ["daily", "weekly", "mtd", "ytd", "all", "YYYY-MM"]
            }
        )


# ===================
# DATA SOURCES
# ===================

class DataSourceUnavailableError(ExternalServiceError):
    """Order or inventory source could not be reached or returned an error."""

    def __init__(
        self,
        source: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            service=source,
            message=message,
            details=details,
            code="DATA_SOURCE_UNAVAILABLE"
        )


class MalformedOrderRecordError(ValidationError):
    """A fetched order record does not match the expected shape."""

    def __init__(self, record_id: Optional[str], reason: str):
        super().__init__(
            code="MALFORMED_ORDER_RECORD",
            message=f"Malformed order record: {reason}",
            details={"id": record_id, "reason": reason}
        )


# ===================
# INBOUND ORDERS
# ===================

class InboundOrderNotFoundError(NotFoundError):
    """Inbound order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Inbound order",
            identifier=order_id,
            code="INBOUND_ORDER_NOT_FOUND"
        )


class InboundStoreError(AppError):
    """Inbound order store could not be read or written (500)."""

    def __init__(self, operation: str, message: str, path: Optional[str] = None):
        super().__init__(
            code="INBOUND_STORE_ERROR",
            message=f"Inbound store {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, "path": path}
        )

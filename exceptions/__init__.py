"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,

    # Periods
    InvalidPeriodTokenError,

    # Data sources
    DataSourceUnavailableError,
    MalformedOrderRecordError,

    # Inbound orders
    InboundOrderNotFoundError,
    InboundStoreError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",

    # Periods
    "InvalidPeriodTokenError",

    # Data sources
    "DataSourceUnavailableError",
    "MalformedOrderRecordError",

    # Inbound orders
    "InboundOrderNotFoundError",
    "InboundStoreError",
]

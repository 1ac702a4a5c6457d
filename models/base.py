"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow attribute objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class RecordSchema(BaseModel):
    """
    Base for fetched source records.

    Records are immutable once fetched and strings are kept verbatim
    (SKUs are opaque join keys).
    """
    model_config = ConfigDict(
        from_attributes=True,
        frozen=True
    )

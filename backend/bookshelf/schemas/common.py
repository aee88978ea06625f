"""Common Pydantic schemas."""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str
    error_code: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    app: str
    database: str

"""Pydantic schemas."""
from bookshelf.schemas.book import BookCreate, BookResponse, BookUpdate
from bookshelf.schemas.common import ErrorResponse, HealthResponse

__all__ = [
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "ErrorResponse",
    "HealthResponse",
]

"""Book Pydantic schemas."""
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bookshelf.schemas.common import BaseSchema

# Range of the store's INTEGER column
YEAR_MIN = -(2**31)
YEAR_MAX = 2**31 - 1


class BookFields(BaseModel):
    """Mutable book fields, all nullable."""

    name: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = Field(None, ge=YEAR_MIN, le=YEAR_MAX, strict=True)


class BookCreate(BookFields):
    """Schema for creating a book. The caller supplies the id."""

    id: uuid.UUID


class BookUpdate(BookFields):
    """Schema for replacing a book's fields. An id in the body is ignored."""

    model_config = ConfigDict(extra="ignore")


class BookResponse(BaseSchema):
    """Schema for book response."""

    id: uuid.UUID
    name: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = None

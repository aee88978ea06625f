"""Book API routes."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from bookshelf.core.exceptions import (
    ClientInputError,
    ConflictError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
)
from bookshelf.dependencies import get_book_store
from bookshelf.schemas.book import BookCreate, BookResponse, BookUpdate
from bookshelf.schemas.common import ErrorResponse
from bookshelf.services.book_store import (
    BookStore,
    Empty,
    Failure,
    FailureKind,
    Row,
    StoreResult,
)

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)


def parse_book_id(raw: str) -> uuid.UUID:
    """Parse a path identifier, rejecting anything that is not a UUID."""
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ClientInputError("Invalid book id", field="id") from None


def unwrap(result: StoreResult, book_id: Optional[uuid.UUID] = None):
    """Return the value of a Row result or raise the matching app exception."""
    if isinstance(result, Row):
        return result.value
    if isinstance(result, Empty):
        raise NotFoundError("Book", book_id)
    if isinstance(result, Failure):
        if result.kind is FailureKind.CONFLICT:
            raise ConflictError("Book", book_id)
        if result.kind is FailureKind.UNAVAILABLE:
            raise StoreUnavailableError()
        raise StoreError()
    raise TypeError(f"Unexpected store result: {result!r}")


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_book(
    book_data: BookCreate,
    store: BookStore = Depends(get_book_store),
) -> BookResponse:
    """Create a book with a caller-supplied id."""
    result = await store.insert(book_data)
    return unwrap(result, book_data.id)


@router.get("", response_model=list[BookResponse])
async def list_books(
    store: BookStore = Depends(get_book_store),
) -> list[BookResponse]:
    """List all books."""
    return unwrap(await store.select_all())


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    store: BookStore = Depends(get_book_store),
) -> BookResponse:
    """Get a specific book."""
    parsed_id = parse_book_id(book_id)
    return unwrap(await store.select_by_id(parsed_id), parsed_id)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    book_data: BookUpdate,
    store: BookStore = Depends(get_book_store),
) -> BookResponse:
    """Replace a book's name, author and year. The path id wins over any body id."""
    parsed_id = parse_book_id(book_id)
    result = await store.update_by_id(parsed_id, book_data)
    return unwrap(result, parsed_id)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str,
    store: BookStore = Depends(get_book_store),
) -> Response:
    """Delete a book."""
    parsed_id = parse_book_id(book_id)
    unwrap(await store.delete_by_id(parsed_id), parsed_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

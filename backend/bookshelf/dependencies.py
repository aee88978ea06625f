"""FastAPI dependencies."""
from fastapi import Request

from bookshelf.services.book_store import BookStore


def get_book_store(request: Request) -> BookStore:
    """Dependency returning the store attached to the application at startup."""
    return request.app.state.book_store

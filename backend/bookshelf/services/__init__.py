"""Store services."""
from bookshelf.services.book_store import (
    BookStore,
    Empty,
    Failure,
    FailureKind,
    Row,
    StoreResult,
)

__all__ = [
    "BookStore",
    "StoreResult",
    "Row",
    "Empty",
    "Failure",
    "FailureKind",
]

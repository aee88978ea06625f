"""Book store adapter.

Every public method runs exactly one parameter-bound statement in its own
transaction, on a connection checked out of the shared pool for that call
only, and reports the outcome as one of three result shapes:

* ``Row``: the statement produced a record (or the list of records for
  ``select_all``).
* ``Empty``: the statement matched nothing. This is how get, update and
  delete report an unknown id; it is not an error.
* ``Failure``: the store raised. ``Failure.kind`` tells a duplicate key apart
  from an unreachable database and from anything else.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from bookshelf.core.logging import get_logger
from bookshelf.models.book import Book
from bookshelf.schemas.book import BookCreate, BookResponse, BookUpdate

logger = get_logger("store")

T = TypeVar("T")

UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_ERRORS = ("SQLITE_CONSTRAINT_PRIMARYKEY", "SQLITE_CONSTRAINT_UNIQUE")

# SQLSTATE classes: connection exception, insufficient resources, operator intervention
UNAVAILABLE_SQLSTATE_CLASSES = ("08", "53", "57")
UNAVAILABLE_MESSAGES = (
    "unable to open database",
    "database is locked",
    "connection refused",
    "could not connect",
)

BOOK_COLUMNS = (Book.id, Book.name, Book.author, Book.year)


class FailureKind(str, Enum):
    """Failure kind enum."""
    CONFLICT = "conflict"
    INTEGRITY = "integrity"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Row(Generic[T]):
    value: T


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    error: Exception = field(repr=False, compare=False)


StoreResult = Union[Row[T], Empty, Failure]


def _sqlstate(orig: object) -> Optional[str]:
    """SQLSTATE of a driver error, looking through adapter wrappers."""
    while orig is not None:
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if code:
            return code
        orig = getattr(orig, "__cause__", None)
    return None


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether an integrity error was raised by a primary key or unique index."""
    code = _sqlstate(exc.orig)
    if code is not None:
        return code == UNIQUE_VIOLATION

    errorname = getattr(exc.orig, "sqlite_errorname", None)
    if errorname:
        return errorname in SQLITE_UNIQUE_ERRORS

    message = str(exc.orig).lower()
    return "unique constraint" in message or "duplicate key" in message


def is_connection_failure(exc: OperationalError) -> bool:
    """Whether an operational error means the store cannot be reached or used.

    Schema problems such as a missing table also surface as operational errors
    on SQLite and are not counted here.
    """
    code = _sqlstate(exc.orig)
    if code is not None:
        return code[:2] in UNAVAILABLE_SQLSTATE_CLASSES

    message = str(exc.orig).lower()
    return any(marker in message for marker in UNAVAILABLE_MESSAGES)


def classify_error(exc: Exception) -> FailureKind:
    """Map a store exception to a failure kind."""
    if isinstance(exc, IntegrityError):
        return FailureKind.CONFLICT if is_unique_violation(exc) else FailureKind.INTEGRITY
    if isinstance(exc, (PoolTimeoutError, InterfaceError, OSError)):
        return FailureKind.UNAVAILABLE
    if isinstance(exc, OperationalError) and is_connection_failure(exc):
        return FailureKind.UNAVAILABLE
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return FailureKind.UNAVAILABLE
    return FailureKind.INTERNAL


class BookStore:
    """Store adapter for the book table."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def insert(self, book: BookCreate) -> StoreResult[BookResponse]:
        """Insert a book and return it as stored."""
        stmt = (
            insert(Book)
            .values(id=book.id, name=book.name, author=book.author, year=book.year)
            .returning(*BOOK_COLUMNS)
        )
        return await self._fetch_one(stmt, "insert")

    async def select_all(self) -> StoreResult[list[BookResponse]]:
        """Return every book."""
        try:
            async with self._sessions() as session:
                result = await session.execute(select(*BOOK_COLUMNS))
                rows = result.all()
        except (SQLAlchemyError, OSError) as exc:
            return self._failure(exc, "select_all")
        return Row([BookResponse.model_validate(row) for row in rows])

    async def select_by_id(self, book_id: uuid.UUID) -> StoreResult[BookResponse]:
        """Return the book with the given id."""
        stmt = select(*BOOK_COLUMNS).where(Book.id == book_id)
        return await self._fetch_one(stmt, "select_by_id")

    async def update_by_id(
        self,
        book_id: uuid.UUID,
        book: BookUpdate,
    ) -> StoreResult[BookResponse]:
        """Replace name, author and year of a book."""
        stmt = (
            update(Book)
            .where(Book.id == book_id)
            .values(name=book.name, author=book.author, year=book.year)
            .returning(*BOOK_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        return await self._fetch_one(stmt, "update_by_id")

    async def delete_by_id(self, book_id: uuid.UUID) -> StoreResult[BookResponse]:
        """Delete a book and return the removed row."""
        stmt = (
            delete(Book)
            .where(Book.id == book_id)
            .returning(*BOOK_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        return await self._fetch_one(stmt, "delete_by_id")

    async def ping(self) -> bool:
        """Check that a connection can be checked out and used."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning(f"Database ping failed: {type(exc).__name__}")
            return False
        return True

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self.engine.dispose()

    async def _fetch_one(self, stmt, operation: str) -> StoreResult[BookResponse]:
        try:
            async with self._sessions() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    row = result.one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            return self._failure(exc, operation)

        if row is None:
            return Empty()
        return Row(BookResponse.model_validate(row))

    def _failure(self, exc: Exception, operation: str) -> Failure:
        kind = classify_error(exc)
        if kind is FailureKind.INTERNAL:
            logger.exception(f"{operation} failed")
        else:
            logger.warning(f"{operation} failed: {kind.value} ({type(exc).__name__})")
        return Failure(kind, exc)

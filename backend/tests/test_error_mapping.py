"""Store failures rendered as HTTP responses."""
import logging
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from bookshelf.main import create_app
from bookshelf.services.book_store import Failure, FailureKind


class FailingStore:
    """Store stub whose every call fails with the same kind."""

    def __init__(self, kind: FailureKind):
        self.kind = kind
        self.calls = []

    def _fail(self, name):
        self.calls.append(name)
        return Failure(self.kind, RuntimeError('syntax error at or near "SELECT"'))

    async def insert(self, book):
        return self._fail("insert")

    async def select_all(self):
        return self._fail("select_all")

    async def select_by_id(self, book_id):
        return self._fail("select_by_id")

    async def update_by_id(self, book_id, book):
        return self._fail("update_by_id")

    async def delete_by_id(self, book_id):
        return self._fail("delete_by_id")

    async def ping(self):
        return False


async def request_with(kind: FailureKind, method: str, url: str, **kwargs):
    store = FailingStore(kind)
    app = create_app(store=store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        return await ac.request(method, url, **kwargs), store


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind, status_code",
    [
        (FailureKind.UNAVAILABLE, 503),
        (FailureKind.INTERNAL, 500),
        (FailureKind.INTEGRITY, 500),
    ],
)
async def test_store_failures_are_server_errors(kind, status_code):
    response, _ = await request_with(kind, "GET", "/books")
    assert response.status_code == status_code
    body = response.json()
    assert body["error_code"] == "STORE_ERROR"
    assert "SELECT" not in response.text


@pytest.mark.asyncio
async def test_conflict_on_create():
    response, _ = await request_with(
        FailureKind.CONFLICT,
        "POST",
        "/books",
        json={"id": str(uuid.uuid4())},
    )
    assert response.status_code == 409
    assert "SELECT" not in response.text


@pytest.mark.asyncio
async def test_bad_input_never_reaches_store():
    response, store = await request_with(FailureKind.INTERNAL, "GET", "/books/123")
    assert response.status_code == 400
    assert store.calls == []

    response, store = await request_with(FailureKind.INTERNAL, "POST", "/books", json={"name": "x"})
    assert response.status_code == 400
    assert store.calls == []


@pytest.mark.asyncio
async def test_health_degraded():
    response, _ = await request_with(FailureKind.UNAVAILABLE, "GET", "/health")
    assert response.status_code == 503
    assert response.json()["database"] == "unavailable"


class RaisingStore(FailingStore):
    """Store stub that raises instead of reporting a failure."""

    async def select_all(self):
        raise RuntimeError('relation "book" does not exist')


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.mark.asyncio
async def test_unhandled_error_logged_once_without_traceback():
    handler = RecordingHandler()
    main_logger = logging.getLogger("bookshelf.main")
    main_logger.addHandler(handler)
    try:
        app = create_app(store=RaisingStore(FailureKind.INTERNAL))
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/books")
    finally:
        main_logger.removeHandler(handler)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "relation" not in response.text

    errors = [r for r in handler.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].exc_info is None
    assert "RuntimeError" in errors[0].getMessage()

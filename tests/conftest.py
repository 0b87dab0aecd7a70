"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from bookshelf.handlers import BookHandlers
from bookshelf.main import create_app
from bookshelf.store import BookStore


class FakeClock:
    """Clock that moves forward one second every time it is read."""

    def __init__(self, start=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


class SequentialIds:
    """Deterministic id factory: book-0001, book-0002, ..."""

    def __init__(self):
        self.issued = 0

    def __call__(self):
        self.issued += 1
        return f"book-{self.issued:04d}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def id_factory():
    return SequentialIds()


@pytest.fixture
def store():
    """Create an empty book store."""
    return BookStore()


@pytest.fixture
def handlers(store, clock, id_factory):
    """Create book handlers over the test store."""
    return BookHandlers(store=store, clock=clock, id_factory=id_factory)


@pytest.fixture
def client(handlers):
    """Create test client over a fresh application."""
    return TestClient(create_app(handlers=handlers))


@pytest.fixture
def sample_book_payload():
    """Sample request body for creating a book."""
    return {
        "name": "Buku A",
        "year": 2010,
        "author": "John Doe",
        "summary": "Lorem ipsum dolor sit amet",
        "publisher": "Dicoding Indonesia",
        "pageCount": 100,
        "readPage": 25,
        "reading": False
    }


@pytest.fixture
def make_payload(sample_book_payload):
    """Build a request body from the sample with some fields overridden."""
    def _make(**overrides):
        payload = dict(sample_book_payload)
        payload.update(overrides)
        return payload
    return _make

"""
Request handlers for the bookshelf endpoints.

Each public method of ``BookHandlers`` runs entirely under one lock and
turns its result into an ``Outcome``: an HTTP status code plus the
success/fail envelope sent back to the client.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import structlog
from fastapi import status
from pydantic import ValidationError

from bookshelf.models import BookQueryParams, Envelope, OutcomeStatus
from bookshelf.rules import (
    BookValidationError, WriteAction,
    build_book, build_patch, describe_errors, generate_book_id, parse_payload, utc_now
)
from bookshelf.store import BookStore

logger = structlog.get_logger(__name__)

MSG_CREATED = "Buku berhasil ditambahkan"
MSG_UPDATED = "Buku berhasil diperbarui"
MSG_DELETED = "Buku berhasil dihapus"
MSG_NOT_FOUND = "Buku tidak ditemukan"
MSG_UPDATE_NOT_FOUND = "Gagal memperbarui buku. Id tidak ditemukan"
MSG_DELETE_NOT_FOUND = "Buku gagal dihapus. Id tidak ditemukan"
MSG_INVALID_PAYLOAD = "Gagal memproses permintaan. Data buku tidak valid"


@dataclass
class Outcome:
    """Result of a handler call."""
    status_code: int
    envelope: Envelope

    @classmethod
    def success(cls, status_code: int = status.HTTP_200_OK,
                message: Optional[str] = None, data: Optional[dict] = None) -> "Outcome":
        return cls(status_code, Envelope(status=OutcomeStatus.SUCCESS, message=message, data=data))

    @classmethod
    def fail(cls, status_code: int, message: str, data: Optional[dict] = None) -> "Outcome":
        return cls(status_code, Envelope(status=OutcomeStatus.FAIL, message=message, data=data))


class BookHandlers:
    """Book operations over a single owned store."""

    def __init__(
        self,
        store: Optional[BookStore] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_book_id,
    ):
        self.store = store if store is not None else BookStore()
        self.clock = clock
        self.id_factory = id_factory
        self._lock = threading.Lock()

    def _parse(self, body: Optional[Dict[str, Any]], action: WriteAction, **context):
        """
        Parse a write body, returning ``(payload, None)`` or ``(None, failure)``.

        Broken write rules keep their operation-specific message; a body
        whose fields have the wrong type or range gets the generic one.
        """
        try:
            return parse_payload(body), None
        except BookValidationError as e:
            logger.warning("Book rejected", action=action.name.lower(), reason=e.reason.value, **context)
            return None, Outcome.fail(status.HTTP_400_BAD_REQUEST, e.message_for(action))
        except ValidationError as e:
            errors = describe_errors(e.errors(), prefix=("body",))
            logger.warning("Invalid book payload", action=action.name.lower(), errors=len(errors), **context)
            return None, Outcome.fail(status.HTTP_400_BAD_REQUEST, MSG_INVALID_PAYLOAD, data={"errors": errors})

    def create(self, body: Optional[Dict[str, Any]]) -> Outcome:
        with self._lock:
            payload, failure = self._parse(body, WriteAction.CREATE)
            if failure is not None:
                return failure

            book = build_book(payload, clock=self.clock, id_factory=self.id_factory)
            self.store.insert(book)
            logger.info("Book created", book_id=book.id, name=book.name)
            return Outcome.success(
                status.HTTP_201_CREATED,
                message=MSG_CREATED,
                data={"bookId": book.id},
            )

    def list_books(self, query: BookQueryParams) -> Outcome:
        """
        List books matching the query filters.

        Filters are ANDed together; each surviving book is projected to
        ``{id, name, publisher}``. An empty result is still a success.
        """
        with self._lock:
            books = [
                book.to_summary().model_dump()
                for book in self.store.all()
                if query.matches(book)
            ]
        logger.debug("Books listed", count=len(books), filters=query.model_dump(exclude_none=True))
        return Outcome.success(data={"books": books})

    def get(self, book_id: str) -> Outcome:
        with self._lock:
            book = self.store.find_by_id(book_id)
            if book is None:
                return Outcome.fail(status.HTTP_404_NOT_FOUND, MSG_NOT_FOUND)
            return Outcome.success(data={"book": book.model_dump(by_alias=True)})

    def update(self, book_id: str, body: Optional[Dict[str, Any]]) -> Outcome:
        """Replace every field except ``id``/``insertedAt``; the id lookup happens before any body check."""
        with self._lock:
            index = self.store.index_of_id(book_id)
            if index is None:
                return Outcome.fail(status.HTTP_404_NOT_FOUND, MSG_UPDATE_NOT_FOUND)

            payload, failure = self._parse(body, WriteAction.UPDATE, book_id=book_id)
            if failure is not None:
                return failure

            self.store.update_at(index, build_patch(payload, clock=self.clock))
            logger.info("Book updated", book_id=book_id)
            return Outcome.success(message=MSG_UPDATED)

    def delete(self, book_id: str) -> Outcome:
        with self._lock:
            index = self.store.index_of_id(book_id)
            if index is None:
                return Outcome.fail(status.HTTP_404_NOT_FOUND, MSG_DELETE_NOT_FOUND)

            self.store.remove_at(index)
            logger.info("Book deleted", book_id=book_id)
            return Outcome.success(message=MSG_DELETED)

    def count(self) -> int:
        with self._lock:
            return len(self.store)

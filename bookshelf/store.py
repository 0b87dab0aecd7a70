"""
In-memory storage for book records.

The store keeps books in insertion order and offers the handful of
positional operations the request handlers need. It does no locking of
its own; callers serialise access (see ``bookshelf.handlers``).
"""

from typing import Any, Dict, List, Optional

import structlog

from bookshelf.models import Book

logger = structlog.get_logger(__name__)

# Fields that survive an update untouched
IMMUTABLE_FIELDS = ("id", "inserted_at")


class BookStore:
    """Ordered in-memory collection of books."""

    def __init__(self):
        self._books: List[Book] = []

    def __len__(self) -> int:
        return len(self._books)

    def all(self) -> List[Book]:
        """Return a snapshot of every stored book, oldest first."""
        return list(self._books)

    def insert(self, book: Book) -> None:
        """Append a book. The caller is responsible for a fresh id."""
        self._books.append(book)
        logger.debug("Book inserted", book_id=book.id, total=len(self._books))

    def find_by_id(self, book_id: str) -> Optional[Book]:
        return next((b for b in self._books if b.id == book_id), None)

    def index_of_id(self, book_id: str) -> Optional[int]:
        for index, book in enumerate(self._books):
            if book.id == book_id:
                return index
        return None

    def update_at(self, index: int, patch: Dict[str, Any]) -> Book:
        """
        Replace the fields of the book at ``index``.

        Args:
            index: Position returned by ``index_of_id``
            patch: New values keyed by field name; ``id`` and
                ``inserted_at`` are ignored if present

        Returns:
            The updated book
        """
        changes = {k: v for k, v in patch.items() if k not in IMMUTABLE_FIELDS}
        updated = self._books[index].model_copy(update=changes)
        self._books[index] = updated
        return updated

    def remove_at(self, index: int) -> Book:
        """Remove and return the book at ``index``; later books shift down."""
        return self._books.pop(index)

    def clear(self) -> None:
        self._books.clear()

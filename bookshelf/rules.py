"""
Validation and transform rules for book writes.

Both create and update run ``parse_payload`` before touching the store.
The derived fields (id, timestamps, finished flag) are computed here so
the handlers only orchestrate.
"""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from bookshelf.models import Book, BookPayload


class WriteAction(str, Enum):
    """Write operation a validation message refers to."""
    CREATE = "menambahkan"
    UPDATE = "memperbarui"


class ValidationReason(str, Enum):
    """Why a book payload was rejected."""
    MISSING_NAME = "missing_name"
    READ_PAGE_EXCEEDS_PAGE_COUNT = "read_page_exceeds_page_count"


_REASON_MESSAGES = {
    ValidationReason.MISSING_NAME: "Mohon isi nama buku",
    ValidationReason.READ_PAGE_EXCEEDS_PAGE_COUNT: "readPage tidak boleh lebih besar dari pageCount",
}


class BookValidationError(Exception):
    """Raised when a book payload breaks one of the write rules."""

    def __init__(self, reason: ValidationReason):
        self.reason = reason
        super().__init__(reason.value)

    def message_for(self, action: WriteAction) -> str:
        """User-facing message, e.g. 'Gagal menambahkan buku. Mohon isi nama buku'."""
        return f"Gagal {action.value} buku. {_REASON_MESSAGES[self.reason]}"


def validate_payload(payload: BookPayload) -> None:
    """
    Check a create/update payload.

    The name check runs first and the first failure wins.

    Raises:
        BookValidationError: if the name is missing or readPage > pageCount
    """
    if not payload.name:
        raise BookValidationError(ValidationReason.MISSING_NAME)
    if (
        payload.read_page is not None
        and payload.page_count is not None
        and payload.read_page > payload.page_count
    ):
        raise BookValidationError(ValidationReason.READ_PAGE_EXCEEDS_PAGE_COUNT)


def parse_payload(body: Optional[Dict[str, Any]]) -> BookPayload:
    """
    Turn a raw request body into a validated payload.

    The name check runs on the raw body, before the payload shape is
    checked, so a missing name is reported whatever else the body holds.

    Raises:
        BookValidationError: if a write rule is broken
        pydantic.ValidationError: if a field has the wrong type or range
    """
    body = body or {}
    if not body.get("name"):
        raise BookValidationError(ValidationReason.MISSING_NAME)
    payload = BookPayload.model_validate(body)
    validate_payload(payload)
    return payload


def describe_errors(errors: Iterable[Dict[str, Any]], prefix: tuple = ()) -> List[Dict[str, Any]]:
    """Reduce pydantic error entries to JSON-safe ``{loc, msg, type}`` dicts."""
    return [
        {
            "loc": [str(part) for part in (*prefix, *err.get("loc", ()))],
            "msg": err.get("msg"),
            "type": err.get("type"),
        }
        for err in errors
    ]


def generate_book_id(length: int = 16) -> str:
    """Generate a random URL-safe book id of ``length`` characters."""
    return secrets.token_urlsafe(length)[:length]


def format_timestamp(moment: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_finished(payload: BookPayload) -> bool:
    return payload.read_page == payload.page_count


def payload_fields(payload: BookPayload) -> Dict[str, Any]:
    """Client-writable fields plus the recomputed ``finished`` flag."""
    fields = payload.model_dump(by_alias=False)
    fields["finished"] = is_finished(payload)
    return fields


def build_book(
    payload: BookPayload,
    clock: Callable[[], datetime] = utc_now,
    id_factory: Callable[[], str] = generate_book_id,
) -> Book:
    """Build a new record from a validated payload."""
    inserted_at = format_timestamp(clock())
    return Book(
        id=id_factory(),
        inserted_at=inserted_at,
        updated_at=inserted_at,
        **payload_fields(payload),
    )


def build_patch(payload: BookPayload, clock: Callable[[], datetime] = utc_now) -> Dict[str, Any]:
    """Build the replacement fields for an update from a validated payload."""
    patch = payload_fields(payload)
    patch["updated_at"] = format_timestamp(clock())
    return patch

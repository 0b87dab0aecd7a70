"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class OutcomeStatus(str, Enum):
    """Envelope status values."""
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


class BookPayload(BaseModel):
    """Request body for creating or updating a book.

    ``name`` is optional here so that a missing name is reported with the
    bookshelf's own message instead of a generic validation error.
    """
    name: Optional[str] = Field(None, description="Book title")
    year: Optional[int] = Field(None, description="Publication year")
    author: Optional[str] = Field(None, description="Book author")
    summary: Optional[str] = Field(None, description="Short summary")
    publisher: Optional[str] = Field(None, description="Publisher name")
    page_count: Optional[int] = Field(None, ge=0, alias="pageCount", description="Total number of pages")
    read_page: Optional[int] = Field(None, ge=0, alias="readPage", description="Last page read")
    reading: bool = Field(False, description="Whether the book is currently being read")

    @field_validator('reading', mode='before')
    @classmethod
    def null_reading_is_false(cls, v):
        return False if v is None else v

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "name": "Buku A",
                "year": 2010,
                "author": "John Doe",
                "summary": "Lorem ipsum dolor sit amet",
                "publisher": "Dicoding Indonesia",
                "pageCount": 100,
                "readPage": 25,
                "reading": False
            }
        }
    }


class Book(BaseModel):
    """A stored book record."""
    id: str = Field(..., description="Unique book identifier")
    name: str = Field(..., description="Book title")
    year: Optional[int] = Field(None, description="Publication year")
    author: Optional[str] = Field(None, description="Book author")
    summary: Optional[str] = Field(None, description="Short summary")
    publisher: Optional[str] = Field(None, description="Publisher name")
    page_count: Optional[int] = Field(None, alias="pageCount", description="Total number of pages")
    read_page: Optional[int] = Field(None, alias="readPage", description="Last page read")
    finished: bool = Field(..., description="Whether readPage has reached pageCount")
    reading: bool = Field(False, description="Whether the book is currently being read")
    inserted_at: str = Field(..., alias="insertedAt", description="Creation timestamp")
    updated_at: str = Field(..., alias="updatedAt", description="Last update timestamp")

    model_config = {"populate_by_name": True}

    def to_summary(self) -> "BookSummary":
        return BookSummary(id=self.id, name=self.name, publisher=self.publisher)


class BookSummary(BaseModel):
    """Projection of a book used by the list endpoint."""
    id: str
    name: str
    publisher: Optional[str] = None


class BookQueryParams(BaseModel):
    """Query parameters for book listing.

    ``reading`` and ``finished`` arrive as raw query strings: ``"1"`` means
    true and any other value means false. ``None`` disables the filter.
    """
    name: Optional[str] = Field(None, description="Case-insensitive substring of the book name")
    reading: Optional[bool] = Field(None, description="Filter by reading flag")
    finished: Optional[bool] = Field(None, description="Filter by finished flag")

    @field_validator('reading', 'finished', mode='before')
    @classmethod
    def parse_flag(cls, v):
        if v is None or isinstance(v, bool):
            return v
        return str(v) == "1"

    def matches(self, book: Book) -> bool:
        """Return True when the book passes every active filter."""
        if self.name is not None and self.name.lower() not in book.name.lower():
            return False
        if self.reading is not None and book.reading != self.reading:
            return False
        if self.finished is not None and book.finished != self.finished:
            return False
        return True


class Envelope(BaseModel):
    """Response envelope shared by every bookshelf endpoint."""
    status: OutcomeStatus = Field(..., description="success, fail or error")
    message: Optional[str] = Field(None, description="Human-readable message")
    data: Optional[Dict[str, Any]] = Field(None, description="Response payload")

    def to_content(self) -> Dict[str, Any]:
        """Serialize, leaving out ``message``/``data`` when they are unset."""
        content: Dict[str, Any] = {"status": self.status.value}
        if self.message is not None:
            content["message"] = self.message
        if self.data is not None:
            content["data"] = self.data
        return content


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    books: int = Field(..., description="Number of stored books")

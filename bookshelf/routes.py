"""
Route table for the bookshelf endpoints.

Routes are declared once in ``ROUTES`` and registered on an ``APIRouter``;
FastAPI does the matching and dispatch. Endpoints are plain ``def``
functions, so FastAPI runs them on its thread pool; ``BookHandlers``
serialises access to the store.
"""

from typing import Any, Callable, Dict, List, NamedTuple, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from bookshelf.handlers import BookHandlers, Outcome
from bookshelf.models import BookPayload, BookQueryParams, Envelope


class Route(NamedTuple):
    """
    One entry of the route table.

    ``status_code`` is the success status shown in the OpenAPI schema only;
    endpoints return a ``JSONResponse`` carrying the handler's own status.
    """
    method: str
    path: str
    endpoint: Callable
    status_code: int
    summary: str


def get_handlers(request: Request) -> BookHandlers:
    """Resolve the handlers owned by the running application."""
    return request.app.state.handlers


def _respond(outcome: Outcome) -> JSONResponse:
    return JSONResponse(status_code=outcome.status_code, content=outcome.envelope.to_content())


def book_body():
    """Request body taken as a plain JSON object; the handlers validate it."""
    return Body(
        None,
        description="Book fields: name, year, author, summary, publisher, pageCount, readPage, reading",
        examples=[BookPayload.model_config["json_schema_extra"]["example"]],
    )


def add_book(
    body: Optional[Dict[str, Any]] = book_body(),
    handlers: BookHandlers = Depends(get_handlers)
):
    """
    Add a book.

    - **name**: required
    - **readPage**: must not exceed **pageCount**
    """
    return _respond(handlers.create(body))


def list_books(
    name: Optional[str] = Query(None, description="Case-insensitive substring of the book name"),
    reading: Optional[str] = Query(None, description="1 for books being read, anything else for the rest"),
    finished: Optional[str] = Query(None, description="1 for finished books, anything else for the rest"),
    handlers: BookHandlers = Depends(get_handlers)
):
    """
    List books as ``{id, name, publisher}``.

    - **name**: substring filter, case-insensitive
    - **reading**: reading flag filter
    - **finished**: finished flag filter
    """
    query = BookQueryParams(name=name, reading=reading, finished=finished)
    return _respond(handlers.list_books(query))


def get_book(
    book_id: str,
    handlers: BookHandlers = Depends(get_handlers)
):
    """Get a single book by ID."""
    return _respond(handlers.get(book_id))


def update_book(
    book_id: str,
    body: Optional[Dict[str, Any]] = book_body(),
    handlers: BookHandlers = Depends(get_handlers)
):
    """Replace a book's fields. ``id`` and ``insertedAt`` are kept."""
    return _respond(handlers.update(book_id, body))


def delete_book(
    book_id: str,
    handlers: BookHandlers = Depends(get_handlers)
):
    """Delete a book by ID."""
    return _respond(handlers.delete(book_id))


ROUTES: List[Route] = [
    Route("POST", "/books", add_book, status.HTTP_201_CREATED, "Add a book"),
    Route("GET", "/books", list_books, status.HTTP_200_OK, "List books"),
    Route("GET", "/books/{book_id}", get_book, status.HTTP_200_OK, "Get a book"),
    Route("PUT", "/books/{book_id}", update_book, status.HTTP_200_OK, "Update a book"),
    Route("DELETE", "/books/{book_id}", delete_book, status.HTTP_200_OK, "Delete a book"),
]


def build_router(routes: List[Route] = ROUTES) -> APIRouter:
    """Register every route of the table on a fresh router."""
    router = APIRouter(tags=["Books"])
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            response_model=Envelope,
            summary=route.summary,
        )
    return router

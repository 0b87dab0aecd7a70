"""
FastAPI RESTful API for the Bookshelf service.

This package provides a small REST API for:
- Creating, updating and deleting book records
- Listing books with name/reading/finished filters
- Looking up a single book by its identifier

Records live in an in-memory store owned by the application instance.
"""

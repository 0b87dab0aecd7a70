"""Shared helpers for the bookshelf service."""

"""SQLAlchemy models."""
from bookshelf.models.book import Book

__all__ = ["Book"]

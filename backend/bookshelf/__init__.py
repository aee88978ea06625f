"""Bookshelf: a JSON-over-HTTP record manager for books."""

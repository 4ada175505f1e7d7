"""Configuration utilities for STREAMSTORE.

This module centralizes small helpers and constants related to configuration.
Settings are read from the environment:

| Variable                 | Meaning                               | Default  |
|--------------------------|---------------------------------------|----------|
| ``STREAMSTORE_DB_URL``   | SQLAlchemy database URL               | required |
| ``STREAMSTORE_PAGE_SIZE``| rows fetched per cursor page          | 1000     |
"""

import os

DB_URL_ENV = "STREAMSTORE_DB_URL"  # pragma: no mutate
PAGE_SIZE_ENV = "STREAMSTORE_PAGE_SIZE"  # pragma: no mutate

DEFAULT_PAGE_SIZE = 1000


class DatabaseUrlNotSetError(Exception):
    """Raised when the STREAMSTORE_DB_URL environment variable is not set."""


class InvalidPageSizeError(ValueError):
    """Raised when STREAMSTORE_PAGE_SIZE is not a positive integer."""


def get_db_url() -> str:
    """Get the database URL from the environment.

    Returns:
        The value of the `STREAMSTORE_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `STREAMSTORE_DB_URL` is not set.
    """
    if not (url := os.environ.get(DB_URL_ENV)):
        raise DatabaseUrlNotSetError
    return url


def get_page_size() -> int:
    """Get the cursor page size from the environment.

    Returns:
        The value of `STREAMSTORE_PAGE_SIZE`, or `DEFAULT_PAGE_SIZE` if unset.

    Raises:
        InvalidPageSizeError: If the value is not a positive integer.
    """
    if not (raw := os.environ.get(PAGE_SIZE_ENV, "").strip()):
        return DEFAULT_PAGE_SIZE
    try:
        size = int(raw)
    except ValueError as e:
        raise InvalidPageSizeError(f"{PAGE_SIZE_ENV} must be an integer, got {raw!r}") from e
    if size < 1:
        raise InvalidPageSizeError(f"{PAGE_SIZE_ENV} must be >= 1, got {size}")
    return size

"""Error kinds shared by the storage layer and the HTTP boundary.

The API maps them to status codes: ``ValidationError`` → 400,
``NotFoundError`` → 404, ``StorageError`` → 500.
"""

from __future__ import annotations

import csv
import functools
import logging
import sqlite3
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class CatalogError(Exception):
    """Base class for every error raised by the catalog package."""


class NotFoundError(CatalogError, LookupError):
    """A content, link or other record does not exist."""


class ValidationError(CatalogError, ValueError):
    """Caller input is malformed (bad token, missing required field)."""


class StorageError(CatalogError):
    """The underlying store failed (connection, constraint, file I/O)."""


def storage_errors(func: F) -> F:
    """Re-raise low-level backend failures as :class:`StorageError`.

    Catalog errors pass through untouched so ``NotFoundError`` raised inside
    a store method still reaches the caller as-is.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except CatalogError:
            raise
        except (sqlite3.Error, OSError, csv.Error) as exc:
            logger.exception("Storage failure in %s", func.__qualname__)
            raise StorageError(str(exc)) from exc

    return wrapper  # type: ignore[return-value]

"""Shared translation of store-level access errors for the repositories."""

from collections.abc import Iterator
from contextlib import contextmanager

from controlplus.domain.exceptions import DataAccessDeniedException
from controlplus.infrastructure.firebase._rest_client import FirestorePermissionDeniedError


@contextmanager
def store_access(path: str) -> Iterator[None]:
    """Re-raise a security-rules rejection as DataAccessDeniedException(path)."""
    try:
        yield
    except FirestorePermissionDeniedError as e:
        raise DataAccessDeniedException(path) from e

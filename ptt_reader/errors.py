from __future__ import annotations

from typing import Optional


class PttReaderError(Exception):
    """Base class for errors raised by the reader."""


class FetchError(PttReaderError):
    """Network failure or non-2xx response for a single GET."""

    def __init__(self, url: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        self.url = url
        self.status = status
        self.cause = cause
        detail = f"status={status}" if status is not None else f"err={cause}"
        super().__init__(f"GET failed: url={url} {detail}")


class ParseInconsistency(PttReaderError):
    """
    A field scan returned a different number of nodes than the entry-container
    scan, so values can no longer be aligned by position.
    """

    def __init__(self, field: str, expected: int, actual: int):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"Field '{field}' matched {actual} nodes, expected {expected}")

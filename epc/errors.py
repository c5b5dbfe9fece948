"""Error taxonomy for the reader core.

I/O failures (unreadable documents, terminal control calls, the input
device) are ``EpcIOError``; anything else surfacing from the core is a plain
``EpcError``. The CLI reports both and exits non-zero.
"""

from __future__ import annotations

import termios


class EpcError(Exception):
    """Base class for failures that terminate a reading session."""


class EpcIOError(EpcError):
    """I/O failure while reading a document or driving the terminal."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


def classify_error(exc: BaseException) -> EpcError:
    """Map an arbitrary exception onto the reader error taxonomy."""
    if isinstance(exc, EpcError):
        return exc
    if isinstance(exc, (OSError, termios.error)):
        detail = str(exc) or type(exc).__name__
        return EpcIOError(f"i/o error: {detail}", cause=exc)
    return EpcError(f"unexpected error: {exc!r}")


__all__ = ["EpcError", "EpcIOError", "classify_error"]

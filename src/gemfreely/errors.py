"""Error taxonomy for gemfreely.

Every failure the sync engine distinguishes maps to an ``ErrorKind``.
Fatal kinds (feed, dialect, auth, index construction) abort a run before
anything is published; per-entry kinds are recorded on the entry's
outcome and the run carries on.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure categories surfaced in sync reports."""

    MALFORMED_FEED = "malformed_feed"
    UNSUPPORTED_DIALECT = "unsupported_dialect"
    TRANSPORT = "transport"
    AUTH = "auth"
    INTERNAL = "internal"


class GemfreelyError(Exception):
    """Base class for all gemfreely errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class MalformedFeed(GemfreelyError):
    """The feed document cannot be parsed as the selected dialect."""

    kind = ErrorKind.MALFORMED_FEED


class UnsupportedDialect(GemfreelyError):
    """Dialect detection was inconclusive and no dialect was declared."""

    kind = ErrorKind.UNSUPPORTED_DIALECT


class TransportError(GemfreelyError):
    """A network call failed, timed out, or returned an error status.

    Attributes:
        status: HTTP or Gemini status code, when the server answered.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AuthError(GemfreelyError):
    """Credentials were rejected or the access token is invalid/expired."""

    kind = ErrorKind.AUTH


def error_kind(exc: BaseException) -> ErrorKind:
    """Return the ``ErrorKind`` for *exc*, ``INTERNAL`` for foreign errors."""
    if isinstance(exc, GemfreelyError):
        return exc.kind
    return ErrorKind.INTERNAL

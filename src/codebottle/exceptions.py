"""Exception hierarchy for codebottle.

All exceptions inherit from :class:`CodeBottleError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`codebottle.exit_codes`
and a ``recoverable`` flag telling callers whether retrying can help.
Futures returned by the client complete exceptionally with one of these;
the CLI entry point catches ``CodeBottleError`` and exits with its code.

Subclass hierarchy::

    CodeBottleError (exit 1)
    +-- InvalidUsageError           (exit 2)
    +-- RevisionGapError            (exit 2, also IndexError)
    +-- UnexpectedStatusCodeError   (exit 5)
    +-- ProtocolError               (exit 6)
    +-- RequestTimeoutError         (exit 7)
    +-- ConfigError                 (exit 1)
"""

from __future__ import annotations

from codebottle.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROTOCOL_ERROR,
    EXIT_TIMEOUT,
    EXIT_UNEXPECTED_STATUS,
)


class CodeBottleError(Exception):
    """Base exception for all codebottle errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    recoverable: bool = False

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CodeBottleError):
    """Raised for caller mistakes detected before any network I/O.

    Covers a wrong number of endpoint path parameters, a request for the
    unset sentinel id, a negative revision index and an expected status code
    that is not a valid HTTP status.
    """

    exit_code = EXIT_INVALID_USAGE


class RevisionGapError(CodeBottleError, IndexError):
    """Raised when a fetched revision would leave a hole in a revision store.

    Revision stores only support update-in-place or append at the current
    length; this error depends on fetched state and therefore surfaces
    through the request's future rather than synchronously.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, snippet_id: str, index: int, length: int):
        super().__init__(
            f"Revision {index} of snippet '{snippet_id}' would create a gap "
            f"(store holds {length} contiguous revisions)"
        )
        self.snippet_id = snippet_id
        self.index = index
        self.length = length


class UnexpectedStatusCodeError(CodeBottleError):
    """Raised when the API answers with a status other than the expected one.

    Carries the numeric ``status_code`` and the server-provided ``error``
    message so callers can decide to retry or propagate.
    """

    exit_code = EXIT_UNEXPECTED_STATUS
    recoverable = True

    def __init__(self, status_code: int, message: str):
        super().__init__(
            f"Unexpected status code {status_code} with detailed message: {message}"
        )
        self.status_code = status_code
        self.message = message


class ProtocolError(CodeBottleError):
    """Raised on transport failures and on bodies that cannot be decoded.

    These indicate a broken environment or a protocol mismatch rather than
    an expected condition, so they are never retried.
    """

    exit_code = EXIT_PROTOCOL_ERROR


class RequestTimeoutError(CodeBottleError):
    """Raised when a caller stops waiting on requests that have not finished.

    Queued work is cancelled before this is raised, so nothing keeps running
    against the API after the command gives up.
    """

    exit_code = EXIT_TIMEOUT
    recoverable = True


class ConfigError(CodeBottleError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE

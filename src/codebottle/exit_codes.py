"""Numeric process exit codes used by the ``codebottle`` command line.

Each constant maps to an error category and is referenced by the
corresponding :class:`~codebottle.exceptions.CodeBottleError` subclass.
Shell wrappers can inspect the exit code to tell a rejected request apart
from a broken network without parsing stderr.

Example::

    $ codebottle snippet does-not-exist
    $ echo $?
    5   # EXIT_UNEXPECTED_STATUS -- the API answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with arguments the API surface cannot accept."""

EXIT_UNEXPECTED_STATUS = 5
"""The API answered with a status code other than the expected one."""

EXIT_PROTOCOL_ERROR = 6
"""The transport failed or the API returned a body that is not valid JSON."""

EXIT_TIMEOUT = 7
"""The command gave up waiting for the API within its ``--timeout``."""

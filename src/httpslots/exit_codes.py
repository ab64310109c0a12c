"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~httpslots.exceptions.HttpSlotsError` subclass.
Shell wrappers can inspect the exit code of ``httpslots request`` to tell
an HTTP-level rejection apart from a network failure without parsing stderr.

Example::

    $ httpslots request get https://api.example.com/missing
    $ echo $?
    5   # EXIT_HTTP_ERROR -- the server answered with a rejected status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_HTTP_ERROR = 5
"""The remote server answered, but its status failed validation."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CANCELLED = 130
"""The request was cancelled (Ctrl-C or an explicit cancellation signal)."""

"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~spectype.exceptions.SpectypeError` subclass.
CI scripts can inspect the exit code to tell a bad input document apart from
a generation failure without parsing stderr.

Example::

    $ spectype generate openapi.yaml --out ./client
    $ echo $?
    8   # EXIT_GENERATION_FAILED -- at least one artifact could not be built
"""

EXIT_SUCCESS = 0
"""Every artifact was generated."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded or parsed."""

EXIT_GENERATION_FAILED = 8
"""At least one artifact failed entirely."""

"""Exception hierarchy for spectype.

All exceptions inherit from :class:`SpectypeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spectype.exit_codes`.
The top-level handler in :func:`spectype.app.main` catches ``SpectypeError``
and exits with the appropriate code.

Errors raised inside the generation core also carry a ``location`` (a
document pointer such as ``#/components/schemas/Pet`` or ``GET /pets``) so
that diagnostics can point at the offending declaration.

Subclass hierarchy::

    SpectypeError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- SpecParseError               (exit 7)
    +-- SchemaResolutionError        (exit 8)
    |   +-- UnresolvedReferenceError
    |   +-- CircularReferenceError
    +-- DuplicateMethodNameError     (exit 8)
    +-- MalformedOperationError      (exit 8)
    +-- GenerationError              (exit 8)
"""

from __future__ import annotations

from typing import Optional

from spectype.exit_codes import (
    EXIT_GENERATION_FAILED,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpectypeError(Exception):
    """Base exception for all spectype errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
        location: Optional document location the error refers to.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        location: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.location = location
        if exit_code is not None:
            self.exit_code = exit_code

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} (at {self.location})"
        return self.message


class InvalidUsageError(SpectypeError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpectypeError):
    """Raised for configuration problems (unreadable file, invalid values)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpectypeError):
    """Raised when the OpenAPI document cannot be loaded or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SchemaResolutionError(SpectypeError):
    """Base class for failures while following schema references.

    Args:
        message: Human-readable error description.
        schema_name: The reference target that could not be resolved.
        location: Optional document location of the failing reference.
    """

    exit_code = EXIT_GENERATION_FAILED

    def __init__(
        self,
        message: str,
        schema_name: str,
        location: Optional[str] = None,
    ):
        super().__init__(message, location=location)
        self.schema_name = schema_name


class UnresolvedReferenceError(SchemaResolutionError):
    """Raised when a reference names a schema absent from the schema library."""


class CircularReferenceError(SchemaResolutionError):
    """Raised when a reference chain loops without reaching a concrete schema.

    Self-referencing *object* graphs are fine; this only covers aliases that
    point at each other (``A -> B -> A``) with nothing concrete in between.
    """

    def __init__(self, chain: list[str], location: Optional[str] = None):
        super().__init__(
            "Circular reference chain: " + " -> ".join(chain),
            schema_name=chain[0],
            location=location,
        )
        self.chain = chain


class DuplicateMethodNameError(SpectypeError):
    """Raised when two operations collapse to the same client method name."""

    exit_code = EXIT_GENERATION_FAILED

    def __init__(
        self,
        method_name: str,
        first: str,
        second: str,
        tag: Optional[str] = None,
    ):
        scope = f" in tag '{tag}'" if tag else ""
        super().__init__(
            f"Method name '{method_name}'{scope} is produced by both {first} and {second}",
            location=second,
        )
        self.method_name = method_name
        self.tag = tag


class MalformedOperationError(SpectypeError):
    """Raised when an operation has no usable response entry."""

    exit_code = EXIT_GENERATION_FAILED


class GenerationError(SpectypeError):
    """Raised when at least one artifact could not be generated."""

    exit_code = EXIT_GENERATION_FAILED

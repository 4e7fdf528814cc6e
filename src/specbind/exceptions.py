"""Exception hierarchy for specbind.

All exceptions inherit from :class:`SpecbindError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specbind.exit_codes`.
Compile-time failures (:class:`UnsupportedSchemaConstruct`,
:class:`AmbiguousPayload`) are raised before any network activity; runtime
failures (:class:`TransportFailure`, :class:`DecodeFailure`) are raised from
an invocation and never retried.

Subclass hierarchy::

    SpecbindError (exit 1)
    +-- ArgumentShapeError          (exit 2)
    +-- TransportFailure            (exit 6)
    +-- SpecParseError              (exit 7)
    +-- UnsupportedSchemaConstruct  (exit 8)
    +-- AmbiguousPayload            (exit 9)
    +-- DecodeFailure               (exit 11)
    +-- ConfigError                 (exit 1)
"""

from __future__ import annotations

from specbind.exit_codes import (
    EXIT_AMBIGUOUS_PAYLOAD,
    EXIT_DECODE_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TRANSPORT_FAILURE,
    EXIT_UNSUPPORTED_SCHEMA,
)


class SpecbindError(Exception):
    """Base exception for all specbind errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ArgumentShapeError(SpecbindError):
    """Raised when call arguments cannot be mapped one-to-one onto the declared parameters."""

    exit_code = EXIT_INVALID_USAGE


class TransportFailure(SpecbindError):
    """Raised when the HTTP round trip fails.

    ``status_code`` is set when the server answered with a non-2xx status
    and left as ``None`` for network-level failures (DNS, refused
    connection, timeout).
    """

    exit_code = EXIT_TRANSPORT_FAILURE

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SpecParseError(SpecbindError):
    """Raised when the API document cannot be loaded, parsed, or ``$ref``-resolved."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedSchemaConstruct(SpecbindError):
    """Raised when a schema declares discriminated polymorphism."""

    exit_code = EXIT_UNSUPPORTED_SCHEMA


class AmbiguousPayload(SpecbindError):
    """Raised when an operation declares more than one request payload."""

    exit_code = EXIT_AMBIGUOUS_PAYLOAD


class DecodeFailure(SpecbindError):
    """Raised when a response body cannot be decoded into the declared return type."""

    exit_code = EXIT_DECODE_FAILURE


class ConfigError(SpecbindError):
    """Raised for configuration problems (unreadable file, invalid values)."""

    exit_code = EXIT_GENERIC_FAILURE

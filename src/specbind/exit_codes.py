"""Numeric exit codes attached to every :class:`~specbind.exceptions.SpecbindError`.

specbind is a library, but scripts that wrap it (code generators, CI checks
that compile a vendor's spec) tend to ``sys.exit(exc.exit_code)``.  Keeping a
stable number per failure class lets those wrappers tell a broken document
apart from an unreachable server without parsing messages.

Example::

    try:
        binding = ApiBinding.from_source("openapi.yaml")
    except SpecbindError as exc:
        sys.exit(exc.exit_code)
"""

EXIT_SUCCESS = 0
"""Everything compiled and every request succeeded."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration problems)."""

EXIT_INVALID_USAGE = 2
"""Arguments could not be bound to the declared operation parameters."""

EXIT_TRANSPORT_FAILURE = 6
"""The HTTP round trip failed (network error, timeout, or non-2xx status)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API document could not be loaded, parsed, or resolved."""

EXIT_UNSUPPORTED_SCHEMA = 8
"""A schema uses a construct the type mapper cannot represent."""

EXIT_AMBIGUOUS_PAYLOAD = 9
"""An operation declares more than one request payload."""

EXIT_DECODE_FAILURE = 11
"""A response body did not match the operation's declared return type."""

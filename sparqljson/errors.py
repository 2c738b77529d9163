"""
sparqljson.errors
=================

Exception taxonomy for the decoders.

Every failure raised by :mod:`sparqljson` is a :class:`SparqlJsonError`
and is terminal for the call (batch) or the stream (streaming): nothing
is retried and no partial result is returned.
"""

from typing import Optional


class SparqlJsonError(Exception):
    """Base class for all decoding failures."""


class InvalidTermError(SparqlJsonError):
    """Raised when a term descriptor (or a binding row) is malformed."""


class MissingBooleanResultError(SparqlJsonError):
    """Raised when an ASK response has no boolean ``boolean`` field."""


class MalformedVariableListError(SparqlJsonError):
    """Raised when ``head.vars`` is not an array of strings."""


class UnsupportedVersionError(SparqlJsonError):
    """Raised when a declared or negotiated results version is not accepted."""

    def __init__(self, version: object, message: Optional[str] = None):
        self.version = version
        super().__init__(
            message
            or f"Unsupported SPARQL results version: {version!r}"
        )


class MissingResultsSectionError(SparqlJsonError):
    """Raised when a results stream ends without a ``results.bindings`` container."""


class SourceError(SparqlJsonError):
    """Wraps a failure raised by the tokenizer or the underlying transport."""

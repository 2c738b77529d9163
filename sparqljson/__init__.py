"""
Public API for the sparqljson package.

Most users will interact with:

* :class:`SparqlJsonParser` – batch and streaming decoding of SPARQL
  1.1/1.2 Query Results JSON, configured once via
  :class:`ParserSettings`.
* The term models (:class:`NamedNode`, :class:`Literal`, …) built by
  :class:`DefaultDataFactory`, or :class:`RdflibDataFactory` when rdflib
  terms are preferred.
* :class:`SparqlEndpoint` to stream results straight from an HTTP
  endpoint.
"""

from .errors import (
    SparqlJsonError,
    InvalidTermError,
    MissingBooleanResultError,
    MalformedVariableListError,
    UnsupportedVersionError,
    MissingResultsSectionError,
    SourceError,
)
from .settings import (
    DEFAULT_SUPPORTED_VERSIONS,
    ParserSettings,
)
from .terms import (
    TermType,
    Direction,
    NamedNode,
    BlankNode,
    Literal,
    Variable,
    QuotedTriple,
    Term,
)
from .data_factory import (
    DataFactory,
    DefaultDataFactory,
    RdflibDataFactory,
)
from .decode import (
    decode_term,
    decode_bindings,
    decode_variables,
    decode_boolean,
    is_version_supported,
    check_version,
)
from .stream import (
    ResultsEventKind,
    ResultsEvent,
    BindingsEvent,
    VariablesEvent,
    LinkEvent,
    VersionEvent,
    MetadataEvent,
    ResultsStream,
    ResultsStreamDecoder,
    BooleanStreamDecoder,
)
from .parser import SparqlJsonParser
from .endpoint import SparqlEndpoint, media_type_version
from .version import __version__ as __version__

__all__ = [
    # errors
    "SparqlJsonError",
    "InvalidTermError",
    "MissingBooleanResultError",
    "MalformedVariableListError",
    "UnsupportedVersionError",
    "MissingResultsSectionError",
    "SourceError",
    # settings
    "DEFAULT_SUPPORTED_VERSIONS",
    "ParserSettings",
    # terms
    "TermType",
    "Direction",
    "NamedNode",
    "BlankNode",
    "Literal",
    "Variable",
    "QuotedTriple",
    "Term",
    # data_factory
    "DataFactory",
    "DefaultDataFactory",
    "RdflibDataFactory",
    # decode
    "decode_term",
    "decode_bindings",
    "decode_variables",
    "decode_boolean",
    "is_version_supported",
    "check_version",
    # stream
    "ResultsEventKind",
    "ResultsEvent",
    "BindingsEvent",
    "VariablesEvent",
    "LinkEvent",
    "VersionEvent",
    "MetadataEvent",
    "ResultsStream",
    "ResultsStreamDecoder",
    "BooleanStreamDecoder",
    # parser
    "SparqlJsonParser",
    # endpoint
    "SparqlEndpoint",
    "media_type_version",
    # version
    "__version__",
]

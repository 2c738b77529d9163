"""
sparqljson.stream
=================

Incremental decoders for SPARQL JSON results that must not be buffered
in full.

* :func:`parse_results_stream` / :class:`ResultsStream` – SELECT results
  as a lazy sequence of rows and header signals.
* :func:`parse_boolean_stream` – ASK results.

Both run on :func:`iter_json_events`, an :mod:`ijson` push-parser adapter
that accepts bytes, text, file-like objects and chunk iterables. The
state machines (:class:`ResultsStreamDecoder`,
:class:`BooleanStreamDecoder`) can also be fed events directly.
"""

from .events import (
    ResultsEventKind,
    ResultsEvent,
    BindingsEvent,
    VariablesEvent,
    LinkEvent,
    VersionEvent,
    MetadataEvent,
)
from .tokenizer import iter_json_events, iter_chunks
from .results import (
    ResultsStreamState,
    ResultsStreamDecoder,
    ResultsStream,
    parse_results_stream,
)
from .boolean import BooleanStreamDecoder, parse_boolean_stream

__all__ = [
    # events
    "ResultsEventKind",
    "ResultsEvent",
    "BindingsEvent",
    "VariablesEvent",
    "LinkEvent",
    "VersionEvent",
    "MetadataEvent",
    # tokenizer
    "iter_json_events",
    "iter_chunks",
    # results
    "ResultsStreamState",
    "ResultsStreamDecoder",
    "ResultsStream",
    "parse_results_stream",
    # boolean
    "BooleanStreamDecoder",
    "parse_boolean_stream",
]

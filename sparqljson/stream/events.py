"""
sparqljson.stream.events
========================

The ordered event sequence produced by a results stream.

Rows and header signals travel over one channel, so callers observe them
in a single well-defined order. The end of the sequence is the end of the
generator. A failure is the :class:`sparqljson.errors.SparqlJsonError`
raised from it.
"""

import enum
from typing import Any, Dict, List, Literal as TypingLiteral, Union

from pydantic import BaseModel, ConfigDict


class ResultsEventKind(enum.StrEnum):
    BINDINGS = "bindings"
    VARIABLES = "variables"
    LINK = "link"
    VERSION = "version"
    METADATA = "metadata"


class _ResultsEvent(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class BindingsEvent(_ResultsEvent):
    """One decoded result row."""

    kind: TypingLiteral[ResultsEventKind.BINDINGS] = ResultsEventKind.BINDINGS
    bindings: Dict[str, Any]


class VariablesEvent(_ResultsEvent):
    """The projected variables; emitted exactly once per stream."""

    kind: TypingLiteral[ResultsEventKind.VARIABLES] = ResultsEventKind.VARIABLES
    variables: List[Any]


class LinkEvent(_ResultsEvent):
    kind: TypingLiteral[ResultsEventKind.LINK] = ResultsEventKind.LINK
    link: Any


class VersionEvent(_ResultsEvent):
    kind: TypingLiteral[ResultsEventKind.VERSION] = ResultsEventKind.VERSION
    version: str


class MetadataEvent(_ResultsEvent):
    kind: TypingLiteral[ResultsEventKind.METADATA] = ResultsEventKind.METADATA
    metadata: Any


ResultsEvent = Union[
    BindingsEvent, VariablesEvent, LinkEvent, VersionEvent, MetadataEvent
]

"""
sparqljson.stream.results
=========================

Incremental decoding of SPARQL JSON ``SELECT`` results.

Design overview
---------------

:class:`ResultsStreamDecoder` is a small, explicit state object. It is
fed one ijson ``(prefix, event, value)`` tuple at a time and returns the
:mod:`sparqljson.stream.events` that tuple completes. It watches:

* ``head.vars`` – decoded to variable terms, signalled exactly once;
* ``head.link`` – passed through raw, zero or more times;
* ``head.version`` – checked against the version gate as soon as seen;
* ``results.bindings`` – the container marks the results section as
  seen; every array element is decoded into one row;
* top-level ``metadata`` – passed through raw, wherever it appears.

Only the subtree currently being captured (one row, the variable list,
…) is held in memory, built with :class:`ijson.ObjectBuilder`. Header and
results sections may arrive in any order.

:func:`parse_results_stream` drives a decoder from a byte/text source
through a lazy generator. :class:`ResultsStream` wraps that generator
for callers who want plain rows, with the header signals recorded on
the side.
"""

import enum
from collections import defaultdict
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import ijson

from sparqljson.data_factory import DataFactory
from sparqljson.decode import check_version, decode_bindings, decode_variables
from sparqljson.errors import (
    MissingResultsSectionError,
    SparqlJsonError,
    UnsupportedVersionError,
)
from sparqljson.settings import DEFAULT_BUF_SIZE, ParserSettings
from sparqljson.stream.events import (
    BindingsEvent,
    LinkEvent,
    MetadataEvent,
    ResultsEvent,
    ResultsEventKind,
    VariablesEvent,
    VersionEvent,
)
from sparqljson.stream.tokenizer import JsonSource, iter_json_events

_CONTAINER_START = frozenset({"start_map", "start_array"})
_CONTAINER_END = frozenset({"end_map", "end_array"})

# (prefix, depth) → capture target. Depth is the nesting level *before*
# the value's first event: the root object is depth 1, ``head`` is 2.
_HEADER_TARGETS: Dict[Tuple[str, int], str] = {
    ("head.vars", 2): "vars",
    ("head.link", 2): "link",
    ("head.version", 2): "version",
    ("metadata", 1): "metadata",
}
_BINDINGS_CONTAINER = ("results.bindings", 2)
_BINDINGS_ROW = ("results.bindings.item", 3)


class ResultsStreamState(enum.StrEnum):
    AWAITING_HEADER_OR_RESULTS = "AWAITING_HEADER_OR_RESULTS"
    STREAMING_ROWS = "STREAMING_ROWS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class _Capture:
    """A JSON subtree being rebuilt from events."""

    __slots__ = ("target", "depth", "builder")

    def __init__(self, target: str, depth: int):
        self.target = target
        self.depth = depth
        self.builder = ijson.ObjectBuilder()


class ResultsStreamDecoder:
    """
    Push-driven state machine for one results document.

    Parameters
    ----------
    settings:
        Decoder configuration.
    data_factory:
        Factory for the terms placed in rows and the variable list.
    version:
        Optional out-of-band version (e.g. the ``version`` media-type
        parameter). It is checked here, before any event is consumed.

    Raises
    ------
    UnsupportedVersionError
        If ``version`` is given and rejected by the version gate.
    """

    def __init__(
        self,
        settings: ParserSettings,
        data_factory: DataFactory,
        version: Optional[str] = None,
    ):
        self.settings = settings
        self.data_factory = data_factory
        self.state = ResultsStreamState.AWAITING_HEADER_OR_RESULTS
        self.variables_seen = False
        self.results_seen = False
        self._depth = 0
        self._in_bindings_array = False
        self._capture: Optional[_Capture] = None
        if version is not None:
            self._check_version(version)

    @property
    def terminated(self) -> bool:
        return self.state in (ResultsStreamState.COMPLETED, ResultsStreamState.FAILED)

    def abort(self) -> None:
        """Mark the stream as failed (e.g. after a source error)."""
        self.state = ResultsStreamState.FAILED

    def feed(self, prefix: str, event: str, value: Any) -> List[ResultsEvent]:
        """Consume one tokenizer event and return the events it completes."""
        self._ensure_open()
        try:
            return self._feed(prefix, event, value)
        except SparqlJsonError:
            self.abort()
            raise

    def finish(self) -> List[ResultsEvent]:
        """
        Signal a clean end of input.

        Raises
        ------
        MissingResultsSectionError
            If no ``results.bindings`` container was observed and the
            error is not suppressed by the settings.
        """
        self._ensure_open()
        if (
            not self.results_seen
            and not self.settings.suppress_missing_stream_results_error
        ):
            self.abort()
            raise MissingResultsSectionError(
                "No valid SPARQL query results were found."
            )
        out: List[ResultsEvent] = []
        if not self.variables_seen:
            self.variables_seen = True
            out.append(VariablesEvent(variables=[]))
        self.state = ResultsStreamState.COMPLETED
        return out

    # ──────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self.terminated:
            raise RuntimeError(f"Results stream decoder is already {self.state}")

    def _check_version(self, version: Any) -> None:
        try:
            check_version(
                version,
                self.settings.supported_versions,
                self.settings.parse_unsupported_versions,
            )
        except UnsupportedVersionError:
            self.abort()
            raise

    def _feed(self, prefix: str, event: str, value: Any) -> List[ResultsEvent]:
        capture = self._capture
        if capture is not None:
            capture.builder.event(event, value)
            if event in _CONTAINER_START:
                self._depth += 1
            elif event in _CONTAINER_END:
                self._depth -= 1
            if self._depth == capture.depth:
                self._capture = None
                return self._complete(capture.target, capture.builder.value)
            return []

        if event == "map_key":
            return []
        if event in _CONTAINER_END:
            self._depth -= 1
            if self._in_bindings_array and (prefix, self._depth) == _BINDINGS_CONTAINER:
                self._in_bindings_array = False
            return []

        key = (prefix, self._depth)
        target = _HEADER_TARGETS.get(key)
        if target is None and self._in_bindings_array and key == _BINDINGS_ROW:
            target = "row"

        if target is None:
            if event in _CONTAINER_START:
                if key == _BINDINGS_CONTAINER:
                    self._open_results_section(event)
                self._depth += 1
            return []

        capture = _Capture(target, self._depth)
        capture.builder.event(event, value)
        if event in _CONTAINER_START:
            self._depth += 1
            self._capture = capture
            return []
        return self._complete(target, capture.builder.value)

    def _open_results_section(self, event: str) -> None:
        # An empty object in place of the array is tolerated (a common
        # PHP serialisation quirk); it counts as a results section.
        self.results_seen = True
        self._in_bindings_array = event == "start_array"
        self.state = ResultsStreamState.STREAMING_ROWS

    def _complete(self, target: str, value: Any) -> List[ResultsEvent]:
        if target == "row":
            bindings = decode_bindings(
                value,
                self.data_factory,
                prefix_variables=self.settings.prefix_variable_question_mark,
                max_depth=self.settings.max_triple_depth,
            )
            return [BindingsEvent(bindings=bindings)]
        if target == "vars":
            if self.variables_seen:
                return []
            variables = decode_variables(value, self.data_factory)
            self.variables_seen = True
            return [VariablesEvent(variables=variables)]
        if target == "version":
            self._check_version(value)
            return [VersionEvent(version=value)]
        if target == "link":
            return [LinkEvent(link=value)]
        return [MetadataEvent(metadata=value)]


# ──────────────────────────────────────────────────────────────────────────
# Drivers
# ──────────────────────────────────────────────────────────────────────────


def _drive(
    decoder: ResultsStreamDecoder, source: JsonSource, buf_size: int
) -> Iterator[ResultsEvent]:
    json_events = iter_json_events(source, buf_size)
    try:
        for prefix, event, value in json_events:
            yield from decoder.feed(prefix, event, value)
        yield from decoder.finish()
    except SparqlJsonError:
        if not decoder.terminated:
            decoder.abort()
        raise
    finally:
        json_events.close()


def parse_results_stream(
    source: JsonSource,
    settings: ParserSettings,
    data_factory: DataFactory,
    version: Optional[str] = None,
    buf_size: int = DEFAULT_BUF_SIZE,
) -> Iterator[ResultsEvent]:
    """
    Decode a results document from ``source`` into a lazy event sequence.

    The out-of-band ``version`` is checked immediately, so an unsupported
    version raises :class:`UnsupportedVersionError` from this call,
    before ``source`` is read at all. Every other failure is raised while
    iterating, after which the generator is exhausted. Closing the
    generator stops reading ``source`` without raising.
    """
    decoder = ResultsStreamDecoder(settings, data_factory, version=version)
    return _drive(decoder, source, buf_size)


EventCallback = Callable[[Any], None]


class ResultsStream:
    """
    Row-oriented view over a results event sequence.

    Iterating yields binding maps only. The header signals are dispatched
    to callbacks registered with :meth:`on` and recorded on attributes:

    * ``variables`` – list of variable terms (``None`` until signalled),
    * ``version`` – declared ``head.version`` (or ``None``),
    * ``links`` – every ``head.link`` value seen,
    * ``metadata`` – every top-level ``metadata`` value seen.

    Use :meth:`events` instead of iteration to observe the full,
    interleaved sequence.

    ``on_close`` is called once, when the sequence is exhausted, when it
    fails, or on :meth:`close`, whichever comes first. Transports use it
    to release the response body.
    """

    def __init__(
        self,
        events: Iterator[ResultsEvent],
        on_close: Optional[Callable[[], None]] = None,
    ):
        self._events = events
        self._on_close = on_close
        self._listeners: Dict[ResultsEventKind, List[EventCallback]] = defaultdict(
            list
        )
        self.variables: Optional[List[Any]] = None
        self.version: Optional[str] = None
        self.links: List[Any] = []
        self.metadata: List[Any] = []

    def on(self, kind: ResultsEventKind | str, callback: EventCallback) -> "ResultsStream":
        """Register ``callback`` for a signal kind; returns ``self`` for chaining."""
        self._listeners[ResultsEventKind(kind)].append(callback)
        return self

    def _record(self, event: ResultsEvent) -> Any:
        if isinstance(event, BindingsEvent):
            payload: Any = event.bindings
        elif isinstance(event, VariablesEvent):
            payload = self.variables = event.variables
        elif isinstance(event, VersionEvent):
            payload = self.version = event.version
        elif isinstance(event, LinkEvent):
            payload = event.link
            self.links.append(payload)
        else:
            payload = event.metadata
            self.metadata.append(payload)
        for callback in self._listeners.get(event.kind, ()):
            callback(payload)
        return payload

    def events(self) -> Iterator[ResultsEvent]:
        """Yield every event, in document order, recording signals on the way."""
        try:
            for event in self._events:
                self._record(event)
                yield event
        except Exception:
            self._release()
            raise
        self._release()

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for event in self.events():
            if isinstance(event, BindingsEvent):
                yield event.bindings

    def close(self) -> None:
        """Stop consuming the underlying source."""
        close = getattr(self._events, "close", None)
        if close is not None:
            close()
        self._release()

    def _release(self) -> None:
        on_close, self._on_close = self._on_close, None
        if on_close is not None:
            on_close()

    def __enter__(self) -> "ResultsStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

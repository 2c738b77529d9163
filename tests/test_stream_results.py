import io

import ijson
import pytest

from sparqljson import (
    BindingsEvent,
    LinkEvent,
    MetadataEvent,
    ParserSettings,
    SparqlJsonParser,
    VariablesEvent,
    VersionEvent,
)
from sparqljson.data_factory import DefaultDataFactory, RdflibDataFactory
from sparqljson.errors import (
    InvalidTermError,
    MalformedVariableListError,
    MissingResultsSectionError,
    SourceError,
    UnsupportedVersionError,
)
from sparqljson.stream.results import (
    ResultsStream,
    ResultsStreamDecoder,
    ResultsStreamState,
    parse_results_stream,
)
from sparqljson.stream.tokenizer import iter_chunks, iter_json_events

DF = DefaultDataFactory()

BOOKS = """
{
  "head": { "vars": [ "book", "library" ] },
  "results": {
    "bindings": [
      { "book": { "type": "uri", "value": "http://example.org/book/book1" }, "library": { "type": "uri", "value": "http://example.org/book/library1" } },
      { "book": { "type": "uri", "value": "http://example.org/book/book2" }, "library": { "type": "uri", "value": "http://example.org/book/library2" } },
      { "book": { "type": "uri", "value": "http://example.org/book/book3" }, "library": { "type": "uri", "value": "http://example.org/book/library3" } }
    ]
  }
}
"""


def _book_row(i: int) -> dict:
    return {
        "?book": DF.named_node(f"http://example.org/book/book{i}"),
        "?library": DF.named_node(f"http://example.org/book/library{i}"),
    }


class ErroringReader:
    """A source whose reads always fail."""

    def __init__(self):
        self.reads = 0

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        raise OSError("Some stream error")


# -------------------------------------------------------------------
# Rows and variables
# -------------------------------------------------------------------


def test_stream_empty_response(parser):
    stream = parser.parse_json_results_stream(
        '{"head": {"vars": []}, "results": {"bindings": []}}'
    )
    assert list(stream) == []
    assert stream.variables == []


def test_stream_more_empty_response_defaults_variables(parser):
    """
    Example: ``{"results":{"bindings":[]}}`` yields no rows and an empty
    variable list, signalled once at the end of the stream.
    """
    stream = parser.parse_json_results_stream('{"results": {"bindings": []}}')
    events = list(stream.events())
    assert events == [VariablesEvent(variables=[])]


def test_stream_php_style_empty_bindings_object(parser):
    stream = parser.parse_json_results_stream(
        '{"head": {"vars": []}, "results": {"bindings": {}}}'
    )
    assert list(stream) == []


def test_stream_rows_in_document_order(parser):
    stream = parser.parse_json_results_stream(BOOKS)
    assert list(stream) == [_book_row(1), _book_row(2), _book_row(3)]
    assert stream.variables == [DF.variable("book"), DF.variable("library")]


def test_stream_single_row_example():
    parser = SparqlJsonParser(ParserSettings(prefix_variable_question_mark=True))
    stream = parser.parse_json_results_stream(
        '{"head":{"vars":["book"]},"results":{"bindings":'
        '[{"book":{"type":"uri","value":"http://example.org/b1"}}]}}'
    )
    events = list(stream.events())
    assert events == [
        VariablesEvent(variables=[DF.variable("book")]),
        BindingsEvent(bindings={"?book": DF.named_node("http://example.org/b1")}),
    ]


def test_stream_accepts_bytes_files_and_chunks(parser):
    expected = [_book_row(1), _book_row(2), _book_row(3)]
    data = BOOKS.encode("utf-8")
    assert list(parser.parse_json_results_stream(data)) == expected
    assert list(parser.parse_json_results_stream(io.BytesIO(data))) == expected
    assert list(parser.parse_json_results_stream(io.StringIO(BOOKS))) == expected
    # Chunk boundaries that cut through keys, strings and rows
    chunks = [data[i : i + 7] for i in range(0, len(data), 7)]
    assert list(parser.parse_json_results_stream(iter(chunks))) == expected


def test_stream_results_before_head(parser):
    """Variables are signalled exactly once, wherever ``head`` appears."""
    stream = parser.parse_json_results_stream(
        '{"results": {"bindings": [{"x": {"type": "bnode", "value": "b0"}}]},'
        ' "head": {"vars": ["x"]}}'
    )
    events = list(stream.events())
    assert events == [
        BindingsEvent(bindings={"?x": DF.blank_node("b0")}),
        VariablesEvent(variables=[DF.variable("x")]),
    ]


def test_stream_variables_signalled_once(parser):
    stream = parser.parse_json_results_stream(
        '{"head": {"vars": ["a"]}, "head": {"vars": ["b"]},'
        ' "results": {"bindings": []}}'
    )
    events = list(stream.events())
    assert events == [VariablesEvent(variables=[DF.variable("a")])]


def test_stream_quoted_triple_rows(parser):
    stream = parser.parse_json_results_stream(
        """
        {"head": {"vars": ["t"]}, "results": {"bindings": [
          {"t": {"type": "triple", "value": {
             "subject": {"type": "uri", "value": "http://ex/s"},
             "predicate": {"type": "uri", "value": "http://ex/p"},
             "object": {"type": "literal", "value": "42",
                        "datatype": "http://www.w3.org/2001/XMLSchema#integer"}}}}
        ]}}
        """
    )
    (row,) = list(stream)
    assert row["?t"] == DF.quoted_triple(
        DF.named_node("http://ex/s"),
        DF.named_node("http://ex/p"),
        DF.literal(
            "42", datatype=DF.named_node("http://www.w3.org/2001/XMLSchema#integer")
        ),
    )


# -------------------------------------------------------------------
# Side-channel signals
# -------------------------------------------------------------------


def test_stream_trailing_metadata(parser):
    stream = parser.parse_json_results_stream(
        BOOKS.rstrip().rstrip("}") + ', "metadata": { "httpRequests": 0 } }'
    )
    received = []
    stream.on("metadata", received.append)
    rows = list(stream)
    assert len(rows) == 3
    assert received == [{"httpRequests": 0}]
    assert stream.metadata == [{"httpRequests": 0}]


def test_stream_link_and_version(parser):
    stream = parser.parse_json_results_stream(
        '{"head": {"vars": [], "link": ["http://example.org/about"],'
        ' "version": "1.2"}, "results": {"bindings": []}}'
    )
    events = list(stream.events())
    assert events == [
        VariablesEvent(variables=[]),
        LinkEvent(link=["http://example.org/about"]),
        VersionEvent(version="1.2"),
    ]
    assert stream.links == [["http://example.org/about"]]
    assert stream.version == "1.2"


def test_stream_callbacks_receive_payloads(parser):
    seen = {"variables": [], "version": [], "bindings": []}
    stream = (
        parser.parse_json_results_stream(
            '{"head": {"vars": ["x"], "version": "1.1"},'
            ' "results": {"bindings": [{"x": {"type": "literal", "value": "v"}}]}}'
        )
        .on("variables", seen["variables"].append)
        .on("version", seen["version"].append)
        .on("bindings", seen["bindings"].append)
    )
    list(stream)
    assert seen["variables"] == [[DF.variable("x")]]
    assert seen["version"] == ["1.1"]
    assert seen["bindings"] == [{"?x": DF.literal("v")}]


def test_stream_metadata_number_types(parser):
    stream = parser.parse_json_results_stream(
        '{"results": {"bindings": []}, "metadata": {"count": 3, "ratio": 0.5}}'
    )
    list(stream)
    assert stream.metadata == [{"count": 3, "ratio": 0.5}]


# -------------------------------------------------------------------
# Failures
# -------------------------------------------------------------------


def test_stream_rejects_boolean_payload(parser):
    with pytest.raises(MissingResultsSectionError):
        list(parser.parse_json_results_stream('{"head": {}, "boolean": true}'))


def test_stream_rejects_empty_payload(parser):
    with pytest.raises(MissingResultsSectionError):
        list(parser.parse_json_results_stream("{}"))


def test_stream_missing_results_can_be_suppressed():
    parser = SparqlJsonParser(
        ParserSettings(suppress_missing_stream_results_error=True)
    )
    stream = parser.parse_json_results_stream('{"head": {"vars": ["a"]}}')
    assert list(stream) == []
    assert stream.variables == [DF.variable("a")]


def test_stream_rejects_invalid_json(parser):
    with pytest.raises(SourceError):
        list(parser.parse_json_results_stream("{"))


@pytest.mark.parametrize(
    "doc",
    [
        '{"head": {"vars": null}, "results": {"bindings": []}}',
        '{"head": {"vars": [[]]}, "results": {"bindings": []}}',
    ],
)
def test_stream_rejects_invalid_variables(parser, doc):
    with pytest.raises(MalformedVariableListError):
        list(parser.parse_json_results_stream(doc))


def test_stream_erroring_source(parser):
    with pytest.raises(SourceError) as exc_info:
        list(parser.parse_json_results_stream(ErroringReader()))
    assert isinstance(exc_info.value.__cause__, OSError)


def test_stream_unsupported_declared_version_emits_no_rows(parser):
    """
    Example: ``head.version = "1.2-unknown"`` terminates the stream before
    any row, even though rows follow in the document.
    """
    stream = parser.parse_json_results_stream(
        '{"head": {"version": "1.2-unknown", "vars": ["book"]},'
        ' "results": {"bindings": [{"book": {"type": "uri", "value": "http://ex/b"}}]}}'
    )
    rows = []
    with pytest.raises(UnsupportedVersionError):
        for row in stream:
            rows.append(row)
    assert rows == []
    assert list(stream) == []


def test_stream_unsupported_version_can_be_overridden():
    parser = SparqlJsonParser(ParserSettings(parse_unsupported_versions=True))
    stream = parser.parse_json_results_stream(
        '{"head": {"version": "1.2-unknown"}, "results": {"bindings": []}}'
    )
    list(stream)
    assert stream.version == "1.2-unknown"


def test_stream_unsupported_media_type_version_fails_before_reading(parser):
    source = ErroringReader()
    with pytest.raises(UnsupportedVersionError):
        parser.parse_json_results_stream(source, version="1.2-unknown")
    assert source.reads == 0


def test_stream_supported_media_type_version(parser):
    stream = parser.parse_json_results_stream(BOOKS, version="1.2")
    assert len(list(stream)) == 3


def test_stream_stops_at_invalid_row(parser):
    """
    Example: a triple missing its ``object`` fails the stream; rows after
    it are never emitted.
    """
    stream = parser.parse_json_results_stream(
        """
        {"results": {"bindings": [
          {"x": {"type": "uri", "value": "http://ex/1"}},
          {"x": {"type": "triple", "value": {
             "subject": {"type": "uri", "value": "http://ex/s"},
             "predicate": {"type": "uri", "value": "http://ex/p"}}}},
          {"x": {"type": "uri", "value": "http://ex/3"}}
        ]}}
        """
    )
    rows = []
    with pytest.raises(InvalidTermError, match="missing component 'object'"):
        for row in stream:
            rows.append(row)
    assert rows == [{"?x": DF.named_node("http://ex/1")}]


# -------------------------------------------------------------------
# Laziness and cancellation
# -------------------------------------------------------------------


def _counting_chunks(pulled: list):
    chunks = [
        '{"head": {"vars": ["x"]}, "results": {"bindings": [',
        '{"x": {"type": "uri", "value": "http://ex/1"}}',
        ',{"x": {"type": "uri", "value": "http://ex/2"}}',
        ',{"x": {"type": "uri", "value": "http://ex/3"}}',
        "]}}",
    ]
    for chunk in chunks:
        pulled.append(chunk)
        yield chunk


def test_stream_reads_source_lazily(parser):
    pulled: list = []
    stream = parser.parse_json_results_stream(_counting_chunks(pulled))
    assert pulled == []
    rows = iter(stream)
    assert next(rows) == {"?x": DF.named_node("http://ex/1")}
    assert len(pulled) < 5


def test_stream_close_stops_consumption(parser):
    pulled: list = []
    stream = parser.parse_json_results_stream(_counting_chunks(pulled))
    with stream:
        next(iter(stream))
    consumed = len(pulled)
    assert list(stream) == []
    assert len(pulled) == consumed


# -------------------------------------------------------------------
# Driving the state machine directly
# -------------------------------------------------------------------


def test_decoder_state_transitions():
    decoder = ResultsStreamDecoder(ParserSettings(), DF)
    assert decoder.state == ResultsStreamState.AWAITING_HEADER_OR_RESULTS
    events = [
        ("", "start_map", None),
        ("", "map_key", "results"),
        ("results", "start_map", None),
        ("results", "map_key", "bindings"),
        ("results.bindings", "start_array", None),
        ("results.bindings", "end_array", None),
        ("results", "end_map", None),
        ("", "end_map", None),
    ]
    for prefix, event, value in events:
        assert decoder.feed(prefix, event, value) == []
    assert decoder.results_seen
    assert decoder.state == ResultsStreamState.STREAMING_ROWS

    assert decoder.finish() == [VariablesEvent(variables=[])]
    assert decoder.state == ResultsStreamState.COMPLETED
    with pytest.raises(RuntimeError):
        decoder.feed("", "start_map", None)


def test_decoder_fed_from_ijson_parse():
    decoder = ResultsStreamDecoder(ParserSettings(), DF)
    out = []
    for prefix, event, value in ijson.parse(io.BytesIO(BOOKS.encode("utf-8"))):
        out.extend(decoder.feed(prefix, event, value))
    out.extend(decoder.finish())
    assert [type(e) for e in out] == [
        VariablesEvent,
        BindingsEvent,
        BindingsEvent,
        BindingsEvent,
    ]
    assert out[1].bindings == {
        "book": DF.named_node("http://example.org/book/book1"),
        "library": DF.named_node("http://example.org/book/library1"),
    }


def test_decoder_fails_on_finish_without_results():
    decoder = ResultsStreamDecoder(ParserSettings(), DF)
    decoder.feed("", "start_map", None)
    decoder.feed("", "end_map", None)
    with pytest.raises(MissingResultsSectionError):
        decoder.finish()
    assert decoder.state == ResultsStreamState.FAILED


def test_decoder_rejects_unsupported_version_at_construction():
    with pytest.raises(UnsupportedVersionError):
        ResultsStreamDecoder(ParserSettings(), DF, version="0.9")


def test_parse_results_stream_yields_metadata_events():
    events = list(
        parse_results_stream(
            '{"metadata": [1, 2], "results": {"bindings": []}}',
            ParserSettings(),
            DF,
        )
    )
    assert events == [MetadataEvent(metadata=[1, 2]), VariablesEvent(variables=[])]


def test_results_stream_on_close_runs_once():
    closed = []
    stream = ResultsStream(
        parse_results_stream('{"results": {"bindings": []}}', ParserSettings(), DF),
        on_close=lambda: closed.append(True),
    )
    assert list(stream) == []
    assert closed == [True]
    stream.close()
    assert closed == [True]


def test_results_stream_on_close_after_failure():
    closed = []
    stream = ResultsStream(
        parse_results_stream("{}", ParserSettings(), DF),
        on_close=lambda: closed.append(True),
    )
    with pytest.raises(MissingResultsSectionError):
        list(stream)
    assert closed == [True]


def test_stream_small_buffer_in_memory_document():
    events = list(
        parse_results_stream(BOOKS, ParserSettings(), DF, buf_size=5)
    )
    assert [type(e) for e in events] == [
        VariablesEvent,
        BindingsEvent,
        BindingsEvent,
        BindingsEvent,
    ]


# -------------------------------------------------------------------
# Factory rejections
# -------------------------------------------------------------------


def test_stream_rdflib_factory_rejection_fails_stream():
    parser = SparqlJsonParser(data_factory=RdflibDataFactory())
    stream = parser.parse_json_results_stream(
        '{"results": {"bindings": ['
        '{"x": {"type": "literal", "value": "x", "xml:lang": "en us!"}}]}}'
    )
    with pytest.raises(InvalidTermError) as exc_info:
        list(stream)
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_decoder_fails_on_factory_rejection():
    decoder = ResultsStreamDecoder(ParserSettings(), RdflibDataFactory())
    doc = b'{"results": {"bindings": [{"x": {"type": "literal", "value": "x", "xml:lang": "en us!"}}]}}'
    with pytest.raises(InvalidTermError):
        for prefix, event, value in ijson.parse(io.BytesIO(doc)):
            decoder.feed(prefix, event, value)
    assert decoder.state == ResultsStreamState.FAILED


# -------------------------------------------------------------------
# Tokenizer chunking
# -------------------------------------------------------------------


def test_iter_chunks_slices_in_memory_documents():
    assert list(iter_chunks(b"0123456789", buf_size=4)) == [b"0123", b"4567", b"89"]
    assert list(iter_chunks("héllo", buf_size=3)) == [b"h\xc3\xa9", b"llo"]


def test_iter_json_events_across_small_slices():
    doc = '{"head": {"vars": ["x"]}, "results": {"bindings": [{"x": {"type": "literal", "value": "h\u00e9llo w\u00f6rld"}}]}}'
    expected = list(ijson.parse(io.BytesIO(doc.encode("utf-8")), use_float=True))
    assert list(iter_json_events(doc, buf_size=3)) == expected

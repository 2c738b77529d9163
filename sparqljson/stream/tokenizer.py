"""
sparqljson.stream.tokenizer
===========================

Adapter between arbitrary byte/text sources and :mod:`ijson`'s push
parser.

:func:`iter_json_events` yields ``(prefix, event, value)`` tuples exactly
as :func:`ijson.parse` does, but it reads the source in chunks and pushes
them into :func:`ijson.parse_coro`. That way one code path serves
in-memory documents, file-like objects (including HTTP response bodies)
and chunk iterators.
"""

from typing import Any, Iterable, Iterator, Tuple, Union

import ijson
from loguru import logger

from sparqljson.errors import SourceError
from sparqljson.settings import DEFAULT_BUF_SIZE

JsonEvent = Tuple[str, str, Any]
JsonSource = Union[bytes, bytearray, str, Any, Iterable[Union[bytes, str]]]


def _as_bytes(chunk: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


def iter_chunks(source: JsonSource, buf_size: int = DEFAULT_BUF_SIZE) -> Iterator[bytes]:
    """
    Yield the source as UTF-8 byte chunks.

    Accepted sources: ``bytes``/``bytearray``/``str`` documents, objects
    with a ``read(size)`` method (binary or text), and iterables of
    ``bytes``/``str`` chunks. In-memory documents are sliced into
    ``buf_size`` pieces, like file-like sources.
    """
    if isinstance(source, (bytes, bytearray, str)):
        data = _as_bytes(source)
        for start in range(0, len(data), buf_size):
            yield data[start : start + buf_size]
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(buf_size)
            if not chunk:
                break
            yield _as_bytes(chunk)
    else:
        for chunk in source:
            yield _as_bytes(chunk)


def iter_json_events(
    source: JsonSource, buf_size: int = DEFAULT_BUF_SIZE
) -> Iterator[JsonEvent]:
    """
    Tokenize ``source`` lazily into ijson ``(prefix, event, value)`` events.

    Only one chunk is read ahead of the events handed to the caller, so a
    consumer that stops iterating stops reading the source too.

    Raises
    ------
    SourceError
        If the JSON is malformed or truncated, or if reading the source
        itself fails. The original exception is chained as ``__cause__``.
    """
    events = ijson.sendable_list()
    coro = ijson.parse_coro(events, use_float=True)
    try:
        for chunk in iter_chunks(source, buf_size):
            coro.send(chunk)
            yield from events
            del events[:]
        coro.close()
        yield from events
    except ijson.JSONError as exc:
        logger.debug(f"JSON tokenizer failed: {exc}")
        raise SourceError(f"Invalid JSON input: {exc}") from exc
    except Exception as exc:
        logger.debug(f"Reading the JSON source failed: {exc}")
        raise SourceError(f"Failed to read JSON source: {exc}") from exc

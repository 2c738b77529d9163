"""
sparqljson.stream.boolean
=========================

Incremental decoding of SPARQL JSON ``ASK`` results.
"""

from typing import Any, Optional

from sparqljson.errors import MissingBooleanResultError
from sparqljson.settings import DEFAULT_BUF_SIZE
from sparqljson.stream.tokenizer import JsonSource, iter_json_events


class BooleanStreamDecoder:
    """
    Watches for a top-level ``boolean`` member of JSON boolean type.

    The first match wins: once :attr:`result` is set, later events are
    ignored.
    """

    def __init__(self) -> None:
        self.result: Optional[bool] = None
        self._depth = 0

    @property
    def resolved(self) -> bool:
        return self.result is not None

    def feed(self, prefix: str, event: str, value: Any) -> bool:
        """Consume one tokenizer event; return ``True`` once resolved."""
        if self.resolved:
            return True
        if event in ("start_map", "start_array"):
            self._depth += 1
        elif event in ("end_map", "end_array"):
            self._depth -= 1
        elif event == "boolean" and prefix == "boolean" and self._depth == 1:
            self.result = value
        return self.resolved

    def finish(self) -> bool:
        """Return the result, or fail if the input ended without one."""
        if self.result is None:
            raise MissingBooleanResultError("No valid ASK response was found.")
        return self.result


def parse_boolean_stream(source: JsonSource, buf_size: int = DEFAULT_BUF_SIZE) -> bool:
    """
    Decode an ASK response from ``source``.

    Reading stops as soon as the boolean is found.

    Raises
    ------
    MissingBooleanResultError
        If the document ends without a top-level boolean ``boolean``.
    SourceError
        If the tokenizer or the source fails first.
    """
    decoder = BooleanStreamDecoder()
    json_events = iter_json_events(source, buf_size)
    try:
        for prefix, event, value in json_events:
            if decoder.feed(prefix, event, value):
                break
    finally:
        json_events.close()
    return decoder.finish()

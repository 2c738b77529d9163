"""
sparqljson.parser
=================

:class:`SparqlJsonParser` binds one :class:`ParserSettings` and one
:class:`DataFactory` and exposes every decoding operation, batch and
streaming, with that configuration.
"""

from typing import Any, Dict, List, Mapping, Optional

from .data_factory import DataFactory, DefaultDataFactory
from .decode import (
    check_version,
    decode_bindings,
    decode_boolean,
    decode_term,
    decode_variables,
    is_version_supported,
)
from .errors import MissingResultsSectionError
from .settings import ParserSettings
from .stream.boolean import parse_boolean_stream
from .stream.results import ResultsStream, parse_results_stream
from .stream.tokenizer import JsonSource


def _head(response: Mapping[str, Any]) -> Mapping[str, Any]:
    # A non-object ``head`` carries no header fields, as in streaming mode.
    head = response.get("head")
    return head if isinstance(head, Mapping) else {}


class SparqlJsonParser:
    """
    Parser for the SPARQL 1.1/1.2 Query Results JSON format.

    See https://www.w3.org/TR/sparql11-results-json/.

    Parameters
    ----------
    settings:
        Decoder configuration; defaults to :class:`ParserSettings()`.
    data_factory:
        Term factory; defaults to :class:`DefaultDataFactory`.
    """

    def __init__(
        self,
        settings: Optional[ParserSettings] = None,
        *,
        data_factory: Optional[DataFactory] = None,
    ):
        self.settings = settings or ParserSettings()
        self.data_factory = data_factory or DefaultDataFactory()

    # ──────────────────────────────────────────────────────────────────
    # Batch
    # ──────────────────────────────────────────────────────────────────

    def parse_json_term(self, raw: Any) -> Any:
        """Convert a single term descriptor into an RDF term."""
        return decode_term(
            raw, self.data_factory, max_depth=self.settings.max_triple_depth
        )

    def parse_json_bindings(self, raw: Any) -> Dict[str, Any]:
        """Convert a single result row into a binding map."""
        return decode_bindings(
            raw,
            self.data_factory,
            prefix_variables=self.settings.prefix_variable_question_mark,
            max_depth=self.settings.max_triple_depth,
        )

    def parse_json_results(self, response: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        Convert a complete SELECT response into a list of binding maps.

        ``head.version``, when present, goes through the version gate
        before any row is decoded.

        Raises
        ------
        MissingResultsSectionError
            If ``results.bindings`` is absent.
        UnsupportedVersionError
            If ``head.version`` is not accepted.
        InvalidTermError
            If any row is malformed.
        """
        head = _head(response)
        if "version" in head:
            self._check_version(head["version"])
        results = response.get("results")
        if not isinstance(results, Mapping) or "bindings" not in results:
            raise MissingResultsSectionError(
                "No valid SPARQL query results were found."
            )
        bindings = results["bindings"]
        if isinstance(bindings, Mapping) and not bindings:
            return []
        if not isinstance(bindings, list):
            raise MissingResultsSectionError(
                f"'results.bindings' must be an array, got {bindings!r}"
            )
        return [self.parse_json_bindings(row) for row in bindings]

    def parse_json_variables(self, response: Mapping[str, Any]) -> List[Any]:
        """Return ``head.vars`` as variable terms (``[]`` when absent)."""
        head = _head(response)
        if "vars" not in head:
            return []
        return decode_variables(head["vars"], self.data_factory)

    def parse_json_boolean(self, response: Mapping[str, Any]) -> bool:
        """Convert an ASK response into a ``bool``."""
        return decode_boolean(response)

    def is_version_supported(self, version: str) -> bool:
        return is_version_supported(
            version,
            self.settings.supported_versions,
            self.settings.parse_unsupported_versions,
        )

    def _check_version(self, version: Any) -> None:
        check_version(
            version,
            self.settings.supported_versions,
            self.settings.parse_unsupported_versions,
        )

    # ──────────────────────────────────────────────────────────────────
    # Streaming
    # ──────────────────────────────────────────────────────────────────

    def parse_json_results_stream(
        self, source: JsonSource, version: Optional[str] = None
    ) -> ResultsStream:
        """
        Decode a SELECT response incrementally.

        Parameters
        ----------
        source:
            Bytes, text, a file-like object or an iterable of chunks.
        version:
            Out-of-band results version (e.g. from the response media
            type). It is checked immediately, so an unsupported value
            raises :class:`UnsupportedVersionError` from this call.
        """
        return ResultsStream(
            parse_results_stream(
                source, self.settings, self.data_factory, version=version
            )
        )

    def parse_json_boolean_stream(self, source: JsonSource) -> bool:
        """Decode an ASK response incrementally."""
        return parse_boolean_stream(source)

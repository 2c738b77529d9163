from email.message import Message
from typing import Literal, Optional

from SPARQLWrapper import SPARQLWrapper, JSON, DIGEST
from loguru import logger
from pydantic import BaseModel

from .errors import SparqlJsonError
from .parser import SparqlJsonParser
from .stream.results import ResultsStream, parse_results_stream

Method = Literal["GET", "POST"]


def media_type_version(content_type: Optional[str]) -> Optional[str]:
    """
    Return the ``version`` parameter of a Content-Type header, if any.

    ``application/sparql-results+json; version=1.2`` → ``"1.2"``.
    """
    if not content_type:
        return None
    msg = Message()
    msg["content-type"] = content_type
    version = msg.get_param("version")
    return version if isinstance(version, str) else None


class SparqlEndpoint(BaseModel):
    """
    Thin wrapper around :class:`SPARQLWrapper.SPARQLWrapper` that streams
    response bodies into :class:`sparqljson.parser.SparqlJsonParser`.

    Use:

    * :meth:`select` for SELECT queries (returns a lazy
      :class:`ResultsStream`).
    * :meth:`ask` for ASK queries (returns ``bool``).
    """

    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    digest_auth: bool = False

    def setup_wrapper(self, method: Method = "POST") -> SPARQLWrapper:
        """
        Create and configure a SPARQLWrapper instance for this endpoint.
        """
        sparql = SPARQLWrapper(self.url)
        sparql.setMethod(method)
        sparql.setReturnFormat(JSON)
        if self.username is not None:
            sparql.setCredentials(self.username, self.password)
            if self.digest_auth:
                sparql.http_auth = DIGEST
        return sparql

    def _open(self, q: str, method: Method):
        sparql = self.setup_wrapper(method=method)
        sparql.setQuery(q)
        logger.debug(f"querying SPARQL endpoint: {self.url}")
        try:
            result = sparql.query()
        except Exception as e:
            logger.error(f"SPARQL request to {self.url} failed: {e}")
            raise e
        content_type = result.info().get("content-type")
        logger.debug(f"response content type: {content_type}")
        return result, content_type

    def select(
        self,
        q: str,
        parser: Optional[SparqlJsonParser] = None,
        method: Method = "POST",
    ) -> ResultsStream:
        """
        Execute a SPARQL SELECT and stream the decoded rows.

        The response body is read lazily while the returned stream is
        iterated, and closed once the stream is exhausted, fails or is
        closed. A ``version`` media-type parameter on the response is
        checked before any row is decoded.
        """
        parser = parser or SparqlJsonParser()
        result, content_type = self._open(q, method)
        version = media_type_version(content_type)
        if version is not None:
            logger.debug(f"negotiated results version: {version}")
        try:
            events = parse_results_stream(
                result.response,
                parser.settings,
                parser.data_factory,
                version=version,
            )
        except SparqlJsonError:
            result.response.close()
            raise
        return ResultsStream(events, on_close=result.response.close)

    def ask(
        self,
        q: str,
        parser: Optional[SparqlJsonParser] = None,
        method: Method = "POST",
    ) -> bool:
        """
        Execute a SPARQL ASK and return its boolean result.
        """
        parser = parser or SparqlJsonParser()
        result, _ = self._open(q, method)
        try:
            return parser.parse_json_boolean_stream(result.response)
        finally:
            result.response.close()

"""
sparqljson.settings
===================

Constants and the immutable :class:`ParserSettings` model shared by the
batch and streaming decoders.
"""

from typing import FrozenSet, Final

from pydantic import BaseModel, ConfigDict, Field

# ──────────────────────────────────────────────────────────────────────────
# Format constants
# ──────────────────────────────────────────────────────────────────────────

DEFAULT_SUPPORTED_VERSIONS: Final[FrozenSet[str]] = frozenset(
    {"1.1", "1.2", "1.2-basic"}
)

VARIABLE_PREFIX: Final[str] = "?"

# Bounds recursion through nested ``"triple"`` descriptors.
DEFAULT_MAX_TRIPLE_DEPTH: Final[int] = 64
# Each nesting level costs two interpreter frames; stay well under the
# default recursion limit.
MAX_TRIPLE_DEPTH_LIMIT: Final[int] = 256

# Chunk size used when reading file-like sources.
DEFAULT_BUF_SIZE: Final[int] = 64 * 1024

SPARQL_RESULTS_JSON_MEDIA_TYPE: Final[str] = "application/sparql-results+json"

# ──────────────────────────────────────────────────────────────────────────
# Environment (live endpoint tests only)
# ──────────────────────────────────────────────────────────────────────────

ENV_SPARQL_ENDPOINT_URL: Final[str] = "SPARQL_ENDPOINT_URL"
ENV_SPARQL_ENDPOINT_USER: Final[str] = "SPARQL_ENDPOINT_USER"
ENV_SPARQL_ENDPOINT_PASSWORD: Final[str] = "SPARQL_ENDPOINT_PASSWORD"


class ParserSettings(BaseModel):
    """
    Decoder configuration, fixed at construction time.

    Attributes
    ----------
    prefix_variable_question_mark:
        Prefix every binding key (and nothing else) with ``?``.
    supported_versions:
        Results-format versions accepted from ``head.version`` or from a
        media-type ``version`` parameter.
    parse_unsupported_versions:
        Skip version enforcement entirely.
    suppress_missing_stream_results_error:
        Do not fail a results stream that ends without a
        ``results.bindings`` container.
    max_triple_depth:
        Maximum nesting of quoted triples inside a single descriptor, at
        most ``MAX_TRIPLE_DEPTH_LIMIT``.
    """

    model_config = ConfigDict(frozen=True)

    prefix_variable_question_mark: bool = False
    supported_versions: FrozenSet[str] = DEFAULT_SUPPORTED_VERSIONS
    parse_unsupported_versions: bool = False
    suppress_missing_stream_results_error: bool = False
    max_triple_depth: int = Field(
        default=DEFAULT_MAX_TRIPLE_DEPTH, ge=1, le=MAX_TRIPLE_DEPTH_LIMIT
    )

"""
sparqljson.decode
=================

Pure, synchronous decoders for fully-parsed SPARQL JSON values.

* :func:`decode_term` – one term descriptor → one RDF term (recursive
  for ``"triple"`` descriptors).
* :func:`decode_bindings` – one row of descriptors → one binding map.
* :func:`decode_variables` – ``head.vars`` → list of variable terms.
* :func:`decode_boolean` – ASK response → ``bool``.
* :func:`is_version_supported` / :func:`check_version` – the version gate.

The streaming decoders in :mod:`sparqljson.stream` call the same
functions on each completed JSON subtree, so batch and streaming modes
accept and reject exactly the same inputs.
"""

from typing import Any, Callable, Dict, FrozenSet, List, Mapping

from .data_factory import DataFactory
from .errors import (
    InvalidTermError,
    MalformedVariableListError,
    MissingBooleanResultError,
    UnsupportedVersionError,
)
from .settings import DEFAULT_MAX_TRIPLE_DEPTH, VARIABLE_PREFIX
from .terms import Direction

TRIPLE_COMPONENTS = ("subject", "predicate", "object")

_DIRECTIONS = frozenset(d.value for d in Direction)

TermDecoder = Callable[[Mapping[str, Any], DataFactory, int, int], Any]


# ──────────────────────────────────────────────────────────────────────────
# Term decoder
# ──────────────────────────────────────────────────────────────────────────


def _lexical_value(raw: Mapping[str, Any]) -> str:
    value = raw.get("value")
    if not isinstance(value, str):
        raise InvalidTermError(
            f"Term descriptor requires a string 'value', got {value!r}"
        )
    return value


def _decode_blank_node(
    raw: Mapping[str, Any], data_factory: DataFactory, depth: int, max_depth: int
) -> Any:
    return data_factory.blank_node(_lexical_value(raw))


def _decode_literal(
    raw: Mapping[str, Any], data_factory: DataFactory, depth: int, max_depth: int
) -> Any:
    value = _lexical_value(raw)
    language = raw.get("xml:lang")
    datatype = raw.get("datatype")
    if language:
        if not isinstance(language, str):
            raise InvalidTermError(f"Invalid literal language tag {language!r}")
        direction = raw.get("its:dir")
        if direction is not None and direction not in _DIRECTIONS:
            raise InvalidTermError(
                f"Invalid literal direction {direction!r} (expected 'ltr' or 'rtl')"
            )
        return data_factory.literal(value, language=language, direction=direction)
    if datatype:
        if not isinstance(datatype, str):
            raise InvalidTermError(f"Invalid literal datatype {datatype!r}")
        return data_factory.literal(
            value, datatype=data_factory.named_node(datatype)
        )
    return data_factory.literal(value)


def _decode_typed_literal(
    raw: Mapping[str, Any], data_factory: DataFactory, depth: int, max_depth: int
) -> Any:
    # Virtuoso extension; always datatyped, never version-gated.
    value = _lexical_value(raw)
    datatype = raw.get("datatype")
    if not isinstance(datatype, str):
        raise InvalidTermError("A 'typed-literal' term requires a 'datatype'")
    return data_factory.literal(value, datatype=data_factory.named_node(datatype))


def _decode_quoted_triple(
    raw: Mapping[str, Any], data_factory: DataFactory, depth: int, max_depth: int
) -> Any:
    if depth >= max_depth:
        raise InvalidTermError(
            f"Quoted triple nesting exceeds the maximum depth of {max_depth}"
        )
    triple = raw.get("value")
    if not isinstance(triple, Mapping):
        raise InvalidTermError("A 'triple' term requires an object 'value'")
    components = []
    for name in TRIPLE_COMPONENTS:
        component = triple.get(name)
        if component is None:
            raise InvalidTermError(
                f"Invalid quoted triple: missing component '{name}'"
            )
        components.append(_decode(component, data_factory, depth + 1, max_depth))
    return data_factory.quoted_triple(*components)


def _decode_named_node(
    raw: Mapping[str, Any], data_factory: DataFactory, depth: int, max_depth: int
) -> Any:
    return data_factory.named_node(_lexical_value(raw))


# Lookup on the exact ``type`` string; anything else (including ``"uri"``
# and a missing ``type``) goes to the named-node fallback.
_TERM_DECODERS: Dict[str, TermDecoder] = {
    "bnode": _decode_blank_node,
    "literal": _decode_literal,
    "typed-literal": _decode_typed_literal,
    "triple": _decode_quoted_triple,
}
_FALLBACK_TERM_DECODER: TermDecoder = _decode_named_node


def _decode(raw: Any, data_factory: DataFactory, depth: int, max_depth: int) -> Any:
    if not isinstance(raw, Mapping):
        raise InvalidTermError(f"Term descriptor must be an object, got {raw!r}")
    term_type = raw.get("type")
    if isinstance(term_type, str) and term_type in _TERM_DECODERS:
        decoder = _TERM_DECODERS[term_type]
    else:
        decoder = _FALLBACK_TERM_DECODER
    try:
        return decoder(raw, data_factory, depth, max_depth)
    except (ValueError, TypeError) as exc:
        # Rejections raised by the data factory (rdflib term checks,
        # pydantic ValidationError) surface as descriptor errors.
        raise InvalidTermError(f"Invalid term descriptor {raw!r}: {exc}") from exc


def decode_term(
    raw: Any,
    data_factory: DataFactory,
    *,
    max_depth: int = DEFAULT_MAX_TRIPLE_DEPTH,
) -> Any:
    """
    Convert a SPARQL JSON term descriptor into an RDF term.

    Parameters
    ----------
    raw:
        A descriptor such as ``{"type": "uri", "value": "http://…"}``.
    data_factory:
        Factory used to build the resulting term(s).
    max_depth:
        Maximum nesting of ``"triple"`` descriptors.

    Raises
    ------
    InvalidTermError
        If the descriptor (or any nested triple component) is malformed.
    """
    return _decode(raw, data_factory, 0, max_depth)


# ──────────────────────────────────────────────────────────────────────────
# Bindings / variables / boolean
# ──────────────────────────────────────────────────────────────────────────


def decode_bindings(
    raw: Any,
    data_factory: DataFactory,
    *,
    prefix_variables: bool = False,
    max_depth: int = DEFAULT_MAX_TRIPLE_DEPTH,
) -> Dict[str, Any]:
    """
    Convert one result row (variable name → descriptor) into a binding map.

    The row is decoded atomically: the first invalid descriptor raises
    and no partially-filled mapping escapes.
    """
    if not isinstance(raw, Mapping):
        raise InvalidTermError(f"Binding row must be an object, got {raw!r}")
    bindings: Dict[str, Any] = {}
    for key, descriptor in raw.items():
        name = f"{VARIABLE_PREFIX}{key}" if prefix_variables else key
        bindings[name] = decode_term(descriptor, data_factory, max_depth=max_depth)
    return bindings


def decode_variables(raw: Any, data_factory: DataFactory) -> List[Any]:
    """Convert a ``head.vars`` value into variable terms, in order."""
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise MalformedVariableListError(
            f"Invalid 'head.vars', expected an array of strings: {raw!r}"
        )
    return [data_factory.variable(name) for name in raw]


def decode_boolean(response: Any) -> bool:
    """
    Return the ``boolean`` field of an ASK response.

    Raises
    ------
    MissingBooleanResultError
        If the field is absent or not a JSON boolean.
    """
    if isinstance(response, Mapping) and isinstance(response.get("boolean"), bool):
        return response["boolean"]
    raise MissingBooleanResultError("No valid ASK response was found.")


# ──────────────────────────────────────────────────────────────────────────
# Version gate
# ──────────────────────────────────────────────────────────────────────────


def is_version_supported(
    version: str,
    supported_versions: FrozenSet[str],
    parse_unsupported_versions: bool = False,
) -> bool:
    """Return whether ``version`` may be decoded under the given configuration."""
    return parse_unsupported_versions or version in supported_versions


def check_version(
    version: Any,
    supported_versions: FrozenSet[str],
    parse_unsupported_versions: bool = False,
) -> None:
    """
    Raise :class:`UnsupportedVersionError` unless ``version`` passes the gate.

    A non-string version never passes, even with
    ``parse_unsupported_versions`` set.
    """
    if not isinstance(version, str) or not is_version_supported(
        version, supported_versions, parse_unsupported_versions
    ):
        raise UnsupportedVersionError(version)

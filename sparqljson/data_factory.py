"""
sparqljson.data_factory
=======================

Term construction is delegated to a *data factory*: the decoders only
ever call the five methods of :class:`DataFactory`, so callers decide
which concrete term classes end up in their bindings.

Two factories ship with the package:

* :class:`DefaultDataFactory` builds the frozen pydantic models from
  :mod:`sparqljson.terms`. It supports every term kind, including
  directional literals and quoted triples.
* :class:`RdflibDataFactory` builds :mod:`rdflib` terms, for callers
  that feed results straight into an :class:`rdflib.Graph`. rdflib has
  no triple-term class, so quoted triples come back as plain
  ``(subject, predicate, object)`` tuples of rdflib terms, and literal
  base directions are dropped.
"""

from typing import Any, Optional, Protocol, Tuple, runtime_checkable

from rdflib.term import BNode, Literal as RDFLiteral, URIRef, Variable as RDFVariable

from .terms import (
    BlankNode,
    Literal,
    NamedNode,
    QuotedTriple,
    Variable,
)


@runtime_checkable
class DataFactory(Protocol):
    """The term-construction capabilities required by the decoders."""

    def named_node(self, value: str) -> Any: ...

    def blank_node(self, value: str) -> Any: ...

    def literal(
        self,
        value: str,
        language: Optional[str] = None,
        direction: Optional[str] = None,
        datatype: Any = None,
    ) -> Any: ...

    def variable(self, value: str) -> Any: ...

    def quoted_triple(self, subject: Any, predicate: Any, object_: Any) -> Any: ...


class DefaultDataFactory:
    """Builds :mod:`sparqljson.terms` models."""

    def named_node(self, value: str) -> NamedNode:
        return NamedNode(value=value)

    def blank_node(self, value: str) -> BlankNode:
        return BlankNode(value=value)

    def literal(
        self,
        value: str,
        language: Optional[str] = None,
        direction: Optional[str] = None,
        datatype: Optional[NamedNode] = None,
    ) -> Literal:
        return Literal(
            value=value, language=language, direction=direction, datatype=datatype
        )

    def variable(self, value: str) -> Variable:
        return Variable(value=value)

    def quoted_triple(self, subject: Any, predicate: Any, object_: Any) -> QuotedTriple:
        return QuotedTriple(subject=subject, predicate=predicate, object=object_)


class RdflibDataFactory:
    """Builds :mod:`rdflib` terms (see the module notes on triples and direction)."""

    def named_node(self, value: str) -> URIRef:
        return URIRef(value)

    def blank_node(self, value: str) -> BNode:
        return BNode(value)

    def literal(
        self,
        value: str,
        language: Optional[str] = None,
        direction: Optional[str] = None,
        datatype: Optional[URIRef] = None,
    ) -> RDFLiteral:
        if language is not None:
            return RDFLiteral(value, lang=language)
        return RDFLiteral(value, datatype=datatype)

    def variable(self, value: str) -> RDFVariable:
        return RDFVariable(value)

    def quoted_triple(
        self, subject: Any, predicate: Any, object_: Any
    ) -> Tuple[Any, Any, Any]:
        return (subject, predicate, object_)

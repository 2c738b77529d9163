import enum
from typing import Annotated, Final, Literal as TypingLiteral, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

"""
sparqljson.terms
================
Immutable RDF term models produced by
:class:`sparqljson.data_factory.DefaultDataFactory`.

Terms are frozen pydantic models: they hash and compare by value, so two
decodes of the same descriptor yield equal terms. Each model carries a
``term_type`` tag, and :data:`Term` is the discriminated union over all
of them, which lets quoted triples nest arbitrarily.

Literal annotations
-------------------
A :class:`Literal` carries exactly one of:

* nothing (a plain ``xsd:string`` literal),
* a language tag (``rdf:langString``),
* a language tag plus a base direction (``rdf:dirLangString``),
* an explicit datatype IRI.

The combination is checked on construction.
"""

RDF_NS: Final[str] = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XSD_NS: Final[str] = "http://www.w3.org/2001/XMLSchema#"

XSD_STRING_IRI: Final[str] = f"{XSD_NS}string"
RDF_LANG_STRING_IRI: Final[str] = f"{RDF_NS}langString"
RDF_DIR_LANG_STRING_IRI: Final[str] = f"{RDF_NS}dirLangString"


class TermType(enum.StrEnum):
    """Discriminator values for :data:`Term`."""

    NAMED_NODE = "NamedNode"
    BLANK_NODE = "BlankNode"
    LITERAL = "Literal"
    VARIABLE = "Variable"
    QUOTED_TRIPLE = "QuotedTriple"


class Direction(enum.StrEnum):
    """Base direction of a directional language-tagged string."""

    LTR = "ltr"
    RTL = "rtl"


class _FrozenTerm(BaseModel):
    model_config = ConfigDict(frozen=True)


class NamedNode(_FrozenTerm):
    term_type: TypingLiteral[TermType.NAMED_NODE] = TermType.NAMED_NODE
    value: str


class BlankNode(_FrozenTerm):
    term_type: TypingLiteral[TermType.BLANK_NODE] = TermType.BLANK_NODE
    value: str


class Variable(_FrozenTerm):
    term_type: TypingLiteral[TermType.VARIABLE] = TermType.VARIABLE
    value: str


class Literal(_FrozenTerm):
    term_type: TypingLiteral[TermType.LITERAL] = TermType.LITERAL
    value: str
    language: Optional[str] = None
    direction: Optional[Direction] = None
    datatype: Optional[NamedNode] = None

    @model_validator(mode="after")
    def check_annotations(self) -> "Literal":
        """Enforce that language, direction and datatype are exclusive."""
        if self.language is not None and self.datatype is not None:
            raise ValueError("a literal cannot carry both a language and a datatype")
        if self.direction is not None and self.language is None:
            raise ValueError("a literal direction requires a language tag")
        return self

    @property
    def effective_datatype(self) -> NamedNode:
        """
        The datatype implied by the annotations, following RDF 1.2:
        ``rdf:dirLangString``, ``rdf:langString``, the explicit datatype,
        or ``xsd:string``.
        """
        if self.direction is not None:
            return NamedNode(value=RDF_DIR_LANG_STRING_IRI)
        if self.language is not None:
            return NamedNode(value=RDF_LANG_STRING_IRI)
        if self.datatype is not None:
            return self.datatype
        return NamedNode(value=XSD_STRING_IRI)


class QuotedTriple(_FrozenTerm):
    """
    An RDF 1.2 triple term. Components are not restricted by kind; any
    :data:`Term` is accepted in every position.
    """

    term_type: TypingLiteral[TermType.QUOTED_TRIPLE] = TermType.QUOTED_TRIPLE
    subject: "Term"
    predicate: "Term"
    object: "Term"


Term = Annotated[
    Union[NamedNode, BlankNode, Literal, Variable, QuotedTriple],
    Field(discriminator="term_type"),
]

QuotedTriple.model_rebuild()

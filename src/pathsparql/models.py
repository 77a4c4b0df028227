"""
Pydantic models for path and mutation expressions.

Provides validated, immutable structures for the values the compiler
reads.  Terms are rdflib identifiers; textual and JSON-LD input is
coerced through :func:`pathsparql.terms.term_from_value`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from rdflib.term import Identifier

from pathsparql.errors import TermKindError
from pathsparql.terms import term_from_value


def _coerce_term(value: Any) -> Any:
    if value is None:
        return None
    try:
        return term_from_value(value)
    except TermKindError as exc:
        raise ValueError(str(exc)) from exc


class PathSegment(BaseModel):
    """One step of a path expression: a subject or a predicate."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    subject: Optional[Union[Identifier, List[Identifier]]] = Field(
        None, description="Start term(s); only valid in the first segment"
    )
    predicate: Optional[Identifier] = Field(
        None, description="Predicate followed from the previous node"
    )

    @field_validator("subject", mode="before")
    @classmethod
    def coerce_subject(cls, v: Any) -> Any:
        """Accept textual and JSON-LD terms, alone or in a list."""
        if isinstance(v, (list, tuple)):
            return [_coerce_term(item) for item in v]
        return _coerce_term(v)

    @field_validator("predicate", mode="before")
    @classmethod
    def coerce_predicate(cls, v: Any) -> Any:
        """Accept textual and JSON-LD terms."""
        return _coerce_term(v)

    @model_validator(mode="after")
    def check_single_role(self) -> "PathSegment":
        """A segment holds either a subject or a predicate."""
        if (self.subject is None) == (self.predicate is None):
            raise ValueError("A path segment needs exactly one of subject or predicate")
        if isinstance(self.subject, list) and not self.subject:
            raise ValueError("A path segment subject list cannot be empty")
        return self

    @property
    def subject_terms(self) -> List[Identifier]:
        """Subject term(s) of this segment as a list."""
        if self.subject is None:
            return []
        if isinstance(self.subject, list):
            return list(self.subject)
        return [self.subject]


def _check_expression(segments: List[PathSegment]) -> List[PathSegment]:
    if not segments:
        return segments
    if segments[0].subject is None:
        raise ValueError("A path expression must start with a subject")
    if any(segment.predicate is None for segment in segments[1:]):
        raise ValueError("Only the first segment of a path expression can hold a subject")
    return segments


class MutationType(str, Enum):
    """Kind of change described by a mutation expression."""

    INSERT = "INSERT"
    DELETE = "DELETE"


class MutationExpression(BaseModel):
    """An INSERT or DELETE intent linking a domain to a range."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True, frozen=True, populate_by_name=True
    )

    mutation_type: MutationType = Field(..., alias="mutationType")
    domain_expression: List[PathSegment] = Field(..., alias="domainExpression")
    predicate: Optional[Identifier] = Field(None, description="Connecting predicate")
    range_expression: Optional[List[PathSegment]] = Field(None, alias="rangeExpression")

    @field_validator("predicate", mode="before")
    @classmethod
    def coerce_predicate(cls, v: Any) -> Any:
        """Accept textual and JSON-LD terms."""
        return _coerce_term(v)

    @field_validator("domain_expression", "range_expression")
    @classmethod
    def validate_expression(
        cls, v: Optional[List[PathSegment]]
    ) -> Optional[List[PathSegment]]:
        """Expressions start with a subject followed by predicates."""
        return None if v is None else _check_expression(v)

    @model_validator(mode="after")
    def check_range(self) -> "MutationExpression":
        """Predicate and range come together; only DELETE may omit both."""
        if (self.predicate is None) != (self.range_expression is None):
            raise ValueError("predicate and rangeExpression must be given together")
        if self.predicate is None and self.mutation_type is not MutationType.DELETE:
            raise ValueError("Only DELETE mutations can omit predicate and range")
        return self

    @property
    def has_range(self) -> bool:
        """Whether this mutation names an explicit predicate and range."""
        return self.range_expression is not None


class QueryContext(BaseModel):
    """Expressions collected for one path, ready to be compiled."""

    model_config = ConfigDict(populate_by_name=True)

    path_expression: Optional[List[PathSegment]] = Field(None, alias="pathExpression")
    mutation_expressions: Optional[List[MutationExpression]] = Field(
        None, alias="mutationExpressions"
    )

    @field_validator("path_expression")
    @classmethod
    def validate_expression(
        cls, v: Optional[List[PathSegment]]
    ) -> Optional[List[PathSegment]]:
        """Expressions start with a subject followed by predicates."""
        return None if v is None else _check_expression(v)


class CompileRequest(QueryContext):
    """A compile document as accepted by the CLI and the HTTP API."""

    property: Optional[str] = Field(None, description="Accessed property name")

    def __str__(self) -> str:
        return self.property or "path"

"""Conversion between rdflib terms and their SPARQL text form.

:func:`term_to_query_string` is the only place where term content is
written into query text, so every IRI, literal and blank node in a
compiled query passes through it.
"""

from __future__ import annotations

import re
from typing import Any

from rdflib import BNode, Literal, URIRef, Variable
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID
from rdflib.term import Identifier
from rdflib.util import from_n3

from pathsparql.errors import TermKindError
from pathsparql.utils import is_absolute_iri

# Characters the SPARQL IRIREF production excludes.
_IRI_FORBIDDEN = re.compile(r'[\x00-\x20<>"{}|^`\\]')
_BNODE_LABEL = re.compile(r"^\w(?:[\w.\-]*[\w\-])?$")
_VARIABLE = re.compile(r"^[?$](\w+)$")


def _checked_iri(value: str) -> str:
    if _IRI_FORBIDDEN.search(value):
        raise TermKindError(f"Could not convert a term of type URIRef: invalid IRI {value!r}")
    return value


def _checked_bnode_label(label: str) -> str:
    if not _BNODE_LABEL.match(label):
        raise TermKindError(f"Could not convert a term of type BNode: invalid label {label!r}")
    return label


def term_to_query_string(term: Any) -> str:
    """Serialize a single term for use inside a query.

    Parameters
    ----------
    term:
        A :class:`~rdflib.URIRef`, :class:`~rdflib.Literal` or
        :class:`~rdflib.BNode`.

    Returns
    -------
    str
        ``<iri>``, ``"value"`` (with ``@lang`` or ``^^<datatype>`` when
        present) or ``_:label``.

    Raises
    ------
    TermKindError
        For variables, the default graph marker, non-term values and
        IRIs or blank node labels that cannot be written as SPARQL.
    """
    if isinstance(term, Variable):
        raise TermKindError("Could not convert a term of type Variable")
    if isinstance(term, URIRef):
        if term == DATASET_DEFAULT_GRAPH_ID:
            raise TermKindError("Could not convert a term of type DefaultGraph")
        return f"<{_checked_iri(str(term))}>"
    if isinstance(term, Literal):
        text = '"' + str(term).replace("\\", "\\\\").replace('"', '\\"') + '"'
        if term.language:
            return f"{text}@{term.language}"
        if term.datatype is not None:
            return f"{text}^^<{_checked_iri(str(term.datatype))}>"
        return text
    if isinstance(term, BNode):
        return f"_:{_checked_bnode_label(str(term))}"
    raise TermKindError(
        f"Could not convert a term of type {type(term).__name__}"
    )


def term_from_value(value: Any) -> Identifier:
    """Coerce textual, JSON-LD or plain Python input into an rdflib term.

    * Identifiers are returned unchanged.
    * Strings that look like absolute IRIs become :class:`URIRef`,
      ``_:label`` becomes a :class:`BNode` and ``?name``/``$name`` a
      :class:`Variable`; other strings are parsed as N3 (``<iri>``,
      ``"lit"@en``, ``ex:thing`` with a known prefix).  Bare words are
      rejected rather than read as blank nodes.
    * ``{"@id": ...}`` and ``{"@value": ..., "@language"|"@type": ...}``
      objects are read as JSON-LD node and value objects.
    * Numbers and booleans become typed literals.
    """
    if isinstance(value, Identifier):
        return value
    if isinstance(value, dict):
        if "@id" in value:
            node_id = str(value["@id"])
            if node_id.startswith("_:"):
                return BNode(_checked_bnode_label(node_id[2:]))
            return URIRef(_checked_iri(node_id))
        if "@value" in value:
            datatype = value.get("@type")
            return Literal(
                value["@value"],
                lang=value.get("@language"),
                datatype=URIRef(_checked_iri(str(datatype))) if datatype else None,
            )
        raise TermKindError(f"Could not read a term from {value!r}")
    if isinstance(value, str):
        if value.startswith("_:"):
            return BNode(_checked_bnode_label(value[2:]))
        variable = _VARIABLE.match(value)
        if variable:
            return Variable(variable.group(1))
        if is_absolute_iri(value):
            return URIRef(_checked_iri(value))
        try:
            term = from_n3(value)
        except (KeyError, ValueError, IndexError) as exc:
            raise TermKindError(f"Could not read a term from {value!r}") from exc
        if not isinstance(term, Identifier) or isinstance(term, BNode):
            raise TermKindError(f"Could not read a term from {value!r}")
        if isinstance(term, URIRef):
            _checked_iri(str(term))
        return term
    if isinstance(value, (bool, int, float)):
        return Literal(value)
    raise TermKindError(
        f"Could not convert a term of type {type(value).__name__}"
    )


def term_from_binding(cell: dict[str, Any]) -> Identifier:
    """Build a term from one SPARQL JSON results binding cell."""
    cell_type = cell.get("type", "literal")
    if cell_type == "uri":
        return URIRef(cell["value"])
    if cell_type == "bnode":
        return BNode(cell["value"])
    datatype = cell.get("datatype")
    return Literal(
        cell["value"],
        lang=cell.get("xml:lang"),
        datatype=URIRef(datatype) if datatype else None,
    )

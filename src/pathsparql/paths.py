"""Build path and mutation expressions through property access.

A :class:`PathFactory` creates root :class:`Path` objects.  Accessing a
property on a path (``path.name`` or ``path["foaf:name"]``) looks the
name up in a :class:`HandlerRegistry`; names without a handler become a
further predicate step, resolved through the factory's JSON-LD style
context.

Usage:
    factory = PathFactory(context={"foaf": "http://xmlns.com/foaf/0.1/"})
    me = factory.create("https://example.org/#me")

    me["foaf:knows"]["foaf:name"].sparql
    me["foaf:name"].set("Alice").sparql
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from rdflib import Literal, URIRef
from rdflib.term import Identifier

from pathsparql.accumulator import collect_mutation_expressions
from pathsparql.arena import PathArena, PathContext
from pathsparql.compiler import compile_query
from pathsparql.errors import PathQueryError, PathStructureError, UnknownPropertyError
from pathsparql.models import MutationExpression, MutationType, PathSegment, QueryContext
from pathsparql.terms import term_from_value
from pathsparql.utils import expand_curie, is_absolute_iri

logger = logging.getLogger(__name__)

# A handler receives the owning factory and the index of the accessed path
Handler = Callable[["PathFactory", int], Any]


class Path:
    """A view on one :class:`PathContext` of a factory."""

    __slots__ = ("_factory", "_index")

    def __init__(self, factory: PathFactory, index: int) -> None:
        self._factory = factory
        self._index = index

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._factory.resolve(self._index, name)

    def __getitem__(self, name: str) -> Any:
        return self._factory.resolve(self._index, name)

    def __str__(self) -> str:
        return str(self._factory.arena[self._index])

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


class HandlerRegistry:
    """Maps property names to handlers, with a predicate-step fallback."""

    def __init__(
        self,
        handlers: Optional[Mapping[str, Handler]] = None,
        fallback: Optional[Callable[["PathFactory", int, str], Any]] = None,
    ) -> None:
        self._handlers: Dict[str, Handler] = dict(handlers or {})
        self._fallback = fallback or predicate_step

    def register(self, name: str, handler: Handler) -> None:
        """Add or replace the handler for *name*."""
        self._handlers[name] = handler

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def handle(self, factory: PathFactory, index: int, name: str) -> Any:
        """Run the handler for *name*, or the fallback when there is none."""
        handler = self._handlers.get(name)
        if handler is None:
            return self._fallback(factory, index, name)
        return handler(factory, index)


class PathFactory:
    """Creates paths and owns the arena their contexts live in.

    Parameters
    ----------
    context:
        JSON-LD style context mapping terms and prefixes to IRIs, for
        example ``{"foaf": "http://xmlns.com/foaf/0.1/",
        "name": "foaf:name"}``.
    handlers:
        Registry to dispatch property access; defaults to
        :data:`DEFAULT_HANDLERS`.
    engine:
        Object with ``terms(query)`` and ``update(query)`` methods used
        by the ``results`` handler, e.g.
        :class:`~pathsparql.engine.SparqlEndpoint`.
    """

    def __init__(
        self,
        context: Optional[Mapping[str, Any]] = None,
        handlers: Optional[HandlerRegistry] = None,
        engine: Any = None,
    ) -> None:
        self.context: Dict[str, Any] = dict(context or {})
        self.registry = handlers or HandlerRegistry(DEFAULT_HANDLERS)
        self.engine = engine
        self.arena = PathArena()

    def create(self, subject: Any) -> Path:
        """Create a root path starting at *subject* (one term or a list)."""
        segment = PathSegment(subject=subject)
        description = ", ".join(str(term) for term in segment.subject_terms)
        index = self.arena.add(
            PathContext(description=f"[{description}]", path_expression=(segment,))
        )
        return Path(self, index)

    def resolve(self, index: int, name: str) -> Any:
        """Dispatch access of property *name* on the path at *index*."""
        return self.registry.handle(self, index, name)

    def resolve_predicate(self, name: str) -> URIRef:
        """Resolve a property name to a predicate IRI through the context."""
        value = self.context.get(name, name)
        if isinstance(value, Mapping):
            value = value.get("@id")
        if isinstance(value, str):
            prefixes = {k: v for k, v in self.context.items() if isinstance(v, str)}
            value = expand_curie(value, prefixes)
            if is_absolute_iri(value):
                return URIRef(value)
        raise UnknownPropertyError(f"Could not resolve property {name!r} to a predicate")

    def extend(self, index: int, name: str, predicate: URIRef) -> Path:
        """Derive a path that follows *predicate* from the path at *index*."""
        parent = self.arena[index]
        if parent.path_expression is None:
            raise PathStructureError(f"{parent} cannot be extended")
        child = PathContext(
            description=f"{parent}.{name}",
            property=name,
            parent=index,
            path_expression=parent.path_expression + (PathSegment(predicate=predicate),),
        )
        return Path(self, self.arena.add(child))

    def derive(self, index: int, name: str, mutations: Sequence[MutationExpression]) -> Path:
        """Derive a path from *index* that carries *mutations*."""
        parent = self.arena[index]
        child = PathContext(
            description=f"{parent}.{name}()",
            property=parent.property,
            parent=index,
            path_expression=parent.path_expression,
            mutation_expressions=tuple(mutations),
        )
        logger.debug(f"Attached {len(mutations)} mutation(s) to {child}")
        return Path(self, self.arena.add(child))

    def query_context(self, index: int) -> QueryContext:
        """Collect the expressions of the path at *index* for compilation."""
        context = self.arena[index]
        path_expression = context.path_expression
        return QueryContext(
            path_expression=list(path_expression) if path_expression is not None else None,
            mutation_expressions=collect_mutation_expressions(self.arena, index),
        )

    def execute(self, index: int) -> Any:
        """Compile the path at *index* and run it through the engine.

        Returns the bound terms of a read query, or ``None`` after an
        update.
        """
        if self.engine is None:
            raise PathQueryError("No query engine configured for this path factory")
        query_context = self.query_context(index)
        query = compile_query(self.arena[index], query_context)
        if query_context.mutation_expressions:
            self.engine.update(query)
            return None
        return self.engine.terms(query)


# ── Fallback and default handlers ─────────────────────────────────


def predicate_step(factory: PathFactory, index: int, name: str) -> Path:
    """Treat an unknown property as a further predicate step."""
    return factory.extend(index, name, factory.resolve_predicate(name))


def _sparql(factory: PathFactory, index: int) -> str:
    return compile_query(factory.arena[index], factory.query_context(index))


def _path_expression(factory: PathFactory, index: int) -> Optional[List[PathSegment]]:
    expression = factory.arena[index].path_expression
    return list(expression) if expression is not None else None


def _mutation_expressions(factory: PathFactory, index: int) -> List[MutationExpression]:
    return collect_mutation_expressions(factory.arena, index)


def _subject(factory: PathFactory, index: int) -> Any:
    expression = factory.arena[index].path_expression
    return expression[0].subject if expression else None


def _predicate(factory: PathFactory, index: int) -> Optional[Identifier]:
    expression = factory.arena[index].path_expression
    if not expression or len(expression) < 2:
        return None
    return expression[-1].predicate


def _results(factory: PathFactory, index: int) -> Any:
    return factory.execute(index)


# ── Write handlers ────────────────────────────────────────────────


def _value_term(value: Any) -> Identifier:
    # Plain strings are values, not IRIs
    if isinstance(value, str) and not isinstance(value, Identifier):
        return Literal(value)
    return term_from_value(value)


def _range_expressions(values: Sequence[Any]) -> List[List[PathSegment]]:
    """Group concrete values into one range; each path becomes its own."""
    terms = [_value_term(v) for v in values if not isinstance(v, Path)]
    ranges = [v["path_expression"] for v in values if isinstance(v, Path)]
    if terms:
        ranges.insert(0, [PathSegment(subject=terms[0] if len(terms) == 1 else terms)])
    return ranges


def _split_last_step(factory: PathFactory, index: int, action: str):
    expression = factory.arena[index].path_expression or ()
    if len(expression) < 2:
        raise PathStructureError(
            f"{action} needs a path with at least a subject and a predicate"
        )
    return list(expression[:-1]), expression[-1].predicate, list(expression)


def _mutations(
    mutation_type: MutationType,
    domain: List[PathSegment],
    predicate: Identifier,
    values: Sequence[Any],
) -> List[MutationExpression]:
    return [
        MutationExpression(
            mutation_type=mutation_type,
            domain_expression=domain,
            predicate=predicate,
            range_expression=range_expression,
        )
        for range_expression in _range_expressions(values)
    ]


def _delete_all(full_expression: List[PathSegment]) -> MutationExpression:
    return MutationExpression(
        mutation_type=MutationType.DELETE, domain_expression=full_expression
    )


def _add(factory: PathFactory, index: int) -> Callable[..., Path]:
    def add(*values: Any) -> Path:
        if not values:
            raise PathStructureError("add needs at least one value")
        domain, predicate, _ = _split_last_step(factory, index, "add")
        return factory.derive(
            index, "add", _mutations(MutationType.INSERT, domain, predicate, values)
        )

    return add


def _delete(factory: PathFactory, index: int) -> Callable[..., Path]:
    def delete(*values: Any) -> Path:
        domain, predicate, full = _split_last_step(factory, index, "delete")
        if not values:
            return factory.derive(index, "delete", [_delete_all(full)])
        return factory.derive(
            index, "delete", _mutations(MutationType.DELETE, domain, predicate, values)
        )

    return delete


def _set(factory: PathFactory, index: int) -> Callable[..., Path]:
    def set_(*values: Any) -> Path:
        domain, predicate, full = _split_last_step(factory, index, "set")
        mutations = [_delete_all(full)]
        mutations.extend(_mutations(MutationType.INSERT, domain, predicate, values))
        return factory.derive(index, "set", mutations)

    return set_


def _replace(factory: PathFactory, index: int) -> Callable[[Any, Any], Path]:
    def replace(old_value: Any, new_value: Any) -> Path:
        domain, predicate, _ = _split_last_step(factory, index, "replace")
        mutations = _mutations(MutationType.DELETE, domain, predicate, [old_value])
        mutations.extend(_mutations(MutationType.INSERT, domain, predicate, [new_value]))
        return factory.derive(index, "replace", mutations)

    return replace


DEFAULT_HANDLERS: Dict[str, Handler] = {
    # Read and query functionality
    "sparql": _sparql,
    "path_expression": _path_expression,
    "subject": _subject,
    "predicate": _predicate,
    "results": _results,
    # Write functionality
    "mutation_expressions": _mutation_expressions,
    "add": _add,
    "delete": _delete,
    "set": _set,
    "replace": _replace,
}

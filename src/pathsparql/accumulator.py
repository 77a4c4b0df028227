"""Collect the mutations attached along a chain of derived paths."""

from __future__ import annotations

from typing import List

from pathsparql.arena import PathArena
from pathsparql.models import MutationExpression


def collect_mutation_expressions(arena: PathArena, leaf: int) -> List[MutationExpression]:
    """Gather mutations from *leaf* up to its root, oldest first.

    Mutations found on an ancestor are placed before those of its
    descendants, so chained ``add``/``delete`` calls compile in the
    order they were made.
    """
    collected: List[MutationExpression] = []
    for context in arena.lineage(leaf):
        if context.mutation_expressions:
            collected[:0] = context.mutation_expressions
    return collected

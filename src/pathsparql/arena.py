"""Append-only storage for path contexts.

Every path derived from another one records the index of its parent
instead of a reference to it, so a chain of derived paths can be walked
back to its root without recursion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from pathsparql.models import MutationExpression, PathSegment


@dataclass(frozen=True)
class PathContext:
    """State recorded for one path."""

    description: str
    property: Optional[str] = None
    parent: Optional[int] = None
    path_expression: Optional[Tuple[PathSegment, ...]] = None
    mutation_expressions: Tuple[MutationExpression, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.description


class PathArena:
    """Owns the :class:`PathContext` records of one path factory."""

    def __init__(self) -> None:
        self._contexts: List[PathContext] = []

    def add(self, context: PathContext) -> int:
        """Store *context* and return its index."""
        if context.parent is not None and not 0 <= context.parent < len(self._contexts):
            raise IndexError(f"Unknown parent path {context.parent}")
        self._contexts.append(context)
        return len(self._contexts) - 1

    def __getitem__(self, index: int) -> PathContext:
        return self._contexts[index]

    def __len__(self) -> int:
        return len(self._contexts)

    def lineage(self, index: int) -> Iterator[PathContext]:
        """Yield the context at *index* and then each of its ancestors."""
        current: Optional[int] = index
        while current is not None:
            context = self._contexts[current]
            yield context
            current = context.parent

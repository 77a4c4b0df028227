"""Collision-free query variable allocation.

A variable scope is a plain ``dict`` mapping each label already used in
one query to ``True``.  A fresh scope is created for every compiled
query block and is never shared between blocks.
"""

from __future__ import annotations

VariableScope = dict[str, bool]


def get_query_var(suggestion: str, scope: VariableScope) -> str:
    """Return an unused variable label based on *suggestion*.

    The suggestion itself is used when it is free; otherwise
    ``suggestion_0``, ``suggestion_1``, ... are tried in order.  The
    returned label is marked as used in *scope*.

    Examples::

        >>> scope = {"a": True}
        >>> get_query_var("a", scope)
        'a_0'
        >>> sorted(scope)
        ['a', 'a_0']
    """
    label = suggestion
    counter = 0
    while label in scope:
        label = f"{suggestion}_{counter}"
        counter += 1
    scope[label] = True
    return label

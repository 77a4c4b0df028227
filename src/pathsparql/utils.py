"""
Common utility functions for IRI and variable name handling.

These helpers are shared by the compiler, the path factory and the
command line interface.
"""

import re
from typing import Dict, Optional

# Trailing run of characters that are legal in a SPARQL variable name
_VAR_NAME_TAIL = re.compile(r"[A-Za-z0-9_]+$")


def var_name(suggestion: Optional[str]) -> str:
    """Turn a property name or IRI into a usable variable label.

    Only the trailing run of word characters is kept; when nothing
    usable remains the label ``result`` is returned.

    Examples::

        >>> var_name("https://example.org/#Dp2")
        'Dp2'
        >>> var_name("/x/")
        'result'
    """
    if not suggestion:
        return "result"
    match = _VAR_NAME_TAIL.search(str(suggestion))
    return match.group(0) if match else "result"


def expand_curie(curie: str, prefixes: Dict[str, str]) -> str:
    """Expand a CURIE (prefix:local) to a full URI."""
    if ":" not in curie or curie.startswith("http"):
        return curie
    pfx, local = curie.split(":", 1)
    ns = prefixes.get(pfx)
    return f"{ns}{local}" if ns else curie


def is_absolute_iri(value: str) -> bool:
    """Check whether *value* looks like an absolute IRI."""
    return value.startswith(("http://", "https://", "urn:"))

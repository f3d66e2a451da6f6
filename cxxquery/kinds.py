"""
cxxquery.kinds
==============

Kind registry: which child searches each scope kind permits, and which Node
variant class wraps records of each kind.

The kind space is open.  A record of an unregistered kind still becomes a
plain :class:`~cxxquery.node.Node`; it simply has an empty capability set, so
any *governed* search on it raises
:class:`~cxxquery.errors.NotQueryableError`.

Governed kinds
--------------
A kind is governed when a named search method targets it (``classes`` targets
``Class``, ``methods`` targets ``Method``, ...).  Only governed kinds are
subject to the capability check; ``NodeCache.find_children_of_type`` with an
ungoverned kind is a plain filter, so kinds introduced later by the
extraction tool never break querying.

Adding a kind::

    from cxxquery.kinds import register_kind, SCOPE_SEARCHES
    register_kind("Concept")                        # leaf, no searches
    register_kind("Module", children=SCOPE_SEARCHES)  # namespace-like
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Type

#: search method name -> kind it looks for
SEARCH_METHODS: Dict[str, str] = {
    "namespaces": "Namespace",
    "classes": "Class",
    "structs": "Struct",
    "functions": "Function",
    "enumerations": "Enumeration",
    "variables": "Variable",
    "typedefs": "Typedef",
    "methods": "Method",
    "constructors": "Constructor",
    "fields": "Field",
}

#: Synthetic kind of the root scope when the corpus has no global namespace record.
ROOT_KIND = "Root"

SCOPE_SEARCHES: FrozenSet[str] = frozenset({
    "Namespace", "Class", "Struct", "Function", "Enumeration", "Variable",
    "Typedef",
})

RECORD_SEARCHES: FrozenSet[str] = frozenset({
    "Class", "Struct", "Function", "Enumeration", "Variable", "Typedef",
    "Method", "Constructor", "Field",
})


@dataclass(frozen=True)
class KindSpec:
    """Capabilities of one kind."""
    name: str
    children: FrozenSet[str] = frozenset()
    node_class: Optional[type] = None

    def permits(self, kind: str) -> bool:
        return kind in self.children


_REGISTRY: Dict[str, KindSpec] = {}
_GOVERNED: FrozenSet[str] = frozenset(SEARCH_METHODS.values())


def register_kind(name: str, children: Optional[Iterable[str]] = None,
                  node_class: Optional[Type] = None) -> KindSpec:
    """Register (or update) the capability set and variant class of a kind.

    Whichever of ``children`` / ``node_class`` is omitted keeps the value of
    a previous registration (empty set and plain ``Node`` for a new kind).
    """
    previous = _REGISTRY.get(name, KindSpec(name))
    if children is None:
        children = previous.children
    if node_class is None:
        node_class = previous.node_class
    spec = KindSpec(name, frozenset(children), node_class)
    _REGISTRY[name] = spec
    return spec


def register_search(method: str, kind: str) -> None:
    """Declare ``kind`` as governed under the search name ``method``."""
    global _GOVERNED
    SEARCH_METHODS[method] = kind
    _GOVERNED = frozenset(SEARCH_METHODS.values())


def spec_for(kind: str) -> KindSpec:
    """Return the spec of ``kind``; unregistered kinds get an empty one."""
    spec = _REGISTRY.get(kind)
    if spec is None:
        return KindSpec(kind)
    return spec


def is_governed(kind: str) -> bool:
    return kind in _GOVERNED


def registered_kinds() -> FrozenSet[str]:
    return frozenset(_REGISTRY)


# Capability sets.  Variant classes are attached by cxxquery.node.
register_kind(ROOT_KIND, SCOPE_SEARCHES)
register_kind("Namespace", SCOPE_SEARCHES)
for _record_kind in ("Class", "Struct", "Union"):
    register_kind(_record_kind, RECORD_SEARCHES)
del _record_kind

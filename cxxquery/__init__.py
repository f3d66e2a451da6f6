"""
cxxquery — Queryable Object Model over C++ Extraction-Tool Records
===================================================================

This package turns the flat, id-referenced element records emitted by a C++
program-structure extraction tool (GCC-XML / CastXML) into a navigable,
cached, typed graph of namespaces, classes, functions and types, and offers a
uniform, chainable search interface over it.

Core modules
------------
records
    The record feed: :class:`Record` and the XML reader :func:`read_xml`.
cache
    :class:`NodeCache`, the id/kind/context-indexed owner of all nodes, and
    the process-wide current cache.
node
    :class:`Node` and its per-kind variants.
query
    :class:`QueryResult`, the collection every search returns.
kinds
    Per-kind capability sets and variant classes.
criteria
    S-expression node filters.

Quick start
-----------
>>> from cxxquery import ingest
>>> cache = ingest([
...     {"kind": "Namespace", "id": "1", "name": "N", "context": "_1"},
...     {"kind": "Class", "id": "2", "name": "C", "context": "1"},
...     {"kind": "Function", "id": "3", "name": "f",
...      "demangled": "N::C::f(int)", "context": "2"},
... ])
>>> cache.root.namespaces("N").classes("C").functions("f").qualified_name
'N::C::f'
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import IO, Any, List, Optional, Union

__version__ = "0.1.0"
__all__: List[str] = []          # populated below

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

# ---------------------------------------------------------------------------
# Re-exported names, by submodule
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "errors": [
        "CxxQueryError",
        "RecordError",
        "FeedError",
        "DuplicateIdError",
        "DanglingReferenceError",
        "CorpusAlreadyLoadedError",
        "NotQueryableError",
        "UnsupportedMatcherError",
        "CardinalityError",
        "CriteriaError",
    ],
    "config": [
        "QueryConfig",
    ],
    "records": [
        "Record",
        "NestedEntry",
        "read_xml",
    ],
    "kinds": [
        "register_kind",
        "register_search",
    ],
    "node": [
        "Node",
        "Argument",
        "EnumValue",
    ],
    "query": [
        "QueryResult",
    ],
    "criteria": [
        "compile_criteria",
    ],
    "cache": [
        "NodeCache",
        "ingest",
        "current_cache",
        "reset",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    mod = importlib.import_module(f"{__name__}.{module_rel_name}")
    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            raise AttributeError(
                f"cxxquery.{module_rel_name} does not export '{name}'")
        setattr(current_module, name, obj)
        __all__.append(name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names)
del _mod, _names


def load(source: Union[str, "IO[bytes]", Any],
         config: Optional["QueryConfig"] = None) -> "NodeCache":  # noqa: F821
    """Read an extraction-tool XML document and make it the current corpus.

    Equivalent to ``ingest(read_xml(source), config)``.
    """
    cache = ingest(read_xml(source), config)  # noqa: F821  (bound above)
    _log.debug("Loaded %d nodes from %s", len(cache),
               getattr(source, "name", source))
    return cache


__all__.append("load")

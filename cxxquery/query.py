"""
cxxquery.query
==============

:class:`QueryResult`, the ordered, set-like collection every search returns.

Single-match convenience
------------------------
Code that expects "a class" should not have to special-case one-vs-many::

    klass = root.namespaces("N").classes("C")      # a QueryResult
    klass.qualified_name                           # 'N::C'
    klass.functions("f")                           # searches inside N::C

Any Node operation accessed on a result is delegated to :meth:`one`, which
raises :class:`~cxxquery.errors.CardinalityError` (with the count and the
criteria that produced the result) unless exactly one node matched.  The set
of delegated names is closed: it is the public Node API listed in
``_NODE_OPERATIONS``; nothing else is forwarded.

Operations defined over the collection itself never collapse: ``len``,
iteration, indexing, membership, :meth:`find`, :meth:`select`, :meth:`one`
and :meth:`first`.

String equality
---------------
``result == "Foo"`` is true when exactly one node matched and its name is
``Foo`` or ``Foo`` occurs in its qualified name with ``*`` as a wildcard, so
``result == "Foo*"`` holds for ``N::FooBar``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import (
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Union,
    overload,
)

from .criteria import compile_criteria
from .errors import CardinalityError
from .matching import NameMatcher, describe_matcher, matches_name, name_test
from .node import Node

Predicate = Callable[["Node"], bool]

# Public Node API reachable on a single-match result.
_NODE_OPERATIONS = frozenset({
    # identity and attributes
    "id", "kind", "name", "demangled", "record", "cache", "attributes",
    "attribute",
    # navigation
    "parent", "qualified_name", "file", "file_name", "members",
    # access predicates
    "access", "is_const", "is_public", "is_protected", "is_private",
    # kind-scoped searches
    "namespaces", "classes", "structs", "functions", "enumerations",
    "variables", "typedefs", "methods", "constructors", "fields",
    # types and rendering
    "base_type", "render",
    # variant accessors
    "is_anonymous", "is_abstract", "is_incomplete", "bases", "arguments",
    "return_type", "is_variadic", "is_static", "is_virtual",
    "is_pure_virtual", "values", "type", "is_extern", "is_volatile",
    "element_count", "basename",
})


class QueryResult(Sequence):
    """An ordered, duplicate-free collection of nodes.

    Parameters
    ----------
    nodes : iterable of Node
        Nodes in the order they should be reported.  Later duplicates (same
        node) are dropped.
    criteria : str
        Description of the search that produced the result, used in error
        messages.
    """

    __slots__ = ("_nodes", "_criteria")

    def __init__(self, nodes: Iterable["Node"] = (), criteria: str = "") -> None:
        seen = set()
        unique: List["Node"] = []
        for node in nodes:
            key = (id(node.cache), node.id)
            if key in seen:
                continue
            seen.add(key)
            unique.append(node)
        self._nodes = unique
        self._criteria = criteria

    @property
    def criteria(self) -> str:
        return self._criteria

    # ----- sequence protocol ------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator["Node"]:
        return iter(self._nodes)

    @overload
    def __getitem__(self, index: int) -> "Node": ...

    @overload
    def __getitem__(self, index: slice) -> "QueryResult": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return QueryResult(self._nodes[index], f"{self._criteria}[{index.start}:{index.stop}]")
        return self._nodes[index]

    def __contains__(self, node: object) -> bool:
        if not isinstance(node, Node):
            return False
        return any(n == node for n in self._nodes)

    def __bool__(self) -> bool:
        return bool(self._nodes)

    def to_list(self) -> List["Node"]:
        return list(self._nodes)

    # ----- narrowing --------------------------------------------------------

    def find(self,
             kind: Optional[str] = None,
             name: NameMatcher = None,
             pattern: Union[None, str, re.Pattern[str]] = None,
             predicate: Union[None, str, Predicate] = None) -> "QueryResult":
        """Narrow this result; all given criteria must hold.

        Parameters
        ----------
        kind : str, optional
            Element kind tag.
        name : str or compiled pattern, optional
            Literal name (``==``) or pattern (``search``).
        pattern : str or compiled pattern, optional
            Regular expression searched in the name.
        predicate : callable or str, optional
            ``Node -> bool``, or a criteria S-expression (see
            :mod:`cxxquery.criteria`).
        """
        tests: List[Predicate] = []
        labels: List[str] = []
        if kind is not None:
            tests.append(lambda n: n.kind == kind)
            labels.append(f"kind={kind}")
        test = name_test(name)
        if test is not None:
            tests.append(lambda n: test(n.name))
            labels.append(f"name={describe_matcher(name)}")
        if pattern is not None:
            compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
            pattern_test = name_test(compiled)
            tests.append(lambda n: pattern_test(n.name))
            labels.append(f"pattern={describe_matcher(compiled)}")
        if predicate is not None:
            if isinstance(predicate, str):
                labels.append(predicate)
                predicate = compile_criteria(predicate)
            else:
                labels.append(getattr(predicate, "__name__", "predicate"))
            tests.append(predicate)

        matched = [n for n in self._nodes if all(t(n) for t in tests)]
        return QueryResult(matched, self._narrowed(", ".join(labels)))

    def select(self, criteria: str) -> "QueryResult":
        """Narrow with a criteria S-expression, e.g. ``(and (kind Class) (const))``."""
        return self.find(predicate=criteria)

    def _narrowed(self, label: str) -> str:
        if not label:
            return self._criteria
        if not self._criteria:
            return f".find({label})"
        return f"{self._criteria}.find({label})"

    # ----- collapse ---------------------------------------------------------

    def one(self, operation: Optional[str] = None) -> "Node":
        """Return the single node, or raise :class:`CardinalityError`."""
        if len(self._nodes) != 1:
            raise CardinalityError(len(self._nodes), self._criteria, operation)
        return self._nodes[0]

    def first(self) -> Optional["Node"]:
        return self._nodes[0] if self._nodes else None

    def __getattr__(self, attr: str):
        if attr in _NODE_OPERATIONS:
            return getattr(self.one(attr), attr)
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {attr!r}")

    # ----- comparison and display -------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return len(self._nodes) == 1 and matches_name(self._nodes[0], other)
        if isinstance(other, QueryResult):
            return self._nodes == other._nodes
        if isinstance(other, (list, tuple)):
            return self._nodes == list(other)
        if isinstance(other, Node):
            return len(self._nodes) == 1 and self._nodes[0] == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        if len(self._nodes) == 1:
            return str(self._nodes[0])
        return "[" + ", ".join(str(n) for n in self._nodes) + "]"

    def __repr__(self) -> str:
        return f"QueryResult({self._criteria or '<all>'}, {len(self._nodes)} nodes)"

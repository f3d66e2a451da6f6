"""
cxxquery.cache
==============

The node cache: the single owner of every :class:`~cxxquery.node.Node` of a
corpus and the single authority for resolving ids to nodes.

A :class:`NodeCache` is born empty and populated by exactly one
:meth:`NodeCache.ingest` call, which makes one pass over the record feed and
builds three indices:

* id → Node
* kind → Nodes of that kind, in feed order
* context id → Nodes directly in that scope, in feed order

No parent-before-child ordering is assumed.  Links between nodes are never
stored at ingestion; nodes resolve their ``context`` / ``file`` / ``type``
ids lazily through :meth:`NodeCache.resolve_reference` and memoize the
result.  Calling ``ingest`` again on the same cache raises
:class:`~cxxquery.errors.CorpusAlreadyLoadedError`: two corpora are never
merged, because ids are not stable across tool runs.

Process-wide cache
------------------
The module keeps one *current* cache for the process::

    from cxxquery import cache

    cache.ingest(records)            # builds a fresh NodeCache, replaces the old one
    cache.current_cache().root.namespaces("N")

Nodes obtained from a replaced cache stay valid and keep resolving against
the corpus they came from.

Public API
----------
    NodeCache       - id/kind/context indices and search dispatch
    ingest          - build a new cache and make it current
    current_cache   - the current process-wide cache
    reset           - drop the current cache
"""

from __future__ import annotations

import logging
from collections import OrderedDict, defaultdict
from typing import (
    Any,
    DefaultDict,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
    Union,
)

from . import kinds
from .config import QueryConfig
from .errors import (
    CorpusAlreadyLoadedError,
    DanglingReferenceError,
    DuplicateIdError,
    NotQueryableError,
)
from .matching import NameMatcher, describe_matcher, name_test
from .node import Node, RootNode
from .query import QueryResult
from .records import Record, as_record

logger = logging.getLogger(__name__)

RecordLike = Union[Record, Mapping[str, Any]]

# Attributes whose value is an id checked by strict ingestion.
_REFERENCE_KEYS = ("context", "file")


class NodeCache:
    """Id-, kind- and context-indexed store of the nodes of one corpus.

    Parameters
    ----------
    config : QueryConfig, optional
        Ingestion and resolution settings.
    """

    def __init__(self, config: Optional[QueryConfig] = None) -> None:
        self._config = config or QueryConfig()
        for warning in self._config.validate():
            logger.warning("QueryConfig: %s", warning)

        self._by_id: Dict[str, Node] = {}
        self._by_kind: DefaultDict[str, List[Node]] = defaultdict(list)
        self._by_context: DefaultDict[str, List[Node]] = defaultdict(list)
        self._order: List[Node] = []
        self._loaded = False
        self._root: Optional[Node] = None
        self._dangling: Set[Tuple[str, str]] = set()

    @property
    def config(self) -> QueryConfig:
        return self._config

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ----- ingestion --------------------------------------------------------

    def ingest(self, records: Iterable[RecordLike]) -> "NodeCache":
        """Create one node per record in a single pass.

        Parameters
        ----------
        records : iterable of Record or mapping
            The record feed.  Mappings are converted with
            :meth:`Record.from_mapping`.

        Returns
        -------
        NodeCache
            ``self``, to allow ``NodeCache().ingest(feed)``.

        Raises
        ------
        CorpusAlreadyLoadedError
            If this cache has already ingested a corpus.
        DuplicateIdError
            If two records share an id.
        DanglingReferenceError
            In strict mode, if a ``context`` or ``file`` id does not resolve.

        Any of these errors leaves the cache empty and unloaded.
        """
        if self._loaded:
            raise CorpusAlreadyLoadedError(
                "This NodeCache already holds a corpus; use cxxquery.cache.ingest() "
                "or a new NodeCache to load another")

        by_id: Dict[str, Node] = {}
        by_kind: DefaultDict[str, List[Node]] = defaultdict(list)
        by_context: DefaultDict[str, List[Node]] = defaultdict(list)
        order: List[Node] = []
        for item in records:
            record = as_record(item)
            if record.id in by_id:
                raise DuplicateIdError(record.id)
            spec = kinds.spec_for(record.kind)
            node_class = spec.node_class or Node
            node = node_class(record, self)
            by_id[record.id] = node
            by_kind[record.kind].append(node)
            if record.context is not None:
                by_context[record.context].append(node)
            order.append(node)

        if self._config.strict_references:
            self._check_references(by_id, order)

        self._by_id = by_id
        self._by_kind = by_kind
        self._by_context = by_context
        self._order = order
        self._loaded = True
        self._root = None
        self._dangling.clear()

        logger.debug("Ingested %d records of %d kinds", len(self._order),
                     len(self._by_kind))
        return self

    def _check_references(self, by_id: Mapping[str, Node],
                          order: Iterable[Node]) -> None:
        root_context = self._config.root_context
        for node in order:
            for key in _REFERENCE_KEYS:
                target = node.attribute(key)
                if target is None or (key == "context" and target == root_context):
                    continue
                if target not in by_id:
                    raise DanglingReferenceError(node.id, key, target)

    # ----- lookup -----------------------------------------------------------

    def find_by_id(self, node_id: Optional[str]) -> Optional[Node]:
        """Return the node with ``node_id``, or ``None`` if there is none."""
        if node_id is None:
            return None
        return self._by_id.get(node_id)

    def resolve_reference(self, node: Node, key: str, target: Optional[str],
                          scope: bool = False) -> Optional[Node]:
        """Resolve an id-valued attribute of ``node``.

        ``None`` targets resolve to ``None``; so does the root context when
        ``scope`` is true.  A target that names no record also resolves to
        ``None`` and is logged once at DEBUG level.
        """
        if target is None:
            return None
        if scope and target == self._config.root_context:
            return None
        found = self._by_id.get(target)
        if found is None and (node.id, key) not in self._dangling:
            self._dangling.add((node.id, key))
            logger.debug("%s %r: %s=%r does not resolve", node.kind, node.id,
                         key, target)
        return found

    @property
    def root(self) -> Node:
        """The root scope.

        This is the corpus's own record for the global namespace when it has
        one (the record whose id is ``QueryConfig.root_context``), otherwise a
        synthetic ``Root`` scope that is not in the id index.
        """
        if self._root is None:
            found = self._by_id.get(self._config.root_context)
            if found is None:
                found = RootNode(
                    Record(kind=kinds.ROOT_KIND, id=self._config.root_context,
                           name="::", attributes={"id": self._config.root_context,
                                                   "name": "::"}),
                    self)
            self._root = found
        return self._root

    # ----- search dispatch --------------------------------------------------

    def find_children_of_type(self, scope: Optional[Node], kind: str,
                              matcher: NameMatcher = None) -> QueryResult:
        """Nodes of ``kind`` directly inside ``scope``, in feed order.

        Parameters
        ----------
        scope : Node or None
            The enclosing scope; ``None`` means the root scope, which matches
            only nodes whose context is ``QueryConfig.root_context``.
        kind : str
            Element kind.  Unknown kinds give an empty result.
        matcher : str or compiled pattern, optional
            Literal name or pattern restricting the result.

        Raises
        ------
        NotQueryableError
            If ``kind`` is governed and the scope's kind does not permit it.
        UnsupportedMatcherError
            If ``matcher`` is of an unsupported type.
        """
        if scope is None:
            scope = self.root
        if kinds.is_governed(kind) and not kinds.spec_for(scope.kind).permits(kind):
            raise NotQueryableError(scope.kind, kind)
        test = name_test(matcher)

        nodes = [n for n in self._by_context.get(scope.id, ())
                 if n.kind == kind and (test is None or test(n.name))]
        return QueryResult(nodes, self._describe(scope, kind, matcher))

    def members_of(self, scope: Optional[Node], kind: Optional[str] = None) -> QueryResult:
        """All nodes directly inside ``scope``, without a capability check."""
        if scope is None:
            scope = self.root
        nodes = [n for n in self._by_context.get(scope.id, ())
                 if kind is None or n.kind == kind]
        return QueryResult(nodes, self._describe(scope, kind or "*", None))

    @staticmethod
    def _describe(scope: Node, kind: str, matcher: NameMatcher) -> str:
        where = scope.qualified_name or scope.id
        label = f"{where}/{kind}"
        if matcher is not None:
            label += f"[{describe_matcher(matcher)}]"
        return label

    # ----- whole-corpus queries ---------------------------------------------

    def nodes_of_kind(self, kind: str) -> QueryResult:
        """Every node of ``kind`` anywhere in the corpus, in feed order."""
        return QueryResult(self._by_kind.get(kind, ()), f"//{kind}")

    def all_nodes(self) -> QueryResult:
        return QueryResult(self._order, "//*")

    def select(self, criteria: str) -> QueryResult:
        """Every node matching a criteria S-expression."""
        return self.all_nodes().select(criteria)

    def kinds(self) -> FrozenSet[str]:
        return frozenset(self._by_kind)

    def kind_counts(self) -> "OrderedDict[str, int]":
        return OrderedDict((k, len(v)) for k, v in self._by_kind.items())

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._order)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __repr__(self) -> str:
        return f"NodeCache({len(self._order)} nodes, {len(self._by_kind)} kinds)"


# ---------------------------------------------------------------------------
# Process-wide current cache
# ---------------------------------------------------------------------------

_current: Optional[NodeCache] = None


def ingest(records: Iterable[RecordLike],
           config: Optional[QueryConfig] = None) -> NodeCache:
    """Build a fresh cache from ``records`` and make it the current one.

    Any previously current cache is discarded; this never merges corpora.
    """
    global _current
    cache = NodeCache(config).ingest(records)
    if _current is not None:
        logger.debug("Replacing current corpus (%d nodes) with a new one (%d nodes)",
                     len(_current), len(cache))
    _current = cache
    return cache


def current_cache() -> NodeCache:
    """The current process-wide cache (an empty one if nothing was ingested)."""
    global _current
    if _current is None:
        _current = NodeCache()
    return _current


def reset() -> None:
    """Forget the current process-wide cache."""
    global _current
    _current = None

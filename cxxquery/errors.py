"""
cxxquery.errors
===============

Exception hierarchy for the node graph and query engine.

::

    CxxQueryError (base)
    ├── RecordError               - malformed record in the feed
    ├── FeedError                 - unreadable / malformed XML feed
    ├── DuplicateIdError          - same id twice in one feed
    ├── DanglingReferenceError    - context/file id does not resolve (strict mode)
    ├── CorpusAlreadyLoadedError  - ingest() called on a populated cache
    ├── NotQueryableError         - search kind illegal for the scope kind
    ├── UnsupportedMatcherError   - matcher is not None / str / pattern
    ├── CardinalityError          - collapse of a result with != 1 nodes
    └── CriteriaError             - criteria S-expression failed to parse/compile

None of these are transient: every one is a caller-contract violation or a
data-integrity condition, and nothing in the package retries.
"""

from __future__ import annotations

from typing import Optional


class CxxQueryError(Exception):
    """Base exception for all cxxquery errors."""
    pass


class RecordError(CxxQueryError):
    """Raised when a record lacks a kind or an id."""
    pass


class FeedError(CxxQueryError):
    """Raised when an extraction-tool XML document cannot be read."""
    pass


class DuplicateIdError(CxxQueryError):
    """Raised when two records in one feed share an id."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duplicate record id {node_id!r} in feed")


class DanglingReferenceError(CxxQueryError):
    """Raised when a ``context`` or ``file`` id references no record."""

    def __init__(self, node_id: str, key: str, target: str):
        self.node_id = node_id
        self.key = key
        self.target = target
        super().__init__(
            f"Record {node_id!r} has {key}={target!r} which references "
            f"no record in this corpus")


class CorpusAlreadyLoadedError(CxxQueryError):
    """Raised when ``NodeCache.ingest`` is called twice on one cache."""
    pass


class NotQueryableError(CxxQueryError):
    """Raised when a scope is searched for a kind its kind does not permit.

    For example, a ``Class`` cannot contain ``Namespace`` children, so
    ``klass.namespaces()`` raises this rather than returning nothing.
    """

    def __init__(self, scope_kind: str, search_kind: str):
        self.scope_kind = scope_kind
        self.search_kind = search_kind
        super().__init__(
            f"Cannot query for {search_kind} nodes while in a {scope_kind}")


class UnsupportedMatcherError(CxxQueryError, TypeError):
    """Raised for a name matcher that is neither a string nor a pattern."""

    def __init__(self, matcher: object):
        self.matcher = matcher
        super().__init__(
            f"Unsupported name matcher of type {type(matcher).__name__}: "
            f"expected None, str or a compiled regular expression")


class CardinalityError(CxxQueryError):
    """Raised when a query result is used as a single node but is not one.

    Attributes
    ----------
    count : int
        Number of nodes actually in the result.
    criteria : str
        Human-readable description of the searches that produced it.
    """

    def __init__(self, count: int, criteria: str,
                 operation: Optional[str] = None):
        self.count = count
        self.criteria = criteria
        self.operation = operation
        what = "no nodes" if count == 0 else f"{count} nodes"
        msg = f"Expected exactly one node but query {criteria or '<all>'} matched {what}"
        if operation:
            msg += f" (while accessing {operation!r})"
        super().__init__(msg)


class CriteriaError(CxxQueryError):
    """Raised when a criteria S-expression is malformed."""
    pass

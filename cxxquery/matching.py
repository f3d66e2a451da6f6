"""
cxxquery.matching
=================

Name matchers shared by the cache, nodes and query results.

A *name matcher* is one of:

``None``
    no restriction;
``str``
    literal name, compared with ``==``;
compiled ``re.Pattern``
    matched against the name with ``search``.

Anything else raises :class:`~cxxquery.errors.UnsupportedMatcherError`.
"""

from __future__ import annotations

import functools
import re
from typing import Callable, Optional, Union

from .errors import UnsupportedMatcherError

NameMatcher = Union[None, str, re.Pattern[str]]
NameTest = Callable[[Optional[str]], bool]


def name_test(matcher: NameMatcher) -> Optional[NameTest]:
    """Turn a name matcher into a predicate over names.

    Returns ``None`` for the ``None`` matcher so callers can skip filtering.
    """
    if matcher is None:
        return None
    if isinstance(matcher, str):
        return lambda name: name == matcher
    if isinstance(matcher, re.Pattern):
        return lambda name: name is not None and matcher.search(name) is not None
    raise UnsupportedMatcherError(matcher)


def describe_matcher(matcher: NameMatcher) -> str:
    if matcher is None:
        return ""
    if isinstance(matcher, re.Pattern):
        return f"/{matcher.pattern}/"
    return repr(matcher)


@functools.lru_cache(maxsize=512)
def wildcard_regex(pattern: str) -> re.Pattern[str]:
    """Compile a ``*``-wildcard pattern; every other character is literal."""
    parts = [re.escape(p) for p in pattern.split("*")]
    return re.compile(".*".join(parts), re.DOTALL)


def wildcard_match(pattern: str, text: Optional[str]) -> bool:
    """True if ``text`` matches ``pattern`` in full, ``*`` matching any run."""
    if text is None:
        return False
    return wildcard_regex(pattern).fullmatch(text) is not None


def wildcard_search(pattern: str, text: Optional[str]) -> bool:
    """True if ``pattern`` occurs anywhere in ``text``, ``*`` matching any run."""
    if text is None:
        return False
    return wildcard_regex(pattern).search(text) is not None


def matches_name(node, value: str) -> bool:
    """String-equality rule for nodes and single-node query results.

    ``value`` matches when it equals the node's name, or when it occurs in
    the node's qualified name with ``*`` as a wildcard, so ``"Foo*"`` matches
    ``N::FooBar``.
    """
    if node.name == value:
        return True
    return wildcard_search(value, node.qualified_name)

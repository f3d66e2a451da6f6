"""
cxxquery.criteria
=================

A small S-expression language for node filters, parsed with ``sexpdata``.

Forms
-----
``(kind K)``
    node kind equals ``K``.
``(name N)``
    name equals ``N`` literally.
``(name-like "Foo*")``
    name matches with ``*`` as a wildcard.
``(matches "regex")``
    regular expression searched in the name.
``(qualified "N::*")``
    qualified name matches with ``*`` as a wildcard.
``(attr key value)``
    raw attribute ``key`` equals ``value``.
``(has-attr key)``
    raw attribute ``key`` is present.
``(access public|protected|private)``
    access level (absent means public).
``(const)``
    the const flag is set.
``(in-file "name.h")``
    declared in a file whose path or base name equals the argument.
``(and C ...)`` / ``(or C ...)`` / ``(not C)``
    combinators.

Usage::

    from cxxquery.criteria import compile_criteria

    pred = compile_criteria('(and (kind Method) (not (access public)))')
    hidden = [n for n in cache if pred(n)]

Compiled predicates are plain callables ``Node -> bool`` and can be passed
anywhere a predicate is accepted (``QueryResult.find(predicate=...)``).
"""

from __future__ import annotations

import functools
import logging
import os
import re
from typing import Any, Callable, Dict, List

import sexpdata

from .errors import CriteriaError
from .matching import wildcard_match

logger = logging.getLogger(__name__)

Criterion = Callable[[Any], bool]


# ===================================================================
#  PART 1 — S-EXPRESSION PARSING
# ===================================================================

def parse_criteria(text: str) -> Any:
    """Parse criteria text into a nested list of plain strings and numbers.

    Raises
    ------
    CriteriaError
        If the text is not a single well-formed S-expression.
    """
    try:
        parsed = sexpdata.loads(text)
    except Exception as e:
        raise CriteriaError(f"Failed to parse criteria {text!r}: {e}") from e
    return _normalise(parsed)


def _normalise(obj: Any) -> Any:
    """Recursively turn sexpdata output into plain Python values."""
    if isinstance(obj, list):
        return [_normalise(x) for x in obj]
    if isinstance(obj, sexpdata.Symbol):
        value = obj.value() if callable(getattr(obj, "value", None)) else obj
        return str(value)
    if isinstance(obj, bool):
        return "t" if obj else "nil"
    if isinstance(obj, (int, float, str)):
        return obj
    return str(obj)


# ===================================================================
#  PART 2 — COMPILER
# ===================================================================

_Builder = Callable[[List[Any]], Criterion]
_FORMS: Dict[str, _Builder] = {}


def _form(name: str, arity: int = -1):
    """Register a builder for ``(name arg ...)``; ``arity`` -1 means any >= 1."""
    def decorator(fn: _Builder) -> _Builder:
        def checked(args: List[Any]) -> Criterion:
            if arity >= 0 and len(args) != arity:
                raise CriteriaError(
                    f"({name} ...) takes {arity} argument(s), got {len(args)}")
            if arity < 0 and not args:
                raise CriteriaError(f"({name} ...) needs at least one argument")
            return fn(args)
        _FORMS[name] = checked
        return fn
    return decorator


@_form("kind", 1)
def _kind(args: List[Any]) -> Criterion:
    kind = str(args[0])
    return lambda n: n.kind == kind


@_form("name", 1)
def _name(args: List[Any]) -> Criterion:
    name = str(args[0])
    return lambda n: n.name == name


@_form("name-like", 1)
def _name_like(args: List[Any]) -> Criterion:
    pattern = str(args[0])
    return lambda n: wildcard_match(pattern, n.name)


@_form("matches", 1)
def _matches(args: List[Any]) -> Criterion:
    try:
        regex = re.compile(str(args[0]))
    except re.error as e:
        raise CriteriaError(f"Invalid regular expression {args[0]!r}: {e}") from e
    return lambda n: n.name is not None and regex.search(n.name) is not None


@_form("qualified", 1)
def _qualified(args: List[Any]) -> Criterion:
    pattern = str(args[0])
    return lambda n: wildcard_match(pattern, n.qualified_name)


@_form("attr", 2)
def _attr(args: List[Any]) -> Criterion:
    key, value = str(args[0]), str(args[1])
    return lambda n: n.attribute(key) == value


@_form("has-attr", 1)
def _has_attr(args: List[Any]) -> Criterion:
    key = str(args[0])
    return lambda n: n.attribute(key) is not None


@_form("access", 1)
def _access(args: List[Any]) -> Criterion:
    level = str(args[0])
    if level not in ("public", "protected", "private"):
        raise CriteriaError(f"Unknown access level {level!r}")
    return lambda n: n.access == level


@_form("const", 0)
def _const(args: List[Any]) -> Criterion:
    return lambda n: n.is_const


@_form("in-file", 1)
def _in_file(args: List[Any]) -> Criterion:
    wanted = str(args[0])

    def test(n) -> bool:
        path = n.file
        return path is not None and (path == wanted or os.path.basename(path) == wanted)
    return test


@_form("and")
def _and(args: List[Any]) -> Criterion:
    parts = [_compile(a) for a in args]
    return lambda n: all(p(n) for p in parts)


@_form("or")
def _or(args: List[Any]) -> Criterion:
    parts = [_compile(a) for a in args]
    return lambda n: any(p(n) for p in parts)


@_form("not", 1)
def _not(args: List[Any]) -> Criterion:
    inner = _compile(args[0])
    return lambda n: not inner(n)


def _compile(sexp: Any) -> Criterion:
    if not isinstance(sexp, list) or not sexp:
        raise CriteriaError(f"Expected a (form ...) criterion, got {sexp!r}")
    head = sexp[0]
    builder = _FORMS.get(head) if isinstance(head, str) else None
    if builder is None:
        raise CriteriaError(
            f"Unknown criterion {head!r}; expected one of {', '.join(sorted(_FORMS))}")
    return builder(sexp[1:])


@functools.lru_cache(maxsize=256)
def compile_criteria(text: str) -> Criterion:
    """Parse and compile criteria text into a ``Node -> bool`` predicate."""
    predicate = _compile(parse_criteria(text))
    logger.debug("Compiled criteria %s", text)
    return predicate


def criteria_forms() -> List[str]:
    """Names of all recognised forms."""
    return sorted(_FORMS)

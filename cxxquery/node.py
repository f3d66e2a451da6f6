"""
cxxquery.node
=============

Typed, queryable facade over one ingested record.

A :class:`Node` is created by :class:`~cxxquery.cache.NodeCache` during
ingestion and never mutated afterwards, except for the one-time memoization
of ``parent``, ``qualified_name`` and ``file``.  A node holds its record and
a reference to the cache that owns it; every id reference (``context``,
``file``, ``type``, ``returns``, ...) is resolved through that cache.

Variants
--------
Node is a tagged variant: ``kind`` is the tag and the per-kind capability
set lives in :mod:`cxxquery.kinds`.  The subclasses below only add typed
accessors and override :attr:`Node.base_type` / :meth:`Node.render`; they do
not decide which searches are legal.

    ScopeNode           - Namespace, Root
    RecordNode          - Class, Struct, Union
    FunctionNode        - Function, Method, Constructor, Destructor, ...
    EnumerationNode     - Enumeration
    VariableNode        - Variable, Field
    TypedefNode         - Typedef            (base_type sees through)
    FundamentalTypeNode - FundamentalType
    PointerTypeNode     - PointerType
    ReferenceTypeNode   - ReferenceType
    CvQualifiedTypeNode - CvQualifiedType    (base_type sees through)
    ElaboratedTypeNode  - ElaboratedType     (base_type sees through)
    ArrayTypeNode       - ArrayType
    FileNode            - File

Typical usage::

    from cxxquery import load

    cache = load("project.xml")
    klass = cache.root.namespaces("N").classes("C")
    for method in klass.methods():
        print(method.render())
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from .kinds import ROOT_KIND, register_kind
from .matching import NameMatcher, matches_name
from .records import Record

if TYPE_CHECKING:
    from .cache import NodeCache
    from .query import QueryResult

_UNSET = object()

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.lower() in _TRUE_VALUES


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------

class Node:
    """A single wrapped record.

    Attributes
    ----------
    id : str
        Record id, stable for the lifetime of the corpus.
    kind : str
        Element kind tag.
    name : str or None
        Unqualified name; ``None`` for anonymous constructs.
    demangled : str or None
        Full demangled signature when the tool supplies one.
    attributes : Mapping[str, str]
        All raw attributes of the record (read-only).
    """

    __slots__ = ("_record", "_cache", "_parent", "_qualified_name", "_file")

    def __init__(self, record: Record, cache: "NodeCache") -> None:
        self._record = record
        self._cache = cache
        self._parent: Any = _UNSET
        self._qualified_name: Any = _UNSET
        self._file: Any = _UNSET

    # ----- identity ---------------------------------------------------------

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def kind(self) -> str:
        return self._record.kind

    @property
    def name(self) -> Optional[str]:
        return self._record.name

    @property
    def demangled(self) -> Optional[str]:
        return self._record.demangled

    @property
    def record(self) -> Record:
        return self._record

    @property
    def cache(self) -> "NodeCache":
        return self._cache

    @property
    def attributes(self) -> Mapping[str, str]:
        return self._record.attributes

    def attribute(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a raw attribute; unknown keys return ``default``."""
        return self._record.attributes.get(key, default)

    # ----- graph navigation -------------------------------------------------

    @property
    def parent(self) -> Optional["Node"]:
        """The enclosing scope node, or ``None`` at root scope.

        Resolved through the cache on first access and memoized.  A context
        id that references no record resolves to ``None``.
        """
        if self._parent is _UNSET:
            self._parent = self._cache.resolve_reference(
                self, "context", self._record.context, scope=True)
        return self._parent

    @property
    def qualified_name(self) -> Optional[str]:
        """Fully scoped name, e.g. ``N::C::f``.

        The demangled signature, when present, is authoritative and is cut
        at the first ``(``.  Otherwise the parent chain is joined with
        ``::``; anonymous scopes contribute an empty segment.
        """
        if self._qualified_name is _UNSET:
            demangled = self._record.demangled
            if demangled:
                self._qualified_name = demangled.split("(", 1)[0]
            else:
                parent = self.parent
                if parent is not None:
                    self._qualified_name = (
                        f"{parent.qualified_name or ''}::{self.name or ''}")
                else:
                    self._qualified_name = self.name
        return self._qualified_name

    @property
    def file(self) -> Optional[str]:
        """Path of the file this node is declared in, if known.

        Only a ``File`` node counts; an id naming any other kind gives ``None``.
        """
        if self._file is _UNSET:
            file_node = self._cache.resolve_reference(
                self, "file", self.attribute("file"))
            if file_node is not None and file_node.kind == "File":
                self._file = file_node.name
            else:
                self._file = None
        return self._file

    def file_name(self, basename: Optional[bool] = None) -> Optional[str]:
        """Like :attr:`file`; ``basename`` strips the directory part.

        Defaults to the cache's ``QueryConfig.file_basename``.
        """
        path = self.file
        if path is None:
            return None
        if basename is None:
            basename = self._cache.config.file_basename
        return os.path.basename(path) if basename else path

    def members(self, kind: Optional[str] = None) -> "QueryResult":
        """Every node whose context is this node, optionally of one kind.

        Unlike the named searches this is not capability-checked.
        """
        return self._cache.members_of(self, kind)

    def _resolve(self, key: str) -> Optional["Node"]:
        return self._cache.resolve_reference(self, key, self.attribute(key))

    # ----- access predicates ------------------------------------------------

    @property
    def access(self) -> str:
        return self.attribute("access") or "public"

    @property
    def is_const(self) -> bool:
        return _flag(self.attribute("const"))

    @property
    def is_public(self) -> bool:
        return self.access == "public"

    @property
    def is_protected(self) -> bool:
        return self.access == "protected"

    @property
    def is_private(self) -> bool:
        return self.access == "private"

    # ----- kind-scoped searches ---------------------------------------------
    #
    # ``x.classes()`` returns every class directly in this scope and
    # ``x.classes("Foo")`` / ``x.classes(re.compile("^Foo"))`` narrows by
    # name.  Whether a search is legal is decided by the cache from the kind
    # registry, not here.

    def _search(self, kind: str, name: NameMatcher) -> "QueryResult":
        return self._cache.find_children_of_type(self, kind, name)

    def namespaces(self, name: NameMatcher = None) -> "QueryResult":
        """Namespaces nested directly in this scope."""
        return self._search("Namespace", name)

    def classes(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Class", name)

    def structs(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Struct", name)

    def functions(self, name: NameMatcher = None) -> "QueryResult":
        """Free functions in this scope.  Class members are :meth:`methods`."""
        return self._search("Function", name)

    def enumerations(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Enumeration", name)

    def variables(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Variable", name)

    def typedefs(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Typedef", name)

    def methods(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Method", name)

    def constructors(self, name: NameMatcher = None) -> "QueryResult":
        return self._search("Constructor", name)

    def fields(self, name: NameMatcher = None) -> "QueryResult":
        """Data members of a class or struct."""
        return self._search("Field", name)

    # ----- types and rendering ----------------------------------------------

    @property
    def base_type(self) -> "Node":
        """The element this node stands for; wrappers see through."""
        return self

    def render(self, qualified: bool = True) -> str:
        if qualified:
            return self.qualified_name or ""
        return self.name or ""

    def _render_ref(self, key: str, qualified: bool) -> str:
        target = self._resolve(key)
        if target is None:
            return self.attribute(key) or "?"
        return target.render(qualified)

    # ----- dunder -----------------------------------------------------------

    def __str__(self) -> str:
        return self.render(qualified=False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind}, id={self.id!r}, name={self.name!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return matches_name(self, other)
        if isinstance(other, Node):
            return self._cache is other._cache and self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

class ScopeNode(Node):
    """A namespace, or the root scope."""

    __slots__ = ()

    @property
    def is_anonymous(self) -> bool:
        return not self.name


class RootNode(ScopeNode):
    """Synthetic root scope for corpora without a global namespace record.

    It is not part of the id index.
    """

    __slots__ = ()

    @property
    def parent(self) -> Optional[Node]:
        return None

    @property
    def qualified_name(self) -> str:
        return "::"


class RecordNode(Node):
    """A class, struct or union."""

    __slots__ = ()

    @property
    def is_abstract(self) -> bool:
        return _flag(self.attribute("abstract"))

    @property
    def is_incomplete(self) -> bool:
        return _flag(self.attribute("incomplete"))

    @property
    def bases(self) -> List[Node]:
        """Direct base classes, in declaration order.

        CastXML lists them as nested ``Base`` elements; GCC-XML as a
        ``bases`` attribute of ``[access:]id`` tokens.
        """
        ids = [entry.get("type") for entry in self._record.children
               if entry.tag == "Base"]
        if not ids:
            ids = [tok.rsplit(":", 1)[-1]
                   for tok in (self.attribute("bases") or "").split()]
        result = []
        for base_id in ids:
            base = self._cache.resolve_reference(self, "bases", base_id)
            if base is not None:
                result.append(base)
        return result


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Argument:
    """One function parameter."""
    name: Optional[str]
    type: Optional[Node]
    default: Optional[str] = None

    def render(self, qualified: bool = True) -> str:
        text = self.type.render(qualified) if self.type is not None else "?"
        if self.name:
            text = f"{text} {self.name}"
        if self.default is not None:
            text = f"{text} = {self.default}"
        return text


class FunctionNode(Node):
    """Functions, methods, constructors, destructors and operators."""

    __slots__ = ()

    @property
    def arguments(self) -> List[Argument]:
        args = []
        for entry in self._record.children:
            if entry.tag != "Argument":
                continue
            type_node = self._cache.resolve_reference(self, "type", entry.get("type"))
            args.append(Argument(entry.get("name"), type_node, entry.get("default")))
        return args

    @property
    def return_type(self) -> Optional[Node]:
        return self._resolve("returns")

    @property
    def is_variadic(self) -> bool:
        return any(entry.tag == "Ellipsis" for entry in self._record.children)

    @property
    def is_static(self) -> bool:
        return _flag(self.attribute("static"))

    @property
    def is_virtual(self) -> bool:
        return _flag(self.attribute("virtual")) or self.is_pure_virtual

    @property
    def is_pure_virtual(self) -> bool:
        return _flag(self.attribute("pure_virtual"))

    def render(self, qualified: bool = True) -> str:
        """Render the C++ declaration, e.g. ``int N::C::f(int x) const``."""
        name = super().render(qualified)
        params = [arg.render(qualified) for arg in self.arguments]
        if self.is_variadic:
            params.append("...")
        text = f"{name}({', '.join(params)})"
        if self.attribute("returns") is not None:
            text = f"{self._render_ref('returns', qualified)} {text}"
        if self.is_const:
            text += " const"
        return text


# ---------------------------------------------------------------------------
# Enumerations and variables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnumValue:
    name: str
    init: Optional[str] = None


class EnumerationNode(Node):
    __slots__ = ()

    @property
    def values(self) -> List[EnumValue]:
        return [EnumValue(entry.get("name") or "", entry.get("init"))
                for entry in self._record.children
                if entry.tag == "EnumValue"]


class VariableNode(Node):
    """A variable or class data member."""

    __slots__ = ()

    @property
    def type(self) -> Optional[Node]:
        return self._resolve("type")

    @property
    def is_static(self) -> bool:
        return _flag(self.attribute("static"))

    @property
    def is_extern(self) -> bool:
        return _flag(self.attribute("extern"))


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

class TypedefNode(Node):
    """``typedef``/``using`` alias; :attr:`base_type` is the aliased element."""

    __slots__ = ()

    @property
    def type(self) -> Optional[Node]:
        return self._resolve("type")

    @property
    def base_type(self) -> Node:
        target = self.type
        return target.base_type if target is not None else self


class FundamentalTypeNode(Node):
    __slots__ = ()


class PointerTypeNode(Node):
    __slots__ = ()

    def render(self, qualified: bool = True) -> str:
        return f"{self._render_ref('type', qualified)}*"


class ReferenceTypeNode(Node):
    __slots__ = ()

    def render(self, qualified: bool = True) -> str:
        return f"{self._render_ref('type', qualified)}&"


class CvQualifiedTypeNode(Node):
    """``const``/``volatile`` qualification of another type."""

    __slots__ = ()

    @property
    def is_volatile(self) -> bool:
        return _flag(self.attribute("volatile"))

    @property
    def base_type(self) -> Node:
        target = self._resolve("type")
        return target.base_type if target is not None else self

    def render(self, qualified: bool = True) -> str:
        text = self._render_ref("type", qualified)
        if self.is_volatile:
            text = f"volatile {text}"
        if self.is_const:
            text = f"const {text}"
        return text


class ElaboratedTypeNode(Node):
    """CastXML's ``class Foo`` / ``struct Foo`` spelling of a type."""

    __slots__ = ()

    @property
    def base_type(self) -> Node:
        target = self._resolve("type")
        return target.base_type if target is not None else self

    def render(self, qualified: bool = True) -> str:
        return self._render_ref("type", qualified)


class ArrayTypeNode(Node):
    __slots__ = ()

    @property
    def element_count(self) -> Optional[int]:
        """Element count, from the tool's inclusive ``max`` bound."""
        bound = (self.attribute("max") or "").rstrip("uU")
        if not bound:
            return None
        try:
            return int(bound) + 1
        except ValueError:
            return None

    def render(self, qualified: bool = True) -> str:
        count = self.element_count
        return f"{self._render_ref('type', qualified)}[{'' if count is None else count}]"


class FileNode(Node):
    __slots__ = ()

    @property
    def basename(self) -> str:
        return os.path.basename(self.name or "")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

_VARIANTS = {
    ScopeNode: ("Namespace",),
    RootNode: (ROOT_KIND,),
    RecordNode: ("Class", "Struct", "Union"),
    FunctionNode: ("Function", "Method", "Constructor", "Destructor",
                   "OperatorFunction", "OperatorMethod", "Converter"),
    EnumerationNode: ("Enumeration",),
    VariableNode: ("Variable", "Field"),
    TypedefNode: ("Typedef",),
    FundamentalTypeNode: ("FundamentalType",),
    PointerTypeNode: ("PointerType",),
    ReferenceTypeNode: ("ReferenceType",),
    CvQualifiedTypeNode: ("CvQualifiedType",),
    ElaboratedTypeNode: ("ElaboratedType",),
    ArrayTypeNode: ("ArrayType",),
    FileNode: ("File",),
}

for _cls, _kinds in _VARIANTS.items():
    for _kind in _kinds:
        register_kind(_kind, node_class=_cls)
del _cls, _kinds, _kind

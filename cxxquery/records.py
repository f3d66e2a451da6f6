"""
cxxquery.records
================

The record feed: flat, id-referenced element records as produced by a C++
program-structure extraction tool (GCC-XML / CastXML).

A record is the raw unit of ingestion::

    Record(kind="Function", id="_42", name="f",
           demangled="N::C::f(int)", context="_17",
           attributes={"id": "_42", "name": "f", "context": "_17",
                       "file": "f1", "access": "public", ...},
           children=(NestedEntry("Argument", {"name": "x", "type": "_9"}),))

Records can be built from plain mappings (:meth:`Record.from_mapping`) or read
from an extraction-tool XML document (:func:`read_xml`).  Everything else in
the package consumes records only through ``NodeCache.ingest``.

Public API
----------
    Record        - one flat element record
    NestedEntry   - an id-less sub-element (argument, enum value, ...)
    read_xml      - yield records from a GCC-XML / CastXML document
    as_record     - coerce a mapping or Record to a Record
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import IO, Any, Iterator, Mapping, Optional, Tuple, Union

from .errors import FeedError, RecordError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NestedEntry:
    """An id-less element nested inside a record (e.g. ``Argument``)."""
    tag: str
    attributes: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(key, default)


@dataclass(frozen=True)
class Record:
    """One flat element record from the extraction tool.

    Attributes
    ----------
    kind : str
        Element kind tag (``Namespace``, ``Class``, ``Function``, ...).
    id : str
        Identifier, unique within one corpus.
    name, demangled, context : str or None
        Lifted from the raw attributes when present.
    attributes : Mapping[str, str]
        Every raw attribute of the element, read-only.
    children : tuple of NestedEntry
        Id-less nested elements in document order.
    """

    kind: str
    id: str
    name: Optional[str] = None
    demangled: Optional[str] = None
    context: Optional[str] = None
    attributes: Mapping[str, str] = field(default_factory=dict)
    children: Tuple[NestedEntry, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Record":
        """Build a record from a flat mapping.

        The mapping must contain ``kind`` and ``id``.  An optional
        ``attributes`` sub-mapping is merged with the remaining top-level
        keys, and an optional ``children`` sequence of ``(tag, attrs)``
        pairs or :class:`NestedEntry` becomes the nested entries.

        Raises
        ------
        RecordError
            If ``kind`` or ``id`` is missing or empty.
        """
        kind = data.get("kind")
        node_id = data.get("id")
        if not kind:
            raise RecordError(f"Record without a kind: {dict(data)!r}")
        if node_id is None or node_id == "":
            raise RecordError(f"{kind} record without an id: {dict(data)!r}")

        attrs = {}
        for key, value in data.items():
            if key in ("kind", "attributes", "children"):
                continue
            if value is not None:
                attrs[key] = str(value)
        for key, value in (data.get("attributes") or {}).items():
            if value is not None:
                attrs[key] = str(value)
        attrs["id"] = str(node_id)

        children = tuple(_as_nested(c) for c in data.get("children") or ())
        return cls._build(kind, attrs, children)

    @classmethod
    def _build(cls, kind: str, attrs: Mapping[str, str],
               children: Tuple[NestedEntry, ...] = ()) -> "Record":
        return cls(
            kind=kind,
            id=attrs["id"],
            name=attrs.get("name"),
            demangled=attrs.get("demangled"),
            context=attrs.get("context"),
            attributes=MappingProxyType(dict(attrs)),
            children=children,
        )


def _as_nested(entry: Any) -> NestedEntry:
    if isinstance(entry, NestedEntry):
        return entry
    if isinstance(entry, Mapping):
        attrs = {k: str(v) for k, v in entry.items() if k != "tag"}
        return NestedEntry(str(entry.get("tag", "")), MappingProxyType(attrs))
    tag, attrs = entry
    return NestedEntry(tag, MappingProxyType({k: str(v) for k, v in attrs.items()}))


def as_record(item: Union[Record, Mapping[str, Any]]) -> Record:
    """Coerce ``item`` to a :class:`Record`."""
    if isinstance(item, Record):
        return item
    if isinstance(item, Mapping):
        return Record.from_mapping(item)
    raise RecordError(
        f"Cannot ingest {type(item).__name__}; expected a Record or a mapping")


# ===================================================================
#  XML FEED
# ===================================================================

def read_xml(source: Union[str, "IO[bytes]", Any]) -> Iterator[Record]:
    """Yield the records of a GCC-XML / CastXML document.

    Every direct child of the document element that carries an ``id``
    attribute becomes one :class:`Record`; its own id-less children become
    :class:`NestedEntry` items.  Top-level elements without an id are
    skipped.

    Parameters
    ----------
    source : str, path-like or binary file object
        The XML document.

    Raises
    ------
    FeedError
        If the document cannot be opened or is not well-formed XML.
    """
    try:
        tree = ET.parse(source)
    except ET.ParseError as e:
        raise FeedError(f"Malformed extraction-tool XML in {_describe(source)}: {e}") from e
    except OSError as e:
        raise FeedError(f"Cannot read {_describe(source)}: {e}") from e

    root = tree.getroot()
    logger.debug("Reading %s feed from %s", root.tag, _describe(source))
    skipped = 0
    for elem in root:
        if "id" not in elem.attrib:
            skipped += 1
            continue
        children = tuple(
            NestedEntry(child.tag, MappingProxyType(dict(child.attrib)))
            for child in elem
        )
        yield Record._build(elem.tag, dict(elem.attrib), children)
    if skipped:
        logger.debug("Skipped %d top-level elements without an id", skipped)


def _describe(source: Any) -> str:
    return str(getattr(source, "name", source))

"""
cxxquery.config
===============

Configuration for ingesting and querying a corpus.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


#: Id GCC-XML and CastXML assign to the global namespace ``::``.
DEFAULT_ROOT_CONTEXT = "_1"


@dataclass(frozen=True)
class QueryConfig:
    """Settings for a :class:`~cxxquery.cache.NodeCache`.

    Attributes
    ----------
    root_context : str
        The ``context`` value that means "global scope, no parent".
    strict_references : bool
        When true, ``ingest`` verifies every ``context`` and ``file`` id and
        raises :class:`~cxxquery.errors.DanglingReferenceError` on the first
        one that does not resolve.  When false (the default) resolution is
        lazy and soft-fails to ``None``, which tolerates tool output that
        omits records (a missing ``File`` element being the usual case).
    file_basename : bool
        Default for :meth:`Node.file_name` when no argument is given.
    """

    root_context: str = DEFAULT_ROOT_CONTEXT
    strict_references: bool = False
    file_basename: bool = True

    def validate(self) -> List[str]:
        """Return a list of warnings (empty if the configuration is sane)."""
        warnings: List[str] = []
        if not self.root_context:
            warnings.append("root_context is empty; records without a "
                            "context will be treated as root-scoped")
        elif self.root_context.strip() != self.root_context:
            warnings.append(f"root_context {self.root_context!r} has "
                            f"surrounding whitespace")
        return warnings

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
cxxquery/__main__.py
====================

Command-line front end: load an extraction-tool XML document and print the
nodes matching a query.

Usage
-----
    python -m cxxquery <xml-file> [options]

Examples
--------
    cxxquery project.xml --kind Class
    cxxquery project.xml --kind Method --name size --qualified
    cxxquery project.xml --where '(and (kind Function) (in-file "api.h"))' --render
    cxxquery project.xml --stats

Exit status is 0 when something matched, 1 when nothing did and 2 on errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from typing import Optional, Sequence, TextIO

from . import __version__
from .cache import NodeCache, ingest
from .config import DEFAULT_ROOT_CONTEXT, QueryConfig
from .errors import CxxQueryError
from .query import QueryResult
from .records import read_xml

logger = logging.getLogger("cxxquery")

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


# ═══════════════════════════════════════════════════════════════════════════
# ARGUMENT PARSER
# ═══════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the cxxquery CLI."""
    parser = argparse.ArgumentParser(
        prog="cxxquery",
        description="Query the C++ program structure recorded by GCC-XML / CastXML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              %(prog)s project.xml --kind Class
              %(prog)s project.xml --kind Method --name size --qualified
              %(prog)s project.xml --where '(and (kind Function) (const))' --render
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "input",
        help="GCC-XML / CastXML output file (use '-' for stdin)",
    )
    parser.add_argument(
        "-k", "--kind",
        help="Only nodes of this kind (e.g. Class, Function, Method)",
    )
    parser.add_argument(
        "-n", "--name",
        help="Only nodes with exactly this name",
    )
    parser.add_argument(
        "-w", "--where",
        metavar="SEXP",
        help="Criteria S-expression, e.g. '(and (kind Class) (name-like \"Foo*\"))'",
    )
    parser.add_argument(
        "-q", "--qualified",
        action="store_true",
        help="Print qualified names",
    )
    parser.add_argument(
        "-r", "--render",
        action="store_true",
        help="Print rendered declarations (function signatures, types)",
    )
    parser.add_argument(
        "--ids",
        action="store_true",
        help="Prefix every line with the node kind and id",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print the number of nodes of each kind and exit",
    )
    parser.add_argument(
        "--root-context",
        default=DEFAULT_ROOT_CONTEXT,
        metavar="ID",
        help=f"Context id of the global scope (default: {DEFAULT_ROOT_CONTEXT})",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on context/file ids that reference no record",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    return parser


# ═══════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════════════════

def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load(args: argparse.Namespace) -> NodeCache:
    config = QueryConfig(root_context=args.root_context,
                         strict_references=args.strict)
    source = sys.stdin.buffer if args.input == "-" else args.input
    cache = ingest(read_xml(source), config)
    logger.info("Loaded %d nodes from %s", len(cache), args.input)
    return cache


def run_query(cache: NodeCache, args: argparse.Namespace) -> QueryResult:
    """Apply the --kind / --name / --where filters to the whole corpus."""
    result = cache.nodes_of_kind(args.kind) if args.kind else cache.all_nodes()
    if args.name is not None or args.where:
        result = result.find(name=args.name, predicate=args.where or None)
    return result


def format_node(node, args: argparse.Namespace) -> str:
    if args.render:
        text = node.render(qualified=args.qualified)
    elif args.qualified:
        text = node.qualified_name or ""
    else:
        text = node.name or ""
    if args.ids:
        text = f"{node.kind}\t{node.id}\t{text}"
    return text


def cmd_stats(cache: NodeCache, out: TextIO) -> int:
    for kind, count in sorted(cache.kind_counts().items()):
        out.write(f"{kind}\t{count}\n")
    return EXIT_OK


def cmd_query(cache: NodeCache, args: argparse.Namespace, out: TextIO) -> int:
    result = run_query(cache, args)
    for node in result:
        out.write(format_node(node, args) + "\n")
    logger.info("%d nodes matched", len(result))
    return EXIT_OK if result else EXIT_NO_MATCH


# ═══════════════════════════════════════════════════════════════════════════
# MAIN
# ═══════════════════════════════════════════════════════════════════════════

def main(argv: Optional[Sequence[str]] = None,
         out: Optional[TextIO] = None) -> int:
    """Main entry point for the cxxquery CLI.

    Parameters
    ----------
    argv : sequence of str, optional
        Command-line arguments. Defaults to ``sys.argv[1:]``.
    out : text stream, optional
        Where results are written. Defaults to ``sys.stdout``.

    Returns
    -------
    int
        Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout
    _configure_logging(args.verbose)

    try:
        cache = _load(args)
        if args.stats:
            return cmd_stats(cache, out)
        return cmd_query(cache, args, out)
    except CxxQueryError as e:
        sys.stderr.write(f"cxxquery: error: {e}\n")
        return EXIT_ERROR
    except BrokenPipeError:
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

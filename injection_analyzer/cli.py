#!/usr/bin/env python3
"""
Command-line driver for the injection rule.

Analyzes C# files (or directories of them), prints one line per
diagnostic and, with --fix, injects the flagged fields one fix at a time.
"""

from __future__ import annotations

import argparse
import difflib
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from injection_analyzer.analyzer import analyze_document
from injection_analyzer.document import Document
from injection_analyzer.fixer import code_fixes_for
from injection_analyzer.source_parser import SourceParser

logger.remove()
logger.add(sys.stderr, level="INFO", format="[{level}] {message}")

ANALYSIS_NAME = "injection-analyzer"
ANALYSIS_VERSION = "1.0"


def find_sources(paths: list[Path]) -> list[Path]:
    """Expand directories into the ``*.cs`` files below them."""
    sources: list[Path] = []
    for path in paths:
        if path.is_dir():
            sources.extend(sorted(path.rglob("*.cs")))
        else:
            sources.append(path)
    return sources


def fix_document(document: Document, parser: SourceParser) -> tuple[Document, int]:
    """
    Apply one fix at a time, re-analyzing in between.

    Every applied fix resolves the diagnostic it came from, so the number of
    initial diagnostics bounds the loop.
    """
    applied = 0
    limit = len(analyze_document(document))
    while applied < limit:
        fixes = code_fixes_for(document, analyze_document(document))
        if not fixes:
            break
        logger.debug(f"{fixes[0].title}: {fixes[0].diagnostic.message}")
        document = fixes[0].apply(parser)
        applied += 1
    return document, applied


def unified_diff(before: Document, after: Document) -> str:
    return "".join(
        difflib.unified_diff(
            before.text.splitlines(keepends=True),
            after.text.splitlines(keepends=True),
            fromfile=f"a/{before.path}",
            tofile=f"b/{after.path}",
        )
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog=ANALYSIS_NAME,
        description="Find readonly fields that no constructor injects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report only
  injection-analyzer src/Services/NavigationHost.cs

  # Inject every flagged field below a directory
  injection-analyzer --fix src/

  # Preview the fixes
  injection-analyzer --diff src/
        """,
    )
    parser.add_argument("paths", nargs="+", type=Path, help="C# files or directories")
    parser.add_argument("--fix", action="store_true", help="Rewrite files, injecting flagged fields")
    parser.add_argument("--diff", action="store_true", help="Print the fixes as a unified diff")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only print the summary")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {ANALYSIS_VERSION}")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
        logger.remove()
        logger.add(sys.stderr, level="DEBUG", format="[{level}] {message}")

    sources = find_sources(args.paths)
    if not sources:
        logger.error("No C# files found")
        return 1

    source_parser = SourceParser()
    total = 0
    fixed = 0
    failed = 0
    for path in sources:
        document = source_parser.parse_file(path)
        if document is None:
            failed += 1
            continue

        diagnostics = analyze_document(document)
        total += len(diagnostics)
        if not args.quiet:
            for diagnostic in diagnostics:
                print(diagnostic.format())

        if diagnostics and (args.fix or args.diff):
            new_document, applied = fix_document(document, source_parser)
            fixed += applied
            if args.diff:
                print(unified_diff(document, new_document), end="")
            if args.fix:
                path.write_bytes(new_document.source)
                logger.info(f"{path}: injected {applied} field(s)")

    logger.info(f"{len(sources)} file(s), {total} diagnostic(s), {fixed} fix(es) applied")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

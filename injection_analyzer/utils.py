"""Shared utilities for Tree-sitter parsing and node helpers."""

from __future__ import annotations

from typing import Iterator

import tree_sitter
import tree_sitter_c_sharp


def create_csharp_parser() -> tree_sitter.Parser:
    """
    Create a Tree-sitter parser configured for C#.

    Supports both the modern bindings (language passed to the constructor)
    and older releases that expect ``set_language``.
    """

    language = tree_sitter.Language(tree_sitter_c_sharp.language())
    try:
        parser = tree_sitter.Parser(language)
    except TypeError:
        parser = tree_sitter.Parser()
        parser.set_language(language)
    return parser


def node_text(node: tree_sitter.Node, source_bytes: bytes) -> str:
    """Decode the bytes that correspond to a node."""
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def error_regions(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """
    Outermost ERROR and MISSING nodes in source order.

    Only subtrees flagged with ``has_error`` are entered; an ERROR node counts
    once however much it swallowed.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            yield node
        elif node.has_error:
            stack.extend(reversed(node.children))


def char_column(source_bytes: bytes, byte_offset: int) -> int:
    """1-based character column of a byte offset (tree-sitter counts bytes)."""
    line_start = source_bytes.rfind(b"\n", 0, byte_offset) + 1
    return len(source_bytes[line_start:byte_offset].decode("utf-8", errors="replace")) + 1

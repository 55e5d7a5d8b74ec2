"""Immutable document snapshot: source bytes plus the tree read from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from injection_analyzer.syntax import (
    CompilationUnit,
    FieldDeclaration,
    Span,
    SyntaxNode,
    TypeDeclaration,
    ancestors,
    walk,
)


@dataclass(frozen=True)
class Document:
    path: str
    source: bytes
    root: CompilationUnit

    @property
    def text(self) -> str:
        return self.source.decode("utf-8", errors="replace")

    def slice(self, span: Span) -> str:
        return self.source[span.start_byte:span.end_byte].decode("utf-8", errors="replace")

    def ancestors(self, node: SyntaxNode) -> list[SyntaxNode]:
        return ancestors(self.root, node)

    def enclosing_type(self, node: SyntaxNode) -> Optional[TypeDeclaration]:
        """Nearest type declaration containing ``node``."""
        for parent in self.ancestors(node):
            if isinstance(parent, TypeDeclaration):
                return parent
        return None

    def field_at(self, offset: int) -> Optional[FieldDeclaration]:
        """Innermost field declaration whose span covers ``offset``."""
        found = None
        for node in walk(self.root):
            if isinstance(node, FieldDeclaration) and node.span is not None and node.span.contains(offset):
                found = node
        return found

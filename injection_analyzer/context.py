"""Analysis context shared across checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from injection_analyzer.document import Document
from injection_analyzer.syntax import TypeDeclaration, type_declarations


@dataclass
class AnalysisContext:
    document: Document
    types: List[TypeDeclaration] = field(init=False, default_factory=list)

    def __post_init__(self):
        self.types = list(type_declarations(self.document.root))

    @property
    def path(self) -> str:
        return self.document.path

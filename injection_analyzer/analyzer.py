"""Coordinator that runs all injection checks over a document."""

from __future__ import annotations

import logging

from .checks import CHECKS
from .context import AnalysisContext
from .document import Document
from .issues import Diagnostic

log = logging.getLogger(__name__)


class InjectionAnalyzer:
    """Wraps the analysis context and executes the registered checks."""

    def __init__(self, document: Document):
        self.context = AnalysisContext(document)
        self.diagnostics: list[Diagnostic] = []
        self._run_checks()

    def _run_checks(self):
        for check in CHECKS:
            new_diagnostics = check(self.context)
            for diagnostic in new_diagnostics:
                log.debug("injection: %s", diagnostic)
            self.diagnostics.extend(new_diagnostics)


def analyze_document(document: Document) -> list[Diagnostic]:
    """Diagnostics for every type declaration in the document, in preorder."""
    return InjectionAnalyzer(document).diagnostics

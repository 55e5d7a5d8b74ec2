"""Diagnostic data model for analyzer findings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from injection_analyzer.syntax import Span

NO_SPAN = Span(start_byte=0, end_byte=0, line=0, column=0)

# path reported for source text that was not read from a file
SOURCE_PATH = "<source>"


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Location:
    """Where a diagnostic points: file, 1-based line/column and byte span."""

    path: str
    line: int
    column: int
    start_byte: int
    end_byte: int


@dataclass(frozen=True)
class Diagnostic:
    """Structured representation of a rule finding."""

    rule_id: str
    message: str
    severity: Severity
    location: Location
    title: str = ""
    category: str = ""

    def format(self) -> str:
        loc = self.location
        return f"{loc.path}:{loc.line}:{loc.column}: {self.severity.value} {self.rule_id}: {self.message}"


def make_diagnostic(rule_id: str, path: str, span: Optional[Span], message: str,
                    severity: Severity = Severity.INFO, *, title: str = "",
                    category: str = "") -> Diagnostic:
    """Create a Diagnostic anchored at a node's span (synthesized nodes have none)."""
    span = span or NO_SPAN
    location = Location(
        path=path,
        line=span.line,
        column=span.column,
        start_byte=span.start_byte,
        end_byte=span.end_byte,
    )
    return Diagnostic(
        rule_id=rule_id,
        message=message,
        severity=severity,
        location=location,
        title=title,
        category=category,
    )

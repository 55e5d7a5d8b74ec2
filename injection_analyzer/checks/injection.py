"""Readonly fields that no constructor injects."""

from __future__ import annotations

from injection_analyzer.checks.constructors import constructors_of, has_assignment
from injection_analyzer.checks.fields import classify
from injection_analyzer.context import AnalysisContext
from injection_analyzer.issues import SOURCE_PATH, Diagnostic, Severity, make_diagnostic
from injection_analyzer.syntax import FieldDeclaration, TypeDeclaration

RULE_ID = "InjectionAnalyzer"
TITLE = "Readonly field is not injected"
MESSAGE_FORMAT = "Readonly Field '{0}' is injected in none of the constructors."
CATEGORY = "Naming"


def analyze(type_decl: TypeDeclaration, path: str = SOURCE_PATH) -> list[Diagnostic]:
    """
    One Info diagnostic per eligible readonly field of ``type_decl`` that is
    assigned in none of its constructors, in field declaration order.
    """
    diagnostics: list[Diagnostic] = []
    constructors = constructors_of(type_decl)
    for member in type_decl.members:
        if not isinstance(member, FieldDeclaration):
            continue

        field = classify(member)
        if field is None or has_assignment(constructors, field):
            continue

        diagnostics.append(
            make_diagnostic(
                RULE_ID,
                path,
                field.identifier.span,
                MESSAGE_FORMAT.format(field.name),
                Severity.INFO,
                title=TITLE,
                category=CATEGORY,
            )
        )
    return diagnostics


def run(ctx: AnalysisContext) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for type_decl in ctx.types:
        diagnostics.extend(analyze(type_decl, ctx.path))
    return diagnostics

"""
injection_analyzer/fixer.py

Code fix for the injection rule: turn an uninjected readonly field into a
constructor parameter.

The fix never mutates nodes. ``propose_fix`` synthesizes a replacement for
either the enclosing type (no constructor yet) or its first constructor and
returns it as a FixEdit; ``build_fix`` renders that edit into a new Document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Union

from injection_analyzer.checks.constructors import constructors_of
from injection_analyzer.checks.injection import RULE_ID
from injection_analyzer.document import Document
from injection_analyzer.issues import Diagnostic
from injection_analyzer.syntax import (
    ArrowBody,
    AssignmentExpression,
    Block,
    ConstructorDeclaration,
    ExpressionStatement,
    FieldDeclaration,
    IdentifierName,
    Parameter,
    TypeDeclaration,
)

FIX_TITLE = "Inject dependency"
FIXABLE_DIAGNOSTIC_IDS = (RULE_ID,)

log = logging.getLogger(__name__)


class FixContractError(ValueError):
    """The fix was asked to work on a node it cannot have been offered for."""


@dataclass(frozen=True)
class FixEdit:
    """
    One node replacement.

    Attributes:
        target: Node of the current document to replace (type or constructor)
        replacement: Newly built node taking its place
        needs_relayout: The replacement mixes original and new children and
            should go through the renderer's layout pass
    """
    target: Union[TypeDeclaration, ConstructorDeclaration]
    replacement: Union[TypeDeclaration, ConstructorDeclaration]
    needs_relayout: bool = False


def parameter_name_for(field_name: str) -> str:
    """Drop the one-character field prefix: ``_service`` -> ``service``."""
    return field_name[1:]


def propose_fix(document: Document, field: FieldDeclaration) -> FixEdit:
    if not isinstance(field, FieldDeclaration):
        raise FixContractError(f"Expected a field declaration, got {type(field).__name__}")
    if field.variable_count != 1 or not field.is_readonly:
        raise FixContractError("Only single-variable readonly fields can be injected")

    identifier = field.variables[0].identifier
    parameter = Parameter(IdentifierName(parameter_name_for(identifier.text)), type=field.type)
    assignment = ExpressionStatement(
        AssignmentExpression(
            left=IdentifierName(identifier.text),
            operator="=",
            right=IdentifierName(parameter.name),
        )
    )

    type_decl = document.enclosing_type(field)
    if type_decl is None:
        raise FixContractError(f"Field '{identifier.text}' has no enclosing type in {document.path}")

    constructors = constructors_of(type_decl)
    if not constructors:
        constructor = ConstructorDeclaration(
            modifiers=("public",),
            identifier=IdentifierName(type_decl.name),
            parameters=(parameter,),
            body=Block((assignment,)),
        )
        log.debug("inject %s: new constructor %s(%s)", identifier.text, type_decl.name, parameter.name)
        return FixEdit(
            target=type_decl,
            replacement=replace(type_decl, members=type_decl.members + (constructor,)),
        )

    constructor = constructors[0]
    parameters = constructor.parameters
    if parameters and parameters[-1].is_params:
        # a params array must stay last
        parameters = parameters[:-1] + (parameter,) + parameters[-1:]
    else:
        parameters = parameters + (parameter,)

    match constructor.body:
        case Block(statements=statements):
            body = replace(constructor.body, statements=statements + (assignment,))
        case ArrowBody(expression=expression):
            body = Block((ExpressionStatement(expression), assignment))
        case _:
            body = Block((assignment,))

    log.debug("inject %s: extend constructor at line %s", identifier.text,
              constructor.span.line if constructor.span else "?")
    return FixEdit(
        target=constructor,
        replacement=replace(
            constructor,
            parameters=parameters,
            body=body,
        ),
        needs_relayout=True,
    )


def build_fix(document: Document, field: FieldDeclaration, parser=None) -> Document:
    """New document with ``field`` injected through a constructor parameter."""
    from injection_analyzer.rewriter import apply_fix

    return apply_fix(document, propose_fix(document, field), parser)


def field_for_diagnostic(document: Document, diagnostic: Diagnostic) -> FieldDeclaration:
    """Field declaration holding the token a diagnostic was reported on."""
    field = document.field_at(diagnostic.location.start_byte)
    if field is None:
        raise FixContractError(
            f"No field declaration at {diagnostic.location.path}:"
            f"{diagnostic.location.line}:{diagnostic.location.column}"
        )
    return field


@dataclass(frozen=True)
class CodeFix:
    title: str
    equivalence_key: str
    diagnostic: Diagnostic
    document: Document
    field: FieldDeclaration

    def apply(self, parser=None) -> Document:
        return build_fix(self.document, self.field, parser)


def code_fixes_for(document: Document, diagnostics: list[Diagnostic]) -> list[CodeFix]:
    """One "Inject dependency" fix per diagnostic this rule can fix."""
    return [
        CodeFix(
            title=FIX_TITLE,
            equivalence_key=FIX_TITLE,
            diagnostic=diagnostic,
            document=document,
            field=field_for_diagnostic(document, diagnostic),
        )
        for diagnostic in diagnostics
        if diagnostic.rule_id in FIXABLE_DIAGNOSTIC_IDS
    ]

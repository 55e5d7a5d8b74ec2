"""Constructor scanning: does any constructor assign a given field?"""

from __future__ import annotations

from typing import Iterable

from injection_analyzer.checks.fields import FieldEntity
from injection_analyzer.syntax import (
    AssignmentExpression,
    ConstructorDeclaration,
    IdentifierName,
    TypeDeclaration,
    walk,
)


def constructors_of(type_decl: TypeDeclaration) -> list[ConstructorDeclaration]:
    """Instance constructors declared directly in the type, in source order."""
    return [
        member for member in type_decl.members
        if isinstance(member, ConstructorDeclaration) and not member.is_static
    ]


def assigns(constructor: ConstructorDeclaration, name: str) -> bool:
    """
    True if the constructor body holds ``name = <expr>`` at any depth.

    Only a bare identifier on the left counts; ``this.name = ...`` and
    compound assignments do not. The match is on identifier text.
    """
    if constructor.body is None:
        return False

    for node in walk(constructor.body):
        if not isinstance(node, AssignmentExpression) or not node.is_simple:
            continue
        if isinstance(node.left, IdentifierName) and node.left.text == name:
            return True
    return False


def has_assignment(constructors: Iterable[ConstructorDeclaration], field: FieldEntity) -> bool:
    return any(assigns(ctor, field.name) for ctor in constructors)

"""Field classification: which fields the injection rule looks at."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from injection_analyzer.syntax import FieldDeclaration, IdentifierName, TypeRef


@dataclass(frozen=True)
class FieldEntity:
    name: str
    declared_type: TypeRef
    identifier: IdentifierName
    declaration: FieldDeclaration
    is_readonly: bool = True
    is_static: bool = False
    variable_count: int = 1


def classify(field: FieldDeclaration) -> Optional[FieldEntity]:
    """
    Return the analyzable view of a field, or None to skip it.

    Static fields, mutable fields and declarations with more than one
    variable (``readonly string a, b;``) are not candidates.
    """
    if field.is_static or not field.is_readonly or field.variable_count != 1:
        return None

    identifier = field.variables[0].identifier
    return FieldEntity(
        name=identifier.text,
        declared_type=field.type,
        identifier=identifier,
        declaration=field,
        is_readonly=field.is_readonly,
        is_static=field.is_static,
        variable_count=field.variable_count,
    )

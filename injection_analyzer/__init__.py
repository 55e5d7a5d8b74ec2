"""
injection_analyzer

Static-analysis rule plus code fix for C# constructor injection.

- Source parsing with tree-sitter into a closed syntax model
- Diagnostic for readonly fields that no constructor assigns
- "Inject dependency" fix adding a constructor parameter and assignment
"""

from injection_analyzer.syntax import (
    Span,
    CompilationUnit,
    NamespaceDeclaration,
    TypeDeclaration,
    FieldDeclaration,
    VariableDeclarator,
    ConstructorDeclaration,
    Parameter,
    Block,
    ArrowBody,
    ExpressionStatement,
    AssignmentExpression,
    IdentifierName,
    TypeRef,
    OtherNode,
    walk,
    type_declarations,
)

from injection_analyzer.document import Document

from injection_analyzer.source_parser import (
    SourceParser,
    parse_csharp_source,
)

from injection_analyzer.issues import (
    Diagnostic,
    Location,
    Severity,
)

from injection_analyzer.checks.fields import FieldEntity, classify
from injection_analyzer.checks.constructors import constructors_of, has_assignment
from injection_analyzer.checks.injection import (
    RULE_ID,
    MESSAGE_FORMAT,
    analyze,
)
from injection_analyzer.analyzer import InjectionAnalyzer, analyze_document

from injection_analyzer.fixer import (
    FIX_TITLE,
    CodeFix,
    FixContractError,
    FixEdit,
    build_fix,
    code_fixes_for,
    field_for_diagnostic,
    propose_fix,
)
from injection_analyzer.rewriter import apply_fix


__all__ = [
    # Syntax model
    "Span",
    "CompilationUnit",
    "NamespaceDeclaration",
    "TypeDeclaration",
    "FieldDeclaration",
    "VariableDeclarator",
    "ConstructorDeclaration",
    "Parameter",
    "Block",
    "ArrowBody",
    "ExpressionStatement",
    "AssignmentExpression",
    "IdentifierName",
    "TypeRef",
    "OtherNode",
    "walk",
    "type_declarations",
    "Document",

    # Source parsing
    "SourceParser",
    "parse_csharp_source",

    # Analysis
    "Diagnostic",
    "Location",
    "Severity",
    "FieldEntity",
    "classify",
    "constructors_of",
    "has_assignment",
    "RULE_ID",
    "MESSAGE_FORMAT",
    "analyze",
    "InjectionAnalyzer",
    "analyze_document",

    # Fix
    "FIX_TITLE",
    "CodeFix",
    "FixContractError",
    "FixEdit",
    "build_fix",
    "code_fixes_for",
    "field_for_diagnostic",
    "propose_fix",
    "apply_fix",
]

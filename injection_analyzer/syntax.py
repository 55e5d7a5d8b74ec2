"""
injection_analyzer/syntax.py

Closed C# syntax model consumed by the analyzer and the fix synthesizer.

Nodes are frozen dataclasses. Nodes read from a file carry a Span pointing
back into the document source; synthesized nodes have ``span=None``.
Child enumeration is a single exhaustive ``match`` over the node kinds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union


@dataclass(frozen=True)
class Span:
    """Source location of a node (byte offsets, 1-based line and column)."""
    start_byte: int
    end_byte: int
    line: int
    column: int

    def contains(self, offset: int) -> bool:
        return self.start_byte <= offset < self.end_byte


@dataclass(frozen=True)
class IdentifierName:
    text: str
    span: Optional[Span] = None


@dataclass(frozen=True)
class TypeRef:
    """Declared type as written in source (``string``, ``IList<int>``...)."""
    text: str
    span: Optional[Span] = None


@dataclass(frozen=True)
class AssignmentExpression:
    left: SyntaxNode
    operator: str
    right: SyntaxNode
    span: Optional[Span] = None

    @property
    def is_simple(self) -> bool:
        return self.operator == "="


@dataclass(frozen=True)
class OtherNode:
    """Any node kind the analysis does not look into by name."""
    kind: str
    children: tuple[SyntaxNode, ...] = ()
    span: Optional[Span] = None


@dataclass(frozen=True)
class ExpressionStatement:
    expression: SyntaxNode
    span: Optional[Span] = None


@dataclass(frozen=True)
class Block:
    statements: tuple[SyntaxNode, ...] = ()
    span: Optional[Span] = None


@dataclass(frozen=True)
class ArrowBody:
    """Expression body of a member: ``=> expression``."""
    expression: SyntaxNode
    span: Optional[Span] = None


@dataclass(frozen=True)
class Parameter:
    identifier: IdentifierName
    type: Optional[TypeRef] = None
    span: Optional[Span] = None
    is_params: bool = False

    @property
    def name(self) -> str:
        return self.identifier.text


@dataclass(frozen=True)
class VariableDeclarator:
    identifier: IdentifierName
    initializer: Optional[SyntaxNode] = None
    span: Optional[Span] = None


@dataclass(frozen=True)
class FieldDeclaration:
    modifiers: tuple[str, ...]
    type: TypeRef
    variables: tuple[VariableDeclarator, ...]
    span: Optional[Span] = None

    @property
    def is_readonly(self) -> bool:
        return "readonly" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def variable_count(self) -> int:
        return len(self.variables)


@dataclass(frozen=True)
class ConstructorDeclaration:
    """
    Constructor member.

    ``parameter_list`` spans the parenthesized list (``None`` when
    synthesized); ``initializer`` is a ``: base(...)``/``: this(...)`` call.
    """
    modifiers: tuple[str, ...]
    identifier: IdentifierName
    parameters: tuple[Parameter, ...] = ()
    body: Optional[Union[Block, ArrowBody]] = None
    initializer: Optional[OtherNode] = None
    parameter_list: Optional[Span] = None
    span: Optional[Span] = None

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_synthesized(self) -> bool:
        return self.span is None

    @property
    def statements(self) -> tuple[SyntaxNode, ...]:
        match self.body:
            case Block(statements=statements):
                return statements
            case ArrowBody(expression=expression):
                return (ExpressionStatement(expression),)
            case _:
                return ()


@dataclass(frozen=True)
class TypeDeclaration:
    """class / struct / record declaration; ``body`` spans ``{ ... }``."""
    keyword: str
    identifier: IdentifierName
    modifiers: tuple[str, ...] = ()
    members: tuple[SyntaxNode, ...] = ()
    body: Optional[Span] = None
    span: Optional[Span] = None

    @property
    def name(self) -> str:
        return self.identifier.text


@dataclass(frozen=True)
class NamespaceDeclaration:
    name: str
    members: tuple[SyntaxNode, ...] = ()
    span: Optional[Span] = None


@dataclass(frozen=True)
class CompilationUnit:
    members: tuple[SyntaxNode, ...] = ()
    span: Optional[Span] = None


SyntaxNode = Union[
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
]


def children(node: SyntaxNode) -> tuple[SyntaxNode, ...]:
    """Direct children of a node, in source order."""
    match node:
        case CompilationUnit(members=members) | NamespaceDeclaration(members=members):
            return members
        case TypeDeclaration(identifier=identifier, members=members):
            return (identifier, *members)
        case FieldDeclaration(type=type_ref, variables=variables):
            return (type_ref, *variables)
        case VariableDeclarator(identifier=identifier, initializer=initializer):
            return (identifier,) if initializer is None else (identifier, initializer)
        case ConstructorDeclaration():
            found: list[SyntaxNode] = [node.identifier, *node.parameters]
            if node.initializer is not None:
                found.append(node.initializer)
            if node.body is not None:
                found.append(node.body)
            return tuple(found)
        case Parameter(identifier=identifier, type=type_ref):
            return (identifier,) if type_ref is None else (type_ref, identifier)
        case Block(statements=statements):
            return statements
        case ArrowBody(expression=expression) | ExpressionStatement(expression=expression):
            return (expression,)
        case AssignmentExpression(left=left, right=right):
            return (left, right)
        case OtherNode(children=nodes):
            return nodes
        case IdentifierName() | TypeRef():
            return ()
        case _:
            raise TypeError(f"Not a syntax node: {node!r}")


def walk(root: SyntaxNode) -> Iterator[SyntaxNode]:
    """Iterative preorder traversal of the syntax tree."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def ancestors(root: SyntaxNode, target: SyntaxNode) -> list[SyntaxNode]:
    """
    Ancestors of ``target`` inside ``root``, nearest first.

    Nodes are compared by identity, so equal-looking nodes elsewhere in the
    tree are never confused with the target. Returns an empty list when the
    target is not part of the tree.
    """
    stack: list[tuple[SyntaxNode, tuple[SyntaxNode, ...]]] = [(root, ())]
    while stack:
        node, path = stack.pop()
        if node is target:
            return list(reversed(path))
        for child in reversed(children(node)):
            stack.append((child, path + (node,)))
    return []


def type_declarations(root: SyntaxNode) -> Iterator[TypeDeclaration]:
    """All type declarations in preorder, nested ones included."""
    for node in walk(root):
        if isinstance(node, TypeDeclaration):
            yield node

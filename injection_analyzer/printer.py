"""Source text for synthesized nodes, indented the way the document is."""

from __future__ import annotations

import re
from typing import Optional

from injection_analyzer.document import Document
from injection_analyzer.syntax import (
    ArrowBody,
    AssignmentExpression,
    Block,
    ConstructorDeclaration,
    ExpressionStatement,
    FieldDeclaration,
    IdentifierName,
    Parameter,
    SyntaxNode,
    TypeRef,
    VariableDeclarator,
)

DEFAULT_INDENT = "    "

_LEADING_WS = re.compile(rb"^([ \t]+)[^\s*]", re.MULTILINE)


def detect_indent_unit(source: bytes) -> str:
    """Tab if the file indents with tabs, else its smallest run of spaces."""
    widths = []
    for match in _LEADING_WS.finditer(source):
        ws = match.group(1)
        if ws.startswith(b"\t"):
            return "\t"
        widths.append(len(ws))
    return " " * min(widths) if widths else DEFAULT_INDENT


def detect_newline(source: bytes) -> str:
    """Line ending of the first line break, LF for single-line sources."""
    first = source.find(b"\n")
    if first > 0 and source[first - 1:first] == b"\r":
        return "\r\n"
    return "\n"


def line_indent(source: bytes, offset: int) -> Optional[str]:
    """
    Whitespace between the start of the line and ``offset``, or None when
    something other than whitespace precedes ``offset`` on its line.
    """
    line_start = source.rfind(b"\n", 0, offset) + 1
    prefix = source[line_start:offset]
    if prefix.strip(b" \t"):
        return None
    return prefix.decode("utf-8")


class Printer:
    """
    Renders nodes to C# text.

    Nodes read from the document are copied verbatim; synthesized nodes are
    laid out with ``indent_unit`` per nesting level. The first line of a
    rendered node is not indented, the caller positions it.
    """

    def __init__(self, document: Document, indent_unit: Optional[str] = None):
        self.document = document
        self.indent_unit = indent_unit or detect_indent_unit(document.source)
        self.newline = detect_newline(document.source)

    def render(self, node: SyntaxNode, indent: str = "") -> str:
        if node.span is not None:
            return self.document.slice(node.span)

        match node:
            case IdentifierName(text=text) | TypeRef(text=text):
                return text
            case Parameter(identifier=identifier, type=None):
                return self.render(identifier)
            case Parameter(identifier=identifier, type=type_ref):
                return f"{self.render(type_ref)} {self.render(identifier)}"
            case AssignmentExpression(left=left, operator=operator, right=right):
                return f"{self.render(left, indent)} {operator} {self.render(right, indent)}"
            case ExpressionStatement(expression=expression):
                return f"{self.render(expression, indent)};"
            case ArrowBody(expression=expression):
                return f"=> {self.render(expression, indent)}"
            case Block(statements=statements):
                inner = indent + self.indent_unit
                lines = ["{"]
                lines.extend(inner + self.render(s, inner) for s in statements)
                lines.append(indent + "}")
                return self.newline.join(lines)
            case ConstructorDeclaration():
                params = ", ".join(self.render(p) for p in node.parameters)
                header = " ".join((*node.modifiers, node.identifier.text))
                text = f"{header}({params})"
                if node.initializer is not None:
                    text += f" {self.render(node.initializer)}"
                if node.body is None:
                    return text + ";"
                if isinstance(node.body, ArrowBody):
                    return f"{text} {self.render(node.body, indent)};"
                return f"{text}{self.newline}{indent}{self.render(node.body, indent)}"
            case VariableDeclarator(identifier=identifier, initializer=None):
                return self.render(identifier)
            case VariableDeclarator(identifier=identifier, initializer=initializer):
                return f"{self.render(identifier)} = {self.render(initializer, indent)}"
            case FieldDeclaration():
                variables = ", ".join(self.render(v, indent) for v in node.variables)
                return " ".join((*node.modifiers, self.render(node.type), variables)) + ";"
            case _:
                raise TypeError(f"Cannot render synthesized {type(node).__name__}")

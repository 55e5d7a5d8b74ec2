"""
injection_analyzer/source_parser.py

Tree-sitter based C# front end.

Converts the tree-sitter concrete syntax tree into the closed node model of
``injection_analyzer.syntax``. Only the node kinds the injection rule looks
at get their own variant; everything else becomes an ``OtherNode`` that still
carries its children, so assignments nested anywhere stay reachable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import tree_sitter

from injection_analyzer.document import Document
from injection_analyzer.issues import SOURCE_PATH
from injection_analyzer.syntax import (
    ArrowBody,
    AssignmentExpression,
    Block,
    CompilationUnit,
    ConstructorDeclaration,
    ExpressionStatement,
    FieldDeclaration,
    IdentifierName,
    NamespaceDeclaration,
    OtherNode,
    Parameter,
    Span,
    SyntaxNode,
    TypeDeclaration,
    TypeRef,
    VariableDeclarator,
)
from injection_analyzer.utils import char_column, create_csharp_parser, error_regions, node_text

TYPE_DECLARATION_KEYWORDS = {
    "class_declaration": "class",
    "struct_declaration": "struct",
    "record_declaration": "record",
    "record_struct_declaration": "record struct",
}

NAMESPACE_KINDS = ("namespace_declaration", "file_scoped_namespace_declaration")


class SourceParser:
    """
    C# source parser using tree-sitter.

    Example:
        parser = SourceParser()
        document = parser.parse_source(b"class A { readonly int _x; }")
        for type_decl in type_declarations(document.root):
            print(type_decl.name)
    """

    def __init__(self):
        self.parser = create_csharp_parser()
        self.log = logging.getLogger(__name__)

    def parse_file(self, file_path: str | Path) -> Optional[Document]:
        """
        Parse a C# source file.

        Args:
            file_path: Path to the source file

        Returns:
            Document with the converted tree, or None if the file is missing
        """
        file_path = Path(file_path)

        if not file_path.exists():
            self.log.error(f"Source file not found: {file_path}")
            return None

        return self.parse_source(file_path.read_bytes(), str(file_path))

    def parse_source(self, source: bytes | str, path: str = SOURCE_PATH) -> Document:
        """
        Parse C# source code into a Document.

        tree-sitter recovers from syntax errors, so a broken file still
        yields a tree; the error regions become ``OtherNode("ERROR")``.
        """
        if isinstance(source, str):
            source = source.encode("utf-8")

        tree = self.parser.parse(source)
        if tree.root_node.has_error:
            errors = list(error_regions(tree.root_node))
            line = errors[0].start_point[0] + 1 if errors else "?"
            self.log.warning(
                f"{path}: {len(errors)} syntax error region(s), first at line {line}, "
                f"analysis may be partial"
            )

        root = _Converter(source).convert(tree.root_node)
        if not isinstance(root, CompilationUnit):
            root = CompilationUnit(members=(root,), span=root.span)
        return Document(path=path, source=source, root=root)


class _Converter:
    """Builds syntax nodes from tree-sitter nodes of one source buffer."""

    def __init__(self, source: bytes):
        self.source = source

    def span(self, node: tree_sitter.Node) -> Span:
        return Span(
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            line=node.start_point[0] + 1,
            column=char_column(self.source, node.start_byte),
        )

    def text(self, node: tree_sitter.Node) -> str:
        return node_text(node, self.source)

    def identifier(self, node: tree_sitter.Node) -> IdentifierName:
        return IdentifierName(self.text(node), self.span(node))

    def modifiers(self, node: tree_sitter.Node) -> tuple[str, ...]:
        return tuple(self.text(c) for c in node.named_children if c.type == "modifier")

    def convert(self, node: tree_sitter.Node) -> SyntaxNode:
        kind = node.type
        if kind == "compilation_unit":
            return CompilationUnit(self._convert_all(node.named_children), self.span(node))
        if kind in NAMESPACE_KINDS:
            return self._namespace(node)
        if kind in TYPE_DECLARATION_KEYWORDS:
            return self._type_declaration(node)
        if kind == "field_declaration":
            field = self._field(node)
            if field is not None:
                return field
        elif kind == "constructor_declaration":
            return self._constructor(node)
        elif kind == "block":
            return Block(self._convert_all(node.named_children), self.span(node))
        elif kind == "expression_statement" and node.named_child_count:
            return ExpressionStatement(self.convert(node.named_children[0]), self.span(node))
        elif kind == "assignment_expression":
            assignment = self._assignment(node)
            if assignment is not None:
                return assignment
        elif kind == "identifier":
            return self.identifier(node)
        return OtherNode(kind, self._convert_all(node.named_children), self.span(node))

    def _convert_all(self, nodes: list[tree_sitter.Node]) -> tuple[SyntaxNode, ...]:
        return tuple(self.convert(n) for n in nodes)

    def _namespace(self, node: tree_sitter.Node) -> NamespaceDeclaration:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if body is not None:
            members = body.named_children
        else:
            # file-scoped: declarations follow the name directly
            members = [c for c in node.named_children if c != name_node]
        return NamespaceDeclaration(
            name=self.text(name_node) if name_node is not None else "",
            members=self._convert_all(members),
            span=self.span(node),
        )

    def _type_declaration(self, node: tree_sitter.Node) -> SyntaxNode:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if name_node is None or body is None or body.type != "declaration_list":
            # positional records (`record R(int X);`) have no member body
            return OtherNode(node.type, self._convert_all(node.named_children), self.span(node))

        return TypeDeclaration(
            keyword=TYPE_DECLARATION_KEYWORDS[node.type],
            identifier=self.identifier(name_node),
            modifiers=self.modifiers(node),
            members=self._convert_all(body.named_children),
            body=self.span(body),
            span=self.span(node),
        )

    def _field(self, node: tree_sitter.Node) -> Optional[FieldDeclaration]:
        declaration = next(
            (c for c in node.named_children if c.type == "variable_declaration"), None
        )
        if declaration is None:
            return None
        type_node = declaration.child_by_field_name("type")
        if type_node is None:
            return None

        variables = []
        for child in declaration.named_children:
            if child.type != "variable_declarator":
                continue
            variable = self._variable(child)
            if variable is None:
                return None
            variables.append(variable)

        return FieldDeclaration(
            modifiers=self.modifiers(node),
            type=TypeRef(self.text(type_node), self.span(type_node)),
            variables=tuple(variables),
            span=self.span(node),
        )

    def _variable(self, node: tree_sitter.Node) -> Optional[VariableDeclarator]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            name_node = next((c for c in node.named_children if c.type == "identifier"), None)
        if name_node is None:
            return None

        initializer = None
        for child in node.named_children:
            if child == name_node or child.type == "bracketed_argument_list":
                continue
            if child.type == "equals_value_clause" and child.named_child_count:
                child = child.named_children[0]
            initializer = self.convert(child)
            break

        return VariableDeclarator(self.identifier(name_node), initializer, self.span(node))

    def _constructor(self, node: tree_sitter.Node) -> SyntaxNode:
        name_node = node.child_by_field_name("name")
        params_node = node.child_by_field_name("parameters")
        if name_node is None or params_node is None:
            return OtherNode(node.type, self._convert_all(node.named_children), self.span(node))

        parameters = self._parameters(params_node)

        initializer = None
        body = None
        for child in node.named_children:
            if child.type == "constructor_initializer":
                initializer = OtherNode(
                    child.type, self._convert_all(child.named_children), self.span(child)
                )
            elif child.type == "block":
                body = Block(self._convert_all(child.named_children), self.span(child))
            elif child.type == "arrow_expression_clause" and child.named_child_count:
                body = ArrowBody(self.convert(child.named_children[0]), self.span(child))

        return ConstructorDeclaration(
            modifiers=self.modifiers(node),
            identifier=self.identifier(name_node),
            parameters=parameters,
            body=body,
            initializer=initializer,
            parameter_list=self.span(params_node),
            span=self.span(node),
        )

    def _parameters(self, node: tree_sitter.Node) -> tuple[Parameter, ...]:
        """
        Parameters of a ``parameter_list``.

        The grammar inlines a ``params`` array into the list as loose
        ``[attribute_list...] params <array_type> <identifier>`` children;
        those are folded back into one Parameter.
        """
        parameters = []
        pending: list[tree_sitter.Node] = []
        for child in node.children:
            if child.type == "parameter":
                parameters.append(self._parameter(child))
            elif child.type in ("attribute_list", "params") or (pending and child.is_named):
                pending.append(child)
                if child.type == "identifier" and any(c.type == "params" for c in pending):
                    parameters.append(self._params_array(pending))
                    pending = []
        return tuple(parameters)

    def _parameter(self, node: tree_sitter.Node) -> Parameter:
        name_node = node.child_by_field_name("name")
        type_node = node.child_by_field_name("type")
        return Parameter(
            identifier=self.identifier(name_node) if name_node is not None else IdentifierName(""),
            type=TypeRef(self.text(type_node), self.span(type_node)) if type_node is not None else None,
            span=self.span(node),
            is_params=any(
                self.text(c) == "params"
                for c in node.children
                if not c.is_named or c.type == "modifier"
            ),
        )

    def _params_array(self, nodes: list[tree_sitter.Node]) -> Parameter:
        name_node = nodes[-1]
        type_node = next(
            (n for n in reversed(nodes[:-1]) if n.is_named and n.type != "attribute_list"), None
        )
        start, end = nodes[0], name_node
        return Parameter(
            identifier=self.identifier(name_node),
            type=TypeRef(self.text(type_node), self.span(type_node)) if type_node is not None else None,
            span=Span(
                start_byte=start.start_byte,
                end_byte=end.end_byte,
                line=start.start_point[0] + 1,
                column=char_column(self.source, start.start_byte),
            ),
            is_params=True,
        )

    def _assignment(self, node: tree_sitter.Node) -> Optional[AssignmentExpression]:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None:
            return None

        operator_node = node.child_by_field_name("operator")
        if operator_node is not None:
            operator = self.text(operator_node)
        else:
            operator = self.source[left.end_byte:right.start_byte].decode("utf-8", errors="replace")

        return AssignmentExpression(
            left=self.convert(left),
            operator=operator.strip(),
            right=self.convert(right),
            span=self.span(node),
        )


def parse_csharp_source(source: bytes | str, path: str = SOURCE_PATH) -> Document:
    """
    Convenience function to parse C# source text.

    Args:
        source: C# source code
        path: File name reported in diagnostic locations

    Returns:
        Document holding the source and its converted tree
    """
    parser = SourceParser()
    return parser.parse_source(source, path)

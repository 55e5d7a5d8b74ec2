"""
tests/test_analyzer.py

Test suite for the injection rule:
- Field classification (readonly, static, multi-variable)
- Constructor scanning for assignments at any depth
- Diagnostic emission, order, location and determinism
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from injection_analyzer.analyzer import InjectionAnalyzer, analyze_document
from injection_analyzer.checks.constructors import assigns, constructors_of, has_assignment
from injection_analyzer.checks.fields import classify
from injection_analyzer.checks.injection import CATEGORY, MESSAGE_FORMAT, RULE_ID, TITLE, analyze
from injection_analyzer.issues import Severity
from injection_analyzer.source_parser import parse_csharp_source
from injection_analyzer.syntax import (
    AssignmentExpression,
    Block,
    ConstructorDeclaration,
    ExpressionStatement,
    FieldDeclaration,
    IdentifierName,
    OtherNode,
    TypeDeclaration,
    TypeRef,
    VariableDeclarator,
    type_declarations,
)


# ============================================================================
# Helpers
# ============================================================================

def make_field(*names, modifiers=("private", "readonly"), type_text="string"):
    return FieldDeclaration(
        modifiers=modifiers,
        type=TypeRef(type_text),
        variables=tuple(VariableDeclarator(IdentifierName(n)) for n in names),
    )


def assign(left, right="value"):
    return ExpressionStatement(AssignmentExpression(IdentifierName(left), "=", IdentifierName(right)))


def make_constructor(*statements, modifiers=("public",)):
    return ConstructorDeclaration(
        modifiers=modifiers,
        identifier=IdentifierName("Host"),
        body=Block(tuple(statements)),
    )


def single_type(source):
    document = parse_csharp_source(source)
    return document, next(type_declarations(document.root))


def messages(diagnostics):
    return [d.message for d in diagnostics]


# ============================================================================
# Field Classifier
# ============================================================================

class TestClassify:

    def test_readonly_instance_field(self):
        field = make_field("_service", type_text="IService")
        entity = classify(field)
        assert entity.name == "_service"
        assert entity.declared_type.text == "IService"
        assert entity.is_readonly and not entity.is_static
        assert entity.variable_count == 1

    def test_mutable_field_skipped(self):
        assert classify(make_field("_service", modifiers=("private",))) is None

    def test_static_readonly_skipped(self):
        assert classify(make_field("Default", modifiers=("static", "readonly"))) is None

    def test_multi_variable_skipped(self):
        assert classify(make_field("a", "b")) is None


# ============================================================================
# Constructor Scanner
# ============================================================================

class TestConstructorScanner:

    def test_direct_assignment(self):
        assert assigns(make_constructor(assign("_service")), "_service")

    def test_other_field_assigned(self):
        assert not assigns(make_constructor(assign("_logger")), "_service")

    def test_no_body(self):
        ctor = ConstructorDeclaration(modifiers=("extern",), identifier=IdentifierName("Host"))
        assert not assigns(ctor, "_service")

    def test_compound_assignment_is_not_evidence(self):
        statement = ExpressionStatement(
            AssignmentExpression(IdentifierName("_count"), "+=", IdentifierName("step"))
        )
        assert not assigns(make_constructor(statement), "_count")

    def test_nested_assignment_found(self):
        nested = OtherNode("if_statement", (IdentifierName("ready"), Block((assign("_service"),))))
        assert assigns(make_constructor(nested), "_service")

    def test_has_assignment_any_constructor(self):
        field = classify(make_field("_service"))
        constructors = [make_constructor(assign("_logger")), make_constructor(assign("_service"))]
        assert has_assignment(constructors, field)
        assert not has_assignment(constructors[:1], field)
        assert not has_assignment([], field)

    def test_constructors_of_skips_static_and_nested(self):
        _, host = single_type(
            "class Host {\n"
            "    static Host() { }\n"
            "    public Host() { }\n"
            "    public Host(int a) { }\n"
            "    class Inner { public Inner() { } }\n"
            "}\n"
        )
        found = constructors_of(host)
        assert [len(c.parameters) for c in found] == [0, 1]
        assert all(c.identifier.text == "Host" for c in found)


# ============================================================================
# Diagnostic Engine
# ============================================================================

END_TO_END_SOURCE = "\n".join([
    "",
    "using System;",
    "using System.Collections.Generic;",
    "using System.Linq;",
    "using System.Text;",
    "using System.Threading.Tasks;",
    "using System.Diagnostics;",
    "",
    "namespace ConsoleApplication1",
    "{",
    "\tclass TypeName",
    "\t{",
    "\t\tprivate readonly string _navigationService;",
    "\t}",
    "}",
])


class TestAnalyze:

    def test_empty_source(self):
        assert analyze_document(parse_csharp_source("")) == []

    def test_field_without_constructor(self):
        document = parse_csharp_source(END_TO_END_SOURCE, "Test0.cs")
        (diagnostic,) = analyze_document(document)
        assert diagnostic.rule_id == RULE_ID == "InjectionAnalyzer"
        assert diagnostic.message == (
            "Readonly Field '_navigationService' is injected in none of the constructors."
        )
        assert diagnostic.severity is Severity.INFO
        assert diagnostic.title == TITLE
        assert diagnostic.category == CATEGORY == "Naming"
        assert diagnostic.location.path == "Test0.cs"
        assert diagnostic.location.line == 13
        assert diagnostic.location.column == 27

    def test_location_is_field_name_token(self):
        document = parse_csharp_source(END_TO_END_SOURCE)
        (diagnostic,) = analyze_document(document)
        start, end = diagnostic.location.start_byte, diagnostic.location.end_byte
        assert document.source[start:end] == b"_navigationService"

    def test_assigned_in_one_constructor(self):
        _, host = single_type(
            "class Host {\n"
            "    private readonly IService _service;\n"
            "    public Host() { }\n"
            "    public Host(IService service) { _service = service; }\n"
            "}\n"
        )
        assert analyze(host) == []

    def test_assigned_in_no_constructor(self):
        _, host = single_type(
            "class Host {\n"
            "    private readonly IService _service;\n"
            "    private readonly ILogger _logger;\n"
            "    public Host(ILogger logger) { _logger = logger; }\n"
            "}\n"
        )
        assert messages(analyze(host)) == [MESSAGE_FORMAT.format("_service")]

    def test_assignment_inside_lambda_and_branch(self):
        _, host = single_type(
            "class Host {\n"
            "    private readonly IService _a;\n"
            "    private readonly IService _b;\n"
            "    public Host(IService a, IService b, bool flag) {\n"
            "        if (flag) { _a = a; }\n"
            "        Action init = () => { _b = b; };\n"
            "    }\n"
            "}\n"
        )
        assert analyze(host) == []

    def test_this_qualified_assignment_not_counted(self):
        _, host = single_type(
            "class Host {\n"
            "    private readonly IService _service;\n"
            "    public Host(IService service) { this._service = service; }\n"
            "}\n"
        )
        assert messages(analyze(host)) == [MESSAGE_FORMAT.format("_service")]

    def test_static_constructor_is_not_evidence(self):
        _, host = single_type(
            "class Host {\n"
            "    private readonly IService _service;\n"
            "    static Host() { _service = null; }\n"
            "}\n"
        )
        assert messages(analyze(host)) == [MESSAGE_FORMAT.format("_service")]

    def test_excluded_fields_never_reported(self):
        _, host = single_type(
            "class Host {\n"
            "    private static readonly IService _shared;\n"
            "    private readonly string _a, _b;\n"
            "    private IService _mutable;\n"
            "}\n"
        )
        assert analyze(host) == []

    def test_declaration_order(self):
        _, host = single_type(
            "class Host {\n"
            "    private readonly A _first;\n"
            "    public Host() { }\n"
            "    private readonly B _second;\n"
            "    private readonly C _third;\n"
            "}\n"
        )
        assert messages(analyze(host)) == [
            MESSAGE_FORMAT.format("_first"),
            MESSAGE_FORMAT.format("_second"),
            MESSAGE_FORMAT.format("_third"),
        ]

    def test_nested_type_constructors_are_separate(self):
        document = parse_csharp_source(
            "class Outer {\n"
            "    private readonly IService _service;\n"
            "    class Inner {\n"
            "        private readonly IService _service;\n"
            "        public Inner(IService service) { _service = service; }\n"
            "    }\n"
            "}\n"
        )
        (diagnostic,) = analyze_document(document)
        assert diagnostic.location.line == 2

    def test_repeated_analysis_is_identical(self):
        document = parse_csharp_source(
            "namespace App {\n"
            "    class A { private readonly int _x; private readonly int _y; }\n"
            "    struct B { private readonly int _z; }\n"
            "}\n"
        )
        first = analyze_document(document)
        second = analyze_document(document)
        assert first == second
        assert len(first) == 3

    def test_analyzer_coordinator(self):
        document = parse_csharp_source(END_TO_END_SOURCE)
        analyzer = InjectionAnalyzer(document)
        assert analyzer.context.types[0].name == "TypeName"
        assert analyzer.diagnostics == analyze_document(document)

    def test_hand_built_type(self):
        host = TypeDeclaration(
            keyword="class",
            identifier=IdentifierName("Host"),
            members=(make_field("_service"), make_constructor(assign("_other"))),
        )
        (diagnostic,) = analyze(host, "Host.cs")
        assert diagnostic.message == MESSAGE_FORMAT.format("_service")
        assert diagnostic.location.path == "Host.cs"

    def test_format(self):
        (diagnostic,) = analyze_document(parse_csharp_source(END_TO_END_SOURCE, "Test0.cs"))
        assert diagnostic.format() == (
            "Test0.cs:13:27: info InjectionAnalyzer: "
            "Readonly Field '_navigationService' is injected in none of the constructors."
        )


@pytest.mark.parametrize("modifiers", [
    "private readonly",
    "readonly",
    "protected internal readonly",
])
def test_modifier_combinations_reported(modifiers):
    _, host = single_type(f"class Host {{ {modifiers} IService _service; }}")
    assert messages(analyze(host)) == [MESSAGE_FORMAT.format("_service")]

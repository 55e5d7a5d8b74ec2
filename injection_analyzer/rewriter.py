"""
injection_analyzer/rewriter.py

Turns a FixEdit into new source text and a new Document.

Only the bytes covered by the edit's target change. Inside the target, the
original text is kept and the new children are spliced in next to their
original siblings, so comments, layout and line endings of untouched code
survive. A new parameter goes before a trailing ``params`` array.
"""

from __future__ import annotations

import logging
from typing import Optional

from injection_analyzer.document import Document
from injection_analyzer.fixer import FixContractError, FixEdit
from injection_analyzer.printer import Printer, line_indent
from injection_analyzer.source_parser import SourceParser
from injection_analyzer.syntax import (
    ArrowBody,
    Block,
    ConstructorDeclaration,
    Span,
    TypeDeclaration,
)

log = logging.getLogger(__name__)

Splice = tuple[int, int, str]


def apply_fix(document: Document, edit: FixEdit, parser: Optional[SourceParser] = None) -> Document:
    """New Document whose source reflects exactly this one edit."""
    source = render_edit(document, edit)
    parser = parser or SourceParser()
    return parser.parse_source(source, document.path)


def render_edit(document: Document, edit: FixEdit) -> bytes:
    target = edit.target
    if target.span is None:
        raise FixContractError("Edit target was not read from this document")

    printer = Printer(document)
    match edit.replacement:
        case TypeDeclaration():
            splices = _type_splices(document, printer, target, edit.replacement)
        case ConstructorDeclaration():
            if edit.needs_relayout:
                log.debug("relayout constructor at line %s", target.span.line)
            splices = _constructor_splices(document, printer, target, edit.replacement)
        case _:
            raise FixContractError(f"Cannot apply edit replacing {type(target).__name__}")

    return _apply_splices(document.source, splices)


def _apply_splices(source: bytes, splices: list[Splice]) -> bytes:
    for start, end, text in sorted(splices, key=lambda s: s[0], reverse=True):
        source = source[:start] + text.encode("utf-8") + source[end:]
    return source


def _added(original: tuple, updated: tuple) -> tuple:
    if updated[:len(original)] != original:
        raise FixContractError("Replacement must keep the original children in order")
    return updated[len(original):]


def _inserted(original: tuple, updated: tuple) -> tuple[int, tuple]:
    """Position and run of children ``updated`` adds to ``original`` in one place."""
    count = len(updated) - len(original)
    if count < 0:
        raise FixContractError("Replacement must keep the original children in order")
    for index in range(len(original), -1, -1):
        if updated[:index] == original[:index] and updated[index + count:] == original[index:]:
            return index, updated[index:index + count]
    raise FixContractError("Replacement must keep the original children in order")


def _indent_at(source: bytes, offset: int, fallback: str) -> str:
    indent = line_indent(source, offset)
    return fallback if indent is None else indent


def _close_block(source: bytes, block: Span, after: int, text: str,
                 brace_indent: str, newline: str = "\n") -> Splice:
    """
    Insert ``text`` after offset ``after`` inside a braced block.

    When the closing brace shares the line with what precedes it, the brace
    moves to its own line.
    """
    close = block.end_byte - 1
    if b"\n" in source[after:close]:
        return (after, after, text)
    return (after, close, text + newline + brace_indent)


def _type_splices(document: Document, printer: Printer,
                  old: TypeDeclaration, new: TypeDeclaration) -> list[Splice]:
    source = document.source
    added = _added(old.members, new.members)
    if old.body is None:
        raise FixContractError(f"Type '{old.name}' has no member body")

    brace_indent = _indent_at(source, old.body.start_byte, _indent_at(source, old.span.start_byte, ""))
    originals = [m for m in old.members if m.span is not None]
    if originals:
        member_indent = _indent_at(source, originals[0].span.start_byte, brace_indent + printer.indent_unit)
        after = originals[-1].span.end_byte
        separator = printer.newline * 2
    else:
        member_indent = brace_indent + printer.indent_unit
        after = old.body.start_byte + 1
        separator = printer.newline

    text = "".join(separator + member_indent + printer.render(m, member_indent) for m in added)
    return [_close_block(source, old.body, after, text, brace_indent, printer.newline)]


def _constructor_splices(document: Document, printer: Printer,
                         old: ConstructorDeclaration, new: ConstructorDeclaration) -> list[Splice]:
    source = document.source
    splices: list[Splice] = []

    index, added_params = _inserted(old.parameters, new.parameters)
    if added_params:
        if old.parameter_list is None:
            raise FixContractError("Constructor has no parameter list to extend")
        params = old.parameters
        separator = ", "
        if len(params) >= 2:
            separator = source[params[-2].span.end_byte:params[-1].span.start_byte].decode("utf-8")
        if index < len(params):
            at = params[index].span.start_byte
            text = "".join(printer.render(p) + separator for p in added_params)
        elif params:
            at = params[-1].span.end_byte
            text = "".join(separator + printer.render(p) for p in added_params)
        else:
            at = old.parameter_list.start_byte + 1
            text = ", ".join(printer.render(p) for p in added_params)
        splices.append((at, at, text))

    ctor_indent = _indent_at(source, old.span.start_byte, "")
    match (old.body, new.body):
        case (Block(span=old_span), Block(span=new_span)) if old_span is not None and old_span == new_span:
            added = _added(old.body.statements, new.body.statements)
            if added:
                splices.append(_statement_splice(source, printer, old.body, added, ctor_indent))
        case (old_body, Block()) if old.body != new.body:
            # expression body or no body: replace it with a laid-out block
            start = old_body.span.start_byte if isinstance(old_body, ArrowBody) else old.span.end_byte - 1
            while start > 0 and source[start - 1:start] in (b" ", b"\t", b"\n", b"\r"):
                start -= 1
            text = printer.newline + ctor_indent + printer.render(new.body, ctor_indent)
            splices.append((start, old.span.end_byte, text))
        case _:
            pass
    return splices


def _statement_splice(source: bytes, printer: Printer, block: Block,
                      added: tuple, ctor_indent: str) -> Splice:
    brace_indent = _indent_at(source, block.span.start_byte, ctor_indent)
    statements = block.statements
    if statements:
        indent = _indent_at(source, statements[0].span.start_byte, brace_indent + printer.indent_unit)
        after = statements[-1].span.end_byte
    else:
        indent = brace_indent + printer.indent_unit
        after = block.span.start_byte + 1

    text = "".join(printer.newline + indent + printer.render(s, indent) for s in added)
    return _close_block(source, block.span, after, text, brace_indent, printer.newline)

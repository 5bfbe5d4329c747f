"""
Resolvers decide which nodes of a parsed file are component definitions.

A resolver takes a SourceFile and returns a list of ComponentDefinition in
source order. Callers may pass their own callable with the same shape.
"""
import re
from typing import List, Optional

from docmeta.errors import ERROR_MULTIPLE_DEFINITIONS, MULTIPLE_DEFINITIONS, ExtractionError
from docmeta.extractors.source import (
    CLASS_TYPES,
    FUNCTION_TYPES,
    JSX_TYPES,
    WRAPPER_CALLS,
    ComponentDefinition,
    SourceFile,
    same_node,
    walk,
)

COMPONENT_BASE = re.compile(r"\bextends\s+(?:React\.)?(?:Pure)?Component\b")
CREATE_CLASS_CALLS = {"React.createClass", "createReactClass", "createClass"}
CREATE_ELEMENT_CALLS = {"React.createElement", "createElement"}


# ---------- shape checks ----------

def is_component_class(node, src: SourceFile) -> bool:
    body = node.child_by_field_name("body")
    if body is None:
        return False
    header = src.code[node.start_byte:body.start_byte].decode("utf-8", errors="replace")
    if COMPONENT_BASE.search(header):
        return True
    for member in body.named_children:
        if member.type == "method_definition" and src.safe_text(member.child_by_field_name("name")) == "render":
            return True
    return False


def is_create_class_call(node, src: SourceFile) -> bool:
    if node.type != "call_expression":
        return False
    callee = node.child_by_field_name("function")
    if callee is None or src.get_text(callee) not in CREATE_CLASS_CALLS:
        return False
    return create_class_spec(node) is not None


def create_class_spec(call):
    args = call.child_by_field_name("arguments")
    if args is None:
        return None
    named = [a for a in args.named_children if a.type != "comment"]
    if named and named[0].type == "object":
        return named[0]
    return None


def _contains_jsx(node, src: SourceFile) -> bool:
    for child in walk(node):
        if child.type in JSX_TYPES:
            return True
        if child.type == "call_expression":
            callee = child.child_by_field_name("function")
            if callee is not None and src.get_text(callee) in CREATE_ELEMENT_CALLS:
                return True
    return False


def _returns(body):
    """Return statements of a function body, not descending into nested functions."""
    stack = [body]
    while stack:
        node = stack.pop()
        if node.type == "return_statement":
            yield node
            continue
        for child in node.children:
            if child.type in FUNCTION_TYPES or child.type in CLASS_TYPES:
                continue
            stack.append(child)


def returns_jsx(fn, src: SourceFile) -> bool:
    body = fn.child_by_field_name("body")
    if body is None:
        return False
    if body.type != "statement_block":
        return _contains_jsx(body, src)
    for ret in _returns(body):
        if any(_contains_jsx(value, src) for value in ret.named_children):
            return True
    return False


# ---------- position checks ----------

def _definition_anchor(node, src: SourceFile):
    """
    Walk from a definition to the top-level statement owning it. Returns
    (statement, binding name, exported) or None when the definition isn't
    bound at module level.
    """
    name: Optional[str] = None
    exported = False
    current = node
    while True:
        parent = current.parent
        if parent is None:
            return None
        if parent.type == "program":
            return current, name, exported
        if parent.type == "export_statement":
            exported = True
        elif parent.type == "variable_declarator":
            if not same_node(parent.child_by_field_name("value"), current):
                return None
            if name is None:
                name = src.safe_text(parent.child_by_field_name("name"))
        elif parent.type == "assignment_expression":
            if not same_node(parent.child_by_field_name("right"), current):
                return None
            if name is None:
                name = src.safe_text(parent.child_by_field_name("left"))
        elif parent.type == "arguments":
            call = parent.parent
            callee = call.child_by_field_name("function") if call is not None else None
            if callee is None or src.get_text(callee) not in WRAPPER_CALLS:
                return None
        elif parent.type in ("call_expression", "parenthesized_expression", "lexical_declaration",
                             "variable_declaration", "expression_statement"):
            pass
        else:
            return None
        current = parent


def _make_definition(kind, node, src, anchor, exported_names):
    _, name, exported = anchor
    if name is None and kind != "create_class":
        name = src.safe_text(node.child_by_field_name("name"))
    if name is not None and name in exported_names:
        exported = True
    return ComponentDefinition(kind, node, src, name=name, exported=exported)


# ---------- resolvers ----------

def find_all_component_definitions(src: SourceFile) -> List[ComponentDefinition]:
    """Every class, createClass call and JSX-returning function bound at module level."""
    exported_names = src.exported_names()
    definitions: List[ComponentDefinition] = []
    seen = set()

    for node in walk(src.root):
        kind = None
        target = node
        if node.type in CLASS_TYPES and is_component_class(node, src):
            kind = "class"
        elif node.type in FUNCTION_TYPES and returns_jsx(node, src):
            kind = "function"
        elif is_create_class_call(node, src):
            kind = "create_class"
            target = create_class_spec(node)

        if kind is None:
            continue
        anchor = _definition_anchor(node, src)
        if anchor is None:
            continue
        key = (target.start_byte, target.end_byte)
        if key in seen:
            continue
        seen.add(key)
        definitions.append(_make_definition(kind, target, src, anchor, exported_names))

    return definitions


def find_all_exported_component_definitions(src: SourceFile) -> List[ComponentDefinition]:
    return [d for d in find_all_component_definitions(src) if d.exported]


def find_exported_component_definition(src: SourceFile) -> List[ComponentDefinition]:
    """The single exported component of the file; more than one is an error."""
    exported = find_all_exported_component_definitions(src)
    if len(exported) > 1:
        raise ExtractionError(ERROR_MULTIPLE_DEFINITIONS, kind=MULTIPLE_DEFINITIONS)
    return exported

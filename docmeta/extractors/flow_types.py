from typing import Any, Dict, List, Optional

from docmeta.extractors.source import SourceFile, strip_quotes, walk

SIMPLE_TYPE_NODES = {"predefined_type", "type_identifier", "nested_type_identifier", "identifier", "this_type"}


def _named(node) -> List[Any]:
    return [c for c in node.named_children if c.type != "comment"]


def unwrap_annotation(node):
    """The type inside a `: Type` annotation node."""
    if node is not None and node.type in ("type_annotation", "opting_type_annotation", "omitting_type_annotation"):
        named = _named(node)
        return named[0] if named else None
    return node


def _union_members(node) -> List[Any]:
    out = []
    for child in _named(node):
        if child.type == "union_type":
            out.extend(_union_members(child))
        else:
            out.append(child)
    return out


def get_type_descriptor(node, src: SourceFile) -> Dict[str, Any]:
    """Describe a Flow/TypeScript type node the way component docs present it."""
    node = unwrap_annotation(node)
    if node is None:
        return {"name": "any"}
    text = src.get_text(node)

    if node.type in SIMPLE_TYPE_NODES:
        return {"name": text}
    if node.type == "literal_type":
        return {"name": "literal", "value": text}
    if node.type == "flow_maybe_type":
        named = _named(node)
        descriptor = dict(get_type_descriptor(named[0], src)) if named else {"name": text.lstrip("?")}
        descriptor["nullable"] = True
        return descriptor
    if node.type == "parenthesized_type":
        named = _named(node)
        return get_type_descriptor(named[0], src) if named else {"name": text}
    if node.type == "union_type":
        return {
            "name": "union",
            "raw": text,
            "elements": [get_type_descriptor(m, src) for m in _union_members(node)],
        }
    if node.type == "array_type":
        named = _named(node)
        return {
            "name": "Array",
            "raw": text,
            "elements": [get_type_descriptor(named[0], src)] if named else [],
        }
    if node.type == "generic_type":
        name_node = node.child_by_field_name("name")
        args = node.child_by_field_name("type_arguments")
        if name_node is None or args is None:
            named = _named(node)
            name_node = named[0] if named else None
            args = next((c for c in named if c.type == "type_arguments"), None)
        return {
            "name": src.get_text(name_node) if name_node is not None else text,
            "raw": text,
            "elements": [get_type_descriptor(a, src) for a in _named(args)] if args is not None else [],
        }
    if node.type == "function_type":
        return {"name": "signature", "type": "function", "raw": text}
    if node.type == "object_type":
        return {"name": "signature", "type": "object", "raw": text}
    return {"name": text}


def object_type_properties(node, src: SourceFile, depth: int = 0):
    """
    Yield (name, type node, required, docblock) for each property of an
    object type. Type references are followed to their local declaration.
    """
    node = unwrap_annotation(node)
    if node is None or depth > 5:
        return
    if node.type in ("type_identifier", "generic_type"):
        name_node = node if node.type == "type_identifier" else node.child_by_field_name("name")
        if name_node is None:
            return
        declared = src.find_type_declaration(src.get_text(name_node))
        yield from object_type_properties(declared, src, depth + 1)
        return
    if node.type == "intersection_type":
        for part in _named(node):
            yield from object_type_properties(part, src, depth + 1)
        return
    if node.type not in ("object_type", "interface_body"):
        return

    for prop in _named(node):
        if prop.type != "property_signature":
            continue
        name_node = prop.child_by_field_name("name")
        if name_node is None:
            continue
        optional = any(c.type == "?" for c in prop.children)
        yield (
            strip_quotes(src.get_text(name_node)),
            prop.child_by_field_name("type"),
            not optional,
            src.docblock_before(prop),
        )


def props_type_node(definition) -> Optional[Any]:
    """The annotation that types a component's props, if any."""
    src = definition.source
    if definition.kind == "class":
        for child in definition.class_members():
            if child.type in ("field_definition", "public_field_definition"):
                name_node = child.child_by_field_name("property") or child.child_by_field_name("name")
                is_static = any(c.type == "static" for c in child.children)
                if not is_static and src.safe_text(name_node) == "props":
                    annotation = child.child_by_field_name("type")
                    if annotation is not None:
                        return annotation
        body = definition.node.child_by_field_name("body")
        end = body.start_byte if body is not None else definition.node.end_byte
        for child in definition.node.children:
            if child.type != "class_heritage" or child.start_byte >= end:
                continue
            for node in walk(child):
                if node.type == "type_arguments":
                    named = _named(node)
                    return named[0] if named else None
        return None

    if definition.kind == "function":
        param = definition.props_parameter()
        if param is not None and param.type in ("required_parameter", "optional_parameter"):
            annotation = param.child_by_field_name("type")
            if annotation is not None:
                return annotation
        # const Foo: React.FC<Props> = (props) => ...
        declarator = definition.node.parent
        while declarator is not None and declarator.type in ("arguments", "call_expression", "parenthesized_expression"):
            declarator = declarator.parent
        if declarator is not None and declarator.type == "variable_declarator":
            annotated = unwrap_annotation(declarator.child_by_field_name("type"))
            if annotated is not None and annotated.type == "generic_type":
                args = annotated.child_by_field_name("type_arguments")
                if args is None:
                    args = next((c for c in annotated.named_children if c.type == "type_arguments"), None)
                named = _named(args) if args is not None else []
                return named[0] if named else None
    return None


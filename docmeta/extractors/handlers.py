"""
Handlers fill a Documentation record from a ComponentDefinition.

Every handler is a plain callable `handler(documentation, definition)`;
the extractor runs them in list order, so a handler may read what an
earlier one wrote. Handler lists are composed by concatenation.
"""
import os
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from docmeta.doclets import clean_doclets, parse_doclets
from docmeta.extractors.documentation import Documentation
from docmeta.extractors.flow_types import get_type_descriptor, object_type_properties, props_type_node
from docmeta.extractors.prop_types import get_prop_type, is_computed, unwrap_required
from docmeta.extractors.source import (
    FUNCTION_TYPES,
    STRING_TYPES,
    ComponentDefinition,
    SourceFile,
    returned_value,
    strip_quotes,
)

LIFECYCLE_METHODS = {
    "constructor",
    "render",
    "componentWillMount",
    "UNSAFE_componentWillMount",
    "componentDidMount",
    "componentWillReceiveProps",
    "UNSAFE_componentWillReceiveProps",
    "shouldComponentUpdate",
    "componentWillUpdate",
    "UNSAFE_componentWillUpdate",
    "componentDidUpdate",
    "componentWillUnmount",
    "componentDidCatch",
    "getDerivedStateFromProps",
    "getDerivedStateFromError",
    "getSnapshotBeforeUpdate",
    "getChildContext",
    "getDefaultProps",
    "getInitialState",
}
# createClass spec keys and class statics that describe the component itself
COMPONENT_KEYS = {
    "propTypes",
    "defaultProps",
    "displayName",
    "contextTypes",
    "childContextTypes",
    "contextType",
    "mixins",
    "statics",
    "state",
}

JSDOC_PARAM = re.compile(r"^(?:\{(?P<type>[^}]*)\}\s*)?(?P<name>\[[^\]]*\]|[\w$.]+)?\s*(?:-\s*)?(?P<description>.*)$", re.S)
JSDOC_RETURNS = re.compile(r"^(?:\{(?P<type>[^}]*)\}\s*)?(?P<description>.*)$", re.S)


# ---------------------------
# Shared helpers
# ---------------------------

def _key_name(pair, src: SourceFile) -> Optional[str]:
    key = pair.child_by_field_name("key")
    if key is None or key.type == "computed_property_name":
        return None
    return strip_quotes(src.get_text(key))


def _object_members(obj, src: SourceFile, depth: int = 0) -> Iterator[Tuple[str, Any]]:
    """
    ("prop", pair) for each keyed entry of an object literal and
    ("spread", argument) for spreads that don't resolve to a local object.
    Spreads of local objects are inlined.
    """
    for child in obj.named_children:
        if child.type == "pair":
            yield "prop", child
        elif child.type == "shorthand_property_identifier":
            yield "shorthand", child
        elif child.type == "spread_element":
            named = [c for c in child.named_children if c.type != "comment"]
            if not named:
                continue
            resolved = src.resolve_to_value(named[0])
            if resolved is not None and resolved.type == "object" and depth < 5:
                yield from _object_members(resolved, src, depth + 1)
            else:
                yield "spread", named[0]


def _prop_types_object(definition: ComponentDefinition):
    obj = definition.get_member("propTypes")
    if obj is None or obj.type != "object":
        return None
    return obj


# ---------------------------
# Prop handlers
# ---------------------------

def prop_type_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    obj = _prop_types_object(definition)
    if obj is None:
        return
    src = definition.source
    for kind, node in _object_members(obj, src):
        if kind != "prop":
            continue
        name = _key_name(node, src)
        value = node.child_by_field_name("value")
        if name is None or value is None:
            continue
        inner, required = unwrap_required(value, src)
        descriptor = documentation.get_prop_descriptor(name)
        descriptor["type"] = get_prop_type(inner, src)
        descriptor["required"] = required


def prop_type_composition_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    """Record the modules whose propTypes are spread into this component's."""
    obj = _prop_types_object(definition)
    if obj is None:
        return
    src = definition.source
    imports = src.imports()
    for kind, node in _object_members(obj, src):
        if kind != "spread":
            continue
        head = node
        while head.type == "member_expression":
            head = head.child_by_field_name("object")
        module = imports.get(src.get_text(head)) if head is not None else None
        if module:
            documentation.add_composes(module)


def prop_docblock_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    obj = _prop_types_object(definition)
    if obj is None:
        return
    src = definition.source
    for kind, node in _object_members(obj, src):
        if kind != "prop":
            continue
        name = _key_name(node, src)
        if name is None:
            continue
        documentation.get_prop_descriptor(name)["description"] = src.docblock_before(node) or ""


def flow_type_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    """Props typed with Flow or TypeScript annotations."""
    src = definition.source
    if src.flavor is None:
        return
    type_node = props_type_node(definition)
    if type_node is None:
        return
    key = "flowType" if src.flavor == "flow" else "tsType"
    for name, prop_type, required, docblock in object_type_properties(type_node, src):
        descriptor = documentation.get_prop_descriptor(name)
        descriptor[key] = get_type_descriptor(prop_type, src)
        descriptor.setdefault("required", required)
        if docblock and not descriptor.get("description"):
            descriptor["description"] = docblock
        else:
            descriptor.setdefault("description", "")


def _default_props_object(definition: ComponentDefinition):
    if definition.kind == "create_class":
        value = returned_value(definition.spec_method("getDefaultProps"))
        if value is not None:
            return definition.source.resolve_to_value(value)
    obj = definition.get_member("defaultProps")
    if obj is None or obj.type != "object":
        return None
    return obj


def _parameter_defaults(definition: ComponentDefinition) -> List[Tuple[str, Any]]:
    """Defaults written in a function component's destructured props parameter."""
    src = definition.source
    param = definition.props_parameter()
    if param is not None and param.type in ("required_parameter", "optional_parameter"):
        param = param.child_by_field_name("pattern")
    if param is not None and param.type == "assignment_pattern":
        param = param.child_by_field_name("left")
    if param is None or param.type != "object_pattern":
        return []

    out = []
    for child in param.named_children:
        if child.type == "object_assignment_pattern":
            left = child.child_by_field_name("left")
            right = child.child_by_field_name("right")
            if left is not None and right is not None:
                out.append((src.get_text(left), right))
        elif child.type == "pair_pattern":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if key is not None and value is not None and value.type == "assignment_pattern":
                right = value.child_by_field_name("right")
                if right is not None:
                    out.append((strip_quotes(src.get_text(key)), right))
    return out


def default_props_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    src = definition.source
    defaults: List[Tuple[str, Any]] = []

    obj = _default_props_object(definition)
    if obj is not None and obj.type == "object":
        for kind, node in _object_members(obj, src):
            if kind == "prop":
                name = _key_name(node, src)
                value = node.child_by_field_name("value")
                if name is not None and value is not None:
                    defaults.append((name, value))
            elif kind == "shorthand":
                defaults.append((src.get_text(node), node))

    if definition.kind == "function":
        defaults.extend(_parameter_defaults(definition))

    for name, value in defaults:
        documentation.get_prop_descriptor(name)["defaultValue"] = {
            "value": src.get_text(value),
            "computed": is_computed(value),
        }


# ---------------------------
# Component handlers
# ---------------------------

def component_docblock_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    documentation.set("description", definition.source.docblock_for(definition.node) or "")


def _params(fn, src: SourceFile) -> List[Dict[str, Any]]:
    params_node = fn.child_by_field_name("parameters") if fn is not None else None
    if params_node is None:
        single = fn.child_by_field_name("parameter") if fn is not None else None
        return [{"name": src.get_text(single), "type": None}] if single is not None else []

    out = []
    for param in params_node.named_children:
        if param.type == "comment":
            continue
        entry: Dict[str, Any] = {"name": src.get_text(param), "type": None}
        if param.type in ("required_parameter", "optional_parameter"):
            pattern = param.child_by_field_name("pattern")
            annotation = param.child_by_field_name("type")
            entry["name"] = src.get_text(pattern) if pattern is not None else entry["name"]
            if annotation is not None:
                entry["type"] = get_type_descriptor(annotation, src)
            if param.type == "optional_parameter" or param.child_by_field_name("value") is not None:
                entry["optional"] = True
        elif param.type == "assignment_pattern":
            left = param.child_by_field_name("left")
            entry["name"] = src.get_text(left) if left is not None else entry["name"]
            entry["optional"] = True
        out.append(entry)
    return out


def _method(name: str, fn, src: SourceFile, docblock: Optional[str], modifiers: List[str]) -> Dict[str, Any]:
    returns = None
    return_type = fn.child_by_field_name("return_type") if fn is not None else None
    if return_type is not None:
        returns = {"type": get_type_descriptor(return_type, src)}
    return {
        "name": name,
        "docblock": docblock,
        "modifiers": modifiers,
        "params": _params(fn, src),
        "returns": returns,
        "description": None,
    }


def _modifiers(node) -> List[str]:
    out = []
    for child in node.children:
        if child.type in ("static", "async", "get", "set"):
            out.append(child.type)
        elif child.type == "*":
            out.append("generator")
    return out


def component_methods_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    src = definition.source
    methods: List[Dict[str, Any]] = []

    for member in definition.class_members():
        if member.type == "method_definition":
            name = src.safe_text(member.child_by_field_name("name"))
            if not name or name in LIFECYCLE_METHODS or name in COMPONENT_KEYS:
                continue
            methods.append(_method(name, member, src, src.docblock_before(member), _modifiers(member)))
        elif member.type in ("field_definition", "public_field_definition"):
            name = src.safe_text(member.child_by_field_name("property") or member.child_by_field_name("name"))
            value = member.child_by_field_name("value")
            if not name or value is None or value.type not in FUNCTION_TYPES:
                continue
            if name in LIFECYCLE_METHODS or name in COMPONENT_KEYS:
                continue
            modifiers = [m for m in _modifiers(member) if m == "static"] + [m for m in _modifiers(value) if m == "async"]
            methods.append(_method(name, value, src, src.docblock_before(member), modifiers))

    for member in definition.spec_members():
        if member.type == "method_definition":
            name = src.safe_text(member.child_by_field_name("name"))
            fn = member
        else:
            name = _key_name(member, src)
            fn = member.child_by_field_name("value")
            if fn is None or fn.type not in FUNCTION_TYPES:
                continue
        if not name or name in LIFECYCLE_METHODS or name in COMPONENT_KEYS:
            continue
        methods.append(_method(name, fn, src, src.docblock_before(member), _modifiers(fn)))

    if definition.kind == "function" and definition.name:
        for prop, value in src.member_assignments(definition.name):
            if value is None or value.type not in FUNCTION_TYPES or prop in COMPONENT_KEYS:
                continue
            statement = value.parent.parent if value.parent is not None else None
            docblock = src.docblock_before(statement) if statement is not None else None
            methods.append(_method(prop, value, src, docblock, ["static"]))

    documentation.set("methods", methods)


def component_methods_jsdoc_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
    """Fill method descriptions, param and return docs from the method docblocks."""
    for method in documentation.get("methods") or []:
        docblock = method.get("docblock")
        if not docblock:
            continue
        method["description"] = clean_doclets(docblock) or None
        params = {p["name"]: p for p in method["params"]}

        for doclet in parse_doclets(docblock):
            if doclet["tag"] == "param":
                match = JSDOC_PARAM.match(doclet["value"])
                if not match or not match.group("name"):
                    continue
                raw_name = match.group("name")
                optional = raw_name.startswith("[")
                name = raw_name.strip("[]").split("=", 1)[0]
                param = params.get(name)
                if param is None:
                    continue
                if match.group("type") and param.get("type") is None:
                    param["type"] = {"name": match.group("type").strip()}
                if match.group("description"):
                    param["description"] = match.group("description").strip()
                if optional:
                    param["optional"] = True
            elif doclet["tag"] in ("returns", "return"):
                match = JSDOC_RETURNS.match(doclet["value"])
                returns = method.get("returns") or {}
                if match.group("type") and not returns.get("type"):
                    returns["type"] = {"name": match.group("type").strip()}
                if match.group("description"):
                    returns["description"] = match.group("description").strip()
                method["returns"] = returns or None


# ---------------------------
# Display names
# ---------------------------

def infer_display_name(file_path: str) -> str:
    """Name for an anonymous component from the file it lives in (`index` uses its folder)."""
    name = os.path.splitext(os.path.basename(file_path))[0]
    if name == "index":
        name = os.path.basename(os.path.dirname(file_path)) or name
    name = re.sub(r"[-_]+(\w)", lambda m: m.group(1).upper(), name)
    return name[:1].upper() + name[1:]


def _explicit_display_name(definition: ComponentDefinition) -> Optional[str]:
    value = definition.get_member("displayName")
    if value is None:
        return None
    text = definition.source.get_text(value)
    return strip_quotes(text) if value.type in STRING_TYPES else text


def create_display_name_handler(file_path: str):
    """
    displayName from, in order: an explicit `displayName`, the name the
    definition is bound to, and finally the file the component lives in.
    """
    def display_name_handler(documentation: Documentation, definition: ComponentDefinition) -> None:
        name = (
            _explicit_display_name(definition)
            or definition.name
            or definition.own_name()
            or infer_display_name(file_path)
        )
        documentation.set("displayName", name)

    return display_name_handler


DEFAULT_HANDLERS = [
    prop_type_handler,
    prop_type_composition_handler,
    prop_docblock_handler,
    flow_type_handler,
    default_props_handler,
    component_docblock_handler,
    component_methods_handler,
    component_methods_jsdoc_handler,
]

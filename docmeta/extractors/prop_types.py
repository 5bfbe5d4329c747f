from typing import Any, Dict, Optional

from docmeta.extractors.source import LITERAL_TYPES, SourceFile, strip_quotes

SIMPLE_PROP_TYPES = {
    "array", "bool", "func", "number", "object", "string", "symbol",
    "any", "element", "elementType", "node",
}
CALL_PROP_TYPES = {"oneOf", "oneOfType", "arrayOf", "objectOf", "instanceOf", "shape", "exact"}
COMPUTED_TYPES = {"identifier", "member_expression", "call_expression"}


def is_computed(node) -> bool:
    return node.type in COMPUTED_TYPES


def _last_segment(node, src: SourceFile) -> Optional[str]:
    if node.type == "identifier":
        return src.get_text(node)
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is not None and prop is not None and src.get_text(obj).endswith("PropTypes"):
            return src.get_text(prop)
    return None


def unwrap_required(node, src: SourceFile):
    """(inner node, required) for `X.isRequired`."""
    if node.type == "member_expression":
        prop = node.child_by_field_name("property")
        if prop is not None and src.get_text(prop) == "isRequired":
            return node.child_by_field_name("object"), True
    return node, False


def _first_argument(call):
    args = call.child_by_field_name("arguments")
    if args is None:
        return None
    named = [a for a in args.named_children if a.type != "comment"]
    return named[0] if named else None


def _shape_value(obj, src: SourceFile) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for pair in obj.named_children:
        if pair.type != "pair":
            continue
        key = strip_quotes(src.get_text(pair.child_by_field_name("key")))
        inner, required = unwrap_required(pair.child_by_field_name("value"), src)
        descriptor = get_prop_type(inner, src)
        descriptor["required"] = required
        doc = src.docblock_before(pair)
        if doc:
            descriptor["description"] = doc
        out[key] = descriptor
    return out


def get_prop_type(node, src: SourceFile) -> Dict[str, Any]:
    """
    Describe a PropTypes expression:

        PropTypes.string                  -> {"name": "string"}
        PropTypes.oneOf(["a", "b"])       -> {"name": "enum", "value": [...]}
        PropTypes.shape({...})            -> {"name": "shape", "value": {...}}
        anything else                     -> {"name": "custom", "raw": text}
    """
    node, _ = unwrap_required(node, src)
    name = _last_segment(node, src)
    if name in SIMPLE_PROP_TYPES:
        return {"name": name}

    if node.type == "call_expression":
        callee = node.child_by_field_name("function")
        call_name = _last_segment(callee, src) if callee is not None else None
        arg = _first_argument(node)
        if call_name in CALL_PROP_TYPES and arg is not None:
            arg = src.resolve_to_value(arg)

            if call_name == "oneOf":
                if arg.type == "array":
                    return {
                        "name": "enum",
                        "value": [
                            {"value": src.get_text(el), "computed": el.type not in LITERAL_TYPES}
                            for el in arg.named_children if el.type != "comment"
                        ],
                    }
                return {"name": "enum", "computed": True, "value": src.get_text(arg)}

            if call_name == "oneOfType":
                if arg.type == "array":
                    return {
                        "name": "union",
                        "value": [get_prop_type(el, src) for el in arg.named_children if el.type != "comment"],
                    }
                return {"name": "union", "computed": True, "value": src.get_text(arg)}

            if call_name in ("arrayOf", "objectOf"):
                return {"name": call_name, "value": get_prop_type(arg, src)}

            if call_name == "instanceOf":
                return {"name": "instanceOf", "value": src.get_text(arg)}

            if call_name in ("shape", "exact"):
                if arg.type == "object":
                    return {"name": call_name, "value": _shape_value(arg, src)}
                return {"name": call_name, "computed": True, "value": src.get_text(arg)}

    return {"name": "custom", "raw": src.get_text(node)}

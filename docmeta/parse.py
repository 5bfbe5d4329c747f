import itertools
import logging
import re
import threading
from typing import Any, Dict, List, Optional

from docmeta.doclets import apply_prop_doclets, clean_doclets, parse_doclets
from docmeta.errors import MISSING_DEFINITION, ExtractionError
from docmeta.extractors.handlers import DEFAULT_HANDLERS, create_display_name_handler
from docmeta.extractors.react_docgen import parse
from docmeta.extractors.resolvers import find_all_component_definitions
from docmeta.utils.code_frame import code_frame_columns

logger = logging.getLogger(__name__)

TRAILING_DIGITS = re.compile(r"\d+$")

_file_count = itertools.count(1)
_file_count_lock = threading.Lock()


def next_unknown_component_path() -> str:
    """Identity for sources without an absolute path; unique for the process lifetime."""
    with _file_count_lock:
        return f"/UnknownComponent{next(_file_count)}"


def _with_node(handler, node):
    def wrapped(documentation, definition):
        return handler(documentation, definition, node)

    wrapped.__name__ = getattr(handler, "__name__", "handler")
    return wrapped


def make_handlers(node: Dict[str, Any], handlers: Optional[List[Any]] = None) -> List[Any]:
    """Display-name handler for this file followed by the caller's handlers, each given `node` last."""
    file_path = node.get("absolute_path") or next_unknown_component_path()
    return [create_display_name_handler(file_path)] + [_with_node(h, node) for h in (handlers or [])]


def parse_metadata(content: str, node: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Extract and normalize every component of one source file.

    Components come back in source order, each with `docblock`, `doclets`,
    a doclet-free `description` and `props` as an ordered list of
    normalized props. A file without components yields [].
    """
    options = options or {}
    node = node or {}
    try:
        components = parse(
            content,
            options.get("resolver") or find_all_component_definitions,
            DEFAULT_HANDLERS + make_handlers(node, options.get("handlers")),
            {
                "cwd": options.get("cwd"),
                "filename": node.get("absolute_path"),
                "parser_options": options.get("parser_options"),
            },
        )
    except ExtractionError as err:
        if err.kind == MISSING_DEFINITION:
            return []
        if err.loc:
            err.code_frame = code_frame_columns(content, err.loc)
        raise

    if len(components) == 1 and components[0].get("displayName"):
        components[0]["displayName"] = TRAILING_DIGITS.sub("", components[0]["displayName"])

    for component in components:
        component["docblock"] = component.get("description") or ""
        component["doclets"] = parse_doclets(component)
        component["description"] = clean_doclets(component.get("description"))

        props = []
        for prop_name, prop in (component.get("props") or {}).items():
            prop["name"] = prop_name
            prop["docblock"] = prop.get("description") or ""
            prop["doclets"] = parse_doclets(prop, prop_name)
            prop["description"] = clean_doclets(prop.get("description"))
            apply_prop_doclets(prop)
            props.append(prop)
        component["props"] = props

    return components

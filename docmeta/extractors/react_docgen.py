"""
Component extraction over tree-sitter.

`parse` turns one file into a list of raw component records:

    {"displayName", "description", "methods", "props": {name: descriptor}, "composes"?}

It raises ExtractionError of kind `syntax` when the grammar reports an
error and of kind `missing_definition` when the resolver finds nothing.
"""
import logging
import os
from typing import Any, Callable, Dict, List, Optional

from docmeta.errors import ERROR_MISSING_DEFINITION, MISSING_DEFINITION, SYNTAX, ExtractionError
from docmeta.extractors.documentation import Documentation
from docmeta.extractors.resolvers import find_all_component_definitions
from docmeta.extractors.source import SourceFile

logger = logging.getLogger(__name__)

Handler = Callable[..., None]


def _syntax_error(src: SourceFile) -> Optional[ExtractionError]:
    node = src.first_error()
    if node is None:
        return None
    line = node.start_point[0] + 1
    # tree-sitter columns count bytes; the frame and message count characters
    line_start = src.code.rfind(b"\n", 0, node.start_byte) + 1
    column = len(src.code[line_start:node.start_byte].decode("utf-8", errors="replace")) + 1
    if node.is_missing:
        message = f"Missing {node.type} ({line}:{column})"
    else:
        message = f"Unexpected token ({line}:{column})"
    return ExtractionError(message, kind=SYNTAX, loc={"start": {"line": line, "column": column}})


def load_source(content: str, context: Optional[Dict[str, Any]] = None) -> SourceFile:
    context = context or {}
    filename = context.get("filename")
    cwd = context.get("cwd")
    if filename and cwd and not os.path.isabs(filename):
        filename = os.path.join(cwd, filename)
    return SourceFile(content, filename=filename, parser_options=context.get("parser_options"))


def parse(
    content: str,
    resolver: Optional[Callable[[SourceFile], List[Any]]] = None,
    handlers: Optional[List[Handler]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    src = load_source(content, context)
    err = _syntax_error(src)
    if err is not None:
        raise err

    definitions = (resolver or find_all_component_definitions)(src)
    if not definitions:
        raise ExtractionError(ERROR_MISSING_DEFINITION, kind=MISSING_DEFINITION)
    logger.debug("%s: %d component definition(s) [%s]", src.filename or "<anonymous>", len(definitions), src.language)

    components = []
    for definition in definitions:
        documentation = Documentation()
        for handler in handlers or []:
            handler(documentation, definition)
        components.append(documentation.to_object())
    return components

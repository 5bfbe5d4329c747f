from typing import Any, Dict, Optional

MISSING_DEFINITION = "missing_definition"
MULTIPLE_DEFINITIONS = "multiple_definitions"
SYNTAX = "syntax"

ERROR_MISSING_DEFINITION = "No suitable component definition found."
ERROR_MULTIPLE_DEFINITIONS = "Multiple exported component definitions found."


class ExtractionError(Exception):
    """
    Raised by the component extractor. The failure is identified by `kind`
    rather than by subclass so callers can branch on a single type.

    `loc` is {"start": {"line": int, "column": int}} (both 1-based) when the
    failure can be pinned to a source position. `code_frame` is filled in by
    parse_metadata before the error reaches the caller.
    """

    def __init__(self, message: str, kind: str = SYNTAX, loc: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.loc = loc
        self.code_frame: Optional[str] = None


from typing import Any, Dict, Optional


def _position(loc: Optional[Dict[str, Any]]) -> Optional[Dict[str, int]]:
    if not loc:
        return None
    start = loc.get("start", loc)
    if not isinstance(start, dict) or "line" not in start:
        return None
    return {"line": int(start["line"]), "column": int(start.get("column") or 0)}


def code_frame_columns(source: str, loc: Optional[Dict[str, Any]], lines_above: int = 2, lines_below: int = 3) -> str:
    """
    Render the lines around `loc` (1-based line and column) the way a
    compiler diagnostic does:

          1 | import React from "react"
        > 2 | class Foo extends {
            |                   ^
          3 | }
    """
    pos = _position(loc)
    lines = source.splitlines()
    if pos is None or not lines:
        return ""

    line_no = min(max(pos["line"], 1), len(lines))
    first = max(line_no - lines_above, 1)
    last = min(line_no + lines_below, len(lines))
    gutter = len(str(last))

    res_code = []
    for idx in range(first, last + 1):
        marker = ">" if idx == line_no else " "
        line = lines[idx - 1]
        res_code.append(f"{marker} {str(idx).rjust(gutter)} | {line}".rstrip())
        if idx == line_no and pos["column"] > 0:
            pointer = " " * (pos["column"] - 1) + "^"
            res_code.append(f"  {' ' * gutter} | {pointer}")
    return "\n".join(res_code)

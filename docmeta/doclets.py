import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# `@tag` or `@tag value` on its own line; inline mentions like "(see @foo)" are prose
DOCLET_LINE = re.compile(r"^\s*@(\w+)(?:\s+(.*?))?\s*$")
LITERAL = re.compile(r"""^(?:(["'`]).*\1|-?\d+(?:\.\d+)?|true|false|null)$""")

OVERRIDE_TAGS = ("type", "default", "defaultValue", "required")


# ---------- tokenizing ----------

def _description_of(obj: Union[str, Dict[str, Any], None]) -> str:
    if obj is None:
        return ""
    if isinstance(obj, str):
        return obj
    return obj.get("description") or ""


def _scan(description: str) -> Tuple[List[Dict[str, str]], List[str]]:
    """
    Single pass over the description lines. Returns the doclets in order and
    the prose lines that survive once tag lines (and the lines folded into
    them) are dropped.
    """
    doclets: List[Dict[str, str]] = []
    kept: List[str] = []
    current: Optional[Dict[str, str]] = None

    for line in description.splitlines():
        match = DOCLET_LINE.match(line)
        if match:
            current = {"tag": match.group(1), "value": match.group(2) or ""}
            doclets.append(current)
            continue

        if not line.strip():
            if current is not None:
                current = None
                # the block sat between two paragraphs; keep a single gap
                if not kept or not kept[-1].strip():
                    continue
            kept.append(line)
            continue

        if current is not None:
            piece = line.strip()
            current["value"] = f"{current['value']} {piece}" if current["value"] else piece
            continue

        kept.append(line)

    return doclets, kept


def parse_doclets(obj: Union[str, Dict[str, Any], None], name: Optional[str] = None) -> List[Dict[str, str]]:
    """
    Pull `@tag value` lines out of a description (or of a record carrying a
    `description`). Tags repeated in the text are all kept, in text order.
    """
    description = _description_of(obj)
    if not description.strip():
        return []
    doclets, _ = _scan(description)
    if doclets and name:
        logger.debug("%s: %d doclet(s)", name, len(doclets))
    return doclets


def clean_doclets(description: Optional[str]) -> str:
    """Description text with every doclet line removed and outer whitespace trimmed."""
    description = description or ""
    doclets, kept = _scan(description)
    if not doclets:
        return description.strip()
    return "\n".join(kept).strip()


# ---------- prop doclets ----------

def clean_doclet_value(value: str) -> str:
    value = value.strip()
    if value.startswith("{") and value.endswith("}"):
        value = value[1:-1].strip()
    return value


def _is_balanced(value: str) -> bool:
    return value.count("{") == value.count("}") and value.count("(") == value.count(")")


def _type_from_doclet(value: str) -> Dict[str, Any]:
    if not _is_balanced(value):
        logger.debug("unbalanced @type value %r, storing it as-is", value)
        return {"name": value.strip()}

    name = clean_doclet_value(value)
    # @type {("optionA"|"optionB")} lists enum members, @type {(A|B)} a union
    if name.startswith("(") and name.endswith(")"):
        members = [m.strip() for m in name[1:-1].split("|") if m.strip()]
        if members and all(LITERAL.match(m) for m in members):
            return {"name": "enum", "value": [{"value": m, "computed": False} for m in members]}
        return {"name": "union", "value": [{"name": m} for m in members]}
    return {"name": name}


def apply_prop_doclets(prop: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply override tags to the prop's structured fields. A later tag of the
    same kind overrides an earlier one. Other tags stay in `doclets` only.
    """
    for doclet in prop.get("doclets") or []:
        tag, value = doclet["tag"], doclet["value"]

        if tag == "type":
            prop["type"] = _type_from_doclet(value)
        elif tag == "required":
            prop["required"] = value.strip().lower() != "false"
        elif tag in ("default", "defaultValue") and value:
            prop["defaultValue"] = {"value": value, "computed": False}

    if prop.get("type") is None:
        if prop.get("flowType") is not None:
            prop["type"] = dict(prop["flowType"])
        elif prop.get("tsType") is not None:
            prop["type"] = dict(prop["tsType"])

    return prop

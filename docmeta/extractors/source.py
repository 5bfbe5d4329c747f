import os
import re
from typing import Any, Dict, Iterator, List, Optional

from tree_sitter_language_pack import get_parser

JSX_TYPES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}
FUNCTION_TYPES = {"function_declaration", "function", "function_expression", "arrow_function"}
CLASS_TYPES = {"class_declaration", "class", "abstract_class_declaration"}
LITERAL_TYPES = {"string", "number", "true", "false", "null", "undefined", "template_string", "regex"}
STRING_TYPES = {"string", "template_string"}

# wrappers that keep the wrapped function a component
WRAPPER_CALLS = {"React.forwardRef", "forwardRef", "React.memo", "memo"}

# nodes between a definition and the statement a docblock is attached to
STATEMENT_CLIMB = {
    "variable_declarator",
    "lexical_declaration",
    "variable_declaration",
    "export_statement",
    "assignment_expression",
    "expression_statement",
    "parenthesized_expression",
    "arguments",
    "call_expression",
}

FLOW_PRAGMA = re.compile(r"@flow\b")
LEADING_COMMENTS = re.compile(r"\A(?:\s*(?://[^\n]*|/\*.*?\*/))*", re.S)


# ---------------------------
# Text helpers
# ---------------------------

def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
        return text[1:-1]
    return text


def parse_docblock(comment: str) -> str:
    """Body of a `/** ... */` comment without the comment syntax and leading stars."""
    body = comment.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = [re.sub(r"^\s*\*\s?", "", line) for line in body.split("\n")]
    return "\n".join(lines).strip()


def same_node(a, b) -> bool:
    if a is None or b is None:
        return False
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


def walk(node) -> Iterator[Any]:
    """Pre-order walk, children in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def has_flow_pragma(content: str) -> bool:
    """`@flow` in the comments that open the file."""
    return bool(FLOW_PRAGMA.search(LEADING_COMMENTS.match(content).group(0)))


def select_language(filename: Optional[str], content: str, parser_options: Optional[Dict[str, Any]] = None):
    """
    Returns (tree-sitter language name, type flavor). Flow sources are read
    with the TSX grammar, which covers the annotation syntax components use.
    """
    opts = parser_options or {}
    ext = os.path.splitext(filename or "")[1].lower()
    is_flow = bool(opts.get("flow")) or has_flow_pragma(content)

    language = opts.get("language")
    if not language:
        if ext == ".ts":
            language = "typescript"
        elif ext == ".tsx" or is_flow:
            language = "tsx"
        else:
            language = "javascript"

    if language == "javascript":
        flavor = None
    elif is_flow and ext not in (".ts", ".tsx"):
        flavor = "flow"
    else:
        flavor = "typescript"
    return language, flavor


# ---------------------------
# Parsed file
# ---------------------------

class SourceFile:
    """One parsed source file plus the lookups handlers share."""

    def __init__(self, content: str, filename: Optional[str] = None, parser_options: Optional[Dict[str, Any]] = None):
        self.content = content
        self.filename = filename
        self.code = content.encode("utf-8")
        self.language, self.flavor = select_language(filename, content, parser_options)
        # a Parser is not shared between threads; one per file
        self.parser = get_parser(self.language)
        self.tree = self.parser.parse(self.code)
        self.root = self.tree.root_node
        self._imports: Optional[Dict[str, str]] = None

    # ------------- text -------------

    def get_text(self, node) -> str:
        return self.code[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def safe_text(self, node) -> Optional[str]:
        if node is None:
            return None
        return self.get_text(node)

    # ------------- syntax errors -------------

    def first_error(self):
        if not self.root.has_error:
            return None
        for node in walk(self.root):
            if node.type == "ERROR" or node.is_missing:
                return node
        return None

    # ------------- top level -------------

    def top_level_statements(self) -> List[Any]:
        """Program statements with `export` unwrapped to the exported declaration."""
        out = []
        for child in self.root.named_children:
            if child.type == "export_statement":
                decl = child.child_by_field_name("declaration")
                out.append(decl if decl is not None else child)
            else:
                out.append(child)
        return out

    def find_variable(self, name: str):
        """Value node of a top-level `const/let/var name = value`."""
        found = None
        for stmt in self.top_level_statements():
            if stmt.type not in ("lexical_declaration", "variable_declaration"):
                continue
            for decl in stmt.named_children:
                if decl.type != "variable_declarator":
                    continue
                name_node = decl.child_by_field_name("name")
                if name_node is not None and self.get_text(name_node) == name:
                    found = decl.child_by_field_name("value")
        return found

    def resolve_to_value(self, node, depth: int = 0):
        """Follow identifiers to the value they were bound to at the top level."""
        while node is not None and node.type == "parenthesized_expression" and node.named_children:
            node = node.named_children[0]
        if node is None or node.type != "identifier" or depth > 5:
            return node
        value = self.find_variable(self.get_text(node))
        if value is None:
            return node
        return self.resolve_to_value(value, depth + 1)

    def find_type_declaration(self, name: str):
        """Object type behind a top-level `type name = {...}` or `interface name {...}`."""
        for stmt in self.top_level_statements():
            if stmt.type == "type_alias_declaration":
                name_node = stmt.child_by_field_name("name")
                if name_node is not None and self.get_text(name_node) == name:
                    return stmt.child_by_field_name("value")
            if stmt.type == "interface_declaration":
                name_node = stmt.child_by_field_name("name")
                if name_node is not None and self.get_text(name_node) == name:
                    return stmt.child_by_field_name("body")
        return None

    def member_assignments(self, binding: str) -> List[Any]:
        """(property, value node) for every top-level `binding.property = value`."""
        out = []
        for stmt in self.root.named_children:
            if stmt.type != "expression_statement" or not stmt.named_children:
                continue
            expr = stmt.named_children[0]
            if expr.type != "assignment_expression":
                continue
            left = expr.child_by_field_name("left")
            if left is None or left.type != "member_expression":
                continue
            obj = left.child_by_field_name("object")
            prop = left.child_by_field_name("property")
            if obj is not None and prop is not None and self.get_text(obj) == binding:
                out.append((self.get_text(prop), expr.child_by_field_name("right")))
        return out

    def imports(self) -> Dict[str, str]:
        """Local binding -> module specifier for every import in the file."""
        if self._imports is not None:
            return self._imports
        imports: Dict[str, str] = {}
        for stmt in self.root.named_children:
            if stmt.type != "import_statement":
                continue
            source_node = stmt.child_by_field_name("source")
            if source_node is None:
                continue
            source = strip_quotes(self.get_text(source_node))
            for node in walk(stmt):
                if node.type == "import_specifier":
                    local = node.child_by_field_name("alias") or node.child_by_field_name("name")
                    if local is not None:
                        imports[self.get_text(local)] = source
                elif node.type == "namespace_import":
                    ident = next((c for c in node.named_children if c.type == "identifier"), None)
                    if ident is not None:
                        imports[self.get_text(ident)] = source
                elif node.type == "import_clause":
                    for c in node.named_children:
                        if c.type == "identifier":
                            imports[self.get_text(c)] = source
        self._imports = imports
        return imports

    def exported_names(self) -> set:
        """Names exported by reference: `export default X`, `export { X }`, `module.exports = X`."""
        names = set()
        for stmt in self.root.named_children:
            if stmt.type == "export_statement":
                value = stmt.child_by_field_name("value")
                if value is not None and value.type == "identifier":
                    names.add(self.get_text(value))
                for node in stmt.named_children:
                    if node.type == "export_clause":
                        for spec in node.named_children:
                            name_node = spec.child_by_field_name("name")
                            if name_node is not None:
                                names.add(self.get_text(name_node))
            elif stmt.type == "expression_statement" and stmt.named_children:
                expr = stmt.named_children[0]
                if expr.type != "assignment_expression":
                    continue
                left = self.get_text(expr.child_by_field_name("left"))
                right = expr.child_by_field_name("right")
                if (left == "module.exports" or left.startswith("exports.")) and right is not None and right.type == "identifier":
                    names.add(self.get_text(right))
        return names

    # ------------- docblocks -------------

    def docblock_before(self, node) -> Optional[str]:
        """Nearest `/** */` comment directly preceding `node` among its siblings."""
        parent = node.parent
        if parent is None:
            return None
        siblings = parent.children
        idx = next((i for i, sib in enumerate(siblings) if same_node(sib, node)), None)
        if idx is None:
            return None
        for i in range(idx - 1, -1, -1):
            sib = siblings[i]
            if sib.type == "comment":
                text = self.get_text(sib)
                if text.strip().startswith("/**"):
                    return parse_docblock(text)
            elif sib.is_named:
                break
        return None

    def docblock_for(self, node) -> Optional[str]:
        """Docblock of a definition, looking at the statements wrapping it as well."""
        current = node
        while current is not None:
            doc = self.docblock_before(current)
            if doc is not None:
                return doc
            parent = current.parent
            if parent is None or parent.type not in STATEMENT_CLIMB:
                return None
            current = parent
        return None


# ---------------------------
# Component definitions
# ---------------------------

class ComponentDefinition:
    """
    A node the resolver accepted as a component.

    kind is "class", "create_class" or "function"; `node` is the class,
    the createClass spec object or the function itself; `name` is the
    binding the definition is reachable through ("Foo", "Baz.Foo"), if any.
    """

    def __init__(self, kind: str, node, source: SourceFile, name: Optional[str] = None, exported: bool = False):
        self.kind = kind
        self.node = node
        self.source = source
        self.name = name
        self.exported = exported

    def __repr__(self):
        return f"ComponentDefinition(kind={self.kind!r}, name={self.name!r}, line={self.node.start_point[0] + 1})"

    def own_name(self) -> Optional[str]:
        name_node = self.node.child_by_field_name("name") if self.kind != "create_class" else None
        return self.source.safe_text(name_node)

    def class_members(self) -> List[Any]:
        if self.kind != "class":
            return []
        body = self.node.child_by_field_name("body")
        return list(body.named_children) if body is not None else []

    def spec_members(self) -> List[Any]:
        """Pairs and methods of a createClass spec object."""
        if self.kind != "create_class":
            return []
        return [c for c in self.node.named_children if c.type in ("pair", "method_definition")]

    def get_member(self, member: str):
        """
        Value node of a static member: `static member = ...`, a static getter
        returning a value, a createClass spec key, or `Name.member = ...`.
        Later definitions win.
        """
        src = self.source
        found = None
        for child in self.class_members():
            if child.type in ("field_definition", "public_field_definition"):
                name_node = child.child_by_field_name("property") or child.child_by_field_name("name")
                is_static = any(c.type == "static" for c in child.children)
                if is_static and src.safe_text(name_node) == member:
                    found = child.child_by_field_name("value")
            elif child.type == "method_definition":
                name_node = child.child_by_field_name("name")
                is_static = any(c.type == "static" for c in child.children)
                if is_static and src.safe_text(name_node) == member:
                    found = returned_value(child.child_by_field_name("body"))
        for child in self.spec_members():
            if child.type == "pair":
                key = child.child_by_field_name("key")
                if key is not None and strip_quotes(src.get_text(key)) == member:
                    found = child.child_by_field_name("value")
        if self.name:
            for prop, value in src.member_assignments(self.name):
                if prop == member:
                    found = value
        return src.resolve_to_value(found) if found is not None else None

    def spec_method(self, member: str):
        """Function body of a createClass spec method such as getDefaultProps."""
        src = self.source
        for child in self.spec_members():
            if child.type == "method_definition":
                if src.safe_text(child.child_by_field_name("name")) == member:
                    return child.child_by_field_name("body")
            elif child.type == "pair":
                key = child.child_by_field_name("key")
                value = child.child_by_field_name("value")
                if key is not None and strip_quotes(src.get_text(key)) == member and value is not None and value.type in FUNCTION_TYPES:
                    return value.child_by_field_name("body")
        return None

    def props_parameter(self):
        """First parameter of a function component, unwrapped from TS parameter nodes."""
        if self.kind != "function":
            return None
        params = self.node.child_by_field_name("parameters")
        if params is None:
            single = self.node.child_by_field_name("parameter")
            return single
        named = [c for c in params.named_children if c.type != "comment"]
        return named[0] if named else None


def returned_value(body):
    """Expression of the first top-level `return` in a statement block."""
    if body is None:
        return None
    for stmt in body.named_children:
        if stmt.type == "return_statement":
            values = [c for c in stmt.named_children if c.type != "comment"]
            return values[0] if values else None
    return None

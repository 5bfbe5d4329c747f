# component_adapter.py
import hashlib
import json
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from docmeta.errors import ExtractionError
from docmeta.parse import parse_metadata
from docmeta.utils.networkx_graph import replace_file_nodes

logger = logging.getLogger(__name__)

PARSEABLE_MEDIA_TYPES = {
    "application/javascript",
    "text/javascript",
    "text/jsx",
    "text/tsx",
    "application/typescript",
    "text/typescript",
}
PARSEABLE_EXTENSIONS = {"js", "jsx", "mjs", "cjs", "ts", "tsx"}

NODE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "docmeta")

# ---------- ids & digests ----------

def create_node_id(seed: str) -> str:
    """Deterministic node id for a seed string."""
    return str(uuid.uuid5(NODE_NAMESPACE, seed))


def digest(content: Any) -> str:
    if not isinstance(content, str):
        content = json.dumps(content, sort_keys=True, default=str)
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def can_parse(node: Optional[Dict[str, Any]]) -> bool:
    if not node:
        return False
    if node.get("media_type") in PARSEABLE_MEDIA_TYPES:
        return True
    return (node.get("extension") or "").lower() in PARSEABLE_EXTENSIONS


# ---------- adaptor ----------

class _DescriptionNodes:
    """One ComponentDescription per distinct text within a file pass."""

    def __init__(self, source_id: str, create_id: Callable[[str], str]):
        self.source_id = source_id
        self.create_id = create_id
        self.by_text: Dict[str, Dict[str, Any]] = {}

    def attach(self, entity: Dict[str, Any], text: Optional[str], nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]]):
        if not text:
            return
        desc = self.by_text.get(text)
        if desc is None:
            text_digest = digest(text)
            desc = {
                "id": self.create_id(f"{self.source_id}--ComponentDescription--{text_digest}"),
                "parent": entity["id"],
                "children": [],
                "text": text,
                "internal": {
                    "type": "ComponentDescription",
                    "media_type": "text/markdown",
                    "content": text,
                    "content_digest": text_digest,
                },
            }
            self.by_text[text] = desc
            nodes.append(desc)
        entity["description___NODE"] = desc["id"]
        entity["children"].append(desc["id"])
        edges.append({"from": entity["id"], "to": desc["id"], "relation": "has_description"})


def adapt_component_metadata(
    node: Dict[str, Any],
    components: List[Dict[str, Any]],
    create_id: Optional[Callable[[str], str]] = None,
) -> Dict[str, Any]:
    """
    Input: the source node and its normalized components.
    Output: { "nodes": [...], "edges": [...] } with ComponentMetadata,
    ComponentProp and ComponentDescription nodes.
    """
    create_id = create_id or create_node_id
    source_id = node["id"]
    nodes: List[Dict[str, Any]] = []
    edges: List[Dict[str, Any]] = []
    descriptions = _DescriptionNodes(source_id, create_id)

    for index, component in enumerate(components):
        seed = f"{source_id}--{index}--{component.get('displayName')}--ComponentMetadata"
        payload = {k: v for k, v in component.items() if k != "props"}
        metadata_node = {
            **payload,
            "id": create_id(seed),
            "parent": source_id,
            "children": [],
            "internal": {
                "type": "ComponentMetadata",
                "content_digest": digest(component),
            },
        }
        nodes.append(metadata_node)
        edges.append({"from": source_id, "to": metadata_node["id"], "relation": "has_component"})

        prop_ids = []
        for prop in component.get("props") or []:
            prop_node = {
                **prop,
                "id": create_id(f"{seed}--ComponentProp-{prop['name']}"),
                "parent": metadata_node["id"],
                "parentType": prop.get("type"),
                "children": [],
                "internal": {
                    "type": "ComponentProp",
                    "content_digest": digest(prop),
                },
            }
            nodes.append(prop_node)
            edges.append({"from": metadata_node["id"], "to": prop_node["id"], "relation": "has_prop"})
            prop_ids.append(prop_node["id"])
            descriptions.attach(prop_node, prop.get("description"), nodes, edges)

        metadata_node["props___NODE"] = prop_ids
        metadata_node["children"].extend(prop_ids)
        descriptions.attach(metadata_node, component.get("description"), nodes, edges)

    return {"nodes": nodes, "edges": edges}


def on_create_node(
    node: Optional[Dict[str, Any]],
    load_node_content: Callable[[Dict[str, Any]], str],
    graph=None,
    options: Optional[Dict[str, Any]] = None,
    create_id: Optional[Callable[[str], str]] = None,
) -> List[Dict[str, Any]]:
    """
    One processing pass for a source node: extract its components, emit
    their nodes and, when a graph is given, replace whatever an earlier pass
    emitted for the same node. A file that fails to parse is reported and
    yields no nodes.
    """
    if not can_parse(node):
        return []

    content = load_node_content(node)
    try:
        components = parse_metadata(content, node, options)
    except ExtractionError as err:
        path = node.get("relative_path") or node.get("absolute_path") or node.get("id")
        logger.error(
            'There was a problem parsing component metadata for file: "%s"\n%s\n%s',
            path,
            err.message,
            err.code_frame or "",
        )
        return []

    schema = adapt_component_metadata(node, components, create_id)
    if graph is not None:
        replace_file_nodes(graph, node, schema)
    return schema["nodes"]

import os
import json
import networkx as nx
from networkx import DiGraph

SOURCE_NODE_KEYS = ("absolute_path", "relative_path", "extension", "media_type")


def load_components_by_file(output_base):
    """{relative json path: [normalized components]} for every JSON file under output_base."""
    by_file = {}
    for dirpath, _, files in os.walk(output_base):
        for fn in sorted(files):
            if not fn.endswith(".json"):
                continue
            fullpath = os.path.join(dirpath, fn)
            with open(fullpath, "r", encoding="utf-8") as f:
                data = json.load(f)
            by_file[os.path.relpath(fullpath, output_base)] = data
    return by_file


def _graph_attrs(node):
    attrs = {}
    for (k, v) in node.items():
        if k == "id":
            continue
        if v is None:
            attrs[k] = ""
        elif isinstance(v, (str, int, float, bool)):
            attrs[k] = v
        else:
            attrs[k] = json.dumps(v)
    return attrs


def add_schema_to_graph(G: DiGraph, schema):
    for node in schema["nodes"]:
        add_or_update_node(G, node["id"], _graph_attrs(node))

    for edge in schema["edges"]:
        src = edge["from"]
        dst = edge["to"]
        rel = edge.get("relation") or ""
        G.add_edge(src, dst, relation=rel)
    return G


def add_or_update_node(G: DiGraph, key: str, meta: dict):
    if G.has_node(key):
        G.nodes[key].update(meta)
    else:
        G.add_node(key, **meta)


def remove_file_nodes(G: DiGraph, source_id: str) -> int:
    """Drop everything previously emitted under a source node; the source node stays."""
    if not G.has_node(source_id):
        return 0
    stale = nx.descendants(G, source_id)
    G.remove_nodes_from(stale)
    return len(stale)


def replace_file_nodes(G: DiGraph, source_node: dict, schema):
    source_id = source_node["id"]
    remove_file_nodes(G, source_id)
    meta = {k: source_node[k] for k in SOURCE_NODE_KEYS if source_node.get(k) is not None}
    meta["kind"] = "File"
    add_or_update_node(G, source_id, meta)
    return add_schema_to_graph(G, schema)


def nodes_of_type(G: DiGraph, node_type: str):
    """(id, attrs) of emitted nodes whose internal type is node_type."""
    out = []
    for nid, attrs in G.nodes(data=True):
        internal = attrs.get("internal")
        if not internal:
            continue
        if json.loads(internal).get("type") == node_type:
            out.append((nid, attrs))
    return out

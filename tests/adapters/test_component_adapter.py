import os
from collections import defaultdict

import networkx as nx
import pytest

from docmeta.adapters.component_adapter import adapt_component_metadata, can_parse, on_create_node
from docmeta.utils.networkx_graph import add_or_update_node, nodes_of_type

HERE = os.path.dirname(__file__)
FIXTURES = os.path.abspath(os.path.join(HERE, "..", "fixtures"))


def make_node(fixture="classes.js"):
    return {
        "id": "node_1",
        "media_type": "application/javascript",
        "absolute_path": os.path.join(FIXTURES, fixture),
        "relative_path": fixture,
    }


def load_node_content(node):
    with open(node["absolute_path"], encoding="utf-8") as f:
        return f.read()


def group_by_type(nodes):
    types = defaultdict(list)
    for n in nodes:
        types[n["internal"]["type"]].append(n)
    return types


@pytest.fixture(scope="module")
def created():
    return group_by_type(on_create_node(make_node(), load_node_content, options={"cwd": FIXTURES}))


def test_only_processes_javascript_and_typescript_nodes():
    calls = []

    def loader(node):
        calls.append(node)
        return ""

    unknown = [
        None,
        {"id": "a", "media_type": "text/x-foo"},
        {"id": "b", "media_type": "text/markdown"},
    ]
    expected = [
        {"id": "c", "media_type": "application/javascript"},
        {"id": "d", "media_type": "text/jsx"},
        {"id": "e", "media_type": "text/tsx"},
        {"id": "f", "extension": "tsx"},
        {"id": "g", "extension": "ts"},
    ]
    for node in unknown + expected:
        assert on_create_node(node, loader) == []
    assert calls == expected
    assert [can_parse(n) for n in unknown] == [False, False, False]


def test_extracts_all_components(created):
    assert len(created["ComponentMetadata"]) == 6


def test_gives_all_components_a_name(created):
    assert [c["displayName"] for c in created["ComponentMetadata"]] == ["Baz", "Buz", "Foo", "Baz.Foo", "Bar", "Qux"]


def test_handles_duplicate_doclet_values(created):
    bar = next(c for c in created["ComponentMetadata"] if c["displayName"] == "Bar")
    assert len([d for d in bar["doclets"] if d["tag"] == "property"]) == 2


def test_extracts_all_prop_types(created):
    assert len(created["ComponentProp"]) == 14


def test_delicately_removes_doclets(created):
    first = created["ComponentProp"][0]
    assert first["description"] == "An object hash of field (fix this @mention?) errors for the form."
    assert first["doclets"] == [{"tag": "type", "value": "{Foo}"}, {"tag": "default", "value": "blue"}]


def test_description_nodes_are_markdown(created):
    assert created["ComponentDescription"]
    assert all(d["internal"]["media_type"] == "text/markdown" for d in created["ComponentDescription"])


def test_props_link_to_metadata(created):
    baz = created["ComponentMetadata"][0]
    props = [p for p in created["ComponentProp"] if p["parent"] == baz["id"]]
    assert baz["props___NODE"] == [p["id"] for p in props]
    assert "props" not in baz
    assert props[0]["parentType"] == {"name": "Foo"}


def test_allows_custom_handlers():
    calls = []
    on_create_node(make_node(), load_node_content, options={"handlers": [lambda *args: calls.append(args)]})
    assert calls
    assert all(args[-1]["id"] == "node_1" for args in calls)


def test_flow_types():
    nodes = on_create_node(make_node("flow.js"), load_node_content)
    prop = next(n for n in nodes if n.get("flowType"))
    assert prop["flowType"] == {"name": "number"}


def test_parse_errors_are_reported_not_raised(caplog):
    assert on_create_node(make_node("broken.js"), load_node_content) == []
    assert 'problem parsing component metadata for file: "broken.js"' in caplog.text


def test_ids_are_deterministic():
    first = on_create_node(make_node(), load_node_content)
    second = on_create_node(make_node(), load_node_content)
    assert [n["id"] for n in first] == [n["id"] for n in second]


def test_create_id_hook():
    nodes = on_create_node(make_node("unnamed.js"), load_node_content, create_id=lambda seed: seed)
    assert nodes[0]["id"] == "node_1--0--Unnamed--ComponentMetadata"


def test_descriptions_are_shared_by_text():
    components = [{
        "displayName": "A",
        "description": "Same words",
        "props": [
            {"name": "x", "description": "Same words", "type": {"name": "string"}},
            {"name": "y", "description": "Other words"},
            {"name": "z", "description": ""},
        ],
    }]
    schema = adapt_component_metadata({"id": "file"}, components, create_id=lambda seed: seed)
    types = group_by_type(schema["nodes"])
    assert len(types["ComponentDescription"]) == 2
    metadata = types["ComponentMetadata"][0]
    x, y, z = types["ComponentProp"]
    assert metadata["description___NODE"] == x["description___NODE"]
    assert y["description___NODE"] != x["description___NODE"]
    assert "description___NODE" not in z
    relations = {(e["from"], e["to"]) for e in schema["edges"] if e["relation"] == "has_description"}
    assert (metadata["id"], metadata["description___NODE"]) in relations


def test_reprocessing_replaces_earlier_nodes():
    G = nx.DiGraph()
    node = make_node()
    on_create_node(node, load_node_content, graph=G)
    assert len(nodes_of_type(G, "ComponentMetadata")) == 6
    count = G.number_of_nodes()

    on_create_node(node, load_node_content, graph=G)
    assert G.number_of_nodes() == count

    on_create_node(node, lambda n: "export default () => <div />\n", graph=G)
    assert len(nodes_of_type(G, "ComponentMetadata")) == 1
    assert nodes_of_type(G, "ComponentProp") == []
    assert G.nodes["node_1"]["kind"] == "File"


def test_add_or_update_node_overwrites_attributes():
    G = nx.DiGraph()
    add_or_update_node(G, "file", {"kind": "File", "children": '["a"]'})
    add_or_update_node(G, "file", {"children": '["b"]', "extension": "js"})
    assert G.nodes["file"] == {"kind": "File", "children": '["b"]', "extension": "js"}

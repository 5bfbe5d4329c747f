import json
import os
import shutil

import pytest

from docmeta.main import collect_source_files, create_component_data, create_graph
from docmeta.registry.extractor_registry import get_extractor
from docmeta.utils.networkx_graph import nodes_of_type

HERE = os.path.dirname(__file__)
FIXTURES = os.path.join(HERE, "fixtures")


@pytest.fixture
def repo(tmp_path):
    root = tmp_path / "repo_name"
    (root / "src").mkdir(parents=True)
    for name in ("classes.js", "button.tsx", "broken.js", "helpers.js"):
        shutil.copy(os.path.join(FIXTURES, name), root / "src" / name)
    (root / "node_modules" / "lib").mkdir(parents=True)
    shutil.copy(os.path.join(FIXTURES, "unnamed.js"), root / "node_modules" / "lib" / "index.js")
    (root / "ignored").mkdir()
    shutil.copy(os.path.join(FIXTURES, "unnamed.js"), root / "ignored" / "skip.js")
    (root / ".gitignore").write_text("ignored/\n")
    (root / "README.md").write_text("# not source\n")
    return root


def test_collect_source_files(repo):
    files = [(p.relative_to(repo).as_posix(), lang) for p, lang in collect_source_files(repo)]
    assert files == [
        ("src/broken.js", "javascript"),
        ("src/button.tsx", "typescript"),
        ("src/classes.js", "javascript"),
        ("src/helpers.js", "javascript"),
    ]


def test_create_component_data(repo, tmp_path):
    out = tmp_path / "out"
    graph_dir = tmp_path / "graph"
    G = create_component_data(str(repo), str(out), str(graph_dir), options={"cwd": str(repo)}, max_workers=2)

    with open(out / "src" / "classes.js.json", encoding="utf-8") as f:
        classes = json.load(f)
    assert [c["displayName"] for c in classes] == ["Baz", "Buz", "Foo", "Baz.Foo", "Bar", "Qux"]
    assert json.loads((out / "src" / "helpers.js.json").read_text()) == []
    assert not (out / "src" / "broken.js.json").exists()

    assert len(nodes_of_type(G, "ComponentMetadata")) == 7
    assert G.nodes["repo_name/src/classes.js"]["kind"] == "File"
    assert (graph_dir / "component_metadata.graphml").exists()
    assert (graph_dir / "component_metadata.gpickle").exists()


def test_create_graph_from_output(repo, tmp_path):
    out = tmp_path / "out"
    create_component_data(str(repo), str(out), str(tmp_path / "graph"), max_workers=1)
    G = create_graph(str(out), str(tmp_path / "graph2"), str(repo))
    assert len(nodes_of_type(G, "ComponentMetadata")) == 7
    assert len(nodes_of_type(G, "ComponentProp")) == 14 + 3


def test_get_extractor():
    assert get_extractor("flow").options["parser_options"] == {"flow": True}
    with pytest.raises(ValueError):
        get_extractor("haskell")

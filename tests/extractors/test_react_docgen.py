import os

import pytest

from docmeta.errors import MULTIPLE_DEFINITIONS, ExtractionError
from docmeta.extractors.handlers import DEFAULT_HANDLERS, infer_display_name
from docmeta.extractors.react_docgen import parse
from docmeta.extractors.resolvers import (
    find_all_component_definitions,
    find_all_exported_component_definitions,
    find_exported_component_definition,
)
from docmeta.extractors.source import SourceFile, select_language

HERE = os.path.dirname(__file__)
FIXTURES = os.path.abspath(os.path.join(HERE, "..", "fixtures"))


def read_fixture(name):
    with open(os.path.join(FIXTURES, name), encoding="utf-8") as f:
        return f.read()


@pytest.fixture(scope="module")
def classes():
    return parse(read_fixture("classes.js"), handlers=DEFAULT_HANDLERS, context={"filename": "classes.js", "cwd": FIXTURES})


@pytest.fixture(scope="module")
def button():
    return parse(read_fixture("button.tsx"), handlers=DEFAULT_HANDLERS, context={"filename": os.path.join(FIXTURES, "button.tsx")})


def component(components, index):
    return components[index]


def test_select_language():
    assert select_language("a.js", "") == ("javascript", None)
    assert select_language("a.ts", "") == ("typescript", "typescript")
    assert select_language("a.tsx", "") == ("tsx", "typescript")
    assert select_language("a.js", "// @flow\n") == ("tsx", "flow")
    assert select_language("a.js", "", {"flow": True}) == ("tsx", "flow")
    assert select_language("a.js", "/**\n * @flow\n */\nimport x from \"x\"\n") == ("tsx", "flow")
    assert select_language("a.js", "const s = \"@flow\"\n// @flow\n") == ("javascript", None)


def test_resolver_finds_every_kind():
    src = SourceFile(read_fixture("classes.js"), filename="classes.js")
    definitions = find_all_component_definitions(src)
    assert [(d.kind, d.name or d.own_name()) for d in definitions] == [
        ("class", "Baz"),
        ("function", "Buz"),
        ("function", "Foo"),
        ("class", "Baz.Foo"),
        ("create_class", "Bar"),
        ("function", "Qux"),
    ]


def test_exported_resolvers():
    src = SourceFile(read_fixture("classes.js"), filename="classes.js")
    exported = [d.name or d.own_name() for d in find_all_exported_component_definitions(src)]
    assert exported == ["Baz", "Buz", "Qux"]
    with pytest.raises(ExtractionError) as exc:
        find_exported_component_definition(src)
    assert exc.value.kind == MULTIPLE_DEFINITIONS


def test_nested_functions_are_not_components():
    src = SourceFile(
        "function helper() {\n  const inner = () => <div />\n  return inner\n}\n",
        filename="helper.js",
    )
    assert find_all_component_definitions(src) == []


def test_prop_types(classes):
    props = component(classes, 0)["props"]
    assert props["errors"]["type"] == {"name": "object"}
    assert props["errors"]["required"] is False
    assert props["onSubmit"]["type"] == {"name": "func"}
    assert props["onSubmit"]["required"] is True
    assert props["size"]["type"] == {
        "name": "enum",
        "value": [{"value": '"small"', "computed": False}, {"value": '"large"', "computed": False}],
    }


def test_prop_docblocks(classes):
    props = component(classes, 0)["props"]
    assert props["onSubmit"]["description"] == "Called with the form values on submit"
    assert props["errors"]["description"].startswith("An object hash")
    assert component(classes, 2)["props"]["value"]["description"] == ""


def test_nested_prop_types(classes):
    bar = component(classes, 4)["props"]
    assert bar["items"]["type"] == {"name": "arrayOf", "value": {"name": "string"}}
    qux = component(classes, 5)["props"]
    assert qux["c"]["type"]["name"] == "shape"
    assert qux["c"]["type"]["value"]["x"] == {"name": "number", "required": True, "description": "Horizontal offset"}


def test_default_props(classes):
    buz = component(classes, 1)["props"]
    assert buz["label"]["defaultValue"] == {"value": '"buz"', "computed": False}
    assert "defaultValue" not in buz["count"]
    bar = component(classes, 4)["props"]
    assert bar["title"]["defaultValue"] == {"value": '"bar"', "computed": False}


def test_component_docblocks(classes):
    assert component(classes, 0)["description"] == "General component description."
    assert component(classes, 1)["description"] == "Buz renders a label."
    assert component(classes, 2)["description"] == ""


def test_methods(classes):
    methods = component(classes, 0)["methods"]
    assert [m["name"] for m in methods] == ["focus"]
    focus = methods[0]
    assert focus["description"] == "Focus the first field."
    assert focus["params"] == [{"name": "select", "type": {"name": "boolean"}, "description": "also select the text"}]
    assert focus["returns"] == {"type": {"name": "void"}}
    assert component(classes, 3)["methods"] == []


def test_typescript_props(button):
    props = button[0]["props"]
    assert list(props) == ["label", "variant", "onClick"]
    assert props["label"]["tsType"] == {"name": "string"}
    assert props["label"]["required"] is True
    assert props["label"]["description"] == "Label text"
    variant = props["variant"]
    assert variant["required"] is False
    assert variant["tsType"]["name"] == "union"
    assert [e["name"] for e in variant["tsType"]["elements"]] == ["literal", "literal"]
    assert variant["defaultValue"] == {"value": '"primary"', "computed": False}
    assert props["onClick"]["tsType"]["name"] == "signature"
    assert button[0]["description"] == "A button."


@pytest.mark.parametrize("path,expected", [
    ("/src/unnamed.js", "Unnamed"),
    ("/src/date-picker.jsx", "DatePicker"),
    ("/src/text_field.tsx", "TextField"),
    ("/src/my-button/index.js", "MyButton"),
])
def test_infer_display_name(path, expected):
    assert infer_display_name(path) == expected

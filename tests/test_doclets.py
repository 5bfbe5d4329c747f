import pytest

from docmeta.doclets import apply_prop_doclets, clean_doclets, parse_doclets

DESCRIPTION = """An object hash of field (fix this @mention?) errors for the form.
@type {Foo}
@default blue"""


def test_parse_doclets_in_order():
    assert parse_doclets(DESCRIPTION) == [
        {"tag": "type", "value": "{Foo}"},
        {"tag": "default", "value": "blue"},
    ]


def test_parse_doclets_reads_record_description():
    assert parse_doclets({"description": "@required"}) == [{"tag": "required", "value": ""}]
    assert parse_doclets({"description": None}) == []
    assert parse_doclets(None) == []


def test_inline_mentions_are_prose():
    assert parse_doclets("Ping @someone about this.") == []


def test_repeated_tags_are_all_kept():
    doclets = parse_doclets("Bar.\n@property {string} one\n@property {string} two")
    assert [d["value"] for d in doclets if d["tag"] == "property"] == ["{string} one", "{string} two"]


def test_continuation_lines_fold_into_value():
    doclets = parse_doclets("@see the docs\n  for more\n\nTrailing prose.")
    assert doclets == [{"tag": "see", "value": "the docs for more"}]
    assert clean_doclets("@see the docs\n  for more\n\nTrailing prose.") == "Trailing prose."


def test_clean_doclets_delicately_removes_tags():
    assert clean_doclets(DESCRIPTION) == "An object hash of field (fix this @mention?) errors for the form."


def test_clean_doclets_keeps_single_gap_between_paragraphs():
    assert clean_doclets("Intro.\n\n@deprecated\n\nMore text.") == "Intro.\n\nMore text."


@pytest.mark.parametrize("value", [None, "", "   \n  "])
def test_clean_doclets_empty(value):
    assert clean_doclets(value) == ""


def test_clean_doclets_without_tags_only_trims():
    assert clean_doclets("  Just words.\n") == "Just words."


def test_type_doclet_overrides_type():
    prop = {"type": {"name": "object"}, "doclets": parse_doclets(DESCRIPTION)}
    apply_prop_doclets(prop)
    assert prop["type"] == {"name": "Foo"}
    assert prop["defaultValue"] == {"value": "blue", "computed": False}


def test_type_doclet_enum_and_union():
    prop = {"doclets": [{"tag": "type", "value": '{("small"|"large")}'}]}
    apply_prop_doclets(prop)
    assert prop["type"] == {
        "name": "enum",
        "value": [{"value": '"small"', "computed": False}, {"value": '"large"', "computed": False}],
    }

    prop = {"doclets": [{"tag": "type", "value": "{(Foo|Bar)}"}]}
    apply_prop_doclets(prop)
    assert prop["type"] == {"name": "union", "value": [{"name": "Foo"}, {"name": "Bar"}]}


def test_unbalanced_type_is_stored_raw():
    prop = {"doclets": [{"tag": "type", "value": "{Foo"}]}
    apply_prop_doclets(prop)
    assert prop["type"] == {"name": "{Foo"}


def test_later_default_wins_and_empty_is_ignored():
    prop = {
        "defaultValue": {"value": "1", "computed": False},
        "doclets": [
            {"tag": "default", "value": "2"},
            {"tag": "defaultValue", "value": "3"},
            {"tag": "default", "value": ""},
        ],
    }
    apply_prop_doclets(prop)
    assert prop["defaultValue"] == {"value": "3", "computed": False}


def test_required_doclet():
    prop = {"required": False, "doclets": [{"tag": "required", "value": ""}]}
    assert apply_prop_doclets(prop)["required"] is True


def test_other_tags_leave_fields_alone():
    prop = {"type": {"name": "string"}, "doclets": [{"tag": "deprecated", "value": "use label"}]}
    apply_prop_doclets(prop)
    assert prop == {"type": {"name": "string"}, "doclets": [{"tag": "deprecated", "value": "use label"}]}


def test_type_falls_back_to_flow_then_ts():
    prop = {"flowType": {"name": "number"}, "doclets": []}
    apply_prop_doclets(prop)
    assert prop["type"] == {"name": "number"}
    assert prop["type"] is not prop["flowType"]

    prop = {"tsType": {"name": "string"}, "doclets": []}
    assert apply_prop_doclets(prop)["type"] == {"name": "string"}


@pytest.mark.parametrize("value,required", [("", True), ("true", True), ("false", False), ("False", False)])
def test_required_doclet_reads_value(value, required):
    prop = {"doclets": [{"tag": "required", "value": value}]}
    assert apply_prop_doclets(prop)["required"] is required


TRICKY_DESCRIPTIONS = [
    "Intro.\n@see the docs\n  for more\n\nOutro.",
    "Intro.\n\n@deprecated\n\n\n\nOutro.",
    "p\n\n@a\n\n@b\n\nq",
    "p\n@a one\n@b two\n\nq\n@c three",
    "Intro.\r\n@type {Foo}\r\n\r\nOutro.",
    "@only",
    "  @indented value\n",
]


@pytest.mark.parametrize("description", TRICKY_DESCRIPTIONS)
def test_clean_doclets_is_idempotent(description):
    cleaned = clean_doclets(description)
    assert clean_doclets(cleaned) == cleaned


@pytest.mark.parametrize("description", TRICKY_DESCRIPTIONS)
def test_cleaned_text_has_no_doclet_lines(description):
    assert parse_doclets(description)
    cleaned = clean_doclets(description)
    assert parse_doclets(cleaned) == []
    for doclet in parse_doclets(description):
        assert f"@{doclet['tag']}" not in cleaned

"""Unit tests for the field dispatch table.

Tests for:
- FieldBuilder abstract base class
- Builder registry (register_builder, get_builder, list_builders)
- Built-in builders and the generic fallback
"""

import pytest

from formrender.dispatch import (
    DEFAULT_BUILDER,
    FieldBuilder,
    build_field,
    get_builder,
    list_builders,
    register_builder,
    unregister_builder,
)
from formrender.schema import FieldNode
from formrender.ui import UiNode


def field(**data) -> FieldNode:
    data.setdefault("id", "f1")
    return FieldNode.model_validate(data)


class TestFieldBuilderContract:
    """Tests for FieldBuilder abstract base class contract."""

    @pytest.mark.unit
    def test_field_builder_is_abstract(self):
        with pytest.raises(TypeError, match="abstract"):
            FieldBuilder()  # type: ignore

    @pytest.mark.unit
    def test_concrete_builder_requires_build(self):
        class IncompleteBuilder(FieldBuilder):
            tags = frozenset({"incomplete"})

        with pytest.raises(TypeError, match="abstract"):
            IncompleteBuilder()


class TestRegistry:
    """Tests for builder registry functions."""

    @pytest.mark.unit
    def test_known_tags_registered(self):
        expected = {
            "drop-down",
            "plain-text",
            "checkbox",
            "button",
            "multiline",
            "panel",
            "radio",
            "radio-group",
            "checkbox-group",
            "image",
            "heading",
        }
        assert expected <= set(list_builders())

    @pytest.mark.unit
    def test_input_suffix_stripped(self):
        assert get_builder("drop-down-input") is get_builder("drop-down")

    @pytest.mark.unit
    def test_unknown_tag_falls_back(self):
        assert get_builder("unknown-type") is DEFAULT_BUILDER
        assert get_builder(None) is DEFAULT_BUILDER

    @pytest.mark.unit
    def test_register_custom_builder(self):
        @register_builder
        class RatingBuilder(FieldBuilder):
            tags = frozenset({"rating"})

            def build(self, fd: FieldNode) -> UiNode:
                return UiNode("div", classes=["rating"])

        try:
            assert build_field(field(fieldType="rating")).has_class("rating")
        finally:
            unregister_builder("rating")
        assert get_builder("rating") is DEFAULT_BUILDER


class TestBuilders:
    """Tests for the built-in builders."""

    @pytest.mark.unit
    def test_unknown_type_wraps_generic_input(self):
        node = build_field(field(fieldType="unknown-type"))
        assert node.has_class("field-wrapper")
        control = node.query("input")
        assert control is not None
        assert control.input_type == "unknown-type"

    @pytest.mark.unit
    def test_missing_type_is_text_input(self):
        node = build_field(field())
        assert node.query("input").input_type == "text"

    @pytest.mark.unit
    def test_select(self):
        node = build_field(field(fieldType="drop-down", enum=["a"], type="string[]"))
        select = node.query("select")
        assert select.get("multiple") is True
        assert len(select.children) == 1

    @pytest.mark.unit
    def test_plain_text(self):
        node = build_field(field(fieldType="plain-text", value="Hello", label="Ignored"))
        assert node.id == "f1"
        assert [c.tag for c in node.children] == ["p"]
        assert node.children[0].text == "Hello"

    @pytest.mark.unit
    def test_plain_text_rich(self):
        node = build_field(field(fieldType="plain-text", value="<b>Hi</b><script>", richText=True))
        assert node.children[0].markup == "<b>Hi</b>"

    @pytest.mark.unit
    def test_button(self):
        node = build_field(
            field(fieldType="button", buttonType="submit", label="Send", enabled=False)
        )
        button = node.children[0]
        assert node.has_class("submit-wrapper")
        assert button.tag == "button"
        assert button.text == "Send"
        assert button.get("type") == "submit"
        assert button.get("disabled") is True

    @pytest.mark.unit
    def test_button_hidden_label(self):
        button = build_field(
            field(fieldType="button", label={"value": "Go", "visible": False})
        ).children[0]
        assert button.text == ""
        assert button.get("aria-label") == "Go"

    @pytest.mark.unit
    def test_multiline(self):
        node = build_field(field(fieldType="multiline", placeholder="Write", maxLength=100))
        textarea = node.query("textarea")
        assert textarea.get("placeholder") == "Write"
        assert textarea.get("maxlength") == 100

    @pytest.mark.unit
    def test_panel_is_empty_shell(self):
        node = build_field(field(fieldType="panel", name="details", label="Details"))
        assert node.tag == "fieldset"
        assert node.has_class("panel-wrapper")
        assert node.id == "f1"
        assert [c.tag for c in node.children] == ["legend"]

    @pytest.mark.unit
    def test_checkbox_group(self):
        node = build_field(
            field(
                fieldType="checkbox-group",
                name="toppings",
                enum=["a", "b", "c"],
                required=True,
                tooltip="<b>Pick</b>",
                constraintMessages={"required": "Pick one"},
            )
        )
        assert node.tag == "fieldset"
        assert len(node.query_all("input")) == 3
        assert node.dataset["required"] is True
        assert node.get("title") == "Pick"
        assert node.dataset["requiredErrorMessage"] == "Pick one"

    @pytest.mark.unit
    def test_image_from_repo_path(self):
        node = build_field(
            field(fieldType="image", name="logo", properties={"fd:repoPath": "/img/logo.png"})
        )
        img = node.query("img")
        assert img.get("src") == "/img/logo.png"
        assert img.get("alt") == "logo"

    @pytest.mark.unit
    def test_heading(self):
        node = build_field(field(fieldType="heading", label="Title"))
        heading = node.query("h2")
        assert heading.text == "Title"
        assert heading.id == "f1"

"""Unit tests for the shared element helpers."""

import pytest

from formrender.schema import FieldNode
from formrender.ui import UiNode
from formrender.widgets import (
    create_dropdown_options,
    create_field_wrapper,
    create_help_text,
    create_input,
    create_label,
    create_radio_or_checkbox,
    create_radio_or_checkbox_options,
    get_html_render_type,
    strip_tags,
    to_class_name,
)


def field(**data) -> FieldNode:
    data.setdefault("id", "f1")
    return FieldNode.model_validate(data)


class TestTextHelpers:
    """Tests for class-name and markup helpers."""

    @pytest.mark.unit
    def test_to_class_name(self):
        assert to_class_name("First Name") == "first-name"
        assert to_class_name("__x__") == "x"
        assert to_class_name(None) == ""

    @pytest.mark.unit
    def test_strip_tags_keeps_allowed(self):
        text = '<p>Hello <script>x</script><b>there</b></p>'
        assert strip_tags(text) == "<p>Hello x<b>there</b></p>"

    @pytest.mark.unit
    def test_strip_tags_removes_everything_when_empty(self):
        assert strip_tags("<b>Tip</b> text", "") == "Tip text"

    @pytest.mark.unit
    def test_render_type(self):
        assert get_html_render_type(field(fieldType="email-input")) == "email"
        assert get_html_render_type(field()) == "text"


class TestWrapper:
    """Tests for field wrappers and labels."""

    @pytest.mark.unit
    def test_wrapper_classes_and_dataset(self):
        wrapper = create_field_wrapper(field(fieldType="text-input", name="First Name"))
        assert wrapper.classes == ["text-wrapper", "field-first-name", "field-wrapper"]
        assert wrapper.dataset["id"] == "f1"
        assert wrapper.children == []

    @pytest.mark.unit
    def test_hidden_field_marked(self):
        wrapper = create_field_wrapper(field(visible=False))
        assert wrapper.dataset["visible"] is False

    @pytest.mark.unit
    def test_label_included(self):
        wrapper = create_field_wrapper(
            field(label={"value": "Name", "visible": False}, tooltip="<i>Tip</i>")
        )
        label = wrapper.children[0]
        assert label.tag == "label"
        assert label.text == "Name"
        assert label.get("for") == "f1"
        assert label.dataset["visible"] is False
        assert label.get("title") == "Tip"

    @pytest.mark.unit
    def test_rich_text_label_sanitized(self):
        label = create_label(field(label={"value": "<b>Bold</b><img src=x>", "richText": True}))
        assert label.markup == "<b>Bold</b>"

    @pytest.mark.unit
    def test_no_label_without_value(self):
        assert create_label(field(label={"value": ""})) is None

    @pytest.mark.unit
    def test_help_text(self):
        help_text = create_help_text(field(description="Some <b>help</b>"))
        assert help_text.id == "f1-description"
        assert help_text.has_class("field-description")
        assert help_text.markup == "Some <b>help</b>"


class TestControls:
    """Tests for input and option helpers."""

    @pytest.mark.unit
    def test_input_constraints_by_type(self):
        control = create_input(field(fieldType="number-input", minimum=0, maximum=10, step=2))
        assert control.input_type == "number"
        assert control.get("min") == 0
        assert control.get("max") == 10
        assert control.get("step") == 2

    @pytest.mark.unit
    def test_text_constraints_and_placeholder(self):
        control = create_input(field(fieldType="text-input", maxLength=5, placeholder="Type"))
        assert control.get("maxlength") == 5
        assert control.get("placeholder") == "Type"

    @pytest.mark.unit
    def test_radio_control_first(self):
        wrapper = create_radio_or_checkbox(
            field(fieldType="checkbox", label="Agree", enum=["yes", "no"])
        )
        control = wrapper.children[0]
        assert control.tag == "input"
        assert control.value == "yes"
        assert control.dataset["uncheckedValue"] == "no"
        assert wrapper.children[1].tag == "label"

    @pytest.mark.unit
    def test_dropdown_options(self):
        select = UiNode("select")
        create_dropdown_options(
            field(
                fieldType="drop-down",
                enum=["a", "b"],
                enumNames=["Alpha", "Beta"],
                value="b",
                placeholder="Pick",
            ),
            select,
        )
        placeholder, alpha, beta = select.children
        assert placeholder.get("disabled") is True
        assert (alpha.text, alpha.value) == ("Alpha", "a")
        assert beta.get("selected") is True
        assert alpha.get("selected") is None

    @pytest.mark.unit
    def test_group_options(self):
        wrapper = UiNode("fieldset")
        create_radio_or_checkbox_options(
            field(
                fieldType="radio-group",
                name="color",
                enum=["r", "g"],
                enumNames=["Red", "Green"],
                value="g",
                required=True,
            ),
            wrapper,
        )
        first, second = (choice.query("input") for choice in wrapper.children)
        assert first.id == "f1-0" and second.id == "f1-1"
        assert first.input_type == "radio"
        assert first.name == "color"
        assert second.get("checked") is True
        assert first.get("required") is True
        assert second.get("required") is None
        assert "field-wrapper" not in wrapper.children[0].classes

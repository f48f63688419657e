"""Unit tests for the canonical form definition model."""

import pytest
from pydantic import ValidationError

from formrender.schema import (
    FieldNode,
    FieldTag,
    Label,
    children_order_problems,
    field_tag,
    ordered_children,
)


class TestFieldTag:
    """Tests for dispatch key resolution."""

    @pytest.mark.unit
    def test_strips_input_suffix(self):
        assert field_tag("text-input") == "text"
        assert field_tag("date-input") == "date"

    @pytest.mark.unit
    def test_missing_tag_defaults_to_text(self):
        assert field_tag(None) == FieldTag.TEXT.value

    @pytest.mark.unit
    def test_plain_tags_unchanged(self):
        assert field_tag("drop-down") == "drop-down"
        assert field_tag("radio-group") == "radio-group"


class TestFieldNode:
    """Tests for FieldNode model."""

    @pytest.mark.unit
    def test_minimal_node(self):
        node = FieldNode(id="f1")
        assert node.id == "f1"
        assert node.children == {}
        assert node.children_order == []
        assert node.tag == "text"

    @pytest.mark.unit
    def test_camel_case_aliases(self):
        node = FieldNode.model_validate(
            {
                "id": "f1",
                "fieldType": "number-input",
                "readOnly": True,
                "displayFormat": "#,###",
                "constraintMessages": {"required": "Needed"},
                "enum": ["a", "b"],
                "enumNames": ["A", "B"],
                "type": "number",
                "Column Span": 6,
            }
        )
        assert node.field_type == "number-input"
        assert node.read_only is True
        assert node.display_format == "#,###"
        assert node.constraint_messages == {"required": "Needed"}
        assert node.enum_values == ["a", "b"]
        assert node.enum_names == ["A", "B"]
        assert node.data_type == "number"
        assert node.column_span == 6

    @pytest.mark.unit
    def test_string_label_is_coerced(self):
        node = FieldNode.model_validate({"id": "f1", "label": "Name"})
        assert isinstance(node.label, Label)
        assert node.label_text == "Name"

    @pytest.mark.unit
    def test_label_object(self):
        node = FieldNode.model_validate(
            {"id": "f1", "label": {"value": "<b>Name</b>", "richText": True, "visible": False}}
        )
        assert node.label.rich_text is True
        assert node.label.visible is False

    @pytest.mark.unit
    def test_unknown_keys_preserved(self):
        node = FieldNode.model_validate({"id": "f1", "customFlag": "x"})
        assert node.model_extra["customFlag"] == "x"

    @pytest.mark.unit
    def test_default_presence_tracked(self):
        with_default = FieldNode.model_validate({"id": "f1", "default": None})
        without_default = FieldNode.model_validate({"id": "f2"})
        assert with_default.has("default_value")
        assert not without_default.has("default_value")

    @pytest.mark.unit
    def test_panel_and_variant(self):
        node = FieldNode.model_validate(
            {"id": "p", "fieldType": "panel", "properties": {"variant": "noButtons"}}
        )
        assert node.is_panel
        assert node.variant == "noButtons"


class TestChildrenOrder:
    """Tests for the children/childrenOrder invariant."""

    @pytest.mark.unit
    def test_ordered_children_follow_order(self):
        node = FieldNode.model_validate(
            {
                "id": "root",
                "children": {"b": {"id": "b"}, "a": {"id": "a"}, "c": {"id": "c"}},
                "childrenOrder": ["a", "b", "c"],
            }
        )
        assert [child.id for child in ordered_children(node)] == ["a", "b", "c"]

    @pytest.mark.unit
    def test_legacy_item_keys_accepted(self):
        node = FieldNode.model_validate(
            {
                "id": "root",
                ":items": {"x": {"id": "x"}},
                ":itemsOrder": ["x"],
            }
        )
        assert node.children_order == ["x"]
        assert node.children["x"].id == "x"

    @pytest.mark.unit
    def test_missing_key_in_order_rejected(self):
        with pytest.raises(ValidationError, match="missing from childrenOrder"):
            FieldNode.model_validate(
                {"id": "root", "children": {"a": {"id": "a"}}, "childrenOrder": []}
            )

    @pytest.mark.unit
    def test_unknown_key_in_order_rejected(self):
        with pytest.raises(ValidationError, match="missing from children"):
            FieldNode.model_validate(
                {"id": "root", "children": {}, "childrenOrder": ["ghost"]}
            )

    @pytest.mark.unit
    def test_duplicate_key_in_order_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            FieldNode.model_validate(
                {
                    "id": "root",
                    "children": {"a": {"id": "a"}},
                    "childrenOrder": ["a", "a"],
                }
            )

    @pytest.mark.unit
    def test_problems_empty_for_permutation(self):
        assert children_order_problems(["a", "b"], ["b", "a"]) == []

"""Unit tests for definition validation."""

import pytest

from formrender.validation import is_valid, validate_definition


@pytest.fixture
def valid_definition() -> dict:
    return {
        "id": "form",
        "children": {
            "name": {"id": "name", "fieldType": "text-input"},
            "panel": {
                "id": "panel",
                "fieldType": "panel",
                "children": {"inner": {"id": "inner"}},
                "childrenOrder": ["inner"],
            },
        },
        "childrenOrder": ["panel", "name"],
    }


class TestValidateDefinition:
    """Tests for validate_definition."""

    @pytest.mark.unit
    def test_valid_tree(self, valid_definition):
        assert validate_definition(valid_definition) == []
        assert is_valid(valid_definition)

    @pytest.mark.unit
    def test_leaf_without_children_is_valid(self):
        assert is_valid({"id": "leaf"})

    @pytest.mark.unit
    def test_nested_order_problem_reported(self, valid_definition):
        valid_definition["children"]["panel"]["childrenOrder"] = []
        errors = validate_definition(valid_definition)
        assert len(errors) == 1
        assert errors[0].node_id == "panel"
        assert errors[0].error_type == "children_order"

    @pytest.mark.unit
    def test_duplicate_ids(self, valid_definition):
        valid_definition["children"]["panel"]["children"]["inner"]["id"] = "name"
        errors = validate_definition(valid_definition)
        assert [e.error_type for e in errors] == ["duplicate_id"]
        assert "appears 2 times" in errors[0].message

    @pytest.mark.unit
    def test_non_mapping_children(self):
        errors = validate_definition({"id": "form", "children": ["a"], "childrenOrder": []})
        assert errors[0].error_type == "invalid_children"

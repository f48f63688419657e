"""Unit tests for the normalizer module."""

import copy

import pytest

from formrender.normalizer import (
    NormalizationError,
    is_alternate_shape,
    normalize,
    page_template,
    template_for_field_type,
    template_for_kind,
)
from formrender.schema import FieldNode, ordered_children
from formrender.validation import is_valid


@pytest.fixture
def document_definition() -> dict:
    """Alternate-shape definition with a nested panel."""
    return {
        "id": "form",
        "fieldType": "form",
        "title": "Registration",
        "items": [
            {"id": "name", "fieldType": "text-input", "name": "name"},
            {
                "id": "details",
                "fieldType": "panel",
                "items": [
                    {"id": "dob", "fieldType": "date", "dataRef": "foo"},
                    {"id": "start", "fieldType": "date"},
                ],
            },
            {"id": "empty", "fieldType": "panel", "items": []},
        ],
    }


class TestNormalize:
    """Tests for the items → children/childrenOrder reshaping."""

    @pytest.mark.unit
    def test_items_become_children_and_order(self, document_definition):
        result = normalize(document_definition)
        assert "items" not in result
        assert result["childrenOrder"] == ["name", "details", "empty"]
        assert set(result["children"]) == {"name", "details", "empty"}

    @pytest.mark.unit
    def test_nested_items_normalized(self, document_definition):
        details = normalize(document_definition)["children"]["details"]
        assert details["childrenOrder"] == ["dob", "start"]

    @pytest.mark.unit
    def test_other_keys_copied_verbatim(self, document_definition):
        result = normalize(document_definition)
        assert result["title"] == "Registration"
        assert result["children"]["name"]["name"] == "name"

    @pytest.mark.unit
    def test_empty_items_dropped(self, document_definition):
        empty = normalize(document_definition)["children"]["empty"]
        assert "children" not in empty
        assert "childrenOrder" not in empty
        assert "items" not in empty

    @pytest.mark.unit
    def test_date_field_receives_template(self, document_definition):
        start = normalize(document_definition)["children"]["details"]["children"]["start"]
        assert start["properties"]["fd:dor"]["dorContainer"] == template_for_kind(
            "datetimefield"
        )

    @pytest.mark.unit
    def test_data_ref_adds_bind(self, document_definition):
        dob = normalize(document_definition)["children"]["details"]["children"]["dob"]
        container = dob["properties"]["fd:dor"]["dorContainer"]
        expected = template_for_kind("datetimefield")
        expected["bind"] = {"ref": "foo", "match": "dataRef"}
        assert container == expected

    @pytest.mark.unit
    def test_bind_not_shared_between_items(self, document_definition):
        details = normalize(document_definition)["children"]["details"]["children"]
        assert "bind" not in details["start"]["properties"]["fd:dor"]["dorContainer"]

    @pytest.mark.unit
    def test_unmapped_type_untouched(self, document_definition):
        name = normalize(document_definition)["children"]["name"]
        assert "properties" not in name

    @pytest.mark.unit
    def test_page_template_attached_once_at_root(self, document_definition):
        result = normalize(document_definition)
        assert result["properties"]["fd:dor"]["pageTemplate"] == page_template()
        details = result["children"]["details"]
        assert "pageTemplate" not in details.get("properties", {}).get("fd:dor", {})

    @pytest.mark.unit
    def test_input_not_mutated(self, document_definition):
        snapshot = copy.deepcopy(document_definition)
        normalize(document_definition)
        assert document_definition == snapshot

    @pytest.mark.unit
    def test_existing_properties_kept(self):
        result = normalize(
            {
                "id": "form",
                "properties": {"fd:path": "/content/forms/x"},
                "items": [
                    {"id": "d", "fieldType": "date", "properties": {"colspan": 6}}
                ],
            }
        )
        assert result["properties"]["fd:path"] == "/content/forms/x"
        date_props = result["children"]["d"]["properties"]
        assert date_props["colspan"] == 6
        assert "dorContainer" in date_props["fd:dor"]


class TestNormalizeInvariants:
    """Properties that must hold for every normalized tree."""

    @pytest.mark.unit
    def test_children_order_is_permutation(self, document_definition):
        result = normalize(document_definition)
        assert is_valid(result)
        node = FieldNode.model_validate(result)
        assert [c.id for c in ordered_children(node)] == ["name", "details", "empty"]

    @pytest.mark.unit
    def test_idempotent_on_canonical(self, document_definition):
        once = normalize(document_definition)
        assert normalize(once) == once


class TestMalformedItems:
    """Items that cannot be keyed into children."""

    @pytest.mark.unit
    def test_item_without_id(self):
        definition = {"id": "f", "items": [{"name": "x", "fieldType": "text-input"}]}
        with pytest.raises(NormalizationError) as exc_info:
            normalize(definition)
        assert exc_info.value.position == 0

    @pytest.mark.unit
    def test_non_mapping_item(self):
        definition = {"id": "f", "items": [{"id": "a"}, "b"]}
        with pytest.raises(NormalizationError, match=r"items\[1\]"):
            normalize(definition)

    @pytest.mark.unit
    def test_nested_item_without_id(self):
        definition = {"id": "f", "items": [{"id": "p", "items": [{"id": ""}]}]}
        with pytest.raises(NormalizationError):
            normalize(definition)


class TestTemplates:
    """Tests for template lookup."""

    @pytest.mark.unit
    def test_date_input_suffix_maps_to_date_template(self):
        assert template_for_field_type("date-input") == template_for_kind("datetimefield")

    @pytest.mark.unit
    def test_unmapped_types(self):
        assert template_for_field_type("text-input") is None
        assert template_for_field_type(None) is None
        assert template_for_kind("unknown") is None

    @pytest.mark.unit
    def test_templates_are_fresh_copies(self):
        first = template_for_kind("datetimefield")
        first["mutated"] = True
        assert "mutated" not in template_for_kind("datetimefield")


class TestIsAlternateShape:
    """Tests for shape detection."""

    @pytest.mark.unit
    def test_detects_items(self, document_definition):
        assert is_alternate_shape(document_definition)

    @pytest.mark.unit
    def test_canonical_not_alternate(self, document_definition):
        assert not is_alternate_shape(normalize(document_definition))
        assert not is_alternate_shape(None)

"""Unit tests for the UI element tree."""

import pytest

from formrender.ui import UiNode, dataset_attribute, element


class TestTreeMutation:
    """Tests for append/prepend/replace helpers."""

    @pytest.mark.unit
    def test_append_sets_parent_and_skips_none(self):
        parent = UiNode("div")
        child = UiNode("span")
        parent.append(child, None)
        assert parent.children == [child]
        assert child.parent is parent

    @pytest.mark.unit
    def test_append_moves_node_between_parents(self):
        first, second = UiNode("div"), UiNode("div")
        child = UiNode("span")
        first.append(child)
        second.append(child)
        assert first.children == []
        assert child.parent is second

    @pytest.mark.unit
    def test_prepend(self):
        parent = UiNode("fieldset", children=[UiNode("input")])
        legend = UiNode("legend")
        parent.prepend(legend)
        assert parent.children[0] is legend

    @pytest.mark.unit
    def test_replace_children_clears_text(self):
        parent = UiNode("div", text="old")
        parent.replace_children(UiNode("p"))
        assert parent.text is None
        assert [c.tag for c in parent.children] == ["p"]

    @pytest.mark.unit
    def test_replace_with_keeps_position(self):
        a, b, c = UiNode("a"), UiNode("b"), UiNode("c")
        parent = UiNode("div", children=[a, b, c])
        new = UiNode("x")
        b.replace_with(new)
        assert [n.tag for n in parent.children] == ["a", "x", "c"]
        assert b.parent is None


class TestQueries:
    """Tests for descendant lookups."""

    @pytest.mark.unit
    def test_query_document_order(self):
        inner = UiNode("input", attrs={"id": "second"})
        tree = UiNode(
            "div",
            children=[UiNode("div", children=[UiNode("select", attrs={"id": "first"})]), inner],
        )
        assert tree.query("input", "select").id == "first"
        assert [n.id for n in tree.query_all("input", "select")] == ["first", "second"]

    @pytest.mark.unit
    def test_closest_includes_self(self):
        wrapper = UiNode("div", classes=["field-wrapper"])
        control = UiNode("input")
        wrapper.append(control)
        assert control.closest(lambda n: n.has_class("field-wrapper")) is wrapper
        assert wrapper.closest(lambda n: n.has_class("field-wrapper")) is wrapper

    @pytest.mark.unit
    def test_child_with_class_is_direct_only(self):
        marker = UiNode("div", classes=["item-remove"])
        nested = UiNode("div", children=[UiNode("span", children=[marker])])
        assert nested.child_with_class("item-remove") is None
        assert nested.children[0].child_with_class("item-remove") is marker

    @pytest.mark.unit
    def test_text_content(self):
        node = UiNode("div", text="a", children=[UiNode("span", text="b")])
        assert node.text_content == "ab"


class TestEvents:
    """Tests for listener dispatch."""

    @pytest.mark.unit
    def test_non_bubbling_event(self):
        seen = []
        parent = UiNode("form")
        control = UiNode("input")
        parent.append(control)
        parent.add_listener("focus", lambda e: seen.append("parent"))
        control.add_listener("focus", lambda e: seen.append("control"))
        control.dispatch("focus")
        assert seen == ["control"]

    @pytest.mark.unit
    def test_bubbling_event_reaches_ancestors(self):
        targets = []
        form = UiNode("form")
        control = UiNode("input")
        form.append(control)
        form.add_listener("change", lambda e: targets.append(e.target))
        control.dispatch("change", bubbles=True)
        assert targets == [control]


class TestToHtml:
    """Tests for HTML serialization."""

    @pytest.mark.unit
    def test_dataset_attribute_names(self):
        assert dataset_attribute("requiredErrorMessage") == "data-required-error-message"
        assert dataset_attribute("id") == "data-id"

    @pytest.mark.unit
    def test_serializes_attributes_classes_and_dataset(self):
        node = UiNode("div", classes=["text-wrapper", "field-wrapper"], dataset={"id": "f1"})
        node.append(element("input", type="text", required=True, disabled=False))
        assert node.to_html() == (
            '<div class="text-wrapper field-wrapper" data-id="f1">'
            '<input type="text" required></div>'
        )

    @pytest.mark.unit
    def test_escapes_text(self):
        assert element("p", "a < b").to_html() == "<p>a &lt; b</p>"

    @pytest.mark.unit
    def test_boolean_dataset_values(self):
        node = UiNode("fieldset", dataset={"repeatable": True})
        assert node.to_html() == '<fieldset data-repeatable="true"></fieldset>'

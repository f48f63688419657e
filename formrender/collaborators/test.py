"""Unit tests for collaborator defaults and helpers."""

import pytest

from formrender.collaborators import (
    CaptchaConfig,
    DefaultRepeatableGroup,
    extract_id_from_url,
    get_site_page_name,
    noop_enrich,
)
from formrender.schema import FieldNode
from formrender.ui import UiNode


class TestNoopEnrich:
    @pytest.mark.unit
    async def test_leaves_node_untouched(self):
        node = UiNode("div")
        await noop_enrich(node, FieldNode(id="f"), None, "form")
        assert node.attrs == {} and node.children == []


class TestDefaultRepeatableGroup:
    """Tests for the built-in repeatable-group manager."""

    @pytest.mark.unit
    def test_controls_are_direct_children(self):
        group = DefaultRepeatableGroup()
        panel = UiNode("fieldset")
        group.request_add_control(panel)
        group.request_remove_control(panel)
        assert panel.child_with_class("repeat-actions") is not None
        assert panel.child_with_class("item-remove") is not None
        assert group.add_requests == [panel]
        assert group.remove_requests == [panel]

    @pytest.mark.unit
    def test_transfer_groups_instances(self):
        form = UiNode("form")
        first = UiNode("fieldset", dataset={"id": "p", "repeatable": True, "max": 3})
        second = UiNode("fieldset", dataset={"id": "p", "repeatable": True})
        other = UiNode("div", dataset={"id": "x"})
        form.append(first, other, second)

        DefaultRepeatableGroup().transfer(form)

        wrapper = form.children[0]
        assert wrapper.has_class("repeat-wrapper")
        assert wrapper.children == [first, second]
        assert wrapper.dataset == {"id": "p", "max": 3}
        assert form.children == [wrapper, other]


class TestCaptchaConfig:
    """Tests for CAPTCHA configuration resolution."""

    @pytest.mark.unit
    def test_namespaced_config_wins(self):
        fd = FieldNode.model_validate(
            {
                "id": "c",
                "value": "ignored",
                "properties": {
                    "fd:captcha": {
                        "config": {"siteKey": "k", "uri": "u", "version": "v3"}
                    }
                },
            }
        )
        assert CaptchaConfig.from_field(fd) == CaptchaConfig("k", "u", "v3")

    @pytest.mark.unit
    def test_falls_back_to_field_attributes(self):
        fd = FieldNode.model_validate(
            {"id": "c", "value": "key", "uri": "https://x", "version": "v2"}
        )
        assert CaptchaConfig.from_field(fd) == CaptchaConfig("key", "https://x", "v2")


class TestUrlHelpers:
    @pytest.mark.unit
    def test_extract_id_from_url(self):
        assert extract_id_from_url("/adobe/forms/af/submit/L2Nvb") == "L2Nvb"
        assert extract_id_from_url("/adobe/forms/af/abc123") == "abc123"
        assert extract_id_from_url("/somewhere/else") is None
        assert extract_id_from_url(None) is None

    @pytest.mark.unit
    def test_get_site_page_name(self):
        path = "/content/site/en/contact/jcr:content/root/section/form"
        assert get_site_page_name(path) == "contact"
        assert get_site_page_name("/content/site") == ""
        assert get_site_page_name(None) == ""

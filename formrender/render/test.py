"""Tests for the rendering engine.

Tests for:
- Recursive rendering order and concurrency
- Repeatable-panel control requests
- Value display and description recovery on rendered forms
- Error propagation (enrichment failures, CAPTCHA, rule engine)
- Form-level wiring and the render_form entry point
"""

import asyncio
import json

import httpx
import pytest

from formrender.collaborators import DefaultRepeatableGroup
from formrender.render import (
    DuplicateCaptchaError,
    RenderContext,
    RenderOptions,
    RuleEngineLoadError,
    create_form,
    render_children,
    render_form,
    reset_form,
)
from formrender.ui import UiNode

AUTHORING = RenderOptions(authoring=True)


def child_ids(node: UiNode) -> list:
    return [c.dataset.get("id") for c in node.children]


class CallRecorder:
    """Repeatable group that records container ids and inserts nothing."""

    def __init__(self):
        self.add_requests: list = []
        self.remove_requests: list = []
        self.transfers = 0

    def request_add_control(self, container: UiNode) -> None:
        self.add_requests.append(container.dataset.get("id"))

    def request_remove_control(self, container: UiNode) -> None:
        self.remove_requests.append(container.dataset.get("id"))

    def transfer(self, form: UiNode) -> None:
        self.transfers += 1


class TestRenderOrder:
    """Children keep their defined order whatever order builds finish in."""

    @pytest.mark.unit
    async def test_output_order_independent_of_completion(self, make_definition):
        completed = []
        delays = {"a": 0.03, "b": 0.0, "c": 0.02}

        async def enrich(node, fd, parent, form_id):
            if parent is None:
                return
            await asyncio.sleep(delays[fd.id])
            completed.append(fd.id)

        definition = make_definition({"id": "a"}, {"id": "b"}, {"id": "c"})
        form = await create_form(definition, RenderOptions(authoring=True, enrich=enrich))

        assert completed[0] == "b"
        assert child_ids(form) == ["a", "b", "c"]

    @pytest.mark.unit
    async def test_order_follows_children_order_not_mapping(self, make_definition):
        definition = make_definition({"id": "a"}, {"id": "b"})
        definition.children_order = ["b", "a"]
        form = await create_form(definition, AUTHORING)
        assert child_ids(form) == ["b", "a"]

    @pytest.mark.unit
    async def test_nested_panels(self, make_definition):
        definition = make_definition(
            {
                "id": "outer",
                "fieldType": "panel",
                "children": {
                    "x": {"id": "x"},
                    "inner": {
                        "id": "inner",
                        "fieldType": "panel",
                        "children": {"y": {"id": "y"}},
                        "childrenOrder": ["y"],
                    },
                },
                "childrenOrder": ["inner", "x"],
            }
        )
        form = await create_form(definition, AUTHORING)
        outer = form.children[0]
        assert child_ids(outer) == ["inner", "x"]
        assert child_ids(outer.children[0]) == ["y"]

    @pytest.mark.unit
    async def test_none_children_dropped(self, make_definition):
        definition = make_definition({"id": "a"}, {"id": "b"})

        def extractor(panel):
            if not panel.children:
                return []
            return [panel.children[k] for k in panel.children_order] + [None]

        ctx = RenderContext(form_id="form", child_extractor=extractor)
        container = UiNode("form")
        await render_children(definition, container, ctx)
        assert child_ids(container) == ["a", "b"]

    @pytest.mark.unit
    async def test_absent_value_coerced(self, make_definition):
        definition = make_definition({"id": "a"})
        form = await create_form(definition, AUTHORING)
        assert definition.children["a"].value == ""
        assert form.query("input").value == ""


class TestEnrichment:
    """Tests for enrichment hook invocation."""

    @pytest.mark.unit
    async def test_called_per_field_and_container(self, contact_definition):
        calls = []

        async def enrich(node, fd, parent, form_id):
            calls.append((fd.id, parent is None, form_id))

        await render_form(contact_definition, RenderOptions(authoring=False, enrich=enrich))

        fields = {c[0] for c in calls if not c[1]}
        containers = [c[0] for c in calls if c[1]]
        assert fields == {"name", "city", "send"}
        assert containers == ["address", "form"]
        assert {c[2] for c in calls} == {"L2NvbnRhY3Q"}

    @pytest.mark.unit
    async def test_failure_propagates(self, make_definition):
        async def enrich(node, fd, parent, form_id):
            if fd.id == "b":
                raise RuntimeError("enrichment failed")

        definition = make_definition({"id": "a"}, {"id": "b"}, {"id": "c"})
        with pytest.raises(RuntimeError, match="enrichment failed"):
            await create_form(definition, RenderOptions(authoring=True, enrich=enrich))


class TestRepeatablePanels:
    @pytest.mark.unit
    async def test_only_first_instance_requests_controls(self, make_definition):
        group = DefaultRepeatableGroup()
        definition = make_definition(
            {"id": "p0", "fieldType": "panel", "repeatable": True, "index": 0},
            {"id": "p1", "fieldType": "panel", "repeatable": True, "index": 1},
            {
                "id": "p2",
                "fieldType": "panel",
                "repeatable": True,
                "index": 0,
                "properties": {"variant": "noButtons"},
            },
        )
        await create_form(definition, RenderOptions(authoring=True, repeat=group))

        assert [c.dataset["id"] for c in group.add_requests] == ["p0"]
        assert [c.dataset["id"] for c in group.remove_requests] == ["p0"]

    @pytest.mark.unit
    @pytest.mark.parametrize("authoring", [True, False])
    async def test_requests_once_without_marker_nodes(self, make_definition, authoring):
        group = CallRecorder()
        definition = make_definition(
            {"id": "p0", "fieldType": "panel", "repeatable": True, "index": 0},
        )
        await create_form(definition, RenderOptions(authoring=authoring, repeat=group))

        assert group.add_requests == ["p0"]
        assert group.remove_requests == ["p0"]

    @pytest.mark.unit
    async def test_transfer_runs_at_run_time(self, make_definition):
        definition = make_definition(
            {"id": "p", "fieldType": "panel", "repeatable": True, "index": 0},
        )
        form = await create_form(definition, RenderOptions(authoring=False))
        assert form.children[0].has_class("repeat-wrapper")


class TestRenderedFields:
    """Decorations observed on rendered forms."""

    @pytest.mark.unit
    async def test_value_display_state_machine(self, make_definition):
        definition = make_definition(
            {
                "id": "d",
                "fieldType": "date-input",
                "value": "2024-01-01",
                "displayValue": "Jan 1, 2024",
                "displayFormat": "MMM d, y",
            }
        )
        form = await create_form(definition, AUTHORING)
        control = form.query("input")
        assert (control.input_type, control.value) == ("text", "Jan 1, 2024")

        control.dispatch("focus")
        assert (control.input_type, control.value) == ("date", "2024-01-01")

        control.dispatch("blur")
        assert (control.input_type, control.value) == ("text", "Jan 1, 2024")

    @pytest.mark.unit
    async def test_description_recovered_after_error(self, contact_definition):
        form = await render_form(contact_definition, RenderOptions(authoring=False))
        control = form.find(lambda n: n.tag == "input" and n.id == "name")
        wrapper = control.parent
        help_text = wrapper.child_with_class("field-description")

        control.dispatch("change", bubbles=True)
        assert help_text.text == "Name is required"

        control.value = "Ada"
        control.dispatch("change", bubbles=True)
        assert help_text.markup == "Your full name"
        assert wrapper.dataset["description"] == "Your full name"

    @pytest.mark.unit
    async def test_applied_css_classes(self, make_definition):
        definition = make_definition({"id": "a", "appliedCssClassNames": "wide dark"})
        form = await create_form(definition, AUTHORING)
        assert {"wide", "dark"} <= set(form.children[0].classes)


class FakeCaptcha:
    instances: list = []

    def __init__(self, config, field_id, name, page_name):
        self.args = (config, field_id, name, page_name)
        self.attached_to = None
        FakeCaptcha.instances.append(self)

    def attach(self, form):
        self.attached_to = form


class TestCaptcha:
    """Tests for CAPTCHA placeholder and wiring."""

    @pytest.mark.unit
    async def test_placeholder_and_attach(self, make_definition):
        FakeCaptcha.instances = []
        definition = make_definition(
            {
                "id": "cap",
                "name": "captcha",
                "fieldType": "captcha",
                "value": "site-key",
                "label": "Ignored",
                "properties": {"fd:path": "/content/site/en/contact/jcr:content/root/cap"},
            }
        )
        form = await create_form(
            definition, RenderOptions(authoring=False, captcha_factory=FakeCaptcha)
        )

        placeholder = form.children[0]
        assert placeholder.text == "CAPTCHA"
        assert placeholder.children == []

        (captcha,) = FakeCaptcha.instances
        config, field_id, name, page_name = captcha.args
        assert config.site_key == "site-key"
        assert (field_id, name, page_name) == ("cap", "captcha", "contact")
        assert captcha.attached_to is form

    @pytest.mark.unit
    async def test_duplicate_captcha_rejected(self, make_definition):
        definition = make_definition(
            {"id": "c1", "fieldType": "captcha"},
            {"id": "c2", "fieldType": "captcha"},
        )
        with pytest.raises(DuplicateCaptchaError):
            await create_form(definition, AUTHORING)

    @pytest.mark.unit
    def test_context_rejects_second_assignment(self, make_definition):
        definition = make_definition({"id": "c1"}, {"id": "c2"})
        ctx = RenderContext()
        ctx.set_captcha(definition.children["c1"])
        with pytest.raises(DuplicateCaptchaError, match="c1"):
            ctx.set_captcha(definition.children["c2"])


class RecordingEngine:
    def __init__(self):
        self.calls = []

    async def initialize(self, definition, form, captcha, renderer, data):
        self.calls.append((definition, form, captcha, data))
        extra = UiNode("div")
        await renderer(definition, extra)
        self.rendered = extra


class TestRuleEngine:
    """Tests for rule engine initialization."""

    @pytest.mark.unit
    async def test_initialized_once_at_run_time(self, make_definition):
        engine = RecordingEngine()
        definition = make_definition({"id": "a"})
        form = await create_form(
            definition,
            RenderOptions(
                authoring=False, rule_engine=engine, rule_engine_delay_ms=1, data={"a": 1}
            ),
        )
        assert engine.calls == [(definition, form, None, {"a": 1})]
        assert child_ids(engine.rendered) == ["a"]

    @pytest.mark.unit
    async def test_skipped_in_authoring_mode(self, make_definition):
        engine = RecordingEngine()
        options = RenderOptions(authoring=True, rule_engine=engine)
        await create_form(make_definition({"id": "a"}), options)
        assert engine.calls == []

    @pytest.mark.unit
    async def test_missing_module(self, make_definition):
        options = RenderOptions(authoring=False, rule_engine_module="formrender.no_such_engine")
        with pytest.raises(RuleEngineLoadError):
            await create_form(make_definition({"id": "a"}), options)

    @pytest.mark.unit
    async def test_module_without_initialize(self, make_definition):
        options = RenderOptions(authoring=False, rule_engine_module="formrender.schema")
        with pytest.raises(RuleEngineLoadError, match="initialize"):
            await create_form(make_definition({"id": "a"}), options)


class TestFormWiring:
    """Tests for run-time vs authoring form wiring."""

    @pytest.mark.unit
    async def test_run_time_attributes(self, make_definition):
        definition = make_definition({"id": "a"}, action="/adobe/forms/af/submit/abc")
        form = await create_form(definition, RenderOptions(authoring=False))
        assert form.dataset["action"] == "/adobe/forms/af/submit/abc"
        assert form.get("novalidate") is True
        assert "reset" in form.listeners

    @pytest.mark.unit
    async def test_authoring_skips_wiring(self, make_definition):
        form = await create_form(make_definition({"id": "a"}), AUTHORING)
        assert "novalidate" not in form.attrs
        assert form.listeners == {}

    @pytest.mark.unit
    async def test_submit_handler(self, make_definition):
        submitted = []
        options = RenderOptions(
            authoring=False,
            submit_handler=lambda event, form, captcha: submitted.append(
                (event.type, form, captcha)
            ),
        )
        form = await create_form(make_definition({"id": "a"}), options)
        form.dispatch("submit")
        assert submitted == [("submit", form, None)]

    @pytest.mark.unit
    async def test_reset_form_replaces_tree(self, make_definition):
        definition = make_definition({"id": "a"})
        options = RenderOptions(authoring=False)
        page = UiNode("main")
        form = await create_form(definition, options)
        page.append(form)

        new_form = await reset_form(form, definition, options)
        assert page.children == [new_form]
        assert new_form is not form
        assert form.parent is None

    @pytest.mark.unit
    async def test_reset_event_rerenders(self, make_definition):
        definition = make_definition({"id": "a"})
        page = UiNode("main")
        form = await create_form(definition, RenderOptions(authoring=False))
        page.append(form)

        form.dispatch("reset")
        await asyncio.sleep(0.05)
        assert page.children[0] is not form
        assert page.children[0].tag == "form"

    @pytest.mark.unit
    async def test_failed_rerender_is_logged(self, make_definition, caplog):
        renders = []

        async def enrich(node, fd, parent, form_id):
            if parent is None:
                return
            renders.append(fd.id)
            if len(renders) > 1:
                raise RuntimeError("re-render failed")

        definition = make_definition({"id": "a"})
        page = UiNode("main")
        form = await create_form(definition, RenderOptions(authoring=False, enrich=enrich))
        page.append(form)

        with caplog.at_level("ERROR", logger="formrender.render"):
            form.dispatch("reset")
            await asyncio.sleep(0.05)

        assert page.children[0] is form
        assert "re-render failed" in caplog.text


class TestRenderForm:
    """Tests for the render_form entry point."""

    @pytest.mark.unit
    async def test_dataset_attributes(self, contact_definition):
        form = await render_form(contact_definition, RenderOptions(authoring=False))
        assert form.dataset["redirectUrl"] == "/thanks"
        assert form.dataset["thankYouMsg"] == ""
        assert form.dataset["action"] == "/adobe/forms/af/submit/L2NvbnRhY3Q"
        assert form.dataset["source"] == "aem"
        assert form.dataset["rules"] is True
        assert form.dataset["id"] == "form"
        assert form.dataset["formpath"] == "/content/forms/af/contact/jcr:content/guideContainer"

    @pytest.mark.unit
    async def test_from_text(self, contact_definition):
        form = await render_form(json.dumps(contact_definition), AUTHORING)
        assert child_ids(form) == ["name", "address", "send"]

    @pytest.mark.unit
    async def test_alternate_shape_normalized(self, document_definition):
        form = await render_form(document_definition, AUTHORING)
        assert child_ids(form) == ["when", "note"]
        assert form.query("textarea") is not None

    @pytest.mark.unit
    async def test_malformed_text_returns_none(self):
        assert await render_form("{broken", AUTHORING) is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "items",
        [
            [{"name": "x", "fieldType": "text-input"}],
            ["not-a-field"],
        ],
    )
    async def test_unkeyable_items_return_none(self, items):
        assert await render_form({"id": "f", "items": items}, AUTHORING) is None

    @pytest.mark.unit
    async def test_broken_children_invariant_returns_none(self):
        definition = {"id": "f", "children": {"a": {"id": "a"}}, "childrenOrder": []}
        assert await render_form(definition, AUTHORING) is None

    @pytest.mark.unit
    async def test_from_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "remote", "fieldType": "form"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            form = await render_form(
                "https://site.test/forms/contact.json", AUTHORING, client=client
            )
        assert form.dataset["id"] == "remote"
        assert form.dataset["action"] == "/forms/contact"

    @pytest.mark.unit
    async def test_html_output(self, contact_definition):
        form = await render_form(contact_definition, RenderOptions(authoring=False))
        html = form.to_html()
        assert html.startswith("<form novalidate")
        assert 'data-action="/adobe/forms/af/submit/L2NvbnRhY3Q"' in html
        assert '<button class="button" type="submit"' in html

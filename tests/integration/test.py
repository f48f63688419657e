"""Integration tests for the full definition-to-HTML pipeline.

Covers:
- Alternate-shape definition -> normalize -> validate -> render
- Run-time wiring on the rendered tree (validation, repeatables, display values)
"""

import pytest

from formrender.collaborators import DefaultRepeatableGroup
from formrender.normalizer import normalize
from formrender.render import RenderOptions, render_form
from formrender.validation import validate_definition


@pytest.mark.integration
class TestDocumentFormPipeline:
    """End-to-end rendering of a document-based definition."""

    def test_normalized_definition_is_valid(self, document_form):
        canonical = normalize(document_form)
        assert validate_definition(canonical) == []
        assert canonical["childrenOrder"] == ["email", "birthday", "guests", "submit"]
        birthday = canonical["children"]["birthday"]
        assert birthday["properties"]["fd:dor"]["dorContainer"]["bind"] == {
            "ref": "$.person.birthday",
            "match": "dataRef",
        }
        assert "pageTemplate" in canonical["properties"]["fd:dor"]

    async def test_render_run_time(self, document_form):
        group = DefaultRepeatableGroup()
        form = await render_form(document_form, RenderOptions(authoring=False, repeat=group))

        assert form.dataset["id"] == "registration"
        assert form.get("novalidate") is True

        email = form.find(lambda n: n.tag == "input" and n.id == "email")
        assert email.get("required") is True
        assert email.get("pattern")

        birthday = form.find(lambda n: n.tag == "input" and n.id == "birthday")
        assert birthday.value == "Jan 1, 2024"
        birthday.dispatch("focus")
        assert (birthday.input_type, birthday.value) == ("date", "2024-01-01")

        assert [c.dataset["id"] for c in group.add_requests] == ["guests"]
        repeat_wrapper = form.find(lambda n: n.has_class("repeat-wrapper"))
        assert repeat_wrapper.dataset["id"] == "guests"

        email.dispatch("change", bubbles=True)
        assert email.parent.has_class("field-invalid")

    async def test_render_authoring_html(self, document_form):
        form = await render_form(document_form, RenderOptions(authoring=True))
        html = form.to_html()

        assert html.startswith("<form")
        assert "novalidate" not in html.split(">", 1)[0]
        assert 'data-id="guests"' in html
        assert 'class="button"' in html
        assert html.index('data-id="email"') < html.index('data-id="submit"')

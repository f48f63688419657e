"""Unit tests for the decoration pipeline."""

import pytest

from formrender.collaborators import DefaultRepeatableGroup
from formrender.decorators import (
    CONTROLS_REQUESTED_KEY,
    EMAIL_PATTERN,
    apply_repeatable_policy,
    decorate_col_span,
    decorate_field,
    decorate_input,
    decorate_panel_container,
)
from formrender.dispatch import build_field
from formrender.display import ValueDisplayMachine
from formrender.schema import FieldNode
from formrender.ui import UiNode


def field(**data) -> FieldNode:
    data.setdefault("id", "f1")
    return FieldNode.model_validate(data)


def built(**data) -> tuple[FieldNode, UiNode]:
    fd = field(**data)
    return fd, build_field(fd)


class TestColSpan:
    @pytest.mark.unit
    def test_column_span(self):
        fd, node = built(**{"Column Span": 6})
        decorate_col_span(fd, node)
        assert node.has_class("col-6")

    @pytest.mark.unit
    def test_colspan_property(self):
        fd, node = built(properties={"colspan": 4})
        decorate_col_span(fd, node)
        assert node.has_class("col-4")

    @pytest.mark.unit
    def test_absent_span_is_noop(self):
        fd, node = built()
        decorate_col_span(fd, node)
        assert not any(c.startswith("col-") for c in node.classes)


class TestInputDecoration:
    """Tests for input-attribute decoration."""

    @pytest.mark.unit
    def test_identity_and_flags(self):
        fd, node = built(
            name="first", value="Ada", tooltip="<i>Your name</i>", readOnly=True, enabled=False
        )
        control = decorate_input(fd, node)
        assert control.id == "f1"
        assert control.name == "first"
        assert control.get("title") == "Your name"
        assert control.get("readonly") is True
        assert control.get("disabled") is True
        assert control.get("autocomplete") == "off"
        assert control.value == "Ada"

    @pytest.mark.unit
    def test_explicit_autocomplete_kept(self):
        fd, node = built(autoComplete="email")
        assert decorate_input(fd, node).get("autocomplete") == "email"

    @pytest.mark.unit
    def test_empty_autocomplete_not_replaced(self):
        fd, node = built(autoComplete="")
        assert decorate_input(fd, node).get("autocomplete") == ""

    @pytest.mark.unit
    def test_read_only_drop_down_is_disabled(self):
        fd, node = built(fieldType="drop-down", enum=["a"], readOnly=True)
        assert decorate_input(fd, node).get("disabled") is True

    @pytest.mark.unit
    def test_checkbox_binds_first_option(self):
        fd, node = built(fieldType="checkbox", enum=["yes", "no"], value="yes")
        control = decorate_input(fd, node)
        assert control.value == "yes"
        assert control.get("checked") is True

    @pytest.mark.unit
    def test_checkbox_without_options_uses_on(self):
        fd, node = built(fieldType="checkbox", value="")
        control = decorate_input(fd, node)
        assert control.value == "on"
        assert control.get("checked") is False

    @pytest.mark.unit
    def test_file_multiplicity(self):
        fd, node = built(fieldType="file-input", type="file[]")
        control = decorate_input(fd, node)
        assert control.get("multiple") is True
        assert control.value is None

    @pytest.mark.unit
    def test_constraints_and_messages(self):
        fd, node = built(
            required=True,
            description="Help",
            minItems=1,
            maxItems=3,
            maxFileSize="2MB",
            default="x",
            constraintMessages={"required": "Needed"},
        )
        control = decorate_input(fd, node)
        assert control.get("required") is True
        assert control.get("aria-describedby") == "f1-description"
        assert control.dataset == {"minItems": 1, "maxItems": 3, "maxFileSize": "2MB"}
        assert control.get("value") == "x"
        assert node.dataset["requiredErrorMessage"] == "Needed"
        assert node.dataset["required"] is True

    @pytest.mark.unit
    def test_email_pattern(self):
        fd, node = built(fieldType="email")
        assert decorate_input(fd, node).get("pattern") == EMAIL_PATTERN

    @pytest.mark.unit
    def test_display_format_switches_to_state_machine(self):
        fd, node = built(
            fieldType="date-input",
            value="2024-01-01",
            displayValue="Jan 1, 2024",
            displayFormat="MMM d, y",
        )
        control = decorate_input(fd, node)
        assert isinstance(control.controller, ValueDisplayMachine)
        assert control.input_type == "text"
        assert control.value == "Jan 1, 2024"

    @pytest.mark.unit
    def test_no_control_is_noop(self):
        fd, node = built(fieldType="heading", label="Title")
        assert decorate_input(fd, node) is None
        assert "required" not in node.dataset


class TestDecorateField:
    @pytest.mark.unit
    def test_description_is_appended_and_remembered(self):
        fd, node = built(description="<b>Tip</b>")
        decorate_field(fd, node)
        help_text = node.child_with_class("field-description")
        assert help_text.id == "f1-description"
        assert node.dataset["description"] == "<b>Tip</b>"

    @pytest.mark.unit
    def test_groups_skip_input_decoration(self):
        fd, node = built(fieldType="radio-group", name="g", enum=["a", "b"])
        decorate_field(fd, node)
        first = node.query("input")
        assert first.id == "f1-0"
        assert "autocomplete" not in first.attrs


class TestRepeatablePolicy:
    """Tests for repeatable-panel control requests."""

    def _panel(self, **data) -> tuple[FieldNode, UiNode, DefaultRepeatableGroup]:
        fd, node = built(fieldType="panel", repeatable=True, **data)
        group = DefaultRepeatableGroup()
        apply_repeatable_policy(node, fd, group)
        decorate_panel_container(fd, node, group)
        return fd, node, group

    @pytest.mark.unit
    def test_first_instance_requests_one_of_each(self):
        _, node, group = self._panel(index=0)
        assert len(group.add_requests) == 1
        assert len(group.remove_requests) == 1
        assert node.dataset["repeatable"] is True
        assert node.dataset["index"] == 0

    @pytest.mark.unit
    def test_unset_index_counts_as_first(self):
        _, _, group = self._panel()
        assert len(group.add_requests) == 1

    @pytest.mark.unit
    def test_later_instance_requests_none(self):
        _, node, group = self._panel(index=1)
        assert group.add_requests == [] and group.remove_requests == []
        assert node.dataset["index"] == 1

    @pytest.mark.unit
    def test_no_buttons_variant_requests_none(self):
        _, node, group = self._panel(index=0, properties={"variant": "noButtons"})
        assert group.add_requests == [] and group.remove_requests == []
        assert node.dataset["variant"] == "noButtons"

    @pytest.mark.unit
    def test_namespaced_properties_not_copied(self):
        _, node, _ = self._panel(properties={"fd:path": "/x", "layout": "grid"})
        assert node.dataset["layout"] == "grid"
        assert "fd:path" not in node.dataset

    @pytest.mark.unit
    def test_occurrence_limits(self):
        _, node, _ = self._panel(maxOccur=4, minOccur=1)
        assert node.dataset["max"] == 4
        assert node.dataset["min"] == 1


class TestPanelContainer:
    @pytest.mark.unit
    def test_legend_added_when_missing(self):
        fd = field(fieldType="panel", label="Details")
        container = build_field(fd)
        container.children[0].remove()
        decorate_panel_container(fd, container, DefaultRepeatableGroup())
        assert container.children[0].tag == "legend"

    @pytest.mark.unit
    def test_existing_legend_kept(self):
        fd = field(fieldType="panel", label="Details")
        container = build_field(fd)
        decorate_panel_container(fd, container, DefaultRepeatableGroup())
        assert len(container.query_all("legend")) == 1

    @pytest.mark.unit
    def test_non_panel_ignored(self):
        group = DefaultRepeatableGroup()
        form = UiNode("form", dataset={"repeatable": True})
        decorate_panel_container(field(), form, group)
        assert group.add_requests == []


class CallRecorder:
    """Repeatable group that only records requests."""

    def __init__(self):
        self.add_requests: list[UiNode] = []
        self.remove_requests: list[UiNode] = []

    def request_add_control(self, container: UiNode) -> None:
        self.add_requests.append(container)

    def request_remove_control(self, container: UiNode) -> None:
        self.remove_requests.append(container)

    def transfer(self, form: UiNode) -> None:
        pass


class TestControlRequestsOnce:
    """Control requests stay single when the group inserts no markers."""

    @pytest.mark.unit
    def test_container_step_does_not_repeat_request(self):
        fd, node = built(fieldType="panel", repeatable=True, index=0)
        group = CallRecorder()
        apply_repeatable_policy(node, fd, group)
        decorate_panel_container(fd, node, group)
        assert group.add_requests == [node]
        assert group.remove_requests == [node]
        assert node.dataset[CONTROLS_REQUESTED_KEY] is True

    @pytest.mark.unit
    def test_container_step_requests_when_policy_did_not(self):
        fd, node = built(fieldType="panel", repeatable=True)
        node.dataset.update(repeatable=True, index=0)
        group = CallRecorder()
        decorate_panel_container(fd, node, group)
        decorate_panel_container(fd, node, group)
        assert group.add_requests == [node]
        assert group.remove_requests == [node]

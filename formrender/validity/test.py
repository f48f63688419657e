"""Unit tests for field validity checking."""

import pytest

from formrender.decorators import decorate_field
from formrender.dispatch import build_field
from formrender.schema import FieldNode
from formrender.ui import UiNode
from formrender.validity import (
    DEFAULT_MESSAGES,
    check_validation,
    enable_validation,
    find_violation,
)


def render(**data) -> tuple[UiNode, UiNode]:
    data.setdefault("id", "f1")
    fd = FieldNode.model_validate(data)
    node = decorate_field(fd, build_field(fd))
    return node, node.query("input", "textarea", "select")


class TestFindViolation:
    """Tests for constraint evaluation."""

    @pytest.mark.unit
    def test_required(self):
        _, control = render(required=True, value="")
        assert find_violation(control) == "required"
        control.value = "x"
        assert find_violation(control) is None

    @pytest.mark.unit
    def test_pattern(self):
        _, control = render(pattern="[0-9]+", value="12a")
        assert find_violation(control) == "pattern"

    @pytest.mark.unit
    def test_invalid_pattern_is_ignored(self):
        _, control = render(pattern="[abc", value="zz")
        assert find_violation(control) is None

    @pytest.mark.unit
    def test_lengths(self):
        _, control = render(minLength=3, maxLength=5, value="ab")
        assert find_violation(control) == "minLength"
        control.value = "abcdef"
        assert find_violation(control) == "maxLength"

    @pytest.mark.unit
    @pytest.mark.parametrize("bound", ["many", "nan", "inf", -1, None])
    def test_unusable_length_is_ignored(self, bound):
        _, control = render(value="abc")
        control.set("minlength", bound)
        control.set("maxlength", bound)
        assert find_violation(control) is None

    @pytest.mark.unit
    def test_number_range(self):
        _, control = render(fieldType="number-input", minimum=1, maximum=10, value=0)
        assert find_violation(control) == "minimum"
        control.value = 11
        assert find_violation(control) == "maximum"
        control.value = 5
        assert find_violation(control) is None

    @pytest.mark.unit
    def test_required_checkbox_group(self):
        node, _ = render(fieldType="checkbox-group", name="c", enum=["a", "b"], required=True)
        controls = node.query_all("input")
        assert find_violation(controls[0], node) == "required"
        controls[1].set("checked", True)
        assert find_violation(controls[0], node) is None


class TestDescriptionRecovery:
    """Error messages replace the description without losing it."""

    @pytest.mark.unit
    def test_error_then_recovery(self):
        node, control = render(
            required=True,
            value="",
            description="Your full name",
            constraintMessages={"required": "Name is required"},
        )
        help_text = node.child_with_class("field-description")

        assert check_validation(control) is False
        assert help_text.text == "Name is required"
        assert node.has_class("field-invalid")

        control.value = "Ada"
        assert check_validation(control) is True
        assert help_text.markup == "Your full name"
        assert help_text.text is None
        assert not node.has_class("field-invalid")

    @pytest.mark.unit
    def test_default_message_without_description(self):
        node, control = render(required=True, value="")
        check_validation(control)
        assert node.child_with_class("field-description").text == DEFAULT_MESSAGES["required"]

        control.value = "x"
        check_validation(control)
        assert node.child_with_class("field-description") is None


class TestEnableValidation:
    @pytest.mark.unit
    def test_change_bubbles_to_form(self):
        node, control = render(required=True, value="")
        form = UiNode("form")
        form.append(node)
        enable_validation(form)

        control.dispatch("change", bubbles=True)
        assert node.has_class("field-invalid")

    @pytest.mark.unit
    def test_change_with_invalid_pattern(self):
        node, control = render(pattern="[abc", value="zz")
        form = UiNode("form")
        form.append(node)
        enable_validation(form)

        control.dispatch("change", bubbles=True)
        assert not node.has_class("field-invalid")

    @pytest.mark.unit
    def test_invalid_event_on_control(self):
        node, control = render(required=True, value="")
        form = UiNode("form")
        form.append(node)
        enable_validation(form)

        control.dispatch("invalid")
        assert node.has_class("field-invalid")

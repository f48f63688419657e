"""Unit tests for the value display state machine."""

import pytest

from formrender.display import DisplayState, ValueDisplayMachine, qualifies_for_display
from formrender.ui import UiNode


@pytest.fixture
def control() -> UiNode:
    return UiNode("input", attrs={"type": "date"})


@pytest.fixture
def machine(control) -> ValueDisplayMachine:
    return ValueDisplayMachine(control, "date", "2024-01-01", "Jan 1, 2024").bind()


class TestTransitions:
    """Tests for the named transitions."""

    @pytest.mark.unit
    def test_initial_state_shows_display_value(self, machine, control):
        assert machine.state is DisplayState.DISPLAY
        assert control.input_type == "text"
        assert control.value == "Jan 1, 2024"
        assert control.get("edit-value") == "2024-01-01"
        assert control.get("display-value") == "Jan 1, 2024"

    @pytest.mark.unit
    def test_enter_and_exit_edit(self, machine, control):
        machine.enter_edit()
        assert machine.state is DisplayState.EDITING
        assert (control.input_type, control.value) == ("date", "2024-01-01")

        machine.exit_edit()
        assert machine.state is DisplayState.DISPLAY
        assert (control.input_type, control.value) == ("text", "Jan 1, 2024")

    @pytest.mark.unit
    def test_prepare_edit_only_switches_type(self, machine, control):
        machine.prepare_edit()
        assert machine.state is DisplayState.DISPLAY
        assert control.input_type == "date"
        assert control.value == "Jan 1, 2024"

    @pytest.mark.unit
    def test_missing_values_become_empty(self):
        control = UiNode("input")
        ValueDisplayMachine(control, "number")
        assert control.value == ""
        assert control.get("edit-value") == ""


class TestEvents:
    """Tests for event wiring."""

    @pytest.mark.unit
    def test_focus_and_blur(self, machine, control):
        control.dispatch("focus")
        assert control.value == "2024-01-01"
        control.dispatch("blur")
        assert control.value == "Jan 1, 2024"

    @pytest.mark.unit
    def test_touchstart_prepares(self, machine, control):
        control.dispatch("touchstart")
        assert control.input_type == "date"

    @pytest.mark.unit
    def test_bind_sets_controller(self, machine, control):
        assert control.controller is machine


class TestQualification:
    """Tests for the display-mode qualification rule."""

    @pytest.mark.unit
    @pytest.mark.parametrize("render_type", ["number", "date", "text", "email"])
    def test_qualifying_types(self, render_type):
        assert qualifies_for_display(render_type, "d MMM y", None)
        assert qualifies_for_display(render_type, None, "expr")

    @pytest.mark.unit
    def test_requires_format(self):
        assert not qualifies_for_display("date", None, None)

    @pytest.mark.unit
    def test_other_types_never_qualify(self):
        assert not qualifies_for_display("file", "x", None)

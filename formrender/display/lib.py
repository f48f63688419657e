"""Value display state machine.

A control whose field declares a display format (or display-value
expression) shows a formatted projection of its value while idle and the
raw value while being edited:

    DISPLAY --enter_edit--> EDITING --exit_edit--> DISPLAY
    DISPLAY --prepare_edit--> DISPLAY (type switched ahead of focus)

The raw and formatted values are kept on the control itself as the
``edit-value`` and ``display-value`` attributes, so the machine can be
rebuilt from the rendered tree alone.
"""

from enum import Enum
from typing import Any, Optional

from formrender.ui import UiEvent, UiNode

EDIT_VALUE_ATTR = "edit-value"
DISPLAY_VALUE_ATTR = "display-value"
DISPLAY_INPUT_TYPE = "text"

# Render types that may switch between display and edit mode
QUALIFYING_TYPES = frozenset({"number", "date", "text", "email"})


class DisplayState(str, Enum):
    DISPLAY = "display"
    EDITING = "editing"


class ValueDisplayMachine:
    """Two-state display/edit toggle for a single control.

    Example:
        >>> control = UiNode("input")
        >>> machine = ValueDisplayMachine(control, "date", "2024-01-01", "Jan 1, 2024")
        >>> control.value
        'Jan 1, 2024'
        >>> machine.enter_edit()
        >>> control.input_type, control.value
        ('date', '2024-01-01')
    """

    def __init__(
        self,
        control: UiNode,
        semantic_type: str,
        edit_value: Any = None,
        display_value: Any = None,
    ):
        self.control = control
        self.semantic_type = semantic_type
        control.set(EDIT_VALUE_ATTR, "" if edit_value is None else edit_value)
        control.set(DISPLAY_VALUE_ATTR, "" if display_value is None else display_value)
        self.state = DisplayState.DISPLAY
        self._show_display_value()

    @property
    def edit_value(self) -> Any:
        return self.control.get(EDIT_VALUE_ATTR)

    @property
    def display_value(self) -> Any:
        return self.control.get(DISPLAY_VALUE_ATTR)

    def _show_display_value(self) -> None:
        self.control.input_type = DISPLAY_INPUT_TYPE
        self.control.value = self.display_value

    def prepare_edit(self) -> None:
        """Switch the input type ahead of focus (virtual keyboards)."""
        self.control.input_type = self.semantic_type

    def enter_edit(self) -> None:
        self.control.input_type = self.semantic_type
        self.control.value = self.edit_value
        self.state = DisplayState.EDITING

    def exit_edit(self) -> None:
        self._show_display_value()
        self.state = DisplayState.DISPLAY

    def bind(self) -> "ValueDisplayMachine":
        """Wire the transitions to the control's touch/focus/blur events."""
        self.control.add_listener("touchstart", self._on_touchstart)
        self.control.add_listener("focus", self._on_focus)
        self.control.add_listener("blur", self._on_blur)
        self.control.controller = self
        return self

    def _on_touchstart(self, event: UiEvent) -> None:
        self.prepare_edit()

    def _on_focus(self, event: UiEvent) -> None:
        self.enter_edit()

    def _on_blur(self, event: UiEvent) -> None:
        self.exit_edit()


def qualifies_for_display(
    render_type: str,
    display_format: Optional[str],
    display_value_expression: Optional[str],
) -> bool:
    """Whether a control switches into display/edit mode."""
    return render_type in QUALIFYING_TYPES and bool(display_format or display_value_expression)


__all__ = [
    "EDIT_VALUE_ATTR",
    "DISPLAY_VALUE_ATTR",
    "QUALIFYING_TYPES",
    "DisplayState",
    "ValueDisplayMachine",
    "qualifies_for_display",
]

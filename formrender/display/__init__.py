"""Value display state machine.

Example:
    >>> from formrender.display import ValueDisplayMachine
    >>> machine = ValueDisplayMachine(control, "number", 1200, "$1,200.00").bind()
"""

from .lib import (
    DISPLAY_VALUE_ATTR,
    EDIT_VALUE_ATTR,
    QUALIFYING_TYPES,
    DisplayState,
    ValueDisplayMachine,
    qualifies_for_display,
)

__all__ = [
    "EDIT_VALUE_ATTR",
    "DISPLAY_VALUE_ATTR",
    "QUALIFYING_TYPES",
    "DisplayState",
    "ValueDisplayMachine",
    "qualifies_for_display",
]

"""Field validity checking.

Constraint attributes set by the decoration pipeline are evaluated against a
control's current value. A failure writes the per-kind message into the
field's ``.field-description`` node and marks the wrapper
``field-invalid``; success restores the original description recorded in the
wrapper's ``data-description``.
"""

import logging
import math
import re
from typing import Any, Optional

from formrender.ui import UiEvent, UiNode
from formrender.widgets import strip_tags

logger = logging.getLogger(__name__)

INVALID_CLASS = "field-invalid"
DESCRIPTION_CLASS = "field-description"
CONTROL_TAGS = ("input", "textarea", "select")

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "Please fill in this field.",
    "pattern": "Please match the requested format.",
    "minLength": "Please lengthen this text.",
    "maxLength": "Please shorten this text.",
    "minimum": "Value must be greater than or equal to the minimum.",
    "maximum": "Value must be less than or equal to the maximum.",
}


def _field_wrapper(control: UiNode) -> Optional[UiNode]:
    return control.closest(lambda n: n.has_class("field-wrapper"))


def _is_empty(control: UiNode, wrapper: Optional[UiNode]) -> bool:
    if control.input_type in ("radio", "checkbox"):
        scope = wrapper or control
        group = [
            c
            for c in scope.query_all("input")
            if c.name == control.name and c.input_type == control.input_type
        ] or [control]
        return not any(c.get("checked") for c in group)
    return control.value in (None, "")


def _to_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_length(value: Any) -> Optional[int]:
    number = _to_number(value)
    if number is None or not math.isfinite(number) or number < 0:
        return None
    return int(number)


def _compile_pattern(pattern: str) -> Optional["re.Pattern[str]"]:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.debug("Ignoring invalid pattern %r: %s", pattern, e)
        return None


def find_violation(control: UiNode, wrapper: Optional[UiNode] = None) -> Optional[str]:
    """Return the first violated constraint kind of a control, or None."""
    if control.get("required") and _is_empty(control, wrapper):
        return "required"

    value = control.value
    if value in (None, "") or control.input_type in ("radio", "checkbox"):
        return None
    text = str(value)

    pattern = control.get("pattern")
    compiled = _compile_pattern(str(pattern)) if pattern else None
    if compiled is not None and compiled.fullmatch(text) is None:
        return "pattern"

    min_length = _to_length(control.get("minlength"))
    if min_length is not None and len(text) < min_length:
        return "minLength"
    max_length = _to_length(control.get("maxlength"))
    if max_length is not None and len(text) > max_length:
        return "maxLength"

    if control.input_type == "number":
        number = _to_number(value)
        minimum = _to_number(control.get("min"))
        maximum = _to_number(control.get("max"))
        if number is not None and minimum is not None and number < minimum:
            return "minimum"
        if number is not None and maximum is not None and number > maximum:
            return "maximum"
    return None


def set_error_message(wrapper: UiNode, message: str) -> None:
    """Show ``message`` in place of the field's description."""
    help_text = wrapper.child_with_class(DESCRIPTION_CLASS)
    if help_text is None:
        help_text = UiNode("div", classes=[DESCRIPTION_CLASS], attrs={"aria-live": "polite"})
        wrapper.append(help_text)
    help_text.replace_children()
    help_text.text = message
    wrapper.add_class(INVALID_CLASS)


def restore_description(wrapper: UiNode) -> None:
    """Put back the original description (or drop the error node)."""
    wrapper.remove_class(INVALID_CLASS)
    help_text = wrapper.child_with_class(DESCRIPTION_CLASS)
    if help_text is None:
        return
    description = wrapper.dataset.get("description")
    if description:
        help_text.replace_children()
        help_text.markup = strip_tags(description)
    else:
        help_text.remove()


def check_validation(control: UiNode) -> bool:
    """Validate a control and update its wrapper's message.

    Returns:
        True when the control satisfies all its constraints.
    """
    wrapper = _field_wrapper(control)
    kind = find_violation(control, wrapper)
    if wrapper is None:
        return kind is None
    if kind is None:
        restore_description(wrapper)
        return True
    message = wrapper.dataset.get(f"{kind}ErrorMessage") or DEFAULT_MESSAGES[kind]
    logger.debug("Field '%s' failed %s constraint", wrapper.dataset.get("id"), kind)
    set_error_message(wrapper, message)
    return False


def _on_validity_event(event: UiEvent) -> None:
    if event.target.tag in CONTROL_TAGS:
        check_validation(event.target)


def enable_validation(form: UiNode) -> None:
    """Check controls on ``invalid`` and on form-level ``change`` events."""
    for control in form.query_all(*CONTROL_TAGS):
        control.add_listener("invalid", _on_validity_event)
    form.add_listener("change", _on_validity_event)


__all__ = [
    "INVALID_CLASS",
    "DEFAULT_MESSAGES",
    "find_violation",
    "set_error_message",
    "restore_description",
    "check_validation",
    "enable_validation",
]

"""Decoration pipeline.

Decorations are composable transforms applied to an already-built field
node. ``decorate_field`` runs the per-field steps in their fixed order:

1. column span (layout grid class)
2. input attributes (identity, flags, value binding, constraints)
3. description (help text, original text kept for recovery)

Panel containers additionally go through ``apply_repeatable_policy`` right
after they are built and ``decorate_panel_container`` once their children are
attached.
"""

import logging
from typing import Optional

from formrender.collaborators import (
    REMOVE_BUTTON_CLASS,
    REPEAT_ACTIONS_CLASS,
    RepeatableGroup,
)
from formrender.display import ValueDisplayMachine, qualifies_for_display
from formrender.schema import NO_BUTTONS_VARIANT, PROPERTY_NAMESPACE, FieldNode, FieldTag
from formrender.ui import UiNode
from formrender.widgets import (
    create_help_text,
    create_legend,
    get_html_render_type,
    set_constraints,
    strip_tags,
)

logger = logging.getLogger(__name__)

CONTROL_TAGS = ("input", "textarea", "select")

EMAIL_PATTERN = r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}"

# Fields without a single bindable control
SKIP_INPUT_DECORATION = frozenset(
    {
        FieldTag.RADIO_GROUP.value,
        FieldTag.CHECKBOX_GROUP.value,
        FieldTag.CAPTCHA.value,
    }
)

# Set on a repeatable container once its add/remove controls were requested
CONTROLS_REQUESTED_KEY = "controlsRequested"


def decorate_col_span(fd: FieldNode, node: UiNode) -> None:
    """Tag the node with its column span (``col-<n>``) when declared."""
    span = fd.column_span or fd.properties.get("colspan")
    if span:
        node.add_class(f"col-{span}")


def decorate_applied_classes(fd: FieldNode, node: UiNode) -> None:
    if fd.applied_css_class_names:
        node.add_class(fd.applied_css_class_names)


def _bind_value(fd: FieldNode, control: UiNode) -> None:
    value = "" if fd.value is None else fd.value
    if control.input_type in ("radio", "checkbox"):
        options = fd.enum_values or []
        control.value = options[0] if options else "on"
        control.set("checked", fd.value == control.value)
    elif control.tag == "textarea":
        control.text = str(value)
    elif control.tag == "input":
        control.value = value


def decorate_input(fd: FieldNode, node: UiNode) -> Optional[UiNode]:
    """Copy the field's state and constraints onto its bindable control.

    Args:
        fd: Field definition.
        node: Built field node.

    Returns:
        The decorated control, or None when the node has none.
    """
    control = node.query(*CONTROL_TAGS)
    if control is None:
        logger.debug("Field '%s' has no bindable control", fd.id)
        return None

    control.id = fd.id
    control.name = fd.name
    if fd.tooltip:
        control.set("title", strip_tags(fd.tooltip, ""))
    control.set("readonly", bool(fd.read_only))
    control.set("autocomplete", "off" if fd.auto_complete is None else fd.auto_complete)
    control.set(
        "disabled",
        fd.enabled is False or (fd.tag == FieldTag.DROP_DOWN.value and bool(fd.read_only)),
    )

    render_type = get_html_render_type(fd)
    if qualifies_for_display(render_type, fd.display_format, fd.display_value_expression):
        ValueDisplayMachine(control, render_type, fd.value, fd.display_value).bind()
    elif control.input_type != "file":
        _bind_value(fd, control)
    else:
        control.set("multiple", fd.data_type == "file[]")

    if fd.required:
        control.set("required", True)
    if fd.description:
        control.set("aria-describedby", f"{fd.id}-description")
    if fd.min_items:
        control.dataset["minItems"] = fd.min_items
    if fd.max_items:
        control.dataset["maxItems"] = fd.max_items
    if fd.max_file_size:
        control.dataset["maxFileSize"] = fd.max_file_size
    if fd.has("default_value"):
        control.set("value", fd.default_value)
    if control.input_type == "email":
        control.set("pattern", EMAIL_PATTERN)

    for kind, message in fd.constraint_messages.items():
        node.dataset[f"{kind}ErrorMessage"] = message
    node.dataset["required"] = fd.required
    return control


def decorate_description(fd: FieldNode, node: UiNode) -> None:
    """Append help text and remember the original description."""
    if not fd.description:
        return
    node.append(create_help_text(fd))
    node.dataset["description"] = fd.description


def decorate_field(fd: FieldNode, node: UiNode) -> UiNode:
    """Run the per-field decorations in order."""
    decorate_col_span(fd, node)
    if fd.tag not in SKIP_INPUT_DECORATION:
        decorate_input(fd, node)
    decorate_description(fd, node)
    return node


def is_first_instance(index: Optional[int]) -> bool:
    return not index


def apply_repeatable_policy(wrapper: UiNode, fd: FieldNode, repeat: RepeatableGroup) -> None:
    """Mark a repeatable panel instance and request its controls.

    Only the first instance (index 0 or unset) of a panel whose variant does
    not suppress buttons asks for add/remove controls.
    """
    set_constraints(wrapper, fd)
    wrapper.dataset["repeatable"] = True
    wrapper.dataset["index"] = fd.index or 0
    for key, value in fd.properties.items():
        if not key.startswith(PROPERTY_NAMESPACE):
            wrapper.dataset[key] = value
    if is_first_instance(fd.index) and fd.variant != NO_BUTTONS_VARIANT:
        repeat.request_add_control(wrapper)
        repeat.request_remove_control(wrapper)
        wrapper.dataset[CONTROLS_REQUESTED_KEY] = True


def _needs_controls(container: UiNode) -> bool:
    return (
        container.dataset.get("repeatable") is True
        and container.dataset.get("variant") != NO_BUTTONS_VARIANT
        and is_first_instance(container.dataset.get("index"))
        and not container.dataset.get(CONTROLS_REQUESTED_KEY)
    )


def decorate_panel_container(
    panel_def: FieldNode, container: Optional[UiNode], repeat: RepeatableGroup
) -> None:
    """Finish a rendered panel: caption first, then any missing controls."""
    if container is None or not container.has_class("panel-wrapper"):
        return

    has_legend = container.find(
        lambda n: n.tag == "legend" and n.get("for") == container.dataset.get("id")
    )
    if panel_def.label_text and has_legend is None:
        legend = create_legend(panel_def)
        if legend is not None:
            container.prepend(legend)

    if _needs_controls(container):
        if container.child_with_class(REPEAT_ACTIONS_CLASS) is None:
            repeat.request_add_control(container)
        if container.child_with_class(REMOVE_BUTTON_CLASS) is None:
            repeat.request_remove_control(container)
        container.dataset[CONTROLS_REQUESTED_KEY] = True


__all__ = [
    "CONTROLS_REQUESTED_KEY",
    "EMAIL_PATTERN",
    "SKIP_INPUT_DECORATION",
    "decorate_col_span",
    "decorate_applied_classes",
    "decorate_input",
    "decorate_description",
    "decorate_field",
    "is_first_instance",
    "apply_repeatable_policy",
    "decorate_panel_container",
]

"""Element helpers shared by field builders.

Every field is rendered inside a wrapper carrying the classes
``<renderType>-wrapper``, ``field-<name>`` and ``field-wrapper`` plus a
``data-id`` pointing back at the field definition. The helpers here build
those wrappers and the common pieces that go inside them.
"""

import re
from typing import Any, Callable, Optional

from formrender.schema import FieldNode, Label, field_tag
from formrender.ui import UiNode, element

LabelFactory = Callable[[FieldNode], Optional[UiNode]]

_TAG_PATTERN = re.compile(r"<\/?([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")
_CLASS_NAME_PATTERN = re.compile(r"[^0-9a-z]+")

DEFAULT_ALLOWED_TAGS = "<a><i><b><u><em><strong><p><br><span><ul><ol><li>"

# Render type → (field attribute, html attribute)
CONSTRAINT_ATTRIBUTES: dict[str, list[tuple[str, str]]] = {
    "text": [("max_length", "maxlength"), ("min_length", "minlength"), ("pattern", "pattern")],
    "password": [("max_length", "maxlength"), ("min_length", "minlength"), ("pattern", "pattern")],
    "email": [("max_length", "maxlength"), ("min_length", "minlength"), ("pattern", "pattern")],
    "multiline": [("max_length", "maxlength"), ("min_length", "minlength")],
    "number": [("maximum", "max"), ("minimum", "min"), ("step", "step")],
    "date": [("maximum", "max"), ("minimum", "min")],
    "file": [("accept", "accept")],
}


def to_class_name(name: Any) -> str:
    """Sanitize a value into a CSS class name."""
    if not isinstance(name, str):
        return ""
    return _CLASS_NAME_PATTERN.sub("-", name.lower()).strip("-")


def strip_tags(text: Any, allowed: str = DEFAULT_ALLOWED_TAGS) -> str:
    """Remove markup tags from ``text`` except those listed in ``allowed``.

    Args:
        text: Text possibly containing markup.
        allowed: Allowed tags written as ``"<b><i>"``; empty strips everything.

    Returns:
        Sanitized text.
    """
    if text is None:
        return ""
    allowed_tags = set(re.findall(r"<([a-z][a-z0-9]*)>", allowed.lower()))

    def keep_allowed(match: re.Match) -> str:
        return match.group(0) if match.group(1).lower() in allowed_tags else ""

    return _TAG_PATTERN.sub(keep_allowed, str(text))


def get_html_render_type(fd: FieldNode) -> str:
    """Concrete render type of a field: its tag without ``-input``."""
    return field_tag(fd.field_type)


def create_label(fd: FieldNode, tag: str = "label") -> Optional[UiNode]:
    """Build the caption element of a field, or None when it has no label."""
    if not fd.label or not fd.label.value:
        return None
    label = UiNode(tag, classes=["field-label"], attrs={"for": fd.id})
    if fd.label.rich_text:
        label.markup = strip_tags(fd.label.value)
    else:
        label.text = fd.label.value
    if fd.label.visible is False:
        label.dataset["visible"] = False
    if fd.tooltip:
        label.set("title", strip_tags(fd.tooltip, ""))
    return label


def create_legend(fd: FieldNode) -> Optional[UiNode]:
    return create_label(fd, "legend")


def create_field_wrapper(
    fd: FieldNode, tag: str = "div", label_fn: Optional[LabelFactory] = create_label
) -> UiNode:
    """Build the wrapper element every field is rendered into."""
    wrapper = UiNode(tag)
    wrapper.add_class(f"{get_html_render_type(fd)}-wrapper")
    if fd.name:
        wrapper.add_class(f"field-{to_class_name(fd.name)}")
    wrapper.add_class("field-wrapper")
    wrapper.dataset["id"] = fd.id
    if fd.visible is False:
        wrapper.dataset["visible"] = False
    if label_fn is not None:
        wrapper.append(label_fn(fd))
    return wrapper


def create_help_text(fd: FieldNode) -> UiNode:
    """Build the description element referenced by ``aria-describedby``."""
    help_text = UiNode(
        "div",
        classes=["field-description"],
        attrs={"aria-live": "polite", "id": f"{fd.id}-description"},
    )
    help_text.markup = strip_tags(fd.description)
    return help_text


def set_placeholder(control: UiNode, fd: FieldNode) -> None:
    if fd.placeholder:
        control.set("placeholder", fd.placeholder)


def set_constraints(control: UiNode, fd: FieldNode) -> None:
    """Copy type-specific constraint attributes (maxlength, min, accept...)."""
    for field_name, attribute in CONSTRAINT_ATTRIBUTES.get(get_html_render_type(fd), []):
        value = getattr(fd, field_name)
        if value is not None:
            control.set(attribute, value)
    extra = fd.model_extra or {}
    if extra.get("maxOccur") is not None:
        control.dataset["max"] = extra["maxOccur"]
    if extra.get("minOccur") is not None:
        control.dataset["min"] = extra["minOccur"]


def create_input(fd: FieldNode) -> UiNode:
    """Build a plain ``input`` of the field's render type."""
    control = element("input", type=get_html_render_type(fd))
    set_placeholder(control, fd)
    set_constraints(control, fd)
    return control


def create_radio_or_checkbox(fd: FieldNode) -> UiNode:
    """Build a single radio/checkbox field; the control comes before the label."""
    wrapper = create_field_wrapper(fd)
    control = create_input(fd)
    options = fd.enum_values or []
    if options:
        control.value = options[0]
    if len(options) > 1:
        control.dataset["uncheckedValue"] = options[1]
    wrapper.prepend(control)
    return wrapper


def _option_label(names: Optional[list[Any]], index: int, value: Any) -> str:
    name = names[index] if names and index < len(names) else None
    if isinstance(name, dict):
        name = name.get("value")
    if name is None:
        name = value
    return str(name).strip()


def _is_selected(fd: FieldNode, value: Any) -> bool:
    if isinstance(fd.value, list):
        return value in fd.value
    return fd.value == value


def create_dropdown_options(fd: FieldNode, select: UiNode) -> None:
    """Fill a ``select`` with a placeholder and one option per enum entry."""
    if fd.placeholder:
        select.append(
            element("option", fd.placeholder, value="", disabled=True, selected=True)
        )
    for index, value in enumerate(fd.enum_values or []):
        text = _option_label(fd.enum_names, index, value)
        option_value = value.strip() if isinstance(value, str) else value
        if option_value in (None, ""):
            option_value = text
        option = element("option", text, value=option_value)
        if _is_selected(fd, option_value):
            option.set("selected", True)
        select.append(option)


def create_radio_or_checkbox_options(fd: FieldNode, wrapper: UiNode) -> None:
    """Append one radio/checkbox sub-field per enum entry of a group field."""
    choice_type = (fd.field_type or "radio-group").split("-")[0]
    layout = fd.properties.get("afs:layout") or {}
    if fd.properties.get("variant") == "cards":
        wrapper.add_class("cards")
    if isinstance(layout, dict) and layout.get("orientation") == "horizontal":
        wrapper.add_class("horizontal")

    for index, value in enumerate(fd.enum_values or []):
        choice_id = f"{fd.id}-{index}"
        choice = create_radio_or_checkbox(
            FieldNode(
                id=choice_id,
                name=fd.name,
                field_type=choice_type,
                label=Label(value=_option_label(fd.enum_names, index, value)),
                enum_values=[value],
            )
        )
        choice.remove_class("field-wrapper", f"field-{to_class_name(fd.name)}")
        control = choice.query("input")
        control.id = choice_id
        control.name = fd.name
        control.dataset["fieldType"] = fd.field_type
        control.set("checked", _is_selected(fd, value))
        if choice_type == "checkbox" or index == 0:
            control.set("required", bool(fd.required))
        if fd.enabled is False or fd.read_only:
            control.set("disabled", True)
        wrapper.append(choice)


def create_picture(src: str, alt: str) -> UiNode:
    """Build a ``picture`` element for an image field."""
    return UiNode(
        "picture",
        children=[element("img", src=src, alt=alt, loading="lazy")],
    )


__all__ = [
    "CONSTRAINT_ATTRIBUTES",
    "to_class_name",
    "strip_tags",
    "get_html_render_type",
    "create_label",
    "create_legend",
    "create_field_wrapper",
    "create_help_text",
    "set_placeholder",
    "set_constraints",
    "create_input",
    "create_radio_or_checkbox",
    "create_dropdown_options",
    "create_radio_or_checkbox_options",
    "create_picture",
]

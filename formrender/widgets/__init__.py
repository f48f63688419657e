"""Element helpers shared by field builders."""

from .lib import (
    CONSTRAINT_ATTRIBUTES,
    create_dropdown_options,
    create_field_wrapper,
    create_help_text,
    create_input,
    create_label,
    create_legend,
    create_picture,
    create_radio_or_checkbox,
    create_radio_or_checkbox_options,
    get_html_render_type,
    set_constraints,
    set_placeholder,
    strip_tags,
    to_class_name,
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

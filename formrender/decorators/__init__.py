"""Decoration pipeline applied to built field nodes."""

from .lib import (
    CONTROLS_REQUESTED_KEY,
    EMAIL_PATTERN,
    SKIP_INPUT_DECORATION,
    apply_repeatable_policy,
    decorate_applied_classes,
    decorate_col_span,
    decorate_description,
    decorate_field,
    decorate_input,
    decorate_panel_container,
    is_first_instance,
)

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

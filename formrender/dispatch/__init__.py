"""Field dispatch table: field tag to builder."""

from .lib import (
    DEFAULT_BUILDER,
    FieldBuilder,
    InputBuilder,
    build_field,
    create_fieldset,
    get_builder,
    list_builders,
    register_builder,
    unregister_builder,
)

__all__ = [
    "FieldBuilder",
    "InputBuilder",
    "DEFAULT_BUILDER",
    "register_builder",
    "unregister_builder",
    "get_builder",
    "build_field",
    "list_builders",
    "create_fieldset",
]

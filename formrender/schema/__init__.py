"""Schema layer - canonical form definition model.

Example usage:
    >>> from formrender.schema import FieldNode, ordered_children
    >>> form = FieldNode.model_validate({"id": "form", "fieldType": "form"})
    >>> ordered_children(form)
    []
"""

from .lib import (
    CAPTCHA_KEY,
    DOR_KEY,
    NO_BUTTONS_VARIANT,
    PATH_KEY,
    PROPERTY_NAMESPACE,
    REPO_PATH_KEY,
    ChildExtractor,
    FieldNode,
    FieldTag,
    Label,
    children_order_problems,
    field_tag,
    ordered_children,
    parse_definition,
)

__all__ = [
    # Property keys
    "PROPERTY_NAMESPACE",
    "DOR_KEY",
    "PATH_KEY",
    "CAPTCHA_KEY",
    "REPO_PATH_KEY",
    "NO_BUTTONS_VARIANT",
    # Tags
    "FieldTag",
    "field_tag",
    # Core model
    "Label",
    "FieldNode",
    "ChildExtractor",
    "children_order_problems",
    "ordered_children",
    "parse_definition",
]

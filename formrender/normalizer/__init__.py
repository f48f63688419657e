"""Normalizer for alternate-shape (document-based) form definitions."""

from .lib import (
    FIELD_TYPE_TEMPLATE_KINDS,
    TEMPLATE_FILES,
    NormalizationError,
    is_alternate_shape,
    normalize,
    page_template,
    template_for_field_type,
    template_for_kind,
)

__all__ = [
    "FIELD_TYPE_TEMPLATE_KINDS",
    "TEMPLATE_FILES",
    "NormalizationError",
    "normalize",
    "is_alternate_shape",
    "page_template",
    "template_for_kind",
    "template_for_field_type",
]

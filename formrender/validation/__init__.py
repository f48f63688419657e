"""Structural validation of canonical form definitions."""

from .lib import ValidationError, is_valid, validate_definition

__all__ = ["ValidationError", "validate_definition", "is_valid"]

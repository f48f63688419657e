"""Field validity checking and error-message display."""

from .lib import (
    DEFAULT_MESSAGES,
    INVALID_CLASS,
    check_validation,
    enable_validation,
    find_violation,
    restore_description,
    set_error_message,
)

__all__ = [
    "INVALID_CLASS",
    "DEFAULT_MESSAGES",
    "find_violation",
    "set_error_message",
    "restore_description",
    "check_validation",
    "enable_validation",
]

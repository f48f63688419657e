"""Core utilities shared across formrender."""

from .log import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]

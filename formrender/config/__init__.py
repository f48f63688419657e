"""Centralized configuration management for formrender.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from formrender.config import EnvVar, get_environment
    >>>
    >>> delay = get_environment(EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS)  # 0
    >>> authoring = get_environment(EnvVar.FORMRENDER_AUTHORING_MODE)  # False
    >>>
    >>> for var in list_environment_variables("render"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    logging: Log output configuration
    render: Rule engine delay/module and authoring mode
    source: Definition fetch timeout and content path
"""

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Introspection
    "list_environment_variables",
]

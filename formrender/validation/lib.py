"""Form definition validation and static analysis.

This module provides validation functions for canonical form definitions,
detecting structural issues before rendering. It works on plain mappings so
it can check normalizer output before it is turned into FieldNode objects.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from formrender.schema import children_order_problems


@dataclass
class ValidationError:
    """Represents a validation error in a form definition.

    Attributes:
        node_id: ID of the node with the error.
        message: Human-readable error description.
        error_type: Category of the error.
    """

    node_id: str
    message: str
    error_type: str


def validate_definition(definition: Mapping[str, Any]) -> list[ValidationError]:
    """Validate a canonical definition tree for structural issues.

    Performs the following checks:
        - ``childrenOrder`` is a permutation of ``children`` keys
        - Unique ID enforcement (no duplicate field IDs)
        - Child entries are mappings

    Args:
        definition: Root mapping of the canonical definition.

    Returns:
        list[ValidationError]: List of validation errors (empty if valid).

    Example:
        >>> errors = validate_definition(form_json)
        >>> for e in errors:
        ...     print(f"{e.node_id}: {e.message}")
    """
    errors: list[ValidationError] = []
    id_counts: dict[str, int] = {}

    def visit(node: Mapping[str, Any]) -> None:
        node_id = str(node.get("id", ""))
        if node_id:
            id_counts[node_id] = id_counts.get(node_id, 0) + 1

        children = node.get("children") or {}
        order = node.get("childrenOrder") or []
        if not isinstance(children, Mapping):
            errors.append(
                ValidationError(
                    node_id=node_id,
                    message="children must be a mapping of key to field",
                    error_type="invalid_children",
                )
            )
            return

        for problem in children_order_problems(list(children), list(order)):
            errors.append(
                ValidationError(
                    node_id=node_id,
                    message=problem,
                    error_type="children_order",
                )
            )

        for key in order:
            child = children.get(key)
            if isinstance(child, Mapping):
                visit(child)
            elif key in children:
                errors.append(
                    ValidationError(
                        node_id=node_id,
                        message=f"child '{key}' is not a mapping",
                        error_type="invalid_children",
                    )
                )

    visit(definition)

    for node_id, count in id_counts.items():
        if count > 1:
            errors.append(
                ValidationError(
                    node_id=node_id,
                    message=f"Duplicate ID '{node_id}' appears {count} times",
                    error_type="duplicate_id",
                )
            )

    return errors


def is_valid(definition: Mapping[str, Any]) -> bool:
    """Check if a definition tree is valid.

    Args:
        definition: Root mapping of the canonical definition.

    Returns:
        True if no validation errors exist.
    """
    return not validate_definition(definition)


__all__ = ["ValidationError", "validate_definition", "is_valid"]

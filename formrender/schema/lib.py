"""Canonical form definition model.

The schema layer is the **Source of Truth** for the shape of a form definition
consumed by the rendering engine. A definition is an ordered tree of
``FieldNode`` objects: leaves carry a value, containers carry a ``children``
mapping plus a ``childrenOrder`` sequence that is authoritative for rendering
order.

Definitions arrive as camelCase JSON, so every field is exposed under its
camelCase alias while Python code uses snake_case attribute names. Unknown
keys are preserved (``extra="allow"``) because builders and external
collaborators read loosely-specified attributes.
"""

from enum import Enum
from typing import Any, Callable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Namespaced property keys
PROPERTY_NAMESPACE = "fd:"
DOR_KEY = "fd:dor"
PATH_KEY = "fd:path"
CAPTCHA_KEY = "fd:captcha"
REPO_PATH_KEY = "fd:repoPath"

# Panel variant that suppresses add/remove controls on repeatable instances
NO_BUTTONS_VARIANT = "noButtons"

INPUT_SUFFIX = "-input"


class FieldTag(str, Enum):
    """Field-type tags with dedicated handling.

    Tags are matched after the ``-input`` suffix is stripped, so both
    ``"date"`` and ``"date-input"`` resolve to ``DATE``.
    """

    # Generic inputs
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    FILE = "file"

    # Dedicated builders
    DROP_DOWN = "drop-down"
    PLAIN_TEXT = "plain-text"
    CHECKBOX = "checkbox"
    BUTTON = "button"
    MULTILINE = "multiline"
    PANEL = "panel"
    RADIO = "radio"
    RADIO_GROUP = "radio-group"
    CHECKBOX_GROUP = "checkbox-group"
    IMAGE = "image"
    HEADING = "heading"

    # Placeholder handled by the renderer itself
    CAPTCHA = "captcha"


def field_tag(field_type: Optional[str]) -> str:
    """Resolve the dispatch key of a raw field-type tag.

    Args:
        field_type: Raw ``fieldType`` value, possibly suffixed with ``-input``.

    Returns:
        The tag with ``-input`` removed, or ``"text"`` when absent.
    """
    if field_type is None:
        return FieldTag.TEXT.value
    return field_type.replace(INPUT_SUFFIX, "")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Label(_CamelModel):
    """Field caption.

    Attributes:
        value: Caption text (may contain markup when rich_text is set).
        rich_text: Whether value is markup to be sanitized.
        visible: False hides the caption visually but keeps it accessible.
    """

    value: Optional[str] = None
    rich_text: bool = False
    visible: Optional[bool] = None


class FieldNode(_CamelModel):
    """Recursive node of a canonical form definition.

    Attributes:
        id: Unique identifier of the field within the form.
        name: Submission name of the field.
        field_type: Field-type tag (``fieldType``), e.g. ``"text-input"``.
        value: Current value; coerced to an empty string before rendering.
        label: Caption of the field.
        properties: Namespaced metadata (``fd:dor``, ``fd:path``, ...).
        constraint_messages: Constraint kind to error message.
        children: Child key to child node (no order guarantee).
        children_order: Rendering order of the keys in ``children``.
    """

    # Identity
    id: str = Field(..., description="Unique identifier for the field")
    name: Optional[str] = None
    field_type: Optional[str] = Field(None, description="Field-type tag")
    data_type: Optional[str] = Field(None, alias="type")

    # Content
    value: Any = None
    default_value: Any = Field(None, alias="default")
    label: Optional[Label] = None
    description: Optional[str] = None
    tooltip: Optional[str] = None
    placeholder: Optional[str] = None
    rich_text: bool = False
    alt_text: Optional[str] = None
    button_type: Optional[str] = None

    # Options for selection fields
    enum_values: Optional[list[Any]] = Field(None, alias="enum")
    enum_names: Optional[list[Any]] = None

    # State
    required: Optional[bool] = None
    enabled: Optional[bool] = None
    read_only: Optional[bool] = None
    visible: Optional[bool] = None
    auto_complete: Optional[str] = None

    # Display formatting
    display_format: Optional[str] = None
    display_value_expression: Optional[str] = None
    display_value: Optional[str] = None

    # Constraints
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    max_file_size: Any = None
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    minimum: Any = None
    maximum: Any = None
    step: Any = None
    pattern: Optional[str] = None
    accept: Optional[list[str]] = None
    constraint_messages: dict[str, str] = Field(default_factory=dict)

    # Layout
    column_span: Any = Field(None, alias="Column Span")
    applied_css_class_names: Optional[str] = None

    # Repeatable panels
    repeatable: Optional[bool] = None
    index: Optional[int] = None

    # Metadata
    properties: dict[str, Any] = Field(default_factory=dict)
    data_ref: Optional[str] = None

    # Structure
    children: dict[str, "FieldNode"] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("children", ":items"),
    )
    children_order: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("childrenOrder", ":itemsOrder"),
    )

    @field_validator("label", mode="before")
    @classmethod
    def _coerce_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"value": value}
        return value

    @field_validator("accept", mode="before")
    @classmethod
    def _coerce_accept(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode="after")
    def _check_children_order(self) -> "FieldNode":
        problems = children_order_problems(list(self.children), self.children_order)
        if problems:
            raise ValueError(f"Field '{self.id}': " + "; ".join(problems))
        return self

    @property
    def tag(self) -> str:
        """Dispatch key of this field."""
        return field_tag(self.field_type)

    @property
    def is_panel(self) -> bool:
        return self.field_type == FieldTag.PANEL.value

    @property
    def variant(self) -> Optional[str]:
        return self.properties.get("variant")

    @property
    def label_text(self) -> Optional[str]:
        return self.label.value if self.label else None

    def has(self, field_name: str) -> bool:
        """Whether the attribute was explicitly present in the definition."""
        return field_name in self.model_fields_set


def children_order_problems(keys: list[str], order: list[str]) -> list[str]:
    """Describe violations of the children/childrenOrder permutation rule.

    Args:
        keys: Keys of the ``children`` mapping.
        order: The ``childrenOrder`` sequence.

    Returns:
        Human-readable problems; empty when ``order`` is a permutation of ``keys``.
    """
    problems: list[str] = []
    key_set = set(keys)
    seen: set[str] = set()
    for key in order:
        if key in seen:
            problems.append(f"key '{key}' appears more than once in childrenOrder")
        seen.add(key)
        if key not in key_set:
            problems.append(f"childrenOrder key '{key}' missing from children")
    for key in keys:
        if key not in seen:
            problems.append(f"child '{key}' missing from childrenOrder")
    return problems


ChildExtractor = Callable[[FieldNode], list[FieldNode]]


def ordered_children(node: FieldNode) -> list[FieldNode]:
    """Default child extractor: children in ``childrenOrder`` order."""
    return [node.children[key] for key in node.children_order]


def parse_definition(data: dict[str, Any]) -> FieldNode:
    """Validate a canonical definition mapping into a FieldNode tree.

    Raises:
        pydantic.ValidationError: If the mapping is not a valid definition.
    """
    return FieldNode.model_validate(data)


__all__ = [
    "PROPERTY_NAMESPACE",
    "DOR_KEY",
    "PATH_KEY",
    "CAPTCHA_KEY",
    "REPO_PATH_KEY",
    "NO_BUTTONS_VARIANT",
    "FieldTag",
    "field_tag",
    "Label",
    "FieldNode",
    "ChildExtractor",
    "children_order_problems",
    "ordered_children",
    "parse_definition",
]

"""Field builder abstraction and dispatch table.

This module defines the abstract base class for field builders and a
registry mapping field tags to builder instances. Tags without a dedicated
builder resolve to the generic input builder.
"""

import logging
from abc import ABC, abstractmethod

from formrender.schema import REPO_PATH_KEY, FieldNode, FieldTag, field_tag
from formrender.ui import UiNode, element
from formrender.widgets import (
    create_dropdown_options,
    create_field_wrapper,
    create_input,
    create_legend,
    create_picture,
    create_radio_or_checkbox,
    create_radio_or_checkbox_options,
    set_constraints,
    set_placeholder,
    strip_tags,
)

logger = logging.getLogger(__name__)


class FieldBuilder(ABC):
    """Abstract base class for field builders.

    A builder turns one field definition into a single root UI node that
    already contains whatever structure the field type needs. Containers
    (panels) return an empty shell; their children are rendered by the
    engine, never by the builder.

    Subclasses must implement:
        - tags: Field tags handled by the builder
        - build: Field definition to UI node

    Example:
        >>> @register_builder
        ... class RatingBuilder(FieldBuilder):
        ...     tags = frozenset({"rating"})
        ...     def build(self, fd: FieldNode) -> UiNode:
        ...         return create_field_wrapper(fd)
    """

    @property
    @abstractmethod
    def tags(self) -> frozenset[str]:
        """Field tags (``-input`` suffix stripped) this builder handles."""
        ...

    @abstractmethod
    def build(self, fd: FieldNode) -> UiNode:
        """Build the UI node of a field.

        Args:
            fd: Field definition.

        Returns:
            UiNode: Root node representing the field.
        """
        ...


# Builder registry - populated by @register_builder below
_registry: dict[str, FieldBuilder] = {}


def register_builder(builder_cls: type[FieldBuilder]) -> type[FieldBuilder]:
    """Register a builder class for each of its tags.

    Later registrations replace earlier ones for the same tag.

    Args:
        builder_cls: The builder class to register.

    Returns:
        The builder class (for decorator chaining).
    """
    builder = builder_cls()
    for tag in builder.tags:
        _registry[tag] = builder
    return builder_cls


def unregister_builder(tag: str) -> None:
    """Remove the builder registered for ``tag`` (no-op when absent)."""
    _registry.pop(tag, None)


def list_builders() -> list[str]:
    """List all tags with a dedicated builder."""
    return list(_registry.keys())


def get_builder(field_type: str | None) -> FieldBuilder:
    """Resolve the builder for a raw field-type tag.

    Args:
        field_type: Raw ``fieldType`` value; ``-input`` is stripped and a
            missing tag means ``text``.

    Returns:
        FieldBuilder: The dedicated builder, or the generic input builder.
    """
    tag = field_tag(field_type)
    builder = _registry.get(tag)
    if builder is None:
        logger.debug("No dedicated builder for tag %r, using generic input", tag)
        return DEFAULT_BUILDER
    return builder


def build_field(fd: FieldNode) -> UiNode:
    """Dispatch a field definition to its builder."""
    return get_builder(fd.field_type).build(fd)


# =============================================================================
# Built-in builders
# =============================================================================


class InputBuilder(FieldBuilder):
    """Generic fallback: a wrapper around a plain ``input``."""

    tags = frozenset()

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_field_wrapper(fd)
        wrapper.append(create_input(fd))
        return wrapper


DEFAULT_BUILDER: FieldBuilder = InputBuilder()


@register_builder
class SelectBuilder(FieldBuilder):
    tags = frozenset({FieldTag.DROP_DOWN.value})

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_field_wrapper(fd)
        select = UiNode("select")
        if (fd.data_type or "").endswith("[]"):
            select.set("multiple", True)
        create_dropdown_options(fd, select)
        wrapper.append(select)
        return wrapper


@register_builder
class PlainTextBuilder(FieldBuilder):
    tags = frozenset({FieldTag.PLAIN_TEXT.value})

    def build(self, fd: FieldNode) -> UiNode:
        paragraph = UiNode("p")
        if fd.rich_text:
            paragraph.markup = strip_tags(fd.value)
        else:
            paragraph.text = "" if fd.value is None else str(fd.value)
        wrapper = create_field_wrapper(fd)
        wrapper.id = fd.id
        wrapper.replace_children(paragraph)
        return wrapper


@register_builder
class RadioOrCheckboxBuilder(FieldBuilder):
    tags = frozenset({FieldTag.CHECKBOX.value, FieldTag.RADIO.value})

    def build(self, fd: FieldNode) -> UiNode:
        return create_radio_or_checkbox(fd)


@register_builder
class ButtonBuilder(FieldBuilder):
    tags = frozenset({FieldTag.BUTTON.value})

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_field_wrapper(fd)
        if fd.button_type:
            wrapper.add_class(f"{fd.button_type}-wrapper")
        label_hidden = fd.label is not None and fd.label.visible is False
        button = element(
            "button",
            "" if label_hidden else (fd.label_text or ""),
            type=fd.button_type or "button",
            id=fd.id,
            name=fd.name,
        )
        button.add_class("button")
        if label_hidden:
            button.set("aria-label", fd.label_text or "")
        if fd.enabled is False:
            button.set("disabled", True)
        wrapper.replace_children(button)
        return wrapper


@register_builder
class TextAreaBuilder(FieldBuilder):
    tags = frozenset({FieldTag.MULTILINE.value})

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_field_wrapper(fd)
        textarea = UiNode("textarea")
        set_placeholder(textarea, fd)
        set_constraints(textarea, fd)
        wrapper.append(textarea)
        return wrapper


def create_fieldset(fd: FieldNode) -> UiNode:
    """Build the ``fieldset`` shell used by panels and option groups."""
    wrapper = create_field_wrapper(fd, "fieldset", create_legend)
    wrapper.id = fd.id
    wrapper.name = fd.name
    if fd.is_panel:
        wrapper.add_class("panel-wrapper")
    return wrapper


@register_builder
class PanelBuilder(FieldBuilder):
    """Empty panel container; the engine renders its children into it."""

    tags = frozenset({FieldTag.PANEL.value})

    def build(self, fd: FieldNode) -> UiNode:
        return create_fieldset(fd)


@register_builder
class ChoiceGroupBuilder(FieldBuilder):
    tags = frozenset({FieldTag.RADIO_GROUP.value, FieldTag.CHECKBOX_GROUP.value})

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_fieldset(fd)
        create_radio_or_checkbox_options(fd, wrapper)
        wrapper.dataset["required"] = bool(fd.required)
        if fd.tooltip:
            wrapper.set("title", strip_tags(fd.tooltip, ""))
        for kind, message in fd.constraint_messages.items():
            wrapper.dataset[f"{kind}ErrorMessage"] = message
        return wrapper


@register_builder
class ImageBuilder(FieldBuilder):
    tags = frozenset({FieldTag.IMAGE.value})

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_field_wrapper(fd)
        wrapper.id = fd.id
        src = fd.value or fd.properties.get(REPO_PATH_KEY) or ""
        wrapper.append(create_picture(str(src), fd.alt_text or fd.name or ""))
        return wrapper


@register_builder
class HeadingBuilder(FieldBuilder):
    tags = frozenset({FieldTag.HEADING.value})

    def build(self, fd: FieldNode) -> UiNode:
        wrapper = create_field_wrapper(fd)
        heading = element("h2", str(fd.value or fd.label_text or ""), id=fd.id)
        wrapper.append(heading)
        return wrapper


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

"""Platform-agnostic UI element tree used as the render target."""

from .lib import VOID_TAGS, Listener, UiEvent, UiNode, dataset_attribute, element

__all__ = [
    "VOID_TAGS",
    "UiEvent",
    "Listener",
    "UiNode",
    "element",
    "dataset_attribute",
]

"""Alternate-shape definition normalizer.

Converts document-based form definitions, whose containers carry their
children as an ordered ``items`` array, into the canonical shape where
children live in a ``children`` mapping keyed by field id plus a
``childrenOrder`` sequence. While reshaping, each item is annotated with a
per-field-type metadata container under ``properties["fd:dor"]`` and the root
receives the page template block.

The normalizer is a pure function over plain mappings: the input is never
mutated and every copied value is a deep copy.
"""

import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

from formrender.schema import DOR_KEY, field_tag

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).parent / "assets"

ITEMS_KEY = "items"
CHILDREN_KEY = "children"
CHILDREN_ORDER_KEY = "childrenOrder"

# Field tag → metadata template kind
FIELD_TYPE_TEMPLATE_KINDS: dict[str, str] = {
    "date": "datetimefield",
}

# Template kind → asset file
TEMPLATE_FILES: dict[str, str] = {
    "datetimefield": "datefield.json",
}

PAGE_TEMPLATE_FILE = "page_template.json"


class NormalizationError(ValueError):
    """Raised when an ``items`` entry cannot be keyed into ``children``."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"items[{position}]: {message}")


@lru_cache(maxsize=None)
def _load_asset(filename: str) -> Any:
    with open(ASSETS_DIR / filename, encoding="utf-8") as f:
        return json.load(f)


def template_for_kind(kind: Optional[str]) -> Optional[dict[str, Any]]:
    """Return a fresh copy of the metadata template for a template kind.

    Args:
        kind: Template kind (e.g. ``"datetimefield"``) or None.

    Returns:
        A deep copy of the template, or None for unknown kinds.
    """
    filename = TEMPLATE_FILES.get(kind) if kind else None
    if filename is None:
        return None
    return copy.deepcopy(_load_asset(filename))


def template_for_field_type(field_type: Optional[str]) -> Optional[dict[str, Any]]:
    """Return the metadata template for a field-type tag, if one is mapped."""
    if field_type is None:
        return None
    return template_for_kind(FIELD_TYPE_TEMPLATE_KINDS.get(field_tag(field_type)))


def page_template() -> dict[str, Any]:
    """Return a fresh copy of the default page template block."""
    return copy.deepcopy(_load_asset(PAGE_TEMPLATE_FILE)["pageTemplate"])


def _get_or_create_dor(item: dict[str, Any]) -> dict[str, Any]:
    properties = item.setdefault("properties", {})
    if properties is None:
        properties = item["properties"] = {}
    dor = properties.setdefault(DOR_KEY, {})
    if dor is None:
        dor = properties[DOR_KEY] = {}
    return dor


def _add_dor_container(item: dict[str, Any]) -> None:
    container = template_for_field_type(item.get("fieldType"))
    if container is None:
        logger.debug(
            "No metadata template for field '%s' of type %r",
            item.get("id"),
            item.get("fieldType"),
        )
        return

    data_ref = item.get("dataRef")
    if data_ref:
        container["bind"] = {"ref": data_ref, "match": "dataRef"}

    _get_or_create_dor(item)["dorContainer"] = container


def _normalize_items(result: dict[str, Any], items: list[Any]) -> None:
    if not items:
        return

    children: dict[str, Any] = {}
    order: list[str] = []
    for position, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise NormalizationError(
                f"expected a mapping, got {type(item).__name__}", position
            )
        item_id = item.get("id")
        if not isinstance(item_id, str) or not item_id:
            raise NormalizationError("missing field id", position)
        child = _normalize_node(item)
        _add_dor_container(child)
        children[item_id] = child
        order.append(item_id)

    result[CHILDREN_KEY] = children
    result[CHILDREN_ORDER_KEY] = order


def _normalize_node(node: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in node.items():
        if key == ITEMS_KEY and isinstance(value, list):
            _normalize_items(result, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def normalize(definition: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize an alternate-shape definition into the canonical shape.

    Every key is copied verbatim except ``items`` arrays, which become a
    ``children`` mapping (keyed by each item's ``id``) and a
    ``childrenOrder`` list. Items whose field type maps to a metadata
    template receive ``properties["fd:dor"]["dorContainer"]``; a ``dataRef``
    on such an item adds a ``bind`` pair to that container. Empty ``items``
    arrays are dropped. The root finally receives
    ``properties["fd:dor"]["pageTemplate"]``.

    Normalizing an already canonical definition returns an equal copy.

    Args:
        definition: Root mapping of the definition.

    Returns:
        A new canonical definition mapping.

    Raises:
        NormalizationError: If an ``items`` entry is not a mapping or has no id.
    """
    result = _normalize_node(definition)
    _get_or_create_dor(result)["pageTemplate"] = page_template()
    return result


def is_alternate_shape(definition: Any) -> bool:
    """Whether a definition still carries its children as an ``items`` array."""
    return isinstance(definition, Mapping) and isinstance(
        definition.get(ITEMS_KEY), list
    )


__all__ = [
    "NormalizationError",
    "FIELD_TYPE_TEMPLATE_KINDS",
    "TEMPLATE_FILES",
    "template_for_kind",
    "template_for_field_type",
    "page_template",
    "normalize",
    "is_alternate_shape",
]

"""Render module test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from formrender.schema import FieldNode


def _build_definition(*children: dict[str, Any], **root: Any) -> FieldNode:
    data: dict[str, Any] = {"id": "form", "fieldType": "form", **root}
    data["children"] = {c["id"]: c for c in children}
    data["childrenOrder"] = [c["id"] for c in children]
    return FieldNode.model_validate(data)


@pytest.fixture
def make_definition():
    """Factory building a canonical root definition from child mappings (in order)."""
    return _build_definition


@pytest.fixture
def contact_definition() -> dict[str, Any]:
    """Canonical contact form with a panel, a description and a submit button.

    Returns:
        Definition mapping as published (camelCase keys).
    """
    return {
        "id": "form",
        "fieldType": "form",
        "action": "/adobe/forms/af/submit/L2NvbnRhY3Q",
        "redirectUrl": "/thanks",
        "properties": {"fd:path": "/content/forms/af/contact/jcr:content/guideContainer"},
        ":items": {
            "name": {
                "id": "name",
                "name": "name",
                "fieldType": "text-input",
                "label": {"value": "Name"},
                "required": True,
                "description": "Your full name",
                "constraintMessages": {"required": "Name is required"},
            },
            "address": {
                "id": "address",
                "name": "address",
                "fieldType": "panel",
                "label": {"value": "Address"},
                ":items": {
                    "city": {"id": "city", "name": "city", "fieldType": "text-input"},
                },
                ":itemsOrder": ["city"],
            },
            "send": {
                "id": "send",
                "name": "send",
                "fieldType": "button",
                "buttonType": "submit",
                "label": {"value": "Send"},
            },
        },
        ":itemsOrder": ["name", "address", "send"],
    }


@pytest.fixture
def document_definition() -> dict[str, Any]:
    """Alternate-shape definition carrying children as an items array."""
    return {
        "id": "doc",
        "fieldType": "form",
        "items": [
            {"id": "when", "name": "when", "fieldType": "date-input", "dataRef": "$.when"},
            {"id": "note", "name": "note", "fieldType": "multiline"},
        ],
    }

"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Isolation from FORMRENDER_* variables set in the developer's shell
- Sample definition fixtures shared by integration tests
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from formrender.config import EnvVar

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Configuration Constants
# =============================================================================

PROJECT_ROOT = Path(__file__).parent


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset formrender variables so tests see documented defaults."""
    for env_var in EnvVar:
        if env_var.value.name in os.environ:
            monkeypatch.delenv(env_var.value.name)


# =============================================================================
# Sample Definitions
# =============================================================================


@pytest.fixture
def document_form() -> dict[str, Any]:
    """Alternate-shape (document-based) registration form.

    Returns:
        Definition mapping with children carried as ``items`` arrays.
    """
    return {
        "id": "registration",
        "fieldType": "form",
        "action": "/adobe/forms/af/submit/cmVnaXN0cmF0aW9u",
        "items": [
            {
                "id": "email",
                "name": "email",
                "fieldType": "email",
                "label": {"value": "Email"},
                "required": True,
            },
            {
                "id": "birthday",
                "name": "birthday",
                "fieldType": "date-input",
                "dataRef": "$.person.birthday",
                "value": "2024-01-01",
                "displayValue": "Jan 1, 2024",
                "displayFormat": "MMM d, y",
            },
            {
                "id": "guests",
                "name": "guests",
                "fieldType": "panel",
                "repeatable": True,
                "label": {"value": "Guest"},
                "items": [
                    {"id": "guestName", "name": "guestName", "fieldType": "text-input"},
                ],
            },
            {
                "id": "submit",
                "name": "submit",
                "fieldType": "button",
                "buttonType": "submit",
                "label": {"value": "Register"},
            },
        ],
    }


@pytest.fixture
def document_form_file(tmp_path: Path, document_form: dict[str, Any]) -> Path:
    """Write the document-based form to a temporary JSON file."""
    path = tmp_path / "registration.json"
    path.write_text(json.dumps(document_form, indent=2), encoding="utf-8")
    return path

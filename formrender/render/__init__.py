"""Rendering engine: definition tree to UI tree.

Example:
    >>> from formrender.render import RenderOptions, render_form
    >>> form = await render_form(definition_text, RenderOptions(authoring=True))
    >>> html = form.to_html()
"""

from .lib import (
    DuplicateCaptchaError,
    FormRenderError,
    RenderContext,
    RenderOptions,
    RuleEngineLoadError,
    create_form,
    load_rule_engine,
    render_children,
    render_form,
    reset_form,
)

__all__ = [
    "FormRenderError",
    "DuplicateCaptchaError",
    "RuleEngineLoadError",
    "RenderOptions",
    "RenderContext",
    "render_children",
    "load_rule_engine",
    "create_form",
    "reset_form",
    "render_form",
]

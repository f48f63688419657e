"""Rendering engine.

Turns a canonical ``FieldNode`` tree into a ``UiNode`` tree. Rendering is a
recursive, asynchronous depth-first walk: the children of a container are
built concurrently and joined before being appended, so output order always
follows ``childrenOrder`` whatever order the builds complete in.

All per-render state (form id, collaborators, the single CAPTCHA slot, the
rule engine) lives in a ``RenderContext`` threaded through the recursion.
``create_form`` is the single entry point for both authoring and run-time
rendering; run-time rendering additionally wires CAPTCHA, validation,
repeatable instances, the rule engine and the submit/reset listeners.
"""

import asyncio
import functools
import importlib
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from formrender.collaborators import (
    Captcha,
    CaptchaConfig,
    CaptchaFactory,
    DefaultRepeatableGroup,
    EnrichmentHook,
    RepeatableGroup,
    RuleEngine,
    SubmitHandler,
    captcha_page_name,
    extract_id_from_url,
    noop_enrich,
)
from formrender.config import EnvVar, get_environment
from formrender.decorators import (
    apply_repeatable_policy,
    decorate_applied_classes,
    decorate_field,
    decorate_panel_container,
)
from formrender.dispatch import build_field
from formrender.normalizer import NormalizationError, is_alternate_shape, normalize
from formrender.schema import (
    PATH_KEY,
    ChildExtractor,
    FieldNode,
    FieldTag,
    ordered_children,
    parse_definition,
)
from formrender.source import decode, fetch_form
from formrender.ui import UiEvent, UiNode
from formrender.validity import enable_validation
from formrender.widgets import create_field_wrapper

logger = logging.getLogger(__name__)

CAPTCHA_PLACEHOLDER_TEXT = "CAPTCHA"
DEFAULT_SOURCE = "aem"

# Strong references to fire-and-forget listener tasks (form reset)
_background_tasks: set[asyncio.Task] = set()


# =============================================================================
# Errors
# =============================================================================


class FormRenderError(Exception):
    """Base error for form rendering."""


class DuplicateCaptchaError(FormRenderError):
    """Raised when a form declares more than one CAPTCHA field."""

    def __init__(self, first_id: str, second_id: str):
        self.first_id = first_id
        self.second_id = second_id
        super().__init__(
            f"Form already has CAPTCHA field '{first_id}', cannot add '{second_id}'"
        )


class RuleEngineLoadError(FormRenderError):
    """Raised when the configured rule engine cannot be loaded."""


# =============================================================================
# Options and context
# =============================================================================


@dataclass
class RenderOptions:
    """Caller-supplied rendering options.

    Options left as None resolve from the environment (see ``EnvVar``).

    Attributes:
        authoring: Authoring mode skips CAPTCHA, validation, repeatable
            transfer, rule engine and listeners.
        enrich: Per-node enrichment hook.
        repeat: Repeatable-group manager.
        child_extractor: Ordered children of a container.
        rule_engine: Rule engine object; takes precedence over
            ``rule_engine_module``.
        rule_engine_module: Dotted path of a module exposing ``initialize``.
        rule_engine_delay_ms: Delay before the rule engine is initialized.
        captcha_factory: Builds the CAPTCHA widget for a CAPTCHA field.
        submit_handler: Called with (event, form, captcha) on ``submit``.
        data: Prefill data handed to the rule engine.
    """

    authoring: Optional[bool] = None
    enrich: EnrichmentHook = noop_enrich
    repeat: Optional[RepeatableGroup] = None
    child_extractor: ChildExtractor = ordered_children
    rule_engine: Optional[RuleEngine] = None
    rule_engine_module: Optional[str] = None
    rule_engine_delay_ms: Optional[int] = None
    captcha_factory: Optional[CaptchaFactory] = None
    submit_handler: Optional[SubmitHandler] = None
    data: Any = None

    def __post_init__(self) -> None:
        self.authoring = get_environment(
            EnvVar.FORMRENDER_AUTHORING_MODE, override=self.authoring
        )
        self.rule_engine_module = get_environment(
            EnvVar.FORMRENDER_RULE_ENGINE_MODULE, override=self.rule_engine_module
        )
        self.rule_engine_delay_ms = get_environment(
            EnvVar.FORMRENDER_RULE_ENGINE_DELAY_MS, override=self.rule_engine_delay_ms
        )
        if self.repeat is None:
            self.repeat = DefaultRepeatableGroup()


@dataclass
class RenderContext:
    """State shared by one top-level render.

    Attributes:
        form_id: Identifier handed to the enrichment hook.
        enrich: Per-node enrichment hook.
        repeat: Repeatable-group manager.
        child_extractor: Ordered children of a container.
        captcha_field: The form's CAPTCHA field, once seen.
        rule_engine: The rule engine, once loaded.
    """

    form_id: Optional[str] = None
    enrich: EnrichmentHook = noop_enrich
    repeat: RepeatableGroup = field(default_factory=DefaultRepeatableGroup)
    child_extractor: ChildExtractor = ordered_children
    captcha_field: Optional[FieldNode] = None
    rule_engine: Optional[RuleEngine] = None

    def set_captcha(self, fd: FieldNode) -> None:
        """Remember the CAPTCHA field; a form has at most one."""
        if self.captcha_field is not None:
            raise DuplicateCaptchaError(self.captcha_field.id, fd.id)
        self.captcha_field = fd


# =============================================================================
# Recursive core
# =============================================================================


def _captcha_placeholder(fd: FieldNode) -> UiNode:
    node = create_field_wrapper(fd)
    node.replace_children()
    node.text = CAPTCHA_PLACEHOLDER_TEXT
    return node


async def _render_child(
    fd: FieldNode, container: UiNode, ctx: RenderContext
) -> Optional[UiNode]:
    if fd.value is None:
        fd.value = ""

    if fd.tag == FieldTag.CAPTCHA.value:
        ctx.set_captcha(fd)
        return _captcha_placeholder(fd)

    node = build_field(fd)
    decorate_applied_classes(fd, node)
    decorate_field(fd, node)

    if fd.is_panel:
        if fd.repeatable:
            apply_repeatable_policy(node, fd, ctx.repeat)
        await render_children(fd, node, ctx)
        return node

    await ctx.enrich(node, fd, container, ctx.form_id)
    return node


async def render_children(panel: FieldNode, container: UiNode, ctx: RenderContext) -> None:
    """Render the children of ``panel`` into ``container``.

    Children are rendered concurrently and appended in their defined order;
    None results are dropped. The container then receives panel-container
    decoration and the enrichment hook.

    Args:
        panel: Container definition whose children are rendered.
        container: UI node receiving the rendered children.
        ctx: Per-render context.

    Raises:
        Exception: Whatever the enrichment hook raises; the render is aborted.
    """
    children = [c for c in (ctx.child_extractor(panel) or []) if c is not None]
    nodes = await asyncio.gather(*(_render_child(c, container, ctx) for c in children))
    container.append(*(n for n in nodes if n is not None))
    decorate_panel_container(panel, container, ctx.repeat)
    await ctx.enrich(container, panel, None, ctx.form_id)


# =============================================================================
# Form-level wiring
# =============================================================================


def load_rule_engine(module_path: str) -> RuleEngine:
    """Import a rule engine module by dotted path.

    Raises:
        RuleEngineLoadError: If the module is missing or has no ``initialize``.
    """
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise RuleEngineLoadError(f"Cannot import rule engine '{module_path}': {e}") from e
    if not callable(getattr(module, "initialize", None)):
        raise RuleEngineLoadError(f"Rule engine '{module_path}' has no initialize()")
    return module  # type: ignore[return-value]


def _attach_captcha(
    ctx: RenderContext, form: UiNode, options: RenderOptions
) -> Optional[Captcha]:
    fd = ctx.captcha_field
    if fd is None:
        return None
    config = CaptchaConfig.from_field(fd)
    if options.captcha_factory is None:
        logger.debug("CAPTCHA field '%s' present but no CAPTCHA factory configured", fd.id)
        return None
    logger.info("Attaching CAPTCHA (version=%s) for field '%s'", config.version, fd.id)
    captcha = options.captcha_factory(config, fd.id, fd.name, captcha_page_name(fd))
    captcha.attach(form)
    return captcha


async def _initialize_rule_engine(
    definition: FieldNode,
    form: UiNode,
    captcha: Optional[Captcha],
    ctx: RenderContext,
    options: RenderOptions,
) -> None:
    engine = options.rule_engine
    if engine is None and options.rule_engine_module:
        engine = load_rule_engine(options.rule_engine_module)
    if engine is None:
        return
    ctx.rule_engine = engine

    delay = options.rule_engine_delay_ms or 0
    if delay > 0:
        await asyncio.sleep(delay / 1000)
    logger.info("Initializing rule engine for form '%s'", definition.id)
    renderer = functools.partial(render_children, ctx=ctx)
    result = engine.initialize(definition, form, captcha, renderer, options.data)
    if inspect.isawaitable(result):
        await result


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(
            "Background task %s failed: %s", task.get_name(), error, exc_info=error
        )


def _schedule(coro) -> asyncio.Task:
    task = asyncio.get_running_loop().create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    task.add_done_callback(_log_task_failure)
    return task


async def reset_form(form: UiNode, definition: FieldNode, options: RenderOptions) -> UiNode:
    """Re-render a form from scratch and swap it in place of the old tree."""
    new_form = await create_form(definition, options)
    form.replace_with(new_form)
    return new_form


async def create_form(
    definition: FieldNode, options: Optional[RenderOptions] = None
) -> UiNode:
    """Render a form definition.

    Args:
        definition: Canonical root definition.
        options: Rendering options; defaults resolve from the environment.

    Returns:
        UiNode: The ``form`` element.

    Raises:
        DuplicateCaptchaError: If the definition has more than one CAPTCHA field.
        RuleEngineLoadError: If a configured rule engine cannot be loaded.
    """
    options = options or RenderOptions()
    action = (definition.model_extra or {}).get("action")

    form = UiNode("form")
    if options.authoring:
        form_id = definition.id
    else:
        form.dataset["action"] = action
        form.set("novalidate", True)
        form_id = extract_id_from_url(action) or definition.id
    if definition.applied_css_class_names:
        form.add_class(definition.applied_css_class_names)

    ctx = RenderContext(
        form_id=form_id,
        enrich=options.enrich,
        repeat=options.repeat,
        child_extractor=options.child_extractor,
    )
    logger.info(
        "Rendering form '%s' (%s mode)",
        definition.id,
        "authoring" if options.authoring else "run-time",
    )
    await render_children(definition, form, ctx)
    if options.authoring:
        return form

    captcha = _attach_captcha(ctx, form, options)
    enable_validation(form)
    ctx.repeat.transfer(form)
    await _initialize_rule_engine(definition, form, captcha, ctx, options)

    def on_reset(event: UiEvent) -> None:
        _schedule(reset_form(form, definition, options))

    form.add_listener("reset", on_reset)
    if options.submit_handler is not None:
        handler = options.submit_handler
        form.add_listener("submit", lambda event: handler(event, form, captcha))
    return form


# =============================================================================
# Block entry point
# =============================================================================


def _is_url(text: str) -> bool:
    return text.startswith(("http://", "https://"))


async def render_form(
    source: Union[str, Mapping[str, Any]],
    options: Optional[RenderOptions] = None,
    pathname: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[UiNode]:
    """Decode, normalize and render a form definition.

    Args:
        source: Definition mapping, definition text, or an http(s) URL.
        options: Rendering options.
        pathname: Path the definition was published under (fallback action).
        client: HTTP client used when ``source`` is a URL.

    Returns:
        The rendered form, or None when the definition is malformed.

    Raises:
        httpx.HTTPError: If fetching the definition fails.
    """
    if isinstance(source, str):
        if _is_url(source):
            pathname = pathname or urlparse(source).path
            data = await fetch_form(source, client)
        else:
            data = decode(source)
    else:
        data = source
    if data is None:
        logger.warning("No form definition to render")
        return None

    try:
        if is_alternate_shape(data):
            logger.info("Normalizing alternate-shape definition '%s'", data.get("id"))
            data = normalize(data)
        definition = parse_definition(data)
    except (NormalizationError, ValidationError) as e:
        logger.warning("Malformed form definition: %s", e)
        return None

    form = await create_form(definition, options)
    extra = definition.model_extra or {}
    action = extra.get("action") or (pathname.split(".json")[0] if pathname else None)
    form.dataset["redirectUrl"] = extra.get("redirectUrl") or ""
    form.dataset["thankYouMsg"] = extra.get("thankYouMsg") or ""
    form.dataset["action"] = action
    form.dataset["source"] = DEFAULT_SOURCE
    form.dataset["rules"] = True
    form.dataset["id"] = definition.id
    if definition.properties:
        form.dataset["formpath"] = definition.properties.get(PATH_KEY)
    return form


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

"""External collaborator interfaces and default implementations.

The rendering engine calls out to four collaborators it does not own:

- an enrichment hook, awaited once per rendered field and once per container
- a repeatable-group manager that adds instance controls and later
  materializes repeated instances
- an optional rule engine, initialized once after the form is built
- an optional CAPTCHA widget attached to the finished form

Each is described by a Protocol so any object with the right shape can be
plugged in.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

from formrender.schema import CAPTCHA_KEY, PATH_KEY, FieldNode
from formrender.ui import UiNode, element

logger = logging.getLogger(__name__)

REPEAT_ACTIONS_CLASS = "repeat-actions"
ADD_BUTTON_CLASS = "item-add"
REMOVE_BUTTON_CLASS = "item-remove"
REPEAT_WRAPPER_CLASS = "repeat-wrapper"

_FORM_ID_PATTERN = re.compile(r"/adobe/forms/af/(?:submit/)?([^/?#.]+)")
_CONTENT_MARKER = "/jcr:content"


# =============================================================================
# Protocols
# =============================================================================


class EnrichmentHook(Protocol):
    """Per-node enrichment callback.

    May mutate ``node`` in place but must not move it within its parent.
    ``parent`` is None when the hook runs on a container after its
    children were attached.
    """

    def __call__(
        self,
        node: UiNode,
        fd: FieldNode,
        parent: Optional[UiNode],
        form_id: Optional[str],
    ) -> Awaitable[None]: ...


class RepeatableGroup(Protocol):
    """Manager of repeatable panel instances."""

    def request_add_control(self, container: UiNode) -> None:
        """Give a repeatable instance its add-instance control."""
        ...

    def request_remove_control(self, container: UiNode) -> None:
        """Give a repeatable instance its remove-instance control."""
        ...

    def transfer(self, form: UiNode) -> None:
        """Materialize repeated instances once the whole form is built."""
        ...


class Captcha(Protocol):
    def attach(self, form: UiNode) -> None: ...


class RuleEngine(Protocol):
    """Optional rule engine, loaded lazily by module path.

    ``initialize`` may be a coroutine function or a plain function.
    """

    def initialize(
        self,
        definition: FieldNode,
        form: UiNode,
        captcha: Optional[Captcha],
        renderer: Callable[..., Awaitable[None]],
        data: Any,
    ) -> Any: ...


CaptchaFactory = Callable[["CaptchaConfig", str, Optional[str], str], Captcha]
SubmitHandler = Callable[[Any, UiNode, Optional[Captcha]], Any]


# =============================================================================
# Defaults
# =============================================================================


async def noop_enrich(
    node: UiNode,
    fd: FieldNode,
    parent: Optional[UiNode],
    form_id: Optional[str],
) -> None:
    """Enrichment hook that leaves every node untouched."""
    return None


class DefaultRepeatableGroup:
    """Repeatable-group manager producing plain marker controls.

    Add controls are a ``div.repeat-actions`` holding a ``button.item-add``;
    remove controls are a ``button.item-remove``. Both are appended as direct
    children of the instance so a container check can detect them.
    """

    def __init__(self) -> None:
        self.add_requests: list[UiNode] = []
        self.remove_requests: list[UiNode] = []

    def request_add_control(self, container: UiNode) -> None:
        self.add_requests.append(container)
        label = container.dataset.get("repeatAddButtonLabel") or "Add"
        button = element("button", str(label), type="button")
        button.add_class(ADD_BUTTON_CLASS)
        actions = UiNode("div", classes=[REPEAT_ACTIONS_CLASS])
        actions.append(button)
        container.append(actions)

    def request_remove_control(self, container: UiNode) -> None:
        self.remove_requests.append(container)
        label = container.dataset.get("repeatDeleteButtonLabel") or "Delete"
        button = element("button", str(label), type="button")
        button.add_class(REMOVE_BUTTON_CLASS)
        container.append(button)

    def transfer(self, form: UiNode) -> None:
        """Group sibling instances of each repeatable panel in a wrapper."""
        instances = form.find_all(lambda n: n.dataset.get("repeatable") is True)
        for instance in instances:
            if instance.parent is None or instance.parent.has_class(REPEAT_WRAPPER_CLASS):
                continue
            parent = instance.parent
            siblings = [
                c
                for c in parent.children
                if c.dataset.get("repeatable") is True
                and c.dataset.get("id") == instance.dataset.get("id")
            ]
            wrapper = UiNode("div", classes=[REPEAT_WRAPPER_CLASS])
            wrapper.dataset["id"] = instance.dataset.get("id")
            for key in ("max", "min"):
                if key in instance.dataset:
                    wrapper.dataset[key] = instance.dataset[key]
            instance.replace_with(wrapper)
            wrapper.append(*siblings)
            logger.debug(
                "Grouped %d instance(s) of repeatable panel '%s'",
                len(siblings),
                wrapper.dataset["id"],
            )


# =============================================================================
# CAPTCHA helpers
# =============================================================================


@dataclass(frozen=True)
class CaptchaConfig:
    """Construction parameters of the CAPTCHA widget."""

    site_key: Any = None
    uri: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def from_field(cls, fd: FieldNode) -> "CaptchaConfig":
        """Read the namespaced config block, falling back to plain attributes."""
        block = fd.properties.get(CAPTCHA_KEY) or {}
        config = block.get("config") if isinstance(block, dict) else None
        if config:
            return cls(
                site_key=config.get("siteKey"),
                uri=config.get("uri"),
                version=config.get("version"),
            )
        extra = fd.model_extra or {}
        return cls(site_key=fd.value, uri=extra.get("uri"), version=extra.get("version"))


def extract_id_from_url(url: Optional[str]) -> Optional[str]:
    """Form id embedded in a submit action URL, or None."""
    if not url:
        return None
    match = _FORM_ID_PATTERN.search(url)
    return match.group(1) if match else None


def get_site_page_name(path: Optional[str]) -> str:
    """Name of the page owning a content path (segment before ``/jcr:content``)."""
    if not path:
        return ""
    index = path.rfind(_CONTENT_MARKER)
    if index == -1:
        return ""
    page_path = path[:index]
    return page_path[page_path.rfind("/") + 1 :]


def captcha_page_name(fd: FieldNode) -> str:
    return get_site_page_name(fd.properties.get(PATH_KEY))


__all__ = [
    "REPEAT_ACTIONS_CLASS",
    "ADD_BUTTON_CLASS",
    "REMOVE_BUTTON_CLASS",
    "REPEAT_WRAPPER_CLASS",
    "EnrichmentHook",
    "RepeatableGroup",
    "Captcha",
    "RuleEngine",
    "CaptchaFactory",
    "SubmitHandler",
    "noop_enrich",
    "DefaultRepeatableGroup",
    "CaptchaConfig",
    "extract_id_from_url",
    "get_site_page_name",
    "captcha_page_name",
]

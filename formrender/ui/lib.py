"""Platform-agnostic UI element tree.

``UiNode`` is a minimal, DOM-like element: a tag with attributes, a
``dataset`` of ``data-*`` values, CSS classes, text content, children with
parent links, and event listeners. Builders and decorators only ever talk to
this model, so the rendered tree can be serialized to HTML (``to_html``) or
walked by any other backend.
"""

import html
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

VOID_TAGS = frozenset({"input", "img", "br", "hr", "source", "meta", "link"})

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def dataset_attribute(key: str) -> str:
    """Convert a camelCase dataset key to its ``data-*`` attribute name."""
    return "data-" + _CAMEL_BOUNDARY.sub("-", key).lower()


def _attribute_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


@dataclass
class UiEvent:
    """Event delivered to listeners.

    Attributes:
        type: Event name (``focus``, ``blur``, ``change``...).
        target: Node the event was dispatched on.
        bubbles: Whether the event propagates to ancestors.
        current_target: Node whose listeners are currently running.
    """

    type: str
    target: "UiNode"
    bubbles: bool = False
    current_target: Optional["UiNode"] = None


Listener = Callable[[UiEvent], Any]


@dataclass(eq=False)
class UiNode:
    """Element of the rendered UI tree.

    Boolean attributes are stored as Python bools; ``True`` serializes as a
    bare attribute and ``False``/``None`` are omitted.

    Attributes:
        tag: Element name.
        attrs: Element attributes (``id``, ``type``, ``value``...).
        dataset: ``data-*`` values keyed in camelCase.
        classes: CSS classes in insertion order.
        text: Plain text content, escaped on serialization.
        markup: Pre-sanitized markup content, emitted as-is.
        children: Child elements.
        parent: Parent element, maintained by the mutation helpers.
        listeners: Event name to registered listeners.
        controller: Optional per-node behavior object (e.g. a state machine).
    """

    tag: str
    attrs: dict[str, Any] = field(default_factory=dict)
    dataset: dict[str, Any] = field(default_factory=dict)
    classes: list[str] = field(default_factory=list)
    text: Optional[str] = None
    markup: Optional[str] = None
    children: list["UiNode"] = field(default_factory=list)
    parent: Optional["UiNode"] = field(default=None, repr=False)
    listeners: dict[str, list[Listener]] = field(default_factory=dict, repr=False)
    controller: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def get(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    def set(self, name: str, value: Any) -> "UiNode":
        self.attrs[name] = value
        return self

    def remove_attr(self, name: str) -> None:
        self.attrs.pop(name, None)

    @property
    def id(self) -> Optional[str]:
        return self.attrs.get("id")

    @id.setter
    def id(self, value: Optional[str]) -> None:
        self.attrs["id"] = value

    @property
    def name(self) -> Optional[str]:
        return self.attrs.get("name")

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self.attrs["name"] = value

    @property
    def input_type(self) -> Optional[str]:
        return self.attrs.get("type")

    @input_type.setter
    def input_type(self, value: Optional[str]) -> None:
        self.attrs["type"] = value

    @property
    def value(self) -> Any:
        return self.attrs.get("value")

    @value.setter
    def value(self, value: Any) -> None:
        self.attrs["value"] = value

    # -------------------------------------------------------------------------
    # Classes
    # -------------------------------------------------------------------------

    def add_class(self, *names: str) -> "UiNode":
        for name in names:
            for part in name.split():
                if part not in self.classes:
                    self.classes.append(part)
        return self

    def remove_class(self, *names: str) -> None:
        self.classes = [c for c in self.classes if c not in names]

    def has_class(self, name: str) -> bool:
        return name in self.classes

    # -------------------------------------------------------------------------
    # Tree mutation
    # -------------------------------------------------------------------------

    def _adopt(self, node: "UiNode") -> None:
        if node.parent is not None:
            node.parent.children.remove(node)
        node.parent = self

    def append(self, *nodes: Optional["UiNode"]) -> "UiNode":
        """Append nodes as last children, skipping ``None``."""
        for node in nodes:
            if node is None:
                continue
            self._adopt(node)
            self.children.append(node)
        return self

    def prepend(self, node: "UiNode") -> "UiNode":
        """Insert a node as first child."""
        self._adopt(node)
        self.children.insert(0, node)
        return self

    def replace_children(self, *nodes: Optional["UiNode"]) -> "UiNode":
        for child in self.children:
            child.parent = None
        self.children = []
        self.text = None
        self.markup = None
        return self.append(*nodes)

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def replace_with(self, node: "UiNode") -> None:
        """Put ``node`` at this node's position in its parent."""
        parent = self.parent
        if parent is None:
            return
        node.remove()
        position = parent.children.index(self)
        parent.children[position] = node
        node.parent = parent
        self.parent = None

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def iter_descendants(self) -> Iterator["UiNode"]:
        """Depth-first, document-order iteration excluding this node."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def find(self, predicate: Callable[["UiNode"], bool]) -> Optional["UiNode"]:
        return next((n for n in self.iter_descendants() if predicate(n)), None)

    def find_all(self, predicate: Callable[["UiNode"], bool]) -> list["UiNode"]:
        return [n for n in self.iter_descendants() if predicate(n)]

    def query(self, *tags: str) -> Optional["UiNode"]:
        """First descendant whose tag is one of ``tags``."""
        return self.find(lambda n: n.tag in tags)

    def query_all(self, *tags: str) -> list["UiNode"]:
        return self.find_all(lambda n: n.tag in tags)

    def child_with_class(self, name: str) -> Optional["UiNode"]:
        """First direct child carrying class ``name``."""
        return next((c for c in self.children if c.has_class(name)), None)

    def closest(self, predicate: Callable[["UiNode"], bool]) -> Optional["UiNode"]:
        """This node or the nearest ancestor matching ``predicate``."""
        node: Optional[UiNode] = self
        while node is not None:
            if predicate(node):
                return node
            node = node.parent
        return None

    @property
    def text_content(self) -> str:
        parts = [self.text or ""]
        parts.extend(child.text_content for child in self.children)
        return "".join(parts)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def add_listener(self, event_type: str, listener: Listener) -> None:
        self.listeners.setdefault(event_type, []).append(listener)

    def dispatch(self, event_type: str, bubbles: bool = False) -> UiEvent:
        """Synchronously deliver an event to this node (and ancestors if bubbling)."""
        event = UiEvent(type=event_type, target=self, bubbles=bubbles)
        node: Optional[UiNode] = self
        while node is not None:
            event.current_target = node
            for listener in list(node.listeners.get(event_type, [])):
                listener(event)
            if not bubbles:
                break
            node = node.parent
        return event

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_html(self) -> str:
        """Serialize the subtree to an HTML string."""
        parts = [f"<{self.tag}"]
        attributes: list[tuple[str, Any]] = []
        if self.classes:
            attributes.append(("class", " ".join(self.classes)))
        attributes.extend(self.attrs.items())
        attributes.extend(
            (dataset_attribute(key), value) for key, value in self.dataset.items()
        )
        for name, value in attributes:
            is_attr = name in self.attrs
            if value is None or (is_attr and value is False):
                continue
            if is_attr and value is True:
                parts.append(f" {name}")
                continue
            parts.append(f' {name}="{html.escape(_attribute_text(value))}"')
        parts.append(">")
        if self.tag in VOID_TAGS:
            return "".join(parts)
        if self.markup is not None:
            parts.append(self.markup)
        elif self.text is not None:
            parts.append(html.escape(self.text, quote=False))
        parts.extend(child.to_html() for child in self.children)
        parts.append(f"</{self.tag}>")
        return "".join(parts)


def element(tag: str, text: Optional[str] = None, **attrs: Any) -> UiNode:
    """Shorthand constructor: ``element("option", "Yes", value="y")``."""
    return UiNode(tag=tag, attrs=dict(attrs), text=text)


__all__ = [
    "VOID_TAGS",
    "UiEvent",
    "Listener",
    "UiNode",
    "element",
    "dataset_attribute",
]

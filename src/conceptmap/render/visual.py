"""Visual tree produced by the rendering engine.

The tree is read from the engine's SVG output. Only what interaction needs is
modelled: node groups in document order, their text runs, a primary shape
used as hit area, inline style mutations and event listeners.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Callable

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring as defused_fromstring

logger = logging.getLogger(__name__)

SHAPE_TAGS = ("rect", "circle", "ellipse", "polygon", "path")
NODE_CLASSES = ("section", "mindmap-node")

# DOM-style events; pointer enter/leave do not bubble
BUBBLING_EVENTS = frozenset({"click"})

EventHandler = Callable[["PointerEvent"], None]


class VisualTreeError(ValueError):
    """Raised when renderer output cannot be read as a visual tree."""


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _text_content(element: ET.Element) -> str:
    return "".join(element.itertext())


@dataclass
class PointerEvent:
    """Event dispatched to node group listeners."""
    type: str
    target: "NodeGroup"
    current_target: "NodeGroup | None" = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    @property
    def bubbles(self) -> bool:
        return self.type in BUBBLING_EVENTS

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass(eq=False)
class Shape:
    """Primary shape of a node group."""
    tag: str
    element: ET.Element
    style: dict[str, str] = field(default_factory=dict)


class NodeGroup:
    """A ``<g>`` element of the rendered diagram.

    Groups compare by identity so they can key the node to concept mapping.
    """

    def __init__(self, element: ET.Element, parent: "NodeGroup | None" = None, index: int = 0):
        self.element = element
        self.parent = parent
        self.index = index
        self.classes = tuple((element.get("class") or "").split())
        self.style: dict[str, str] = {}
        self.label_style: dict[str, str] = {}
        self.text_runs = self._find_text_runs()
        self.shape = self._find_shape()
        self._listeners: dict[str, list[EventHandler]] = {}

    def __repr__(self) -> str:
        return f"NodeGroup(index={self.index}, classes={list(self.classes)}, text={self.text!r})"

    @property
    def text(self) -> str:
        """Full label text, wrapped lines joined by single spaces."""
        return " ".join(self.text_runs)

    @property
    def is_node(self) -> bool:
        """Whether the renderer tagged this group as a diagram section or node."""
        return any(c in NODE_CLASSES or "node" in c for c in self.classes)

    def _find_text_runs(self) -> list[str]:
        text_element = None
        for child in self.element.iter():
            if child is not self.element and _local_name(child.tag) == "text":
                text_element = child
                break

        if text_element is None:
            # HTML labels are rendered inside a foreignObject
            for child in self.element.iter():
                if _local_name(child.tag) == "foreignObject":
                    content = _text_content(child).strip()
                    return [content] if content else []
            return []

        tspans = [t for t in text_element.iter() if _local_name(t.tag) == "tspan"]
        if tspans:
            return [_text_content(t).strip() for t in tspans]

        content = _text_content(text_element).strip()
        return [content] if content else []

    def _find_shape(self) -> Shape | None:
        for child in self.element.iter():
            if child is self.element:
                continue
            tag = _local_name(child.tag)
            if tag not in SHAPE_TAGS:
                continue
            if tag == "path" and "M" not in (child.get("d") or ""):
                continue
            return Shape(tag=tag, element=child)
        return None

    def add_event_listener(self, event_type: str, handler: EventHandler) -> None:
        """Register a handler; registering the same handler twice is a no-op."""
        handlers = self._listeners.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_event_listener(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: str | None = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(handlers) for handlers in self._listeners.values())

    def _fire(self, event: PointerEvent) -> None:
        event.current_target = self
        for handler in list(self._listeners.get(event.type, [])):
            handler(event)


class VisualTree:
    """Rendered diagram: raw markup plus its node groups in document order."""

    def __init__(self, markup: bytes, root: ET.Element):
        self.markup = markup
        self.root = root
        self.groups: list[NodeGroup] = []
        self._collect_groups(root, None)

    @classmethod
    def from_svg(cls, markup: bytes | str) -> "VisualTree":
        """Parse SVG markup securely.

        Raises:
            VisualTreeError: If the markup is not well-formed SVG
        """
        if isinstance(markup, str):
            markup = markup.encode("utf-8")
        try:
            root = defused_fromstring(markup)
        except (ET.ParseError, DefusedXmlException) as e:
            raise VisualTreeError(f"Renderer output is not valid SVG: {e}")

        if _local_name(root.tag) != "svg":
            raise VisualTreeError(f"Renderer output root is <{_local_name(root.tag)}>, expected <svg>")

        tree = cls(markup, root)
        logger.debug(f"Parsed visual tree with {len(tree.groups)} groups")
        return tree

    def _collect_groups(self, element: ET.Element, parent: NodeGroup | None) -> None:
        for child in element:
            group = parent
            if _local_name(child.tag) == "g":
                group = NodeGroup(child, parent, index=len(self.groups))
                self.groups.append(group)
            self._collect_groups(child, group)

    def node_groups(self) -> list[NodeGroup]:
        """Groups tagged as diagram sections or nodes."""
        return [g for g in self.groups if g.is_node]

    def text_groups(self) -> list[NodeGroup]:
        """Groups carrying any text."""
        return [g for g in self.groups if g.text_runs]

    def dispatch(self, target: NodeGroup, event_type: str) -> PointerEvent:
        """Deliver an event to ``target``, bubbling clicks up to ancestor groups."""
        event = PointerEvent(type=event_type, target=target)
        group = target
        while group is not None:
            group._fire(event)
            if not event.bubbles or event.propagation_stopped:
                break
            group = group.parent
        return event

    def to_markup(self) -> bytes:
        """Native markup exactly as the engine produced it."""
        return self.markup

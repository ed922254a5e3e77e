"""Hover and click behaviour for reconciled node groups."""

import logging
from typing import Callable

from .models.concept import Concept
from .render.visual import EventHandler, NodeGroup, PointerEvent

logger = logging.getLogger(__name__)

ClickCallback = Callable[[Concept], None]

HOVER_FONT_WEIGHT = "bold"
HOVER_FILTER = "brightness(1.15)"


class AttachedBatch:
    """Handlers attached for one render generation, detachable as a unit."""

    def __init__(self, generation: int, on_dispose: Callable[["AttachedBatch"], None] | None = None):
        self.generation = generation
        self.groups: list[NodeGroup] = []
        self.disposed = False
        self._bindings: list[tuple[NodeGroup, str, EventHandler]] = []
        self._on_dispose = on_dispose

    def __len__(self) -> int:
        return len(self.groups)

    def bind(self, group: NodeGroup, event_type: str, handler: EventHandler) -> None:
        group.add_event_listener(event_type, handler)
        self._bindings.append((group, event_type, handler))

    def dispose(self) -> None:
        """Detach every handler of this batch and revert hover styling."""
        if self.disposed:
            return
        for group, event_type, handler in self._bindings:
            group.remove_event_listener(event_type, handler)
        for group in self.groups:
            _clear_hover(group)
        logger.debug(f"Cleaned up {len(self._bindings)} listeners of generation {self.generation}")
        self._bindings.clear()
        self.disposed = True
        if self._on_dispose is not None:
            self._on_dispose(self)


def _apply_hover(group: NodeGroup) -> None:
    group.label_style["font-weight"] = HOVER_FONT_WEIGHT
    if group.shape is not None:
        group.shape.style["filter"] = HOVER_FILTER


def _clear_hover(group: NodeGroup) -> None:
    group.label_style["font-weight"] = "normal"
    if group.shape is not None:
        group.shape.style["filter"] = "none"


def _mark_hit_target(group: NodeGroup) -> None:
    group.style["cursor"] = "pointer"
    group.style["user-select"] = "none"
    if group.shape is not None:
        group.shape.style["cursor"] = "pointer"
        group.shape.style["pointer-events"] = "all"


class InteractionManager:
    """Attaches pointer behaviour to mapped node groups.

    A group keeps at most one set of handlers at a time: groups already
    owned by a live batch are skipped when a later batch is attached.
    """

    def __init__(self, on_click: ClickCallback | None = None):
        self.on_click = on_click
        self._owners: dict[NodeGroup, AttachedBatch] = {}

    def is_attached(self, group: NodeGroup) -> bool:
        return group in self._owners

    def attach(self, mapping: dict[NodeGroup, Concept], generation: int = 0) -> AttachedBatch:
        """Attach hover and click handlers for every mapped group.

        Returns:
            Batch whose ``dispose`` detaches everything attached here
        """
        batch = AttachedBatch(generation, on_dispose=self._release)
        if self.on_click is None:
            return batch

        for group, concept in mapping.items():
            if group in self._owners:
                logger.debug(f"Group {group.index} already has handlers, skipping")
                continue
            self._attach_group(batch, group, concept)
            self._owners[group] = batch

        logger.debug(f"Set up {len(batch)} click handlers for generation {generation}")
        return batch

    def _attach_group(self, batch: AttachedBatch, group: NodeGroup, concept: Concept) -> None:
        _mark_hit_target(group)

        def handle_enter(event: PointerEvent) -> None:
            _apply_hover(group)

        def handle_leave(event: PointerEvent) -> None:
            _clear_hover(group)

        def handle_click(event: PointerEvent) -> None:
            event.stop_propagation()
            event.prevent_default()
            if self.on_click is not None:
                self.on_click(concept)

        batch.bind(group, "pointerenter", handle_enter)
        batch.bind(group, "pointerleave", handle_leave)
        batch.bind(group, "click", handle_click)
        batch.groups.append(group)

    def _release(self, batch: AttachedBatch) -> None:
        for group in batch.groups:
            if self._owners.get(group) is batch:
                del self._owners[group]

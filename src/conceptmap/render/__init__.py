"""Rendering through an external engine and the resulting visual tree."""

from .coordinator import (
    DrawingSurface,
    RenderCoordinator,
    RenderFailure,
    RenderResult,
    RenderState,
)
from .engine import MermaidCliEngine, RenderEngine, RenderEngineError
from .visual import NodeGroup, PointerEvent, Shape, VisualTree, VisualTreeError

__all__ = [
    "DrawingSurface",
    "RenderCoordinator",
    "RenderFailure",
    "RenderResult",
    "RenderState",
    "RenderEngine",
    "RenderEngineError",
    "MermaidCliEngine",
    "NodeGroup",
    "PointerEvent",
    "Shape",
    "VisualTree",
    "VisualTreeError",
]

"""Shared fixtures for conceptmap tests."""

import asyncio
from html import escape

import pytest

from conceptmap.models import Concept, ConceptGraph
from conceptmap.render import RenderEngine, VisualTree

SVG_NS = "http://www.w3.org/2000/svg"


def build_svg(labels) -> str:
    """Build a small mindmap-like SVG with one node group per label.

    A label given as a list is rendered as several tspans (wrapped lines).
    """
    parts = [f'<svg xmlns="{SVG_NS}" id="mermaid-test" width="400" height="300">']
    for index, label in enumerate(labels):
        parts.append(f'<g class="mindmap-node section-{index}">')
        parts.append(f'<rect x="0" y="{index * 50}" width="120" height="40"/>')
        if isinstance(label, list):
            runs = "".join(f"<tspan>{escape(run)}</tspan>" for run in label)
            parts.append(f"<text>{runs}</text>")
        else:
            parts.append(f"<text>{escape(label)}</text>")
        parts.append("</g>")
    parts.append("</svg>")
    return "".join(parts)


def find_group(tree: VisualTree, text: str):
    for group in tree.groups:
        if group.text == text:
            return group
    raise AssertionError(f"No group with text {text!r}")


class FakeEngine(RenderEngine):
    """Engine returning a fixed SVG, or raising a fixed error."""

    def __init__(self, svg: str | None = None, error: Exception | None = None):
        self.svg = svg or build_svg(["Placeholder"])
        self.error = error
        self.submitted: list[str] = []
        self.render_ids: list[str] = []

    async def submit(self, text: str, render_id: str = "mermaid") -> VisualTree:
        self.submitted.append(text)
        self.render_ids.append(render_id)
        if self.error is not None:
            raise self.error
        return VisualTree.from_svg(self.svg)


class GatedEngine(RenderEngine):
    """Engine whose renders complete only when their gate is opened."""

    def __init__(self):
        self.calls: list[tuple[asyncio.Event, str]] = []

    async def submit(self, text: str, render_id: str = "mermaid") -> VisualTree:
        gate = asyncio.Event()
        self.calls.append((gate, text))
        await gate.wait()
        return VisualTree.from_svg(build_svg([text]))

    def release(self, index: int) -> None:
        self.calls[index][0].set()


@pytest.fixture
def ai_graph() -> ConceptGraph:
    """Root with one secondary and one tertiary, plus an orphaned tertiary."""
    return ConceptGraph(concepts=[
        Concept(id="c1", label="Artificial Intelligence", type="main", connections=["c2"]),
        Concept(id="c2", label="Machine Learning", type="secondary", connections=["c3"]),
        Concept(id="c3", label="Neural Networks", type="tertiary", connections=[]),
        Concept(id="c4", label="Orphaned Topic", type="tertiary", connections=[]),
    ])


@pytest.fixture
def ai_svg() -> str:
    return build_svg(["Artificial Intelligence", "Machine Learning", "Neural Networks"])

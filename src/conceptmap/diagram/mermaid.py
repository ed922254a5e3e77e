"""Mermaid mindmap renderers for concept graphs."""

import logging

from ..config import ConceptMapConfig, LabelConfig
from ..labels import sanitize_label, truncate_label
from ..models.concept import ConceptGraph
from .framework import DiagramGenerator, DiagramRenderer

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Mindmap"
PLACEHOLDER_LEAF = "No concepts yet"

ROOT_INDENT = "  "
SECONDARY_INDENT = "    "
TERTIARY_INDENT = "      "


def _root_line(label: str) -> str:
    return f"{ROOT_INDENT}root(({label}))"


def _title_label(title: str | None) -> str:
    return sanitize_label(title) or DEFAULT_TITLE


class MermaidMindmapRenderer(DiagramRenderer):
    """Three-tier mindmap: root, connected secondaries, their tertiaries.

    Blank lines are inserted between branches to loosen the renderer's
    auto-layout. Output is deterministic for a given graph and title.
    """

    def __init__(self, labels: LabelConfig | None = None):
        self.labels = labels or LabelConfig()

    @property
    def format_name(self) -> str:
        return "mindmap"

    def get_file_extension(self) -> str:
        return ".mmd"

    def _shorten(self, text: str, limit: int) -> str:
        return truncate_label(text, limit, self.labels.word_boundary_ratio, self.labels.ellipsis)

    def render(self, graph: ConceptGraph | None, title: str) -> str:
        """Render graph as Mermaid mindmap syntax."""
        if graph is None or graph.is_empty:
            return "\n".join([
                "mindmap",
                _root_line(_title_label(title)),
                f"{SECONDARY_INDENT}{PLACEHOLDER_LEAF}",
            ])

        root = graph.root
        root_label = self._shorten(root.label, self.labels.root_limit) or _title_label(title)

        chunks = ["mindmap\n", f"{_root_line(root_label)}\n"]

        secondaries = [
            s for s in graph.secondaries()
            if self._shorten(s.label, self.labels.secondary_limit)
        ]
        for index, secondary in enumerate(secondaries):
            if index > 0:
                chunks.append("\n\n")

            secondary_label = self._shorten(secondary.label, self.labels.secondary_limit)
            chunks.append(f"{SECONDARY_INDENT}{secondary_label}\n")

            children = []
            for tertiary in graph.tertiaries_of(secondary):
                tertiary_label = self._shorten(tertiary.label, self.labels.tertiary_limit)
                if tertiary_label:
                    children.append(tertiary_label)
                else:
                    logger.debug(f"Skipping tertiary {tertiary.id!r}: label is empty after sanitizing")

            for child_index, tertiary_label in enumerate(children):
                chunks.append(f"{TERTIARY_INDENT}{tertiary_label}\n")

                # Split long child lists in two
                if len(children) > 3 and child_index == len(children) // 2 - 1:
                    chunks.append("\n")

            if children:
                chunks.append("\n")

        return "".join(chunks)


class MermaidHierarchyRenderer(DiagramRenderer):
    """Depth-first mindmap following every connection from the root.

    Each concept appears once. Concepts never reached from the root are
    attached as extra branches directly under it.
    """

    @property
    def format_name(self) -> str:
        return "hierarchy"

    def get_file_extension(self) -> str:
        return ".mmd"

    def render(self, graph: ConceptGraph | None, title: str) -> str:
        """Render graph as a depth-first Mermaid mindmap."""
        if graph is None or graph.is_empty:
            return "\n".join(["mindmap", _root_line(_title_label(title))])

        root = graph.root
        visited = {root.id}
        lines = ["mindmap", _root_line(sanitize_label(root.label) or _title_label(title))]

        def visit(concept, level: int) -> None:
            if concept.id in visited:
                return
            visited.add(concept.id)

            label = sanitize_label(concept.label)
            if label:
                lines.append(f"{'  ' * (level + 1)}{label}")
                level += 1
            for child in graph.children_of(concept):
                visit(child, level)

        for child in graph.children_of(root):
            visit(child, 1)

        for concept in graph:
            if concept.id not in visited:
                visit(concept, 1)

        return "\n".join(lines) + "\n"


def create_generator(config: ConceptMapConfig | None = None) -> DiagramGenerator:
    """Create a generator with both Mermaid renderers registered."""
    generator = DiagramGenerator(config)
    generator.add_renderer(MermaidMindmapRenderer(generator.config.labels))
    generator.add_renderer(MermaidHierarchyRenderer())
    return generator


def generate(graph: ConceptGraph | None, title: str, labels: LabelConfig | None = None) -> str:
    """Compile a concept graph into Mermaid mindmap text.

    Never raises for empty input: an empty or missing graph yields a
    placeholder diagram.
    """
    return MermaidMindmapRenderer(labels).render(graph, title)

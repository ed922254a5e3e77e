"""Diagram generation framework: renderer interface and format registry."""

import logging
from abc import ABC, abstractmethod

from ..config import ConceptMapConfig, create_default_config
from ..models.concept import ConceptGraph

logger = logging.getLogger(__name__)


class DiagramRenderer(ABC):
    """Abstract base class for diagram description renderers."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the output format."""
        pass

    @abstractmethod
    def render(self, graph: ConceptGraph | None, title: str) -> str:
        """Render a concept graph to a textual diagram description."""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format."""
        pass


class DiagramGenerator:
    """Registry of diagram renderers keyed by format name."""

    def __init__(self, config: ConceptMapConfig | None = None):
        self.config = config or create_default_config()
        self.renderers: dict[str, DiagramRenderer] = {}

    def add_renderer(self, renderer: DiagramRenderer) -> None:
        """Add a diagram renderer."""
        self.renderers[renderer.format_name] = renderer

    def render_diagram(self, graph: ConceptGraph | None, title: str, format_name: str = "mindmap") -> str:
        """Render a concept graph with the named renderer.

        Args:
            graph: Concept graph to render, may be empty or None
            title: Diagram title
            format_name: Output format ('mindmap', 'hierarchy')

        Returns:
            Diagram description as string
        """
        if format_name not in self.renderers:
            available = list(self.renderers.keys())
            raise ValueError(f"Unknown format '{format_name}'. Available: {available}")

        renderer = self.renderers[format_name]
        logger.debug(f"Rendering diagram with {renderer.format_name} renderer")
        return renderer.render(graph, title)

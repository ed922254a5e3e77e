"""Diagram description generation for concept graphs.

Compiles a concept graph into Mermaid mindmap text ready for an external
rendering engine.
"""

from .framework import DiagramGenerator, DiagramRenderer
from .mermaid import MermaidHierarchyRenderer, MermaidMindmapRenderer, create_generator, generate

__all__ = [
    "DiagramGenerator",
    "DiagramRenderer",
    "MermaidMindmapRenderer",
    "MermaidHierarchyRenderer",
    "create_generator",
    "generate",
]

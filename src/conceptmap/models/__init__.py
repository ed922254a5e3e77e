"""Data models for conceptmap."""

from .concept import Concept, ConceptGraph, ConceptType, load_graph, parse_graph

__all__ = [
    "Concept",
    "ConceptGraph",
    "ConceptType",
    "load_graph",
    "parse_graph",
]

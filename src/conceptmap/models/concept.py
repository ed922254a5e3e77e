"""Concept graph models shared by the generator and the reconciliation engine."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConceptType(str, Enum):
    """Concept tiers of the three-level hierarchy."""
    MAIN = "main"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


class Concept(BaseModel):
    """A single concept extracted from document text."""

    id: str = Field(description="Opaque identifier, stable across renders")
    label: str = Field(description="Human-readable label")
    type: ConceptType = Field(default=ConceptType.SECONDARY, description="Tier in the hierarchy")
    connections: list[str] = Field(default_factory=list, description="Ids of child concepts, in order")

    model_config = ConfigDict(frozen=True)

    @field_validator("connections", mode="before")
    @classmethod
    def validate_connections(cls, v):
        return [] if v is None else v


class ConceptGraph(BaseModel):
    """Ordered collection of concepts treated as immutable input."""

    concepts: list[Concept] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __len__(self) -> int:
        return len(self.concepts)

    def __iter__(self) -> Iterator[Concept]:
        return iter(self.concepts)

    @property
    def is_empty(self) -> bool:
        return not self.concepts

    def get(self, concept_id: str) -> Concept | None:
        """Look up a concept by id, first occurrence wins."""
        for concept in self.concepts:
            if concept.id == concept_id:
                return concept
        return None

    @property
    def root(self) -> Concept | None:
        """The main concept, falling back to the first concept."""
        for concept in self.concepts:
            if concept.type == ConceptType.MAIN:
                return concept
        return self.concepts[0] if self.concepts else None

    def secondaries(self) -> list[Concept]:
        """Secondary concepts listed in the root's connections, in graph order."""
        root = self.root
        if root is None:
            return []
        return [
            c for c in self.concepts
            if c.type == ConceptType.SECONDARY and c.id in root.connections
        ]

    def tertiaries_of(self, secondary: Concept) -> list[Concept]:
        """Tertiary children of a secondary, in connection order.

        Ids in ``connections`` that do not resolve to a tertiary concept
        are ignored, as are repeated ids.
        """
        return [
            c for c in self.children_of(secondary)
            if c.type == ConceptType.TERTIARY
        ]

    def children_of(self, concept: Concept) -> list[Concept]:
        """All resolvable connections of a concept, in connection order."""
        children = []
        for concept_id in dict.fromkeys(concept.connections):
            child = self.get(concept_id)
            if child is not None:
                children.append(child)
        return children


def parse_graph(data: Any) -> tuple[ConceptGraph, str | None]:
    """Build a graph from decoded JSON.

    Accepts either a bare list of concepts or an object with a ``concepts``
    list and an optional ``title``.

    Returns:
        Tuple of (graph, title or None)
    """
    title = None
    if isinstance(data, dict):
        title = data.get("title")
        data = data.get("concepts", [])
    if data is None:
        data = []
    if not isinstance(data, list):
        raise ValueError("Concept graph must be a list of concepts or an object with a 'concepts' list")

    concepts = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Concept at index {index} must be an object, got {type(item).__name__}")
        concepts.append(Concept(**item))
    return ConceptGraph(concepts=concepts), title


def load_graph(path: str | Path) -> tuple[ConceptGraph, str | None]:
    """Load a concept graph from a JSON file produced by the extraction step."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Concept graph not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in concept graph {path}: {e}")
    return parse_graph(data)

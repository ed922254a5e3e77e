"""conceptmap - Interactive mindmap diagrams for extracted concept graphs.

conceptmap compiles a three-tier concept graph into a Mermaid mindmap,
renders it through an external engine, and maps every rendered label back
to the concept it came from so hover and click behaviour can be attached.
"""

__version__ = "0.1.0"
__author__ = "conceptmap"
__description__ = "Interactive mindmap diagrams for extracted concept graphs"

from conceptmap.config import ConceptMapConfig

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "ConceptMapConfig",
]

"""Tests for Mermaid mindmap generation."""

import pytest

from conceptmap.config import ConceptMapConfig, LabelConfig
from conceptmap.diagram import (
    DiagramGenerator,
    MermaidHierarchyRenderer,
    MermaidMindmapRenderer,
    create_generator,
    generate,
)
from conceptmap.models import Concept, ConceptGraph


def make_graph(*concepts: dict) -> ConceptGraph:
    return ConceptGraph(concepts=[Concept(**c) for c in concepts])


class TestMindmapGeneration:
    """Tests for the three-tier mindmap renderer."""

    def test_ai_overview_scenario(self, ai_graph):
        code = generate(ai_graph, "AI Overview")

        assert code == (
            "mindmap\n"
            "  root((Artificial Intelligence))\n"
            "    Machine Learning\n"
            "      Neural Networks\n"
            "\n"
        )
        assert "Orphaned Topic" not in code

    def test_empty_graph_placeholder(self):
        code = generate(ConceptGraph(), "Empty")
        assert code == "mindmap\n  root((Empty))\n    No concepts yet"

    def test_missing_graph_placeholder(self):
        code = generate(None, "Nothing")
        assert code.startswith("mindmap\n  root((Nothing))")
        assert "No concepts yet" in code

    def test_placeholder_title_sanitized(self):
        code = generate(ConceptGraph(), "Notes (draft)")
        assert "root((Notes draft))" in code

    def test_starts_with_root_declaration(self, ai_graph):
        lines = generate(ai_graph, "AI").split("\n")
        assert lines[0] == "mindmap"
        assert lines[1].startswith("  root((")

    def test_deterministic(self, ai_graph):
        assert generate(ai_graph, "AI") == generate(ai_graph, "AI")

    def test_root_falls_back_to_first_concept(self):
        graph = make_graph(
            {"id": "a", "label": "First", "type": "secondary", "connections": ["b"]},
            {"id": "b", "label": "Second", "type": "secondary"},
        )
        code = generate(graph, "T")
        assert "root((First))" in code
        assert "    Second\n" in code

    def test_connected_secondary_included(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["s"]},
            {"id": "s", "label": "Child", "type": "secondary"},
        )
        assert "    Child\n" in generate(graph, "T")

    def test_unconnected_secondary_excluded(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": []},
            {"id": "s", "label": "Stray", "type": "secondary", "connections": ["r"]},
        )
        assert "Stray" not in generate(graph, "T")

    def test_unknown_connection_ids_ignored(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["missing", "s"]},
            {"id": "s", "label": "Child", "type": "secondary", "connections": ["nope"]},
        )
        assert generate(graph, "T") == "mindmap\n  root((Root))\n    Child\n"

    def test_blank_lines_between_secondaries(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["s1", "s2", "s3"]},
            {"id": "s1", "label": "One", "type": "secondary", "connections": ["t1"]},
            {"id": "s2", "label": "Two", "type": "secondary"},
            {"id": "s3", "label": "Three", "type": "secondary"},
            {"id": "t1", "label": "Leaf", "type": "tertiary"},
        )
        assert generate(graph, "T") == (
            "mindmap\n"
            "  root((Root))\n"
            "    One\n"
            "      Leaf\n"
            "\n"
            "\n\n"
            "    Two\n"
            "\n\n"
            "    Three\n"
        )

    def test_long_child_list_split_after_middle(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["s"]},
            {"id": "s", "label": "Branch", "type": "secondary", "connections": ["a", "b", "c", "d"]},
            {"id": "a", "label": "A", "type": "tertiary"},
            {"id": "b", "label": "B", "type": "tertiary"},
            {"id": "c", "label": "C", "type": "tertiary"},
            {"id": "d", "label": "D", "type": "tertiary"},
        )
        assert generate(graph, "T") == (
            "mindmap\n"
            "  root((Root))\n"
            "    Branch\n"
            "      A\n"
            "      B\n"
            "\n"
            "      C\n"
            "      D\n"
            "\n"
        )

    def test_three_children_not_split(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["s"]},
            {"id": "s", "label": "Branch", "type": "secondary", "connections": ["a", "b", "c"]},
            {"id": "a", "label": "A", "type": "tertiary"},
            {"id": "b", "label": "B", "type": "tertiary"},
            {"id": "c", "label": "C", "type": "tertiary"},
        )
        assert "      A\n      B\n      C\n\n" in generate(graph, "T")

    def test_tier_truncation_limits(self):
        graph = make_graph(
            {"id": "r", "label": "Artificial Intelligence Systems Overview", "type": "main", "connections": ["s"]},
            {"id": "s", "label": "Supervised Learning Methods Explained", "type": "secondary", "connections": ["t"]},
            {"id": "t", "label": "Convolutional Neural Networks", "type": "tertiary"},
        )
        lines = generate(graph, "T").split("\n")
        assert lines[1] == "  root((Artificial Intelligence...))"
        assert lines[2] == "    Supervised Learning..."
        assert lines[3] == "      Convolutional..."

    def test_custom_label_limits(self):
        graph = make_graph({"id": "r", "label": "Artificial Intelligence", "type": "main"})
        code = generate(graph, "T", LabelConfig(rootLimit=10))
        assert "root((Artificial...))" in code

    def test_labels_sanitized(self):
        graph = make_graph(
            {"id": "r", "label": "Root [v2]", "type": "main", "connections": ["s"]},
            {"id": "s", "label": "Graph (theory)", "type": "secondary"},
        )
        code = generate(graph, "T")
        assert "root((Root v2))" in code
        assert "    Graph theory\n" in code

    def test_secondary_with_empty_label_skipped(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["s", "e"]},
            {"id": "s", "label": "Kept", "type": "secondary"},
            {"id": "e", "label": "()", "type": "secondary", "connections": ["t"]},
            {"id": "t", "label": "Leaf", "type": "tertiary"},
        )
        code = generate(graph, "T")
        assert code == "mindmap\n  root((Root))\n    Kept\n"


class TestHierarchyGeneration:
    """Tests for the depth-first renderer."""

    def test_depth_first_with_orphans(self):
        graph = make_graph(
            {"id": "r", "label": "Root", "type": "main", "connections": ["a"]},
            {"id": "a", "label": "Alpha", "type": "secondary", "connections": ["b", "r"]},
            {"id": "b", "label": "Beta", "type": "tertiary", "connections": ["a"]},
            {"id": "o", "label": "Orphan", "type": "secondary"},
        )
        code = MermaidHierarchyRenderer().render(graph, "T")
        assert code == (
            "mindmap\n"
            "  root((Root))\n"
            "    Alpha\n"
            "      Beta\n"
            "    Orphan\n"
        )

    def test_empty_graph(self):
        assert MermaidHierarchyRenderer().render(ConceptGraph(), "Empty") == "mindmap\n  root((Empty))"


class TestDiagramGenerator:
    """Tests for the renderer registry."""

    def test_registered_formats(self):
        generator = create_generator(ConceptMapConfig())
        assert set(generator.renderers) == {"mindmap", "hierarchy"}

    def test_render_by_format(self, ai_graph):
        generator = create_generator()
        assert generator.render_diagram(ai_graph, "AI") == generate(ai_graph, "AI")

    def test_unknown_format(self, ai_graph):
        generator = DiagramGenerator()
        generator.add_renderer(MermaidMindmapRenderer())
        with pytest.raises(ValueError, match="Unknown format 'graphviz'"):
            generator.render_diagram(ai_graph, "AI", "graphviz")

    def test_file_extension(self):
        assert MermaidMindmapRenderer().get_file_extension() == ".mmd"

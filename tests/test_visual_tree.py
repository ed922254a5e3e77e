"""Tests for reading renderer SVG output into a visual tree."""

import pytest

from conceptmap.render import VisualTree, VisualTreeError

from conftest import SVG_NS, build_svg

MERMAID_LIKE_SVG = f"""<svg xmlns="{SVG_NS}" id="mermaid-1">
  <g class="mindmap-edges"><path d="M0,0 L10,10" class="edge"/></g>
  <g class="mindmaps">
    <g class="mindmap-node section-root">
      <circle r="40"/>
      <g class="label">
        <text><tspan class="text-outer-tspan">Artificial</tspan><tspan class="text-outer-tspan">Intelligence</tspan></text>
      </g>
    </g>
    <g class="decoration"><path d="" /><polygon points="0,0 1,1 1,0"/><text>Free text</text></g>
    <g class="mindmap-node section-0">
      <foreignObject width="100" height="20"><div xmlns="http://www.w3.org/1999/xhtml"><span>Machine Learning</span></div></foreignObject>
    </g>
  </g>
</svg>"""


class TestVisualTreeParsing:
    """Tests for group discovery and text extraction."""

    def test_groups_in_document_order(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        classes = [g.classes[0] for g in tree.groups]
        assert classes == ["mindmap-edges", "mindmaps", "mindmap-node", "label", "decoration", "mindmap-node"]

    def test_wrapped_runs_joined(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        root_node = tree.groups[2]
        assert root_node.text_runs == ["Artificial", "Intelligence"]
        assert root_node.text == "Artificial Intelligence"

    def test_outer_group_sees_first_descendant_text(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        assert tree.groups[1].text == "Artificial Intelligence"

    def test_foreign_object_label(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        assert tree.groups[5].text == "Machine Learning"

    def test_group_without_text(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        assert tree.groups[0].text_runs == []
        assert tree.groups[0] not in tree.text_groups()

    def test_node_groups_tagged_by_class(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        tagged = tree.node_groups()
        assert tree.groups[2] in tagged
        assert tree.groups[5] in tagged
        assert tree.groups[4] not in tagged

    def test_primary_shape(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        assert tree.groups[2].shape.tag == "circle"
        # Paths without a move command are not hit areas
        assert tree.groups[4].shape.tag == "polygon"
        assert tree.groups[5].shape is None

    def test_parent_links(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        assert tree.groups[3].parent is tree.groups[2]
        assert tree.groups[2].parent is tree.groups[1]
        assert tree.groups[1].parent is None

    def test_markup_kept_verbatim(self):
        svg = build_svg(["One", "Two"])
        tree = VisualTree.from_svg(svg.encode("utf-8"))
        assert tree.to_markup() == svg.encode("utf-8")

    def test_invalid_markup(self):
        with pytest.raises(VisualTreeError, match="not valid SVG"):
            VisualTree.from_svg("<svg><g></svg>")

    def test_non_svg_root(self):
        with pytest.raises(VisualTreeError, match="expected <svg>"):
            VisualTree.from_svg("<html><body/></html>")

    def test_entities_rejected(self):
        svg = '<!DOCTYPE svg [<!ENTITY x "boom">]><svg xmlns="http://www.w3.org/2000/svg">&x;</svg>'
        with pytest.raises(VisualTreeError):
            VisualTree.from_svg(svg)


class TestEventDispatch:
    """Tests for listener registration and event delivery."""

    def test_click_bubbles_to_parent(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        inner, outer = tree.groups[3], tree.groups[2]
        seen = []
        inner.add_event_listener("click", lambda e: seen.append("inner"))
        outer.add_event_listener("click", lambda e: seen.append("outer"))

        tree.dispatch(inner, "click")
        assert seen == ["inner", "outer"]

    def test_stop_propagation(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        inner, outer = tree.groups[3], tree.groups[2]
        seen = []
        inner.add_event_listener("click", lambda e: e.stop_propagation())
        outer.add_event_listener("click", lambda e: seen.append("outer"))

        event = tree.dispatch(inner, "click")
        assert event.propagation_stopped
        assert seen == []

    def test_pointer_enter_does_not_bubble(self):
        tree = VisualTree.from_svg(MERMAID_LIKE_SVG)
        seen = []
        tree.groups[2].add_event_listener("pointerenter", lambda e: seen.append("outer"))
        tree.dispatch(tree.groups[3], "pointerenter")
        assert seen == []

    def test_remove_listener(self):
        tree = VisualTree.from_svg(build_svg(["One"]))
        group = tree.groups[0]

        def handler(event):
            pass

        group.add_event_listener("click", handler)
        group.add_event_listener("click", handler)
        assert group.listener_count("click") == 1
        group.remove_event_listener("click", handler)
        assert group.listener_count() == 0

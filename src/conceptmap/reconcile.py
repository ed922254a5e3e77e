"""Label reconciliation: recover concept identity from rendered text.

The renderer hands back text only. It may wrap labels over several runs,
echo them twice or show them truncated, so each node group's text is
cleaned and then tried against an ordered list of matcher strategies.
"""

import logging
from typing import Callable, Iterator

from .labels import dedupe_label, normalize_text, strip_truncation_marker
from .models.concept import Concept, ConceptGraph
from .render.visual import NodeGroup, VisualTree

logger = logging.getLogger(__name__)

Matcher = Callable[[str, ConceptGraph], Concept | None]
MissHandler = Callable[[NodeGroup, str], None]


def match_exact(candidate: str, graph: ConceptGraph) -> Concept | None:
    """Concept whose normalized label equals the candidate."""
    for concept in graph:
        if normalize_text(concept.label) == candidate:
            return concept
    return None


def match_prefix(candidate: str, graph: ConceptGraph) -> Concept | None:
    """Concept whose normalized label starts with the (truncated) candidate."""
    for concept in graph:
        if normalize_text(concept.label).startswith(candidate):
            return concept
    return None


def match_root(candidate: str, graph: ConceptGraph) -> Concept | None:
    """The root concept, if the candidate could be the root node's text."""
    root = graph.root
    if root is None:
        return None
    root_normalized = normalize_text(root.label)
    if root_normalized == candidate or root_normalized.startswith(candidate):
        return root
    return None


DEFAULT_MATCHERS: tuple[Matcher, ...] = (match_exact, match_prefix, match_root)


def candidate_groups(tree: VisualTree) -> Iterator[NodeGroup]:
    """Node/section groups first, then every other text-bearing group, each once."""
    seen: set[NodeGroup] = set()
    for group in [*tree.node_groups(), *tree.text_groups()]:
        if group in seen:
            continue
        seen.add(group)
        yield group


def candidate_key(text: str) -> str:
    """Turn a group's rendered text into the normalized key used for matching."""
    label = dedupe_label(text)
    return normalize_text(strip_truncation_marker(label))


def match_concept(
    candidate: str,
    graph: ConceptGraph,
    matchers: tuple[Matcher, ...] = DEFAULT_MATCHERS,
) -> Concept | None:
    """Try each matcher in order; first hit wins."""
    for matcher in matchers:
        concept = matcher(candidate, graph)
        if concept is not None:
            return concept
    return None


def reconcile(
    graph: ConceptGraph,
    tree: VisualTree,
    matchers: tuple[Matcher, ...] = DEFAULT_MATCHERS,
    on_miss: MissHandler | None = None,
) -> dict[NodeGroup, Concept]:
    """Map rendered node groups to the concepts they display.

    The mapping is best effort: several groups may resolve to the same
    concept and groups without a match are left out.

    Args:
        graph: Concept graph the diagram was generated from
        tree: Visual tree returned by the rendering engine
        matchers: Strategies tried in order for every candidate
        on_miss: Called with each group whose text matched nothing

    Returns:
        Mapping of node group to concept
    """
    mapping: dict[NodeGroup, Concept] = {}

    for group in candidate_groups(tree):
        text = group.text
        if not dedupe_label(text).strip():
            continue

        candidate = candidate_key(text)
        if not candidate:
            logger.debug(f"Group {group.index} text {text!r} normalizes to nothing, skipping")
            continue

        concept = match_concept(candidate, graph, matchers)
        if concept is None:
            logger.debug(f"No concept matches label {text!r} (normalized {candidate!r})")
            if on_miss is not None:
                on_miss(group, text)
            continue

        mapping[group] = concept

    logger.debug(f"Reconciled {len(mapping)} of {len(tree.groups)} groups")
    return mapping

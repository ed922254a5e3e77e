"""Label text helpers shared by diagram generation and label reconciliation.

Generation side: ``sanitize_label`` removes characters that are structural in
Mermaid mindmap syntax and ``truncate_label`` shortens a label at a word
boundary. Reconciliation side: ``dedupe_label``, ``strip_truncation_marker``
and ``normalize_text`` turn rendered text back into a comparable key.
"""

import re

ELLIPSIS = "..."
TRUNCATION_MARKERS = ("...", "\u2026")

_STRUCTURAL_CHARS = re.compile(r"[()\[\]{}<>|]")
_CURLY_QUOTES = re.compile("[\u201c\u201d\u2018\u2019]")
_EMOJI = re.compile(
    "[\U0001F600-\U0001F64F"   # emoticons
    "\U0001F300-\U0001F5FF"    # symbols & pictographs
    "\U0001F680-\U0001F6FF"    # transport & map
    "\U0001F900-\U0001F9FF"    # supplemental symbols & pictographs
    "\U0001FA70-\U0001FAFF"    # symbols & pictographs extended-A
    "\u2600-\u26FF"            # misc symbols
    "\u2700-\u27BF"            # dingbats
    "\uFE0F]"                  # emoji presentation selector
)
_WHITESPACE = re.compile(r"\s+")
_MULTI_SPACE = re.compile(r"\s{2,}")
_NON_WORD = re.compile(r"[^\w\s-]")


def sanitize_label(text: str | None) -> str:
    """Strip characters that break Mermaid mindmap rendering.

    Examples:
        >>> sanitize_label("Neural (Deep)   Networks")
        'Neural Deep Networks'
        >>> sanitize_label("“Quoted” `code`")
        "'Quoted' code"
    """
    if not text:
        return ""

    text = _STRUCTURAL_CHARS.sub("", text)
    text = _CURLY_QUOTES.sub("'", text)
    text = text.replace("`", "")
    text = _EMOJI.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def truncate_label(
    text: str | None,
    max_length: int = 20,
    word_boundary_ratio: float = 0.6,
    ellipsis: str = ELLIPSIS,
) -> str:
    """Sanitize and shorten a label for compact display.

    Mermaid mindmaps do not support line breaks inside node text, so long
    labels are cut instead. The cut moves back to the last space when that
    space lies beyond ``word_boundary_ratio`` of the limit.
    """
    sanitized = sanitize_label(text)
    if len(sanitized) <= max_length:
        return sanitized

    truncated = sanitized[:max_length]
    last_space = truncated.rfind(" ")

    if last_space > max_length * word_boundary_ratio:
        return truncated[:last_space] + ellipsis

    return truncated + ellipsis


def dedupe_label(label: str) -> str:
    """Collapse text the renderer accidentally emitted twice.

    Three checks run in order: word-level halves, two parts separated by a
    run of spaces, then raw character halves.

    Examples:
        >>> dedupe_label("Machine Learning Machine Learning")
        'Machine Learning'
        >>> dedupe_label("Deep  Deep")
        'Deep'
        >>> dedupe_label("AIAI")
        'AI'
    """
    words = label.split(" ")
    half_words = len(words) // 2
    if half_words > 0:
        first_half = " ".join(words[:half_words])
        second_half = " ".join(words[half_words:])
        if first_half == second_half and first_half:
            label = first_half

    parts = _MULTI_SPACE.split(label)
    if len(parts) == 2 and parts[0] == parts[1]:
        label = parts[0]

    trimmed = label.strip()
    half = len(trimmed) // 2
    if half > 0 and trimmed[:half] == trimmed[half:]:
        label = trimmed[:half]

    return label


def strip_truncation_marker(text: str) -> str:
    """Remove one trailing ellipsis left by label truncation."""
    for marker in TRUNCATION_MARKERS:
        if text.endswith(marker):
            text = text[: -len(marker)]
            break
    return text.strip()


def normalize_text(text: str) -> str:
    """Lowercase, drop punctuation (hyphens survive) and collapse whitespace.

    Idempotent: ``normalize_text(normalize_text(x)) == normalize_text(x)``.
    """
    text = text.lower()
    text = _NON_WORD.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()

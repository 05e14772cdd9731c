"""Token name handling: clean display names, name alignment and name quality."""

from __future__ import annotations

import re

# Keyword tiers per property type: exact, high, medium
ALIGNMENT_KEYWORDS: dict[str, dict[str, tuple[str, ...]]] = {
    "border-radius": {
        "exact": ("radius", "radii", "border-radius"),
        "high": ("corner", "rounded", "borderradius"),
        "medium": ("round", "curve"),
    },
    "spacing": {
        "exact": ("spacing", "space"),
        "high": ("gap", "margin", "inset", "outset"),
        "medium": ("distance", "separation"),
    },
    "padding": {
        "exact": ("padding", "pad"),
        "high": ("inset", "inner-spacing"),
        "medium": ("internal", "inside"),
    },
    "fill": {
        "exact": ("fill", "background", "bg"),
        "high": ("color", "colour", "surface"),
        "medium": ("tint", "shade"),
    },
    "stroke": {
        "exact": ("stroke", "border", "outline"),
        "high": ("line", "edge"),
        "medium": ("boundary", "perimeter"),
    },
    "typography": {
        "exact": ("typography", "font", "text"),
        "high": ("type", "heading", "body", "caption"),
        "medium": ("letter", "character"),
    },
    "font-size": {
        "exact": ("font-size", "fontsize", "size"),
        "high": ("text-size", "scale", "fontscale"),
        "medium": ("measure", "dimension"),
    },
    "font-family": {
        "exact": ("font-family", "fontfamily", "family"),
        "high": ("font", "typeface", "fontface"),
        "medium": ("type", "text"),
    },
    "font-weight": {
        "exact": ("font-weight", "fontweight", "weight"),
        "high": ("bold", "light", "medium", "heavy"),
        "medium": ("thickness", "density"),
    },
}

# (equal, dot-segment, substring) scores per tier; None means the check is skipped
_TIER_SCORES: tuple[tuple[str, float, float, float | None], ...] = (
    ("exact", 0.95, 0.9, None),
    ("high", 0.85, 0.8, 0.7),
    ("medium", 0.6, 0.55, 0.5),
)

SIZE_QUALIFIER_RE = re.compile(r"\.(xs|sm|md|lg|xl|xxs|xxl|2xl|3xl|4xl|5xl)$")
STEP_SCALE_RE = re.compile(r"\.(100|200|300|400|500|600|700|800|900)$")
NUMERIC_NAME_RE = re.compile(r"^\d+$|\.\d+$")
MAGNITUDE_WORDS: tuple[str, ...] = ("size", "width", "height", "value", "amount", "level", "scale")
BASE_MARKERS: tuple[str, ...] = ("base.", "core.", "foundation.", "primitive.")

FAMILY_SEGMENTS: tuple[str, ...] = (
    "space.", "spacing.", "radius.", "radii.", "padding.", "pad.", "margin.",
    "font.", "typography.", "color.", "colour.", "border.", "stroke.",
)
QUALITY_MARKERS: tuple[tuple[str, float], ...] = (
    ("semantic.", 3.0),
    ("component.", 2.0),
    ("ui.", 2.0),
)


def clean_name(full_path: str) -> str:
    """Strip a leading token-set segment from a dotted token path.

    The first segment is treated as a set name when it contains a space or a
    slash, or starts with a digit ("01 Size, space and Radii.radius.full" ->
    "radius.full"). Paths without such a prefix are returned unchanged.
    """
    parts = full_path.split(".")
    if len(parts) > 1:
        first = parts[0]
        if " " in first or "/" in first or re.match(r"^\d", first):
            return ".".join(parts[1:])
    return full_path


def _has_segment(name: str, keyword: str) -> bool:
    return f".{keyword}" in name or f"{keyword}." in name


def name_alignment(token_name: str | None, property_type: str) -> float:
    """Score in [0, 1] for how well a token name fits an observed property type."""
    if not token_name:
        return 0.0

    name = clean_name(token_name).lower()
    keywords = ALIGNMENT_KEYWORDS.get(property_type)
    if keywords is None:
        return 0.0

    if name == property_type.lower():
        return 1.0

    for tier, equal_score, segment_score, substring_score in _TIER_SCORES:
        for keyword in keywords[tier]:
            if name == keyword:
                return equal_score
            if _has_segment(name, keyword):
                return segment_score
            if substring_score is not None and keyword in name:
                return substring_score

    if SIZE_QUALIFIER_RE.search(name):
        return 0.4
    if STEP_SCALE_RE.search(name):
        return 0.35
    if any(word in name for word in MAGNITUDE_WORDS):
        return 0.3
    if NUMERIC_NAME_RE.search(name):
        return 0.1
    if is_base_token_name(name):
        return 0.05
    return 0.0


def is_base_token_name(token_name: str) -> bool:
    """True when a token name carries a base/core/foundation/primitive marker."""
    name = token_name.lower()
    return any(marker in name for marker in BASE_MARKERS)


def semantic_name_quality(token_name: str) -> float:
    """Tie-break score favouring short, semantic token names over primitives.

    Only used to order candidates that are otherwise tied; it never feeds into
    the confidence value.
    """
    name = token_name.lower()
    score = 0.0

    score += 4.0 * sum(1 for segment in FAMILY_SEGMENTS if segment in name)

    if SIZE_QUALIFIER_RE.search(name):
        score += 3.0
    if STEP_SCALE_RE.search(name):
        score += 2.0

    for marker, bonus in QUALITY_MARKERS:
        if marker in name:
            score += bonus

    if is_base_token_name(name):
        score -= 5.0
    if NUMERIC_NAME_RE.search(name):
        score -= 3.0
    if len(token_name) > 30:
        score -= 2.0

    score += max(0, 15 - len(token_name)) * 0.2
    return score

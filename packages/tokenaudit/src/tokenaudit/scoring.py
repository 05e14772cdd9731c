"""Deterministic confidence scoring of a token candidate against an observed value."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from rapidfuzz import fuzz

from tokenaudit.colors import color_similarity
from tokenaudit.config import MatchConfig
from tokenaudit.names import name_alignment, semantic_name_quality
from tokenaudit.types import ConfidenceLevel, MatchCandidate, MatchType, ResolvedToken

log = structlog.get_logger()

COLOR_TYPES = frozenset({"fill", "stroke"})
NUMERIC_TYPES = frozenset({
    "spacing", "padding", "border-radius", "font-size", "font-weight", "dimension",
})
MIXED_TYPES = frozenset({"typography"})


@dataclass(frozen=True)
class ScoreInputs:
    value_similarity: float
    name_alignment: float
    exact_value: bool
    is_semantic: bool
    strong_alignment: bool
    similar_value: bool
    loose_value: bool


@dataclass(frozen=True)
class ConfidenceTier:
    """One band of the confidence combiner: first tier whose guard passes wins."""

    name: str
    guard: Callable[[ScoreInputs], bool]
    formula: Callable[[ScoreInputs], float]


def _bonus(s: ScoreInputs, amount: float) -> float:
    return amount if s.is_semantic else 0.0


CONFIDENCE_TIERS: tuple[ConfidenceTier, ...] = (
    ConfidenceTier(
        "aligned_exact",
        lambda s: s.strong_alignment and s.exact_value,
        lambda s: min(1.0, 0.95 + _bonus(s, 0.05)),
    ),
    ConfidenceTier(
        "aligned_similar",
        lambda s: s.strong_alignment and s.similar_value,
        lambda s: max(0.8, 0.8 + _bonus(s, 0.1) - (1.0 - s.value_similarity) * 0.3),
    ),
    ConfidenceTier(
        "unaligned_exact",
        lambda s: s.exact_value,
        lambda s: min(0.89, 0.7 + _bonus(s, 0.15) + s.name_alignment * 0.1),
    ),
    ConfidenceTier(
        "unaligned_similar",
        lambda s: s.similar_value,
        lambda s: min(
            0.69,
            0.4 + _bonus(s, 0.2) + (s.value_similarity - 0.9) * 0.5 + s.name_alignment * 0.2,
        ),
    ),
    ConfidenceTier(
        "loose_value",
        lambda s: s.loose_value,
        lambda s: min(0.5, 0.3 + _bonus(s, 0.1) + s.name_alignment * 0.1),
    ),
    ConfidenceTier(
        "weak",
        lambda s: True,
        lambda s: max(0.0, s.value_similarity * 0.2 + s.name_alignment * 0.1),
    ),
)


def _parse_number(value: str, units: tuple[str, ...]) -> float | None:
    text = value.strip().lower()
    # Longest unit first so "rem" is not read as "em"
    for unit in sorted(units, key=len, reverse=True):
        if text.endswith(unit):
            text = text[: -len(unit)].strip()
            break
    if not re.fullmatch(r"[-+]?(\d+(\.\d*)?|\.\d+)", text):
        return None
    return float(text)


def numeric_similarity(observed: str, candidate: str, config: MatchConfig | None = None) -> float:
    """Relative closeness of two dimension values, 0.0 below the configured floor."""
    sc = (config or MatchConfig()).similarity
    a = _parse_number(observed, sc.units)
    b = _parse_number(candidate, sc.units)
    if a is None or b is None:
        return 0.0
    if a == b:
        return 1.0

    average = (a + b) / 2
    if average == 0:
        return 0.0
    similarity = 1.0 - abs(a - b) / abs(average)
    return similarity if similarity > sc.numeric_min_similarity else 0.0


def string_similarity(observed: str, candidate: str) -> float:
    """Case-insensitive edit-distance ratio in [0, 1]."""
    return fuzz.ratio(observed.lower(), candidate.lower()) / 100.0


def value_similarity(
    observed: str,
    candidate: str,
    property_type: str,
    config: MatchConfig | None = None,
) -> float:
    """Type-aware similarity between an observed value and a token value."""
    config = config or MatchConfig()
    if observed == candidate:
        return 1.0

    if property_type in COLOR_TYPES:
        return color_similarity(observed, candidate, config.similarity.color_min_similarity)

    if property_type in NUMERIC_TYPES:
        return numeric_similarity(observed, candidate, config)

    if property_type in MIXED_TYPES:
        units = config.similarity.units
        if _parse_number(observed, units) is not None and _parse_number(candidate, units) is not None:
            return numeric_similarity(observed, candidate, config)

    return string_similarity(observed, candidate)


def combine_confidence(inputs: ScoreInputs) -> tuple[float, str]:
    """Apply the first matching confidence tier. Returns (confidence, tier name)."""
    for tier in CONFIDENCE_TIERS:
        if tier.guard(inputs):
            return tier.formula(inputs), tier.name
    return 0.0, "none"


def _score_inputs(
    similarity: float,
    alignment: float,
    exact: bool,
    is_semantic: bool,
    config: MatchConfig,
) -> ScoreInputs:
    ac = config.alignment
    return ScoreInputs(
        value_similarity=similarity,
        name_alignment=alignment,
        exact_value=exact,
        is_semantic=is_semantic,
        strong_alignment=alignment >= ac.strong_alignment,
        similar_value=not exact and similarity >= ac.similar_value,
        loose_value=similarity >= ac.loose_value,
    )


def calculate_confidence(
    observed_value: str,
    token_value: str,
    property_type: str,
    is_semantic_token: bool = False,
    token_name: str | None = None,
    config: MatchConfig | None = None,
) -> float:
    """Confidence in [0, 1] that a token should replace an observed value."""
    config = config or MatchConfig()
    similarity = value_similarity(observed_value, token_value, property_type, config)
    alignment = name_alignment(token_name, property_type)
    inputs = _score_inputs(
        similarity, alignment, observed_value == token_value, is_semantic_token, config
    )
    confidence, _ = combine_confidence(inputs)
    return confidence


def classify_match(confidence: float, is_semantic_token: bool, config: MatchConfig | None = None) -> MatchType:
    """Bucket a confidence into a display match type."""
    t = (config or MatchConfig()).thresholds
    if confidence >= t.exact:
        return "exact"
    if confidence >= t.semantic and is_semantic_token:
        return "semantic"
    if confidence >= t.similar:
        return "similar"
    return "base"


def confidence_level(confidence: float, config: MatchConfig | None = None) -> ConfidenceLevel:
    t = (config or MatchConfig()).thresholds
    if confidence >= t.level_high:
        return "high"
    if confidence >= t.level_medium:
        return "medium"
    return "low"


def score_candidate(
    observed_value: str,
    property_type: str,
    token_name: str,
    token: ResolvedToken,
    config: MatchConfig | None = None,
) -> MatchCandidate | None:
    """Score one resolved token against an observed value.

    Returns None when the token is not a candidate: zero value similarity, or
    a confidence below the configured floor.
    """
    config = config or MatchConfig()
    if not token.value:
        return None

    similarity = value_similarity(observed_value, token.value, property_type, config)
    if similarity <= 0.0:
        return None

    alignment = name_alignment(token_name, property_type)
    exact = observed_value == token.value
    inputs = _score_inputs(similarity, alignment, exact, token.is_reference, config)
    confidence, tier = combine_confidence(inputs)

    if confidence < config.thresholds.min_confidence:
        log.debug(
            "candidate_below_floor",
            token=token_name,
            confidence=round(confidence, 4),
            tier=tier,
        )
        return None

    return MatchCandidate(
        token_name=token_name,
        token_value=token.value,
        confidence=confidence,
        is_semantic_token=token.is_reference,
        match_type=classify_match(confidence, token.is_reference, config),
        value_similarity=similarity,
        name_alignment=alignment,
        exact_value=exact,
        name_quality=semantic_name_quality(token_name),
        tier=tier,
        reference_chain=list(token.reference_chain),
        original_reference=token.original_reference,
        token_type=token.token_type,
    )

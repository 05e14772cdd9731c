"""Configuration for the tokenaudit resolution and matching engine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ResolverConfig:
    metadata_prefix: str = "$"
    themes_key: str = "$themes"
    active_statuses: tuple[str, ...] = ("enabled", "source")
    # Set-name markers that win the tie-break when a reference matches several sets
    base_set_markers: tuple[str, ...] = ("base", "core", "foundation", "primitive")
    base_set_prefixes: tuple[str, ...] = ("00",)
    example_resolutions: int = 5


@dataclass
class ValueSimilarityConfig:
    color_min_similarity: float = 0.9
    numeric_min_similarity: float = 0.8
    units: tuple[str, ...] = ("px", "rem", "em")


@dataclass
class AlignmentConfig:
    strong_alignment: float = 0.8
    similar_value: float = 0.9
    loose_value: float = 0.8


@dataclass
class Thresholds:
    min_confidence: float = 0.3
    exact: float = 0.95
    semantic: float = 0.8
    similar: float = 0.7
    level_high: float = 0.8
    level_medium: float = 0.6


@dataclass
class RankingConfig:
    alignment_tolerance: float = 0.1
    confidence_tolerance: float = 0.05
    max_candidates: int = 8
    max_alternatives: int = 3
    max_suggestions: int = 3


@dataclass
class MatchConfig:
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    similarity: ValueSimilarityConfig = field(default_factory=ValueSimilarityConfig)
    alignment: AlignmentConfig = field(default_factory=AlignmentConfig)
    thresholds: Thresholds = field(default_factory=Thresholds)
    ranking: RankingConfig = field(default_factory=RankingConfig)

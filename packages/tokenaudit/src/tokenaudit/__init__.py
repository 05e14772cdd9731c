"""tokenaudit - Design token resolution and hardcoded value matching."""

from tokenaudit.config import MatchConfig
from tokenaudit.matcher import Matcher, MatcherStats, match_values
from tokenaudit.names import clean_name
from tokenaudit.resolver import extract_themes, resolve_tokens, summarize_resolution
from tokenaudit.scoring import calculate_confidence
from tokenaudit.types import (
    MatchCandidate,
    MatchReport,
    ObservedValue,
    ResolvedToken,
    Theme,
    TokenMatch,
    UnmatchedValue,
)

__all__ = [
    "MatchCandidate",
    "MatchConfig",
    "MatchReport",
    "Matcher",
    "MatcherStats",
    "ObservedValue",
    "ResolvedToken",
    "Theme",
    "TokenMatch",
    "UnmatchedValue",
    "calculate_confidence",
    "clean_name",
    "extract_themes",
    "match_values",
    "resolve_tokens",
    "summarize_resolution",
]

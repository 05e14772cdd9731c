"""Main orchestration: candidate scoring, ranking, packaging and batch aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cmp_to_key

import structlog

from tokenaudit.config import MatchConfig
from tokenaudit.scoring import score_candidate
from tokenaudit.types import (
    MatchCandidate,
    MatchReport,
    ObservedValue,
    ResolvedToken,
    TokenMatch,
    UnmatchedValue,
)

log = structlog.get_logger()

MATCH_TYPE_PREFIXES: dict[str, str] = {
    "semantic": "[Semantic] ",
    "similar": "[Similar] ",
    "base": "[Base] ",
}


@dataclass
class MatcherStats:
    """Statistics collected during matching."""

    values: int = 0
    tokens: int = 0
    comparisons: int = 0
    pruned: int = 0
    matched_values: int = 0
    unmatched_values: int = 0
    matched_occurrences: int = 0
    unmatched_occurrences: int = 0
    match_types: dict[str, int] = field(default_factory=lambda: {
        "exact": 0, "semantic": 0, "similar": 0, "base": 0
    })


def _cmp(a: float, b: float) -> int:
    return (a > b) - (a < b)


def match_type_prefix(candidate: MatchCandidate) -> str:
    if candidate.match_type == "exact":
        return "[Exact Semantic] " if candidate.is_semantic_token else "[Exact Base] "
    return MATCH_TYPE_PREFIXES.get(candidate.match_type, "")


def format_suggestion(candidate: MatchCandidate) -> str:
    """Human-readable one-liner for an alternative token."""
    return (
        f"{match_type_prefix(candidate)}{candidate.display_name} "
        f"({candidate.token_value}) - {round(candidate.confidence * 100)}%"
    )


class Matcher:
    """Ranks resolved tokens as replacements for observed hardcoded values."""

    def __init__(self, config: MatchConfig | None = None) -> None:
        self.config = config or MatchConfig()
        self.stats = MatcherStats()

    def _compare(self, a: MatchCandidate, b: MatchCandidate) -> int:
        """Multi-key comparator; a key only decides when the previous ones are practically equal."""
        rc = self.config.ranking

        if abs(a.name_alignment - b.name_alignment) > rc.alignment_tolerance:
            return _cmp(b.name_alignment, a.name_alignment)

        if a.exact_value != b.exact_value:
            return -1 if a.exact_value else 1

        if abs(a.confidence - b.confidence) > rc.confidence_tolerance:
            return _cmp(b.confidence, a.confidence)

        if a.is_semantic_token != b.is_semantic_token:
            return -1 if a.is_semantic_token else 1

        if a.name_quality != b.name_quality:
            return _cmp(b.name_quality, a.name_quality)

        return _cmp(a.token_name, b.token_name)

    def rank_candidates(
        self,
        observed: ObservedValue,
        resolved_tokens: dict[str, ResolvedToken],
    ) -> list[MatchCandidate]:
        """Score every resolved token against one observed value and order the survivors."""
        candidates: list[MatchCandidate] = []
        for token_name, token in resolved_tokens.items():
            if not token.value:
                continue
            self.stats.comparisons += 1
            candidate = score_candidate(
                observed.value, observed.type, token_name, token, self.config
            )
            if candidate is None:
                self.stats.pruned += 1
                continue
            candidates.append(candidate)

        # Sort by name first so the tolerance comparator sees a fixed input order
        candidates.sort(key=lambda c: c.token_name)
        candidates.sort(key=cmp_to_key(self._compare))
        return candidates[: self.config.ranking.max_candidates]

    def match_one(
        self,
        observed: ObservedValue,
        resolved_tokens: dict[str, ResolvedToken],
    ) -> TokenMatch | UnmatchedValue:
        """Match a single observed value; unmatched when no candidate survives pruning."""
        self.stats.values += 1
        candidates = self.rank_candidates(observed, resolved_tokens)

        if not candidates:
            log.debug("no_candidates", value=observed.value, type=observed.type)
            self.stats.unmatched_values += 1
            self.stats.unmatched_occurrences += observed.count
            return UnmatchedValue(value=observed.value, type=observed.type, count=observed.count)

        best = candidates[0]
        alternatives = candidates[1: 1 + self.config.ranking.max_alternatives]

        log.debug(
            "match_one_done",
            value=observed.value,
            type=observed.type,
            token=best.token_name,
            confidence=round(best.confidence, 4),
            tier=best.tier,
            alternatives=[c.token_name for c in alternatives],
        )

        self.stats.matched_values += 1
        self.stats.matched_occurrences += observed.count
        self.stats.match_types[best.match_type] += 1

        return TokenMatch(
            observed_value=observed.value,
            observed_type=observed.type,
            count=observed.count,
            token_name=best.display_name,
            full_token_path=best.token_name,
            token_value=best.token_value,
            confidence=best.confidence,
            match_type=best.match_type,
            is_semantic_token=best.is_semantic_token,
            reference_chain=list(best.reference_chain),
            original_reference=best.original_reference,
            token_type=best.token_type,
            node_ids=list(observed.node_ids),
            alternatives=alternatives,
            suggestions=[
                format_suggestion(c)
                for c in alternatives[: self.config.ranking.max_suggestions]
            ],
        )

    def match_values(
        self,
        observed_values: list[ObservedValue],
        resolved_tokens: dict[str, ResolvedToken],
    ) -> MatchReport:
        """Match a batch of observed values. Values are independent of each other."""
        self.stats.tokens = len(resolved_tokens)
        log.info(
            "match_values_start",
            values=len(observed_values),
            tokens=len(resolved_tokens),
            semantic_tokens=sum(1 for t in resolved_tokens.values() if t.is_reference),
        )

        report = MatchReport()
        for observed in observed_values:
            result = self.match_one(observed, resolved_tokens)
            if isinstance(result, TokenMatch):
                report.token_matches.append(result)
                report.matched_occurrences += observed.count
            else:
                report.unmatched_values.append(result)
                report.unmatched_occurrences += observed.count

        log.info(
            "match_values_done",
            matched=len(report.token_matches),
            unmatched=len(report.unmatched_values),
            matched_occurrences=report.matched_occurrences,
            unmatched_occurrences=report.unmatched_occurrences,
        )
        return report

    def recommendations_for_value(
        self,
        value: str,
        property_type: str,
        resolved_tokens: dict[str, ResolvedToken],
    ) -> list[MatchCandidate]:
        """Ranked recommendations for one raw value, e.g. for a per-frame view.

        Each candidate carries its full token path in ``token_name`` and the
        set-stripped name in ``display_name``.
        """
        observed = ObservedValue(type=property_type, value=value)
        return self.rank_candidates(observed, resolved_tokens)


def match_values(
    observed_values: list[ObservedValue],
    resolved_tokens: dict[str, ResolvedToken],
    config: MatchConfig | None = None,
) -> MatchReport:
    """Match observed values against resolved tokens with a fresh Matcher."""
    return Matcher(config).match_values(observed_values, resolved_tokens)

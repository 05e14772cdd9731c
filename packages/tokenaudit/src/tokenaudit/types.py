"""Core types for the tokenaudit design-token matching system."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from tokenaudit.names import clean_name

PropertyType = Literal["fill", "stroke", "spacing", "padding", "typography", "border-radius"]
PROPERTY_TYPES: tuple[str, ...] = (
    "fill", "stroke", "spacing", "padding", "typography", "border-radius",
)

TokenSetStatus = Literal["enabled", "source", "disabled"]
MatchType = Literal["exact", "semantic", "similar", "base"]
ConfidenceLevel = Literal["high", "medium", "low"]
DiagnosticKind = Literal[
    "missing_token",
    "circular_reference",
    "unresolved_reference",
    "malformed_token",
    "missing_set",
]


@dataclass
class Theme:
    id: str
    name: str
    selected_token_sets: dict[str, TokenSetStatus] = field(default_factory=dict)


@dataclass
class FlatToken:
    """A leaf of the raw token tree, addressed by its full path."""

    raw: dict[str, Any]
    set_name: str
    relative_path: str

    @property
    def raw_value(self) -> Any:
        return self.raw.get("$value", self.raw.get("value"))

    @property
    def token_type(self) -> str | None:
        token_type = self.raw.get("$type", self.raw.get("type"))
        return str(token_type) if token_type is not None else None


@dataclass
class ResolvedToken:
    value: str
    is_reference: bool
    original_reference: str | None = None
    reference_chain: list[str] = field(default_factory=list)
    token_type: str | None = None
    unresolved_references: list[str] = field(default_factory=list)

    @property
    def is_fully_resolved(self) -> bool:
        return not self.unresolved_references


@dataclass
class ResolutionDiagnostic:
    kind: DiagnosticKind
    path: str
    message: str
    reference: str | None = None


@dataclass
class ResolutionSummary:
    total_resolved_tokens: int
    semantic_tokens_count: int
    raw_tokens_count: int
    example_resolutions: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class ObservedValue:
    """A hardcoded value found in a design file, supplied by the extractor."""

    type: PropertyType
    value: str
    count: int = 1
    locations: list[str] = field(default_factory=list)
    node_ids: list[str] = field(default_factory=list)


@dataclass
class MatchCandidate:
    token_name: str
    token_value: str
    confidence: float
    is_semantic_token: bool
    match_type: MatchType
    value_similarity: float = 0.0
    name_alignment: float = 0.0
    exact_value: bool = False
    name_quality: float = 0.0
    tier: str = ""
    reference_chain: list[str] = field(default_factory=list)
    original_reference: str | None = None
    token_type: str | None = None

    @property
    def display_name(self) -> str:
        """Token path without its leading set segment, for display."""
        return clean_name(self.token_name)


@dataclass
class TokenMatch:
    observed_value: str
    observed_type: str
    count: int
    token_name: str
    full_token_path: str
    token_value: str
    confidence: float
    match_type: MatchType
    is_semantic_token: bool
    reference_chain: list[str] = field(default_factory=list)
    original_reference: str | None = None
    token_type: str | None = None
    node_ids: list[str] = field(default_factory=list)
    alternatives: list[MatchCandidate] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class UnmatchedValue:
    value: str
    type: str
    count: int


@dataclass
class MatchReport:
    token_matches: list[TokenMatch] = field(default_factory=list)
    unmatched_values: list[UnmatchedValue] = field(default_factory=list)
    matched_occurrences: int = 0
    unmatched_occurrences: int = 0

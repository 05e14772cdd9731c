"""Design-token resolution: theme set selection, flattening and reference substitution."""

from __future__ import annotations

import re
from typing import Any

import structlog

from tokenaudit.config import MatchConfig, ResolverConfig
from tokenaudit.types import (
    FlatToken,
    ResolutionDiagnostic,
    ResolutionSummary,
    ResolvedToken,
    Theme,
)

log = structlog.get_logger()

REFERENCE_RE = re.compile(r"\{([^}]+)\}")


def _resolver_config(config: MatchConfig | None) -> ResolverConfig:
    return (config or MatchConfig()).resolver


def _is_leaf(node: Any) -> bool:
    return isinstance(node, dict) and ("$value" in node or "value" in node)


def _is_metadata_key(key: str, rc: ResolverConfig) -> bool:
    return key.startswith(rc.metadata_prefix)


def _stringify(raw: Any) -> str | None:
    """Render a leaf value as text, or None if it is not a scalar."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (str, int, float)):
        return str(raw)
    return None


def _diagnose(
    diagnostics: list[ResolutionDiagnostic] | None,
    kind: str,
    path: str,
    message: str,
    reference: str | None = None,
) -> None:
    if diagnostics is not None:
        diagnostics.append(
            ResolutionDiagnostic(kind=kind, path=path, message=message, reference=reference)
        )


def extract_themes(tree: dict[str, Any], config: MatchConfig | None = None) -> list[Theme]:
    """Read themes from the reserved ``$themes`` array, skipping incomplete entries."""
    rc = _resolver_config(config)
    raw_themes = tree.get(rc.themes_key)
    if not isinstance(raw_themes, list):
        return []

    themes: list[Theme] = []
    for entry in raw_themes:
        if not isinstance(entry, dict):
            continue
        theme_id = entry.get("id")
        name = entry.get("name")
        selected = entry.get("selectedTokenSets")
        if not theme_id or not name or not isinstance(selected, dict):
            log.debug("theme_skipped", theme=entry.get("name"))
            continue
        themes.append(Theme(id=str(theme_id), name=str(name), selected_token_sets=dict(selected)))
    return themes


def select_theme(themes: list[Theme], name_or_id: str) -> Theme | None:
    """Find a theme by name (case-insensitive) or id."""
    wanted = name_or_id.casefold()
    for theme in themes:
        if theme.id == name_or_id or theme.name.casefold() == wanted:
            return theme
    return None


def _has_typed_leaf(node: dict[str, Any]) -> bool:
    for value in node.values():
        if isinstance(value, dict):
            if _is_leaf(value) and ("$type" in value or "type" in value):
                return True
            if _has_typed_leaf(value):
                return True
    return False


def extract_token_sets(tree: dict[str, Any], config: MatchConfig | None = None) -> list[str]:
    """Names of top-level sets that contain at least one typed token."""
    rc = _resolver_config(config)
    return [
        key
        for key, value in tree.items()
        if not _is_metadata_key(key, rc) and isinstance(value, dict) and _has_typed_leaf(value)
    ]


def filter_tokens_by_selected_sets(tree: dict[str, Any], selected_sets: list[str]) -> dict[str, Any]:
    """Sub-tree holding only the named sets, in the order given."""
    return {name: tree[name] for name in selected_sets if name in tree}


def available_token_sets(
    tree: dict[str, Any],
    theme: Theme | None = None,
    config: MatchConfig | None = None,
    diagnostics: list[ResolutionDiagnostic] | None = None,
) -> list[str]:
    """Sets participating in resolution, theme-selected sets first.

    Every other non-metadata set is appended after the theme's own sets so that
    semantic tokens stay resolvable when a theme's set list is incomplete.
    """
    rc = _resolver_config(config)
    all_sets = [key for key in tree if not _is_metadata_key(key, rc)]
    if theme is None:
        return all_sets

    selected: list[str] = []
    for set_name, status in theme.selected_token_sets.items():
        if status not in rc.active_statuses:
            continue
        if set_name not in tree:
            log.warning("theme_set_missing", theme=theme.name, token_set=set_name)
            _diagnose(diagnostics, "missing_set", set_name, f"Theme '{theme.name}' references a missing set")
            continue
        selected.append(set_name)

    for set_name in all_sets:
        if set_name not in selected:
            selected.append(set_name)
    return selected


def _collect(
    node: dict[str, Any],
    flat: dict[str, FlatToken],
    set_name: str,
    prefix: str,
    diagnostics: list[ResolutionDiagnostic] | None,
) -> None:
    for key, value in node.items():
        if not isinstance(value, dict):
            continue
        relative_path = f"{prefix}.{key}" if prefix else key
        full_path = f"{set_name}.{relative_path}" if set_name else relative_path

        if _is_leaf(value):
            token = FlatToken(raw=value, set_name=set_name, relative_path=relative_path)
            if _stringify(token.raw_value) is None:
                log.warning("malformed_token_skipped", path=full_path)
                _diagnose(diagnostics, "malformed_token", full_path, "Token value is not a string or number")
                continue
            flat[full_path] = token
        else:
            _collect(value, flat, set_name, relative_path, diagnostics)


def flatten_tokens(
    tree: dict[str, Any],
    sets: list[str],
    diagnostics: list[ResolutionDiagnostic] | None = None,
) -> dict[str, FlatToken]:
    """Walk the selected sets into a flat ``SetName.nested.path -> FlatToken`` table."""
    flat: dict[str, FlatToken] = {}
    for set_name in sets:
        node = tree.get(set_name)
        if not isinstance(node, dict) or _is_leaf(node):
            log.debug("token_set_skipped", token_set=set_name)
            continue
        _collect(node, flat, set_name, "", diagnostics)
    return flat


def _is_base_set(path: str, flat: dict[str, FlatToken], rc: ResolverConfig) -> bool:
    set_name = flat[path].set_name
    lowered = set_name.lower()
    return any(marker in lowered for marker in rc.base_set_markers) or set_name.startswith(
        rc.base_set_prefixes
    )


def _reference_candidates(reference: str, flat: dict[str, FlatToken], rc: ResolverConfig) -> list[str]:
    if reference in flat:
        return [reference]
    suffix = f".{reference}"
    matches = [path for path in flat if path == reference or path.endswith(suffix)]
    return sorted(matches, key=lambda p: (not _is_base_set(p, flat, rc), p))


def _resolve_reference(
    reference: str,
    flat: dict[str, FlatToken],
    resolved: dict[str, ResolvedToken],
    visited: frozenset[str],
    rc: ResolverConfig,
    diagnostics: list[ResolutionDiagnostic] | None,
) -> ResolvedToken | None:
    for path in _reference_candidates(reference, flat, rc):
        token = resolve_path(path, flat, resolved, visited, rc, diagnostics)
        if token is not None and token.is_fully_resolved:
            return token
    return None


def resolve_path(
    path: str,
    flat: dict[str, FlatToken],
    resolved: dict[str, ResolvedToken],
    visited: frozenset[str] = frozenset(),
    rc: ResolverConfig | None = None,
    diagnostics: list[ResolutionDiagnostic] | None = None,
) -> ResolvedToken | None:
    """Resolve one flattened token, substituting every ``{reference}`` placeholder.

    ``resolved`` is the memo table shared across one resolution run and
    ``visited`` the paths on the current reference chain. Returns None for a
    missing path or a cycle; both are logged, never raised.
    """
    rc = rc or ResolverConfig()

    if path in visited:
        log.warning("circular_reference", path=path, chain=sorted(visited))
        _diagnose(diagnostics, "circular_reference", path, "Circular reference detected")
        return None

    if path in resolved:
        return resolved[path]

    token = flat.get(path)
    if token is None:
        log.warning("token_not_found", path=path)
        _diagnose(diagnostics, "missing_token", path, "Token not found")
        return None

    raw_text = _stringify(token.raw_value)
    if raw_text is None:
        return None

    references = REFERENCE_RE.findall(raw_text)
    if not references:
        result = ResolvedToken(value=raw_text, is_reference=False, token_type=token.token_type)
        resolved[path] = result
        return result

    chain_visited = visited | {path}
    value = raw_text
    chain: list[str] = []
    unresolved: list[str] = []

    for reference in references:
        chain.append(reference)
        target = _resolve_reference(reference, flat, resolved, chain_visited, rc, diagnostics)
        placeholder = "{" + reference + "}"
        if target is None:
            log.warning("reference_unresolved", path=path, reference=reference)
            _diagnose(
                diagnostics,
                "unresolved_reference",
                path,
                f"Could not resolve reference {placeholder}",
                reference=reference,
            )
            unresolved.append(reference)
            continue
        value = value.replace(placeholder, target.value, 1)
        chain.extend(target.reference_chain)

    result = ResolvedToken(
        value=value,
        is_reference=True,
        original_reference=raw_text,
        reference_chain=list(dict.fromkeys(chain)),
        token_type=token.token_type,
        unresolved_references=list(dict.fromkeys(unresolved)),
    )
    resolved[path] = result
    return result


def resolve_tokens(
    tree: dict[str, Any],
    theme: Theme | None = None,
    config: MatchConfig | None = None,
    diagnostics: list[ResolutionDiagnostic] | None = None,
) -> dict[str, ResolvedToken]:
    """Resolve a raw token tree into a flat ``full path -> ResolvedToken`` map.

    Args:
        tree: Raw token JSON object. Keys starting with ``$`` are metadata.
        theme: Optional theme restricting and ordering the token sets.
        config: Matching configuration; defaults to ``MatchConfig()``.
        diagnostics: Optional list that collects unresolved references,
            cycles, malformed tokens and missing sets.

    Returns:
        Resolved tokens keyed by ``SetName.nested.path``. Per-token problems
        are logged and never raised.
    """
    rc = _resolver_config(config)
    sets = available_token_sets(tree, theme, config, diagnostics)
    log.debug("resolve_tokens_start", theme=theme.name if theme else None, token_sets=sets)

    flat = flatten_tokens(tree, sets, diagnostics)
    log.debug("tokens_collected", count=len(flat))

    resolved: dict[str, ResolvedToken] = {}
    for path in flat:
        if path not in resolved:
            resolve_path(path, flat, resolved, frozenset(), rc, diagnostics)

    # Keep flattening order so output does not depend on reference traversal order
    result = {path: resolved[path] for path in flat if path in resolved}

    summary = summarize_resolution(result, config)
    log.info(
        "resolve_tokens_done",
        theme=theme.name if theme else None,
        resolved=summary.total_resolved_tokens,
        semantic=summary.semantic_tokens_count,
        raw=summary.raw_tokens_count,
    )
    return result


def summarize_resolution(
    resolved: dict[str, ResolvedToken], config: MatchConfig | None = None
) -> ResolutionSummary:
    """Debug summary of a resolved-token map."""
    rc = _resolver_config(config)
    semantic = [(name, token) for name, token in resolved.items() if token.is_reference]
    return ResolutionSummary(
        total_resolved_tokens=len(resolved),
        semantic_tokens_count=len(semantic),
        raw_tokens_count=len(resolved) - len(semantic),
        example_resolutions=[
            {
                "token_name": name,
                "original_reference": token.original_reference,
                "resolved_value": token.value,
                "reference_chain": list(token.reference_chain),
            }
            for name, token in semantic[: rc.example_resolutions]
        ],
    )

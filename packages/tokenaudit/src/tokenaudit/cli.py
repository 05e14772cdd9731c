"""CLI tool for resolving design tokens and auditing hardcoded values."""

import argparse
import sys
from pathlib import Path

import pandas as pd
import structlog

from tokenaudit.config import MatchConfig
from tokenaudit.io import (
    TokenFileError,
    load_token_tree,
    read_observed_values,
    report_rows,
    write_report,
    write_resolved_tokens,
)
from tokenaudit.logging import configure_logging
from tokenaudit.matcher import Matcher
from tokenaudit.resolver import (
    extract_themes,
    extract_token_sets,
    resolve_tokens,
    select_theme,
    summarize_resolution,
)
from tokenaudit.scoring import confidence_level
from tokenaudit.types import PROPERTY_TYPES, ResolutionDiagnostic, ResolvedToken, Theme


def _load_tree(path: str) -> dict:
    try:
        return load_token_tree(path)
    except TokenFileError as e:
        print(f"Error: {e.message} ({path})", file=sys.stderr)
        sys.exit(1)


def _pick_theme(tree: dict, name: str | None) -> Theme | None:
    if not name:
        return None
    themes = extract_themes(tree)
    theme = select_theme(themes, name)
    if theme is None:
        available = ", ".join(t.name for t in themes) or "none"
        print(f"Warning: theme '{name}' not found. Available: {available}")
    return theme


def _resolve(args: argparse.Namespace, config: MatchConfig) -> tuple[dict[str, ResolvedToken], list[ResolutionDiagnostic]]:
    log = structlog.get_logger()
    tree = _load_tree(args.tokens)
    theme = _pick_theme(tree, args.theme)
    diagnostics: list[ResolutionDiagnostic] = []
    log.info("resolve_start", tokens=args.tokens, theme=theme.name if theme else None)
    resolved = resolve_tokens(tree, theme, config, diagnostics)
    return resolved, diagnostics


def cmd_themes(args: argparse.Namespace) -> None:
    tree = _load_tree(args.tokens)
    themes = extract_themes(tree)

    print("=== Token sets ===")
    for name in extract_token_sets(tree):
        print(f"  {name}")

    print(f"\n=== Themes ({len(themes)}) ===")
    if not themes:
        print("  No themes defined.")
    for theme in themes:
        print(f"  {theme.name} [{theme.id}]")
        for set_name, status in theme.selected_token_sets.items():
            print(f"    - {set_name}: {status}")


def cmd_resolve(args: argparse.Namespace) -> None:
    config = MatchConfig()
    resolved, diagnostics = _resolve(args, config)
    summary = summarize_resolution(resolved, config)

    print("\n--- Resolution ---")
    print(f"Resolved tokens: {summary.total_resolved_tokens}")
    print(f"Semantic tokens: {summary.semantic_tokens_count}")
    print(f"Raw tokens: {summary.raw_tokens_count}")
    if diagnostics:
        print(f"Diagnostics: {len(diagnostics)}")

    if summary.example_resolutions:
        print("\nExample semantic token resolutions:")
        for example in summary.example_resolutions:
            print(
                f"  {example['token_name']}: {example['original_reference']} -> {example['resolved_value']}"
            )

    if args.show:
        df = pd.DataFrame([
            {
                "token": name,
                "value": token.value,
                "semantic": token.is_reference,
                "reference": token.original_reference or "",
                "type": token.token_type or "",
            }
            for name, token in resolved.items()
        ])
        if not df.empty:
            print()
            print(df.to_string(index=False))

    if args.output:
        write_resolved_tokens(resolved, args.output)
        print(f"\nSaved to: {args.output}")


def cmd_match(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    config = MatchConfig()
    if args.max_alternatives is not None:
        config.ranking.max_alternatives = args.max_alternatives

    resolved, _ = _resolve(args, config)
    observed = read_observed_values(args.values)
    log.info("observed_values_loaded", count=len(observed))

    matcher = Matcher(config)
    report = matcher.match_values(observed, resolved)

    df_out = pd.DataFrame(report_rows(report))
    if args.show:
        _show_matches(df_out)

    _print_summary(df_out)
    _print_stats(matcher)

    if args.output:
        output = Path(args.output)
        if output.suffix == ".xlsx":
            df_out.to_excel(output, index=False)
        else:
            write_report(report, output)
        print(f"\nSaved to: {output}")


def cmd_recommend(args: argparse.Namespace) -> None:
    config = MatchConfig()
    resolved, _ = _resolve(args, config)
    matcher = Matcher(config)
    candidates = matcher.recommendations_for_value(args.value, args.type, resolved)

    if not candidates:
        print(f"No token match for {args.value} ({args.type})")
        return

    print(f"=== Recommendations for {args.value} ({args.type}) ===")
    for i, c in enumerate(candidates):
        label = "RECOMMENDED TOKEN" if i == 0 else "ALTERNATIVE"
        semantic = " SEMANTIC" if c.is_semantic_token else ""
        print(
            f"  [{label}] {c.display_name} = {c.token_value} "
            f"({round(c.confidence * 100)}%, {c.match_type}, {confidence_level(c.confidence, config)}){semantic}"
        )
        if c.original_reference:
            print(f"      {c.original_reference} via {' -> '.join(c.reference_chain)}")


def _show_matches(df: pd.DataFrame) -> None:
    """Display matched values on screen."""
    if df.empty or "status" not in df.columns:
        print("\n=== No values to show ===")
        return
    matches = df[df["status"] == "matched"]
    if matches.empty:
        print("\n=== No matches found ===")
        return

    display_cols = ["type", "value", "count", "token_name", "token_value", "confidence", "match_type"]
    print(f"\n=== Matches ({len(matches)}) ===")
    print(matches[display_cols].to_string(index=False))


def _print_summary(df: pd.DataFrame) -> None:
    if df.empty:
        print("\nResults: no observed values")
        return
    matched = df[df["status"] == "matched"]
    unmatched = df[df["status"] == "unmatched"]
    parts = [
        f"MATCHED={len(matched)} ({int(matched['count'].sum())} occurrences)",
        f"UNMATCHED={len(unmatched)} ({int(unmatched['count'].sum())} occurrences)",
    ]
    print(f"\nResults: {', '.join(parts)}")
    if not matched.empty:
        by_type = matched["match_type"].value_counts().sort_index()
        print("Match types: " + ", ".join(f"{k}={v}" for k, v in by_type.items()))


def _print_stats(matcher: Matcher) -> None:
    """Print matching statistics."""
    s = matcher.stats
    print("\n--- Statistics ---")
    print(f"Observed values: {s.values}")
    print(f"Resolved tokens: {s.tokens}")
    print(f"Comparisons: {s.comparisons}")
    print(f"Pruned candidates: {s.pruned}")


def main(argv: list[str] | None = None) -> None:
    # Parent parser with global options (inherited by all subcommands)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    parent_parser.add_argument(
        "--log-json",
        action="store_true",
        help="Render log events as JSON lines",
    )

    parser = argparse.ArgumentParser(
        description="Design token resolution and hardcoded value audit",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    themes_parser = subparsers.add_parser("themes", parents=[parent_parser], help="List themes and token sets")
    themes_parser.add_argument("tokens", help="Path to design tokens JSON file")
    themes_parser.set_defaults(func=cmd_themes)

    resolve_parser = subparsers.add_parser("resolve", parents=[parent_parser], help="Resolve token references")
    resolve_parser.add_argument("tokens", help="Path to design tokens JSON file")
    resolve_parser.add_argument("--theme", help="Theme name or id")
    resolve_parser.add_argument("--show", action="store_true", help="Display every resolved token")
    resolve_parser.add_argument("--output", help="Write resolved tokens to this JSON file")
    resolve_parser.set_defaults(func=cmd_resolve)

    match_parser = subparsers.add_parser("match", parents=[parent_parser], help="Match observed values to tokens")
    match_parser.add_argument("tokens", help="Path to design tokens JSON file")
    match_parser.add_argument("values", help="Observed values file (.json, .jsonl or .csv)")
    match_parser.add_argument("--theme", help="Theme name or id")
    match_parser.add_argument("--show", action="store_true", help="Display matches on screen")
    match_parser.add_argument("--max-alternatives", type=int, help="Alternatives kept per match")
    match_parser.add_argument("--output", help="Output file (.csv, .jsonl or .xlsx)")
    match_parser.set_defaults(func=cmd_match)

    recommend_parser = subparsers.add_parser("recommend", parents=[parent_parser], help="Recommend tokens for one value")
    recommend_parser.add_argument("tokens", help="Path to design tokens JSON file")
    recommend_parser.add_argument("--type", required=True, choices=PROPERTY_TYPES, help="Property type")
    recommend_parser.add_argument("--value", required=True, help="Hardcoded value, e.g. 8px or #ffffff")
    recommend_parser.add_argument("--theme", help="Theme name or id")
    recommend_parser.set_defaults(func=cmd_recommend)

    args = parser.parse_args(argv)
    configure_logging(args.log_level, json=args.log_json)
    args.func(args)


if __name__ == "__main__":
    main()

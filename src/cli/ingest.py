# =============================================================================
# src/cli/ingest.py -- CLI for résumé ingestion and record store inspection
# =============================================================================
#
# Subcommands:
#
#   resume  -- Run one PDF résumé through the full ingestion pipeline
#   check   -- Score a summary against stored records (duplicate_resume_check)
#   stats   -- Show the record store size and configured providers
#
# Provider selection is the same as the web app (src/main.py):
#   - LLM:        Anthropic -> OpenAI -> Ollama
#   - Embedding:  OpenAI -> Nomic/Ollama
#   - Store:      ChromaDB (always)
# =============================================================================

"""Standalone CLI for the resumeVault ingestion pipeline.

Usage::

    python -m src.cli.ingest resume --file /path/to/resume.pdf

    python -m src.cli.ingest check --summary "Jane Doe, Senior Engineer..." \\
        --threshold 0.95

    python -m src.cli.ingest stats
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.utils.errors import IngestionError, ResumeVaultError


def _build_components(app_settings: Settings) -> dict[str, Any]:
    """Assemble providers and services the same way the web app does.

    Imported lazily so ``--help`` does not pull in chromadb and the LLM SDKs.
    """
    from src.main import build_pipeline

    return build_pipeline(app_settings)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_resume(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest a single PDF résumé file."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    print(f"Ingesting resume: {path}")
    try:
        result = await components["pipeline"].ingest(path.read_bytes())
    except IngestionError as exc:
        print(f"Error at stage {exc.stage}: {exc.cause}", file=sys.stderr)
        return 2 if exc.is_input_error else 1

    if result.status == "stored":
        print("\nStored:")
        print(f"  Name:        {result.record.full_name or '(unknown)'}")
        print(f"  Employee ID: {result.employee_id or '(none)'}")
        print(f"  Record ID:   {result.record_id}")
    else:
        print("\nSkipped as duplicate:")
        print(f"  Similarity:  {result.score:.4f}")
        print(f"  Nearest:     {result.nearest_employee_id or '(unknown)'}")
        print(f"  {result.message}")
    return 0


async def _handle_check(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Run ``duplicate_resume_check`` for a summary and print its JSON reply."""
    from src.pipeline.orchestrator import store_session
    from src.services.duplicate_detector import DuplicateCheckTool

    tool = DuplicateCheckTool(components["duplicate_detector"])
    arguments: dict[str, Any] = {"resume_summary": args.summary}
    if args.threshold is not None:
        arguments["threshold"] = args.threshold

    async with store_session(components["record_store"]):
        reply = await tool.invoke(arguments)

    print(json.dumps(json.loads(reply), indent=2))
    return 0


async def _handle_stats(components: dict[str, Any]) -> int:
    """Print the record count and the providers in use."""
    from src.pipeline.orchestrator import store_session

    store = components["record_store"]
    async with store_session(store):
        count = await store.count()

    app_settings: Settings = components["settings"]
    print("Record Store Statistics")
    print("=" * 40)
    print(f"  Collection:       {app_settings.chromadb_collection}")
    print(f"  Stored records:   {count}")
    print(f"  Dup. threshold:   {app_settings.duplicate_threshold}")
    print("\n  Providers:")
    for role, name in components["provider_registry"].items():
        print(f"    {role:<15} {name}")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.ingest",
        description="Ingest PDF résumés into the resumeVault record store.",
    )
    subparsers = parser.add_subparsers(dest="command")

    resume_parser = subparsers.add_parser("resume", help="Ingest one PDF résumé")
    resume_parser.add_argument("--file", required=True, help="Path to the PDF file")

    check_parser = subparsers.add_parser(
        "check", help="Check a summary for near-duplicates"
    )
    check_parser.add_argument("--summary", required=True, help="Employee summary text")
    check_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Similarity threshold (default: detector default, 0.90)",
    )

    subparsers.add_parser("stats", help="Show record store statistics")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Exits with the handler's status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "check" and args.threshold is not None and not 0.0 <= args.threshold <= 1.0:
        parser.error("--threshold must be between 0 and 1")

    app_settings = Settings()
    try:
        components = _build_components(app_settings)
    except ResumeVaultError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "resume":
            exit_code = asyncio.run(_handle_resume(args, components))
        elif args.command == "check":
            exit_code = asyncio.run(_handle_check(args, components))
        else:
            exit_code = asyncio.run(_handle_stats(components))
    except ResumeVaultError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for TextForge.

Usage:
  # Rephrase a sentence with the configured provider
  python -m textforge.interfaces.cli --tool rephrase --text "We should meet soon."

  # Change tone, reading the text from a file
  python -m textforge.interfaces.cli --tool tone --tone Casual --file draft.txt

  # Pick a provider/model for this run only; JSON output
  python -m textforge.interfaces.cli -t summarize -q "..." --provider groq \
      --model llama-3.3-70b-versatile --json

  # Use a JSON settings document instead of env vars
  python -m textforge.interfaces.cli --settings settings.json -t expand -q "..."

  # Check every configured credential slot
  python -m textforge.interfaces.cli --probe

  # Via installed entry-point (pyproject.toml [project.scripts])
  textforge --tool improve --text "..."

Exit codes:
  0 : success
  1 : generation or probe failure
  2 : argument error
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from textforge.config.prompts import AVAILABLE_MODELS, TONES
from textforge.config.settings import get_settings
from textforge.domain.exceptions import TextForgeError
from textforge.domain.models import (
    GenerationConfig,
    GenerationResult,
    OperationId,
    ProviderId,
    ProviderSelection,
    TransformRequest,
)
from textforge.services.container import build_dispatcher, build_prober
from textforge.services.dispatcher import build_request

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="textforge",
        description="Rephrase, improve, re-tone, summarize or expand text with an AI backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--tool", "-t",
        choices=[op.value for op in OperationId],
        help="Transformation to apply.",
    )
    p.add_argument(
        "--text", "-q",
        metavar="TEXT",
        help="Text to transform.",
    )
    p.add_argument(
        "--file", "-f",
        metavar="FILE",
        type=Path,
        help="Read the text to transform from a file.",
    )
    p.add_argument(
        "--tone",
        default=None,
        help=f"Target tone for --tool tone (e.g. {', '.join(TONES)}).",
    )
    p.add_argument(
        "--provider", "-p",
        choices=[pid.value for pid in ProviderId],
        help="Override the configured provider for this run.",
    )
    p.add_argument(
        "--model", "-m",
        help="Override the configured model id for this run.",
    )
    p.add_argument(
        "--settings", "-s",
        metavar="FILE",
        type=Path,
        help="JSON settings document (overrides SETTINGS_FILE).",
    )
    p.add_argument(
        "--probe",
        action="store_true",
        help="Check connectivity of every configured provider and exit.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_result_text(result: GenerationResult) -> None:
    """Pretty-print a GenerationResult to stdout."""
    print(f"\n{'─' * 60}")
    print(f"Tool     : {result.operation_id.value}")
    print(f"Provider : {result.provider_id.value} ({result.model_id}) via {result.adapter.value}")
    print(f"{'─' * 60}")
    for i, variant in enumerate(result.variants, 1):
        print(f"  #{i}  {variant}")
        print()


def _print_result_json(result: GenerationResult) -> None:
    """Print a GenerationResult as JSON to stdout."""
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


def _print_probe(statuses: dict[ProviderId, bool], json_output: bool) -> None:
    if json_output:
        print(json.dumps({p.value: ok for p, ok in statuses.items()}, indent=2))
        return
    for provider_id, ok in statuses.items():
        print(f"  {provider_id.value:<12} {'ready' if ok else 'unavailable'}")


# ── Main logic ─────────────────────────────────────────────────────────────

def _read_text(args: argparse.Namespace) -> str | None:
    if args.text:
        return args.text
    if args.file:
        if not args.file.exists():
            print(f"ERROR: File not found: {args.file}", file=sys.stderr)
            return None
        try:
            return args.file.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            print(f"ERROR: File is not UTF-8 text: {args.file}", file=sys.stderr)
            return None
    print("ERROR: provide --text or --file", file=sys.stderr)
    return None


def _selection(config: GenerationConfig, args: argparse.Namespace) -> ProviderSelection:
    """Apply --provider / --model on top of the configured selection."""
    provider_id = ProviderId(args.provider) if args.provider else None
    if provider_id is None and args.model in AVAILABLE_MODELS:
        provider_id = AVAILABLE_MODELS[args.model]
    selection = config.select(provider_id)
    if args.model:
        selection = selection.model_copy(update={"model_id": args.model})
    return selection


def run_probe(args: argparse.Namespace) -> int:
    """Probe every credential slot; 0 when at least one provider is live."""
    try:
        settings = get_settings()
        dispatcher = build_dispatcher(settings, args.settings)
        config = dispatcher.config.snapshot()
    except TextForgeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    statuses = build_prober(settings).probe_all(config)
    _print_probe(statuses, args.json_output)
    return 0 if any(statuses.values()) else 1


def run(args: argparse.Namespace) -> int:
    """Execute one transformation for the given arguments.

    Returns:
        Exit code (0 = success, 1 = error, 2 = argument error).
    """
    if not args.tool:
        print("ERROR: provide --tool (or --probe)", file=sys.stderr)
        return 2
    text = _read_text(args)
    if text is None:
        return 2

    try:
        transform = TransformRequest(operation_id=args.tool, text=text, tone=args.tone)
    except ValidationError as exc:
        print(f"ERROR: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 2

    printer = _print_result_json if args.json_output else _print_result_text
    try:
        dispatcher = build_dispatcher(get_settings(), args.settings)
        config = dispatcher.config.snapshot()
        result = dispatcher.generate(build_request(transform, config), _selection(config, args))
    except TextForgeError as exc:
        logger.debug("Generation failed", exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    printer(result)
    return 0


def main() -> None:
    """Entry point for the textforge console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if args.probe:
        sys.exit(run_probe(args))
    if not args.tool:
        parser.print_help()
        sys.exit(2)

    sys.exit(run(args))


if __name__ == "__main__":
    main()

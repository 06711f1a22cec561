"""Command line client that analyzes food photos with a locally held key."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from calorie_lens.app_logging import configure_logging
from calorie_lens.config import Settings
from calorie_lens.containers import AppContainer, build_container
from calorie_lens.domain.nutrition import NutritionRecord
from calorie_lens.services.prompts import build_prompt
from calorie_lens.services.screen import AnalysisScreen, Stage


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="calorie-lens",
        description="Estimate nutrition facts from a food photo.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze a food photo")
    analyze.add_argument("photo", type=Path, help="Path to the captured photo")
    analyze.add_argument(
        "--json", action="store_true", help="Print the record as JSON"
    )

    demo = subparsers.add_parser("demo", help="Show the demonstration record")
    demo.add_argument("--json", action="store_true", help="Print the record as JSON")

    subparsers.add_parser("prompt", help="Print the instruction sent to the model")
    return parser.parse_args(argv)


def format_record(record: NutritionRecord, is_demo: bool = False) -> str:
    """Format a nutrition record for console output."""
    macros = record.macros
    vitamins = record.vitamins
    lines = []
    if is_demo:
        lines.append("[DEMO] Example data, not an analysis of your photo")
    lines.extend(
        [
            f"{record.food_name}: {record.calories:.0f} kcal "
            f"(confidence {record.confidence:.0f}%)",
            f"Protein {macros.protein:g} g | Carbs {macros.carbs:g} g | "
            f"Fat {macros.fat:g} g | Sugar {macros.sugar:g} g",
            f"Vitamin A {vitamins.vitamin_a} | Vitamin C {vitamins.vitamin_c} | "
            f"Vitamin D {vitamins.vitamin_d} | Vitamin B12 {vitamins.vitamin_b12}",
            f"Calcium {vitamins.calcium} | Iron {vitamins.iron}",
        ]
    )
    return "\n".join(lines)


def _print_screen(screen: AnalysisScreen, as_json: bool) -> int:
    record = screen.record
    if screen.stage is not Stage.RESULT or record is None:
        print(f"Analysis failed: {screen.error_message}", file=sys.stderr)
        return 1
    if as_json:
        payload = {"demo": screen.is_demo, "record": record.to_payload()}
        print(json.dumps(payload, indent=2))
    else:
        print(format_record(record, is_demo=screen.is_demo))
    return 0


async def run_analysis(
    container: AppContainer, image_bytes: bytes | None, as_json: bool
) -> int:
    """Run one capture through the analysis screen and print the outcome."""
    screen = AnalysisScreen(service=container.analysis_service)
    try:
        await screen.start(image_bytes)
    finally:
        await container.close_resources()
    return _print_screen(screen, as_json)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``calorie-lens`` command."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging()

    if args.command == "prompt":
        print(build_prompt())
        return 0

    container = build_container(Settings())
    if args.command == "demo":
        return asyncio.run(run_analysis(container, None, args.json))

    try:
        image_bytes = args.photo.read_bytes()
    except OSError as exc:
        print(f"Cannot read photo {args.photo}: {exc}", file=sys.stderr)
        return 2
    return asyncio.run(run_analysis(container, image_bytes, args.json))


if __name__ == "__main__":
    sys.exit(main())

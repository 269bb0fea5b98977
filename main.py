"""Command line entrypoint to generate a single design locally."""

import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from models.preferences import PreferenceValidationError
from stylegen_app.app import StyleGenApp


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a fashion design image")
    parser.add_argument("--gender", default="unisex")
    parser.add_argument("--occasion", default="casual")
    parser.add_argument("--style", default="modern")
    parser.add_argument("--color", dest="colors", action="append", help="Repeat for up to five colors.")
    parser.add_argument("--pattern", dest="patterns", action="append", default=[])
    parser.add_argument("--material", dest="materials", action="append", default=[])
    parser.add_argument("--mood", default=None)
    parser.add_argument("--season", default=None)
    parser.add_argument("--model", dest="model_type", default=None, help="Model key such as sdxl or flux.")
    parser.add_argument("--demo", action="store_true", help="Skip providers and render the placeholder.")
    parser.add_argument("--output", type=Path, default=None, help="Where to write the image bytes.")
    return parser


async def _run(args: argparse.Namespace) -> int:
    app = StyleGenApp()
    preferences = {
        "gender": args.gender,
        "occasion": args.occasion,
        "style": args.style,
        "colors": args.colors or ["#FF6B6B", "#4ECDC4"],
        "patterns": args.patterns,
        "materials": args.materials,
        "mood": args.mood,
        "season": args.season,
    }
    try:
        result = await app.generate_design(preferences, model_type=args.model_type, demo_mode=args.demo)
    except PreferenceValidationError as exc:
        print(f"Invalid preferences: {exc.message}")
        for detail in exc.details:
            print(f"  - {'.'.join(str(part) for part in detail.get('loc', ()))}: {detail.get('msg')}")
        return 2
    finally:
        await app.aclose()

    print(f"Provider: {result.provider_used} (placeholder={result.is_placeholder})")
    print(f"Prompt: {result.prompt}")
    if args.output:
        args.output.write_bytes(result.image_data)
        print(f"Wrote {len(result.image_data)} bytes ({result.content_type}) to {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python
"""Send a chart image to a running BinaryVision service and print the call."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from binaryvision.core.logging import configure_logging  # noqa: E402
from capture import (  # noqa: E402
    CaptureController,
    InvalidImageError,
    Result,
    create_controller,
)
from capture.config import CaptureSettings, get_capture_settings  # noqa: E402

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_IMAGE = 2

DISCLAIMER = (
    "This analysis is AI-generated and is not financial advice. "
    "Always do your own research before investing."
)


def render(controller: CaptureController) -> str:
    """Format the controller's current result or error for the terminal."""
    analysis = controller.analysis
    if analysis is None:
        return controller.error or "(no analysis)"

    lines = [
        f"{analysis.action}  confidence {analysis.confidence}%",
        "",
        analysis.reasoning,
        "",
        "Indicators:",
    ]
    lines.extend(f"  - {indicator}" for indicator in analysis.indicators)
    lines.extend(["", DISCLAIMER])
    return "\n".join(lines)


async def run(image_path: Path, settings: CaptureSettings) -> int:
    controller, client = create_controller(settings)
    async with client:
        try:
            controller.acquire_image(image_path)
        except InvalidImageError as exc:
            print(str(exc), file=sys.stderr)
            return EXIT_BAD_IMAGE

        print(controller.notice or "", file=sys.stderr)
        outcome = await controller.submit_for_analysis()
        print(render(controller))
        return EXIT_OK if isinstance(outcome, Result) else EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Analyse a trading chart image with the BinaryVision service."
    )
    parser.add_argument("image", type=Path, help="Path to a PNG/JPEG chart image.")
    parser.add_argument(
        "--service-url",
        default=None,
        help="Override CAPTURE_SERVICE_URL for this run.",
    )
    args = parser.parse_args(argv)

    settings = get_capture_settings()
    if args.service_url:
        settings = settings.model_copy(update={"service_url": args.service_url})
    configure_logging(settings.log_level)

    return asyncio.run(run(args.image, settings))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())

"""Verify that a deployment's ``.env`` file yields usable settings.

``check`` loads the server and client settings from the file and prints the
effective analysis configuration. ``record`` additionally stores a SHA256
baseline of the file, and ``verify`` compares the file against that baseline
so unnoticed edits are caught before the service restarts.

Example usages::

    python -m scripts.check_env check --env-file /srv/binaryvision/.env

    python -m scripts.check_env record --env-file /srv/binaryvision/.env \
        --hash-file /srv/binaryvision/.env.sha256

    python -m scripts.check_env verify --env-file /srv/binaryvision/.env \
        --hash-file /srv/binaryvision/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path

from pydantic import ValidationError

from binaryvision.core.config import AppSettings, _load_env_file
from capture.config import CaptureSettings

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _file_digest(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _load_settings(env_file: Path) -> tuple[AppSettings, CaptureSettings]:
    """Instantiate every settings object the way the running processes would."""
    _load_env_file(str(env_file))
    app_settings = AppSettings()  # type: ignore[call-arg]
    capture_settings = CaptureSettings(_env_file=str(env_file))  # type: ignore[call-arg]
    return app_settings, capture_settings


def _describe(app_settings: AppSettings, capture_settings: CaptureSettings) -> str:
    return (
        f"environment={app_settings.environment} "
        f"model={app_settings.gemini.vision_model_name} "
        f"policy={app_settings.analysis.validation_policy.value} "
        f"language={app_settings.analysis.reasoning_language} "
        f"service_url={capture_settings.service_url}"
    )


def _record(env_file: Path, hash_file: Path) -> int:
    digest = _file_digest(env_file)
    hash_file.write_text(f"{digest}\n", encoding="utf-8")
    print(f"Baseline {digest} written to {hash_file}")
    return EXIT_OK


def _verify(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"No baseline at {hash_file}; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _file_digest(env_file)
    if expected != actual:
        print(
            f"{env_file} changed since the baseline was recorded "
            f"(expected {expected}, found {actual}).",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR

    print("Environment file matches its baseline.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate BinaryVision settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text, needs_hash in (
        ("check", "Validate settings only.", False),
        ("record", "Validate settings and store a checksum baseline.", True),
        ("verify", "Validate settings and compare against the baseline.", True),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Environment file to inspect (default: ./.env).",
        )
        if needs_hash:
            subparser.add_argument(
                "--hash-file",
                required=True,
                type=Path,
                help="Where the checksum baseline is stored.",
            )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        app_settings, capture_settings = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    print(f"Settings OK: {_describe(app_settings, capture_settings)}")

    if args.command == "record":
        return _record(env_file, args.hash_file)
    if args.command == "verify":
        return _verify(env_file, args.hash_file)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())

"""Pre-deploy check for the CV assistant environment file.

``check`` loads ``AppSettings`` from the env file and prints the presence of
each secret as ``<set>`` or ``<missing>``, never the value. Out-of-range
values and an unsupported ``DATABASE_URL`` fail the run. With ``--strict`` a
missing secret fails it as well.

``record`` and ``verify`` do the same and additionally pin the env file to a
SHA-256 baseline, so edits made outside a deploy are noticed::

    python -m scripts.check_env check --env-file .env --strict
    python -m scripts.check_env record --env-file .env --hash-file .env.sha256
    python -m scripts.check_env verify --env-file .env --hash-file .env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path

from pydantic import ValidationError

from cv_assistant.core.config import AppSettings, _load_env_file
from cv_assistant.core.errors import MisconfigurationError

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


class EnvCheckFailed(Exception):
    """Ends the run with ``exit_code``; ``main`` prints the message."""

    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def _digest(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def load_settings(env_file: Path) -> AppSettings:
    """Build settings from ``env_file`` and resolve values checked lazily at runtime."""
    if not env_file.is_file():
        raise EnvCheckFailed(f"Env file not found: {env_file}", EXIT_RUNTIME_ERROR)

    _load_env_file(str(env_file))
    try:
        settings = AppSettings(_env_file=env_file)
        settings.storage.database_path  # unsupported schemes raise MisconfigurationError
    except ValidationError as exc:
        raise EnvCheckFailed(
            f"Invalid settings in {env_file}:\n{exc.json(indent=2)}", EXIT_VALIDATION_ERROR
        ) from exc
    except MisconfigurationError as exc:
        raise EnvCheckFailed(f"Invalid settings in {env_file}: {exc}", EXIT_VALIDATION_ERROR) from exc
    return settings


def report_secrets(settings: AppSettings, *, strict: bool) -> None:
    status = settings.secret_status()
    for name, state in status.items():
        print(f"{name}: {state}")

    missing = sorted(name for name, state in status.items() if state == "<missing>")
    if strict and missing:
        raise EnvCheckFailed(f"Missing secrets: {', '.join(missing)}", EXIT_VALIDATION_ERROR)


def record_baseline(env_file: Path, hash_file: Path) -> None:
    digest = _digest(env_file)
    hash_file.write_text(digest + "\n", encoding="utf-8")
    print(f"Baseline for {env_file} written to {hash_file}")


def verify_baseline(env_file: Path, hash_file: Path) -> None:
    if not hash_file.is_file():
        raise EnvCheckFailed(
            f"No baseline at {hash_file}; run 'record' first.", EXIT_RUNTIME_ERROR
        )

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _digest(env_file)
    if expected != actual:
        raise EnvCheckFailed(
            f"{env_file} changed since the baseline was recorded "
            f"(expected {expected}, found {actual}).",
            EXIT_CHECKSUM_ERROR,
        )
    print(f"{env_file} matches its baseline.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    commands = parser.add_subparsers(dest="command", required=True)

    for name, needs_baseline in (("check", False), ("record", True), ("verify", True)):
        command = commands.add_parser(name)
        command.add_argument("--env-file", type=Path, default=Path(".env"))
        command.add_argument(
            "--strict", action="store_true", help="Fail when a secret is missing."
        )
        if needs_baseline:
            command.add_argument("--hash-file", type=Path, required=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
        report_secrets(settings, strict=args.strict)
        if args.command == "record":
            record_baseline(args.env_file, args.hash_file)
        elif args.command == "verify":
            verify_baseline(args.env_file, args.hash_file)
    except EnvCheckFailed as exc:
        print(str(exc), file=sys.stderr)
        return exc.exit_code
    except OSError as exc:
        print(f"Could not read or write a file: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())

"""Command line entry point: compat-check BEFORE AFTER."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .config import CheckerConfig
from .engine import CompatEngine
from .exceptions import (
    ConfigError,
    DuplicateMemberError,
    MalformedSnapshotError,
)
from .loader import load_snapshot
from .models import ErrorResponse

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_MALFORMED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compat-check",
        description="Classify API changes between two snapshots as compatible or breaking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  compat-check api-1.0.json api-1.1.json
  compat-check api-1.0.yaml api-1.1.yaml --allow OrderService.createOrder
  compat-check before.json after.json --format json --output report.json

Exit codes: 0 pass, 1 fail, 2 malformed input
        """
    )

    parser.add_argument("before", help="Snapshot of the previous release (JSON or YAML)")
    parser.add_argument("after", help="Snapshot of the release under check (JSON or YAML)")
    parser.add_argument(
        "--allow",
        action="append",
        default=[],
        metavar="ID[,ID...]",
        help="Member or entity identities whose breaking changes do not fail the run"
    )
    parser.add_argument("-c", "--config", help="Path to YAML/JSON checker config")
    parser.add_argument("--root-path", help="JSONPath of the API surface inside each document")
    parser.add_argument(
        "-f", "--format",
        choices=("text", "json"),
        default="text",
        help="Console output format"
    )
    parser.add_argument("-o", "--output", help="Write the JSON report to this file")
    parser.add_argument("--workers", type=int, help="Compare entities on N threads")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress console output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _load_config(args: argparse.Namespace) -> CheckerConfig:
    config = CheckerConfig.from_file(args.config) if args.config else CheckerConfig()

    allow = []
    for entry in args.allow:
        allow.extend(entry.split(","))
    config = config.with_allowed(allow)

    overrides = {}
    if args.root_path:
        overrides["root_path"] = args.root_path
    if args.workers is not None:
        overrides["workers"] = args.workers
    if overrides:
        config = replace(config, **overrides)
    return config


def _configure_logging(args: argparse.Namespace, level: int):
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _report_error(args: argparse.Namespace, code: str, message: str, details: dict) -> int:
    if args.format == "json":
        response = ErrorResponse(
            success=False,
            error={"code": code, "message": message, "details": details},
        )
        print(json.dumps(response.to_dict(), indent=2), file=sys.stderr)
    else:
        print(f"Error: {message}", file=sys.stderr)
    return EXIT_MALFORMED


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ConfigError as e:
        return _report_error(args, "CONFIG_ERROR", e.message, {})

    _configure_logging(args, config.logging_level)

    try:
        before = load_snapshot(args.before, config.root_path)
        after = load_snapshot(args.after, config.root_path)
    except FileNotFoundError as e:
        return _report_error(args, "FILE_NOT_FOUND", str(e), {})
    except MalformedSnapshotError as e:
        return _report_error(args, "MALFORMED_SNAPSHOT", e.message, e.details)
    except DuplicateMemberError as e:
        return _report_error(
            args, "DUPLICATE_MEMBER", str(e),
            {"entity": e.entity, "identity": e.identity}
        )

    report = CompatEngine(config).check(before, after)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(report.to_json() + "\n", encoding="utf-8")
        logger.info("Report saved to %s", output)

    if not args.quiet:
        if args.format == "json":
            print(report.to_json())
        else:
            report.print_summary()

    return EXIT_PASS if report.passed else EXIT_FAIL


if __name__ == "__main__":
    sys.exit(main())

"""Command line entrypoint."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from resolver_sync.config import CliOverrides, load_effective_config
from resolver_sync.errors import LoadError
from resolver_sync.logging import configure_logging
from resolver_sync.runner import SyncReport, SyncRunner

logger = logging.getLogger("resolver_sync.cli")

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one synchronizer run."""
    parser = argparse.ArgumentParser(
        prog="resolver-sync",
        description="Generate and patch Go resolver implementations from contract interfaces.",
    )
    parser.add_argument("--contract", required=False, default=None, help="contract package dir")
    parser.add_argument("--impl", required=False, default=None, help="implementation package dir")
    parser.add_argument("--project-root", required=False, default=".")
    parser.add_argument("--config", required=False, default=None)
    parser.add_argument("--qualifier", required=False, default=None)
    parser.add_argument("--import-path", required=False, default=None)
    parser.add_argument("--formatter-timeout", type=float, required=False, default=None)
    parser.add_argument("--event-log", required=False, default=None)
    parser.add_argument("--no-format", action="store_true")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument(
        "--check",
        action="store_true",
        help="do not write; exit 1 when any file would change",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the resolver-sync command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    project_root = Path(args.project_root)
    overrides = CliOverrides(
        contract_dir=Path(args.contract) if args.contract is not None else None,
        implementation_dir=Path(args.impl) if args.impl is not None else None,
        contract_qualifier=args.qualifier,
        contract_import_path=args.import_path,
        formatter_enabled=False if args.no_format else None,
        formatter_timeout_seconds=args.formatter_timeout,
        event_log=Path(args.event_log) if args.event_log is not None else None,
    )
    try:
        config = load_effective_config(
            project_root,
            config_path=Path(args.config) if args.config is not None else None,
            overrides=overrides,
        )
        config.validate()
    except ValueError as error:
        logger.error("invalid configuration: %s", error)
        return EXIT_FATAL

    dry_run = args.dry_run or args.check
    try:
        report = SyncRunner(config, dry_run=dry_run).run()
    except LoadError as error:
        logger.error("load failed: %s", error)
        if error.hint:
            logger.error("hint: %s", error.hint)
        return EXIT_FATAL

    _log_summary(report)
    if args.check and report.dirty_paths:
        return EXIT_PARTIAL
    return EXIT_PARTIAL if report.has_failures else EXIT_OK


def _log_summary(report: SyncReport) -> None:
    for decision in report.failed_decisions:
        target = decision.receiver
        if decision.method is not None:
            target = f"{decision.receiver}.{decision.method}"
        logger.warning("skipped %s (%s): %s", target, decision.state, decision.detail)
    for outcome in report.failed_writes:
        logger.warning("not written %s: %s", outcome.path, outcome.detail)
    verb = "would update" if report.dry_run else "updated"
    logger.info("%s %d file(s)", verb, len(report.dirty_paths))


if __name__ == "__main__":
    raise SystemExit(main())

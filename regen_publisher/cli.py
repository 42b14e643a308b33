from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="regen-publisher", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    publish = sub.add_parser("publish", help="Publish a batch of generated artifacts")
    publish.add_argument("batch", help="Path to the batch manifest (YAML)")
    publish.add_argument("--config", default=None, help="Config file (defaults to config/config.yaml)")
    publish.add_argument("--dry-run", action="store_true", help="Plan the pass without writing files")

    check = sub.add_parser("check", help="Show where each artifact would be written")
    check.add_argument("batch", help="Path to the batch manifest (YAML)")
    check.add_argument("--config", default=None, help="Config file (defaults to config/config.yaml)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    from .app.publish import describe_result, run_publish

    if args.command == "publish":
        exit_code, _result = run_publish(args.batch, config_path=args.config, dry_run=args.dry_run)
        return exit_code

    if args.command == "check":
        exit_code, result = run_publish(args.batch, config_path=args.config, dry_run=True)
        if result is not None:
            for line in describe_result(result):
                print(line)
            for warning in result.warnings:
                print(f"warning: {warning}")
        return exit_code

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))

from __future__ import annotations

import dataclasses
import os
import signal
import sys
import uuid
from datetime import datetime

from regen_publisher.foundation.config_io import load_config
from regen_publisher.foundation.logging_utils import setup_operational_logger
from regen_publisher.framework.batch import load_batch
from regen_publisher.framework.config import PublishConfig
from regen_publisher.framework.errors import MalformedNamespace, NameSpaceExhausted, PublishCancelled
from regen_publisher.framework.orchestrator import RunOrchestrator
from regen_publisher.framework.progress import LoggingProgressCallback
from regen_publisher.framework.report import write_publish_report
from regen_publisher.framework.results import PublishResult

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def generate_run_id() -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4().hex[:8]}"


def resolve_config(config_path: str | None) -> tuple[PublishConfig, list[str], list[str]]:
    """Load YAML settings and parse them; returns (config, warnings, loaded paths)."""

    try:
        cfg, meta = load_config(config_path=config_path)
    except FileNotFoundError:
        if config_path is not None:
            raise
        cfg, meta = {}, {"paths": []}

    paths = list(meta.get("paths") or [])
    base_dir = os.path.dirname(paths[0]) if paths else os.getcwd()
    # A config/ directory sits one level below the project it describes.
    if paths and os.path.basename(base_dir) == "config" and meta.get("repo_root"):
        base_dir = str(meta["repo_root"])
    config, warnings = PublishConfig.from_dict(cfg, base_dir=base_dir)
    return config, warnings, paths


def run_publish(
    batch_path: str,
    *,
    config_path: str | None = None,
    dry_run: bool = False,
    run_id: str | None = None,
) -> tuple[int, PublishResult | None]:
    try:
        config, config_warnings, config_paths = resolve_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        # Logging is not configured yet.
        print(f"Invalid publisher config: {exc}", file=sys.stderr)
        return EXIT_FAILED, None
    if dry_run:
        config = dataclasses.replace(config, write_files=False)

    run_id = run_id or generate_run_id()
    logger, log_file = setup_operational_logger(config.log_dir, run_id)
    if config_paths:
        logger.info("Config loaded from %s", ", ".join(config_paths))
    else:
        logger.info("No config file found; using defaults")
    for warning in config_warnings:
        logger.warning("Config: %s", warning)

    progress = LoggingProgressCallback(logger)
    previous_handler = None
    if hasattr(signal, "SIGINT"):
        try:
            previous_handler = signal.signal(signal.SIGINT, lambda _signum, _frame: progress.cancel())
        except ValueError:
            # Not the main thread; Ctrl-C keeps its default behaviour.
            previous_handler = None

    result: PublishResult | None = None
    exit_code = EXIT_OK
    try:
        batch = load_batch(batch_path)
        result = RunOrchestrator(config).publish(batch, progress)
    except PublishCancelled as exc:
        result = exc.result
        exit_code = EXIT_CANCELLED
        logger.warning("Publish run %s cancelled", run_id)
    except (NameSpaceExhausted, MalformedNamespace) as exc:
        exit_code = EXIT_FAILED
        logger.error("Publish run %s aborted: %s", run_id, exc)
    except (FileNotFoundError, ValueError) as exc:
        exit_code = EXIT_FAILED
        logger.error("Invalid publish input: %s", exc)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    if result is not None:
        for warning in result.warnings:
            logger.info("WARNING: %s", warning)
        if config.report_enabled:
            report_path = os.path.join(config.log_dir, f"{run_id}_report.json")
            write_publish_report(report_path, result, run_id=run_id)
            logger.info("Publish report written to %s", report_path)

    logger.debug("Operational log: %s", log_file)
    return exit_code, result


def describe_result(result: PublishResult) -> list[str]:
    lines = [
        f"{item.role.value:<9} {item.disposition:<9} {item.path}" for item in result.files
    ]
    lines.extend(f"{'kept':<9} {'exists':<9} {path}" for path in result.skipped_extensions)
    return lines


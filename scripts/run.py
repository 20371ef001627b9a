# scripts/run.py
from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Any

from allocprep.advisory.client import build_client
from allocprep.advisory.service import AdvisoryService
from allocprep.dataloader.config_loader import ConfigLoader
from allocprep.dataloader.records_loader import RecordsLoader
from allocprep.dataloader.report_handler import ReportHandler
from allocprep.dataloader.sample_data import sample_data
from allocprep.errors import AllocPrepError, ConfigError
from allocprep.rules.priorities import DEFAULT_PRIORITIES, apply_preset
from allocprep.schemas.models import AppConfig, EntityType
from allocprep.session import WorkspaceSession

EXIT_EXPORTED = 0
EXIT_FAILED = 1
EXIT_GATE_CLOSED = 2
EXIT_CRASHED = 3


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO with a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the allocprep pipeline.

    @details
    Sheets given on the command line override those of the config file.
    `--sample` replaces all three sheets with the built-in dataset.
    """
    parser = argparse.ArgumentParser(
        prog="allocprep-run",
        description="Load clients/workers/tasks → validate → export cleaned data and rules",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML")
    parser.add_argument("--clients", type=str, default=None, help="Clients CSV/XLSX")
    parser.add_argument("--workers", type=str, default=None, help="Workers CSV/XLSX")
    parser.add_argument("--tasks", type=str, default=None, help="Tasks CSV/XLSX")
    parser.add_argument("--sample", action="store_true", help="Use the built-in sample dataset")
    parser.add_argument(
        "--output", type=str, default=None, help="Output directory (default: from config)"
    )
    parser.add_argument(
        "--api-key-env",
        type=str,
        default="ALLOCPREP_API_KEY",
        help="Environment variable holding the advisory API key (default: ALLOCPREP_API_KEY)",
    )
    return parser.parse_args(argv)


def _build_session(cfg: AppConfig) -> WorkspaceSession:
    """Session wired with the configured advisory client, rules and priorities."""
    advisory = AdvisoryService(build_client(cfg.advisory))
    priorities = (
        apply_preset(cfg.priorities_preset) if cfg.priorities_preset else DEFAULT_PRIORITIES
    )
    return WorkspaceSession(advisory=advisory, rules=cfg.rules, priorities=priorities)


def run_pipeline(
    cfg: AppConfig,
    output_dir: Path,
    *,
    use_sample: bool = False,
) -> dict[str, Any]:
    """
    @brief
    Executes the allocprep pipeline once.

    @details
    Performs sequential steps:
    (1) Load the three sheets (or the sample dataset).
    (2) Validate all collections together.
    (3) Persist diagnostics (load issues, validation report).
    (4) Export when the gate is open.

    @returns
        Dictionary with the exported flag, gate reasons, finding counts and
        artifact paths.

    @raises
        AllocPrepError
            On configuration or unreadable input.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    session = _build_session(cfg)
    handler = ReportHandler(output_dir)

    # (1) Load data
    if use_sample:
        logging.info("Using built-in sample dataset")
        clients, workers, tasks = sample_data()
        session.replace(EntityType.CLIENTS, clients)
        session.replace(EntityType.WORKERS, workers)
        session.replace(EntityType.TASKS, tasks)
        load_issues_path = None
    else:
        missing = [e.value for e in EntityType if getattr(cfg.inputs, e.value) is None]
        if missing:
            raise ConfigError(
                message=f"No input sheet for: {', '.join(missing)}",
                source="scripts.run",
                suggested_action="Pass "
                + " ".join(f"--{name}" for name in missing)
                + " or set the matching inputs.* keys.",
            )

        loader = RecordsLoader(advisory=session.advisory)
        results = []
        for entity in EntityType:
            raw_path = getattr(cfg.inputs, entity.value)
            logging.info("Loading %s: %s", entity.value, raw_path)
            result = loader.load(Path(raw_path), entity)
            results.append(result)
            session.replace(entity, result.records)
        load_issues_path = handler.handle_loads(results)

    # (2) Validation report for the final state
    report = session.report
    report_path = None
    if cfg.validation.write_report:
        report_path = handler.handle_report(report, filename=cfg.validation.report_filename)

    # (3) Export behind the gate
    gate = session.export_gate()
    exported: dict[str, Path] = {}
    if gate.allowed:
        exported = session.export(output_dir, cfg=cfg.export)
    else:
        for reason in gate.reasons:
            logging.warning("Export blocked: %s", reason)

    return {
        "exported": gate.allowed,
        "gate_reasons": list(gate.reasons),
        "error_count": report.error_count,
        "warning_count": report.warning_count,
        "artifacts": {
            "validation_report": report_path,
            "load_issues": load_issues_path,
            **exported,
        },
    }


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    """Config file (optional) plus command-line overrides and the API key."""
    cfg = ConfigLoader().load(Path(args.config)) if args.config else AppConfig()

    overrides = {
        name: getattr(args, name)
        for name in ("clients", "workers", "tasks")
        if getattr(args, name) is not None
    }
    if overrides:
        cfg = cfg.model_copy(update={"inputs": cfg.inputs.model_copy(update=overrides)})
    if args.output:
        cfg = cfg.model_copy(update={"output_dir": args.output})

    api_key = os.environ.get(args.api_key_env)
    if api_key and not cfg.advisory.api_key:
        cfg = cfg.model_copy(
            update={"advisory": cfg.advisory.model_copy(update={"api_key": api_key})}
        )
    return cfg


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Returns numeric exit codes suitable for shell integration:
      0 – data validated and exported
      1 – controlled failure (config/data/export I/O)
      2 – export refused by the gate (findings written to the report)
      3 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        cfg = _resolve_config(args)
        result = run_pipeline(cfg, Path(cfg.output_dir), use_sample=args.sample)
        logging.info(
            "Findings: %d error(s), %d warning(s)", result["error_count"], result["warning_count"]
        )
        return EXIT_EXPORTED if result["exported"] else EXIT_GATE_CLOSED

    except AllocPrepError as e:
        logging.error(str(e))
        return EXIT_FAILED
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return EXIT_CRASHED


if __name__ == "__main__":
    sys.exit(main())

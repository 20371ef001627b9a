# src/allocprep/export/exporter.py
from __future__ import annotations

import csv
import json
import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from allocprep.errors import ExportError
from allocprep.schemas.models import (
    Client,
    EntityType,
    ExportConfig,
    Finding,
    Priority,
    Record,
    Rule,
    Task,
    Worker,
)
from allocprep.schemas.records import record_type, to_records
from allocprep.validator.aggregator import count_errors, validate_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportGate:
    """Outcome of the export precondition check; `reasons` explains a refusal."""

    allowed: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)


def check_export_gate(
    findings: Iterable[Finding],
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
) -> ExportGate:
    """
    @brief
    Export precondition: zero error findings and all three collections non-empty.

    @details
    Warnings never close the gate. Every failed condition is listed so the
    caller can show all of them at once.
    """
    reasons: list[str] = []

    # (1) Every collection must hold data
    for entity, rows in (
        (EntityType.CLIENTS, clients),
        (EntityType.WORKERS, workers),
        (EntityType.TASKS, tasks),
    ):
        if len(rows) == 0:
            reasons.append(f"No {entity.value} loaded")

    # (2) No blocking findings
    errors = count_errors(findings)
    if errors:
        reasons.append(f"{errors} validation error(s) must be fixed")

    return ExportGate(allowed=not reasons, reasons=tuple(reasons))


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _atomic_write(path: Path, write: Callable[[Any], None]) -> None:
    """
    @brief
    Writes a text file through a temporary sibling and os.replace.

    @raises
        ExportError on any I/O failure; the temporary file is removed.
    """
    out_dir = path.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    tmp_fd, tmp_name = tempfile.mkstemp(dir=str(out_dir), suffix=".tmp", text=True)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
            write(f)
        os.replace(tmp_name, path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise ExportError(
            f"Failed to write {path.name}: {e}",
            source="export._atomic_write",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


def write_records_csv(
    entity: EntityType | str, records: Iterable[Record | dict[str, Any]], out_path: Path
) -> Path:
    """
    @brief
    Writes one collection as CSV with the canonical column order.

    @details
    Values are written as held by the records: list fields keep the encoding
    the user uploaded, integers are rendered as digits and missing integers
    as empty cells.
    """
    model = record_type(entity)
    columns = model.columns()
    rows = [
        {column: _cell(value) for column, value in r.to_row().items()}
        for r in to_records(entity, records)
    ]

    def write(f: Any) -> None:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)

    _atomic_write(out_path, write)
    return out_path


def write_rules_json(
    rules: Iterable[Rule],
    priorities: Iterable[Priority],
    out_path: Path,
    exported_at: datetime | None = None,
) -> Path:
    """Writes {"rules": [...], "priorities": [...], "exportedAt": ISO-8601 UTC}."""
    stamp = exported_at or datetime.now(timezone.utc)
    payload = {
        "rules": [r.model_dump(mode="json") for r in rules],
        "priorities": [p.model_dump(mode="json") for p in priorities],
        "exportedAt": stamp.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    _atomic_write(out_path, lambda f: json.dump(payload, f, ensure_ascii=False, indent=2))
    return out_path


def export_all(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    rules: Iterable[Rule],
    priorities: Iterable[Priority],
    out_dir: Path,
    *,
    findings: Sequence[Finding] | None = None,
    cfg: ExportConfig | None = None,
    exported_at: datetime | None = None,
) -> dict[str, Path]:
    """
    @brief
    Gate-checked export of the three collections plus the rule configuration.

    @details
    When `findings` is not given the collections are validated first. The
    gate is checked before any file is touched, so a refusal leaves the
    output directory unchanged.
    All four files are first written to a hidden staging directory inside
    `out_dir` and only then moved over their targets. A failure while
    writing leaves every existing artifact untouched; the staging directory
    is always removed. The final moves are individually atomic, not atomic
    as a group.

    @returns
        Mapping of artifact name ("clients", "workers", "tasks", "rules") to path.

    @raises
        ExportError when the gate is closed or a file cannot be written.
    """
    cfg = cfg or ExportConfig()
    out_dir = Path(out_dir)

    # (1) Gate
    if findings is None:
        findings = validate_all(clients, workers, tasks)
    gate = check_export_gate(findings, clients, workers, tasks)
    if not gate.allowed:
        raise ExportError(
            "Export refused: " + "; ".join(gate.reasons),
            source="export.export_all",
            suggested_action="Fix all validation errors and load data in all three categories.",
        )

    # (2) Stage every artifact, then move them into place together
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=str(out_dir), prefix=".export-"))
    except OSError as e:
        raise ExportError(
            f"Cannot prepare output directory {out_dir}: {e}",
            source="export.export_all",
            suggested_action="Check output directory permissions and disk space.",
        ) from e
    names = {
        "clients": cfg.clients_filename,
        "workers": cfg.workers_filename,
        "tasks": cfg.tasks_filename,
        "rules": cfg.rules_filename,
    }
    try:
        write_records_csv(EntityType.CLIENTS, clients, staging / names["clients"])
        write_records_csv(EntityType.WORKERS, workers, staging / names["workers"])
        write_records_csv(EntityType.TASKS, tasks, staging / names["tasks"])
        write_rules_json(rules, priorities, staging / names["rules"], exported_at)

        paths: dict[str, Path] = {}
        for key, name in names.items():
            target = out_dir / name
            try:
                os.replace(staging / name, target)
            except OSError as e:
                raise ExportError(
                    f"Failed to move {name} into {out_dir}: {e}",
                    source="export.export_all",
                    suggested_action="Check output directory permissions and disk space.",
                ) from e
            paths[key] = target
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.info("Export complete: %s", ", ".join(str(p) for p in paths.values()))
    return paths


__all__ = [
    "ExportGate",
    "check_export_gate",
    "export_all",
    "write_records_csv",
    "write_rules_json",
]

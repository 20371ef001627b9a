# src/allocprep/validator/aggregator.py
from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from allocprep.errors import DataError
from allocprep.schemas.models import Client, EntityType, Finding, Severity, Task, Worker
from allocprep.schemas.records import to_records
from allocprep.validator.cross_reference import validate_cross_references
from allocprep.validator.entity_validators import (
    validate_clients,
    validate_tasks,
    validate_workers,
)

logger = logging.getLogger(__name__)


def validate_all(
    clients: Iterable[Client | dict[str, Any]],
    workers: Iterable[Worker | dict[str, Any]],
    tasks: Iterable[Task | dict[str, Any]],
) -> list[Finding]:
    """
    @brief
    Full validation of the three collections.

    @details
    Runs the client, worker and task validators, then the cross-reference
    check, and concatenates their findings in exactly that order. Consumers
    group by position, so the order is part of the contract. The function is
    pure: identical inputs always give an identical list. An empty
    collection contributes no findings.

    @params
        clients, workers, tasks
            Records or {column: value} mappings for each collection.

    @returns
        Ordered list of findings.
    """
    # (1) Normalize inputs to typed records
    client_rows = to_records(EntityType.CLIENTS, clients)
    worker_rows = to_records(EntityType.WORKERS, workers)
    task_rows = to_records(EntityType.TASKS, tasks)

    # (2) Entity passes, then the cross-reference pass, in fixed order
    return [
        *validate_clients(client_rows, task_rows),
        *validate_workers(worker_rows),
        *validate_tasks(task_rows),
        *validate_cross_references(worker_rows, task_rows),
    ]


def count_errors(findings: Iterable[Finding]) -> int:
    return sum(1 for f in findings if f.severity == Severity.ERROR.value)


def count_warnings(findings: Iterable[Finding]) -> int:
    return sum(1 for f in findings if f.severity == Severity.WARNING.value)


@dataclass(slots=True)
class ValidationReport:
    """
    Structured result of one full validation pass.

    Fields:
        findings: Ordered findings as returned by validate_all.
        row_counts: Number of rows per collection at validation time.
        generated_at: UTC timestamp of the pass.
    """

    findings: list[Finding] = field(default_factory=list)
    row_counts: dict[str, int] = field(default_factory=dict)
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    @property
    def error_count(self) -> int:
        return count_errors(self.findings)

    @property
    def warning_count(self) -> int:
        return count_warnings(self.findings)

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.is_error]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if not f.is_error]

    def for_entity(self, entity: EntityType | str) -> list[Finding]:
        key = entity.value if isinstance(entity, EntityType) else entity
        return [f for f in self.findings if f.entity == key]

    def for_row(self, entity: EntityType | str, row: int) -> list[Finding]:
        return [f for f in self.for_entity(entity) if f.row == row]

    def kind_counts(self) -> dict[str, int]:
        return dict(Counter(f.kind for f in self.findings))

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.generated_at,
            "valid": self.error_count == 0,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "row_counts": dict(self.row_counts),
            "findings": [f.model_dump(mode="json") for f in self.findings],
        }

    def save(self, out_dir: Path, filename: str = "validation_report.json") -> Path:
        """
        Writes the report atomically to disk.

        Args:
            out_dir: Target directory (created if missing).
            filename: Target filename (default 'validation_report.json').

        Returns:
            Path to the written JSON file.
        """
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        final_path = out_dir / filename
        tmp_path = final_path.with_suffix(".tmp")

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            tmp_path.replace(final_path)
        except OSError as e:
            raise DataError(
                f"Failed to write validation report: {e}",
                source="ValidationReport.save",
                suggested_action="Check disk permissions and free space.",
            ) from e

        logger.info("Validation report saved: %s", final_path)
        return final_path


def build_report(
    clients: Iterable[Client | dict[str, Any]],
    workers: Iterable[Worker | dict[str, Any]],
    tasks: Iterable[Task | dict[str, Any]],
) -> ValidationReport:
    """
    @brief
    Runs validate_all and wraps the findings with counts and a timestamp.

    @details
    Logs a one-line summary: INFO when nothing blocks export, ERROR otherwise.
    """
    clients = to_records(EntityType.CLIENTS, clients)
    workers = to_records(EntityType.WORKERS, workers)
    tasks = to_records(EntityType.TASKS, tasks)

    findings = validate_all(clients, workers, tasks)
    report = ValidationReport(
        findings=findings,
        row_counts={
            EntityType.CLIENTS.value: len(clients),
            EntityType.WORKERS.value: len(workers),
            EntityType.TASKS.value: len(tasks),
        },
    )

    if report.error_count == 0:
        logger.info(
            "Validation OK: %d warning(s) across %d/%d/%d client/worker/task row(s)",
            report.warning_count,
            len(clients),
            len(workers),
            len(tasks),
        )
    else:
        summary = ", ".join(f"{k}={v}" for k, v in report.kind_counts().items())
        logger.error(
            "Validation failed: %d error(s), %d warning(s) [%s]",
            report.error_count,
            report.warning_count,
            summary,
        )
    return report


__all__ = ["ValidationReport", "build_report", "count_errors", "count_warnings", "validate_all"]

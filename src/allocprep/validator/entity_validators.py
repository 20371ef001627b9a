# src/allocprep/validator/entity_validators.py
"""
@brief
Per-collection validators for clients, workers and tasks.

@details
Each validator walks its collection once and returns error findings
addressed by entity, zero-based row and column. Integer cells that did not
parse keep their raw text on the record; range checks quote that text so
the user sees what was typed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from allocprep.decoder.field_decoder import (
    DecodeResult,
    RawText,
    decode_available_slots,
    decode_json_blob,
    decode_preferred_phases,
    parse_int,
    split_list,
)
from allocprep.schemas.models import (
    Client,
    EntityType,
    Finding,
    FindingKind,
    Record,
    Severity,
    Task,
    Worker,
)


# ----------------------------
# BASE CLASS (shared per-row checks)
# ----------------------------
class _EntityValidator:
    """
    @brief
    Per-collection validator core.

    @details
    Walks the collection once, in row order. For every row the checks run in
    a fixed order: duplicate id, required fields, numeric ranges, then the
    collection-specific content checks implemented by subclasses.
    The set of seen ids is fresh for every `run()`: the first occurrence of
    an id is never flagged, every later occurrence is flagged on its own row.
    All findings produced here are errors.
    """

    entity: EntityType

    def __init__(self, records: Sequence[Record]) -> None:
        self.records = records
        self.findings: list[Finding] = []

    def run(self) -> list[Finding]:
        self.findings = []
        seen_ids: set[str] = set()

        for index, record in enumerate(self.records):
            self._check_duplicate(index, record, seen_ids)
            self._check_required(index, record)
            self._check_ranges(index, record)
            self._check_content(index, record)

        return self.findings

    # ---------- Checks ----------
    def _check_duplicate(self, index: int, record: Record, seen_ids: set[str]) -> None:
        record_id = record.record_id
        if record_id in seen_ids:
            self._add_error(
                FindingKind.DUPLICATE_ID,
                f"Duplicate {record.ID_FIELD}: {record_id}",
                index,
                record.ID_FIELD,
            )
        seen_ids.add(record_id)

    def _check_required(self, index: int, record: Record) -> None:
        for column in (record.ID_FIELD, record.NAME_FIELD):
            if not getattr(record, record.attribute_for(column)):
                self._add_error(
                    FindingKind.MISSING_REQUIRED, f"{column} is required", index, column
                )

    def _check_ranges(self, index: int, record: Record) -> None:
        """Numeric range checks; overridden per collection."""

    def _check_content(self, index: int, record: Record) -> None:
        """Collection-specific content checks; overridden per collection."""

    # ---------- Utilities ----------
    def _check_int_range(
        self, index: int, raw: Any, column: str, low: int, high: int | None = None
    ) -> None:
        """Out-of-range error unless `raw` is an integer within [low, high]."""
        value = parse_int(raw)
        if value is not None and value >= low and (high is None or value <= high):
            return
        bounds = f"between {low} and {high}" if high is not None else f"at least {low}"
        shown = "an empty cell" if raw is None else repr(raw)
        self._add_error(
            FindingKind.OUT_OF_RANGE,
            f"{column} must be an integer {bounds}, got {shown}",
            index,
            column,
        )

    def _report_decode(self, index: int, result: DecodeResult, column: str) -> None:
        """One malformed_list error per decode problem."""
        if result.ok:
            return
        for problem in result.problems:
            self._add_error(
                FindingKind.MALFORMED_LIST, f"{column} is malformed: {problem}", index, column
            )

    def _add_error(self, kind: FindingKind, message: str, row: int, column: str) -> None:
        self.findings.append(
            Finding(
                kind=kind,
                message=message,
                row=row,
                column=column,
                entity=self.entity,
                severity=Severity.ERROR,
            )
        )


# ----------------------------
# CONCRETE VALIDATORS
# ----------------------------
class ClientValidator(_EntityValidator):
    """
    @brief
    Checks the client collection.

    @details
    PriorityLevel must be within 1..5. Every requested task id must match a
    TaskID of the task collection, and AttributesJSON, when present, must be
    valid JSON.
    """

    entity = EntityType.CLIENTS

    def __init__(self, records: Sequence[Client], tasks: Sequence[Task]) -> None:
        super().__init__(records)
        self.task_ids: set[str] = {t.task_id for t in tasks}

    def _check_ranges(self, index: int, record: Client) -> None:
        self._check_int_range(index, record.priority_level, "PriorityLevel", 1, 5)

    def _check_content(self, index: int, record: Client) -> None:
        # (1) Requested task ids must reference existing tasks
        for task_id in split_list(record.requested_task_ids):
            if task_id not in self.task_ids:
                self._add_error(
                    FindingKind.UNKNOWN_REFERENCE,
                    f"RequestedTaskID {task_id} does not exist in tasks",
                    index,
                    "RequestedTaskIDs",
                )

        # (2) Attributes must parse as JSON when present
        if record.attributes_json:
            blob = decode_json_blob(record.attributes_json)
            if isinstance(blob, RawText):
                self._add_error(
                    FindingKind.MALFORMED_JSON,
                    f"Invalid JSON in AttributesJSON: {blob.error}",
                    index,
                    "AttributesJSON",
                )


class WorkerValidator(_EntityValidator):
    """Checks MaxLoadPerPhase >= 1 and the AvailableSlots encoding."""

    entity = EntityType.WORKERS

    def _check_ranges(self, index: int, record: Worker) -> None:
        self._check_int_range(index, record.max_load_per_phase, "MaxLoadPerPhase", 1)

    def _check_content(self, index: int, record: Worker) -> None:
        if record.available_slots.strip():
            self._report_decode(
                index, decode_available_slots(record.available_slots), "AvailableSlots"
            )


class TaskValidator(_EntityValidator):
    """Checks Duration and MaxConcurrent >= 1 and the PreferredPhases encoding."""

    entity = EntityType.TASKS

    def _check_ranges(self, index: int, record: Task) -> None:
        self._check_int_range(index, record.duration, "Duration", 1)
        self._check_int_range(index, record.max_concurrent, "MaxConcurrent", 1)

    def _check_content(self, index: int, record: Task) -> None:
        if record.preferred_phases.strip():
            self._report_decode(
                index, decode_preferred_phases(record.preferred_phases), "PreferredPhases"
            )


# ----------------------------
# THIN FACADES
# ----------------------------
def validate_clients(clients: Sequence[Client], tasks: Sequence[Task]) -> list[Finding]:
    return ClientValidator(clients, tasks).run()


def validate_workers(workers: Sequence[Worker]) -> list[Finding]:
    return WorkerValidator(workers).run()


def validate_tasks(tasks: Sequence[Task]) -> list[Finding]:
    return TaskValidator(tasks).run()


__all__ = [
    "ClientValidator",
    "TaskValidator",
    "WorkerValidator",
    "validate_clients",
    "validate_tasks",
    "validate_workers",
]

# src/allocprep/corrections/checker.py
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from allocprep.corrections.applier import apply_correction
from allocprep.schemas.models import Client, EntityType, Finding, Task, Worker
from allocprep.validator.aggregator import validate_all


def would_resolve(
    finding: Finding,
    candidate: Any,
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
) -> bool:
    """
    @brief
    Checks whether writing `candidate` into the finding's cell clears it.

    @details
    Applies the candidate to a copy of the owning collection and re-runs the
    full validation. The finding counts as resolved when no finding of the
    same kind remains at the same entity/row/column. Findings without a
    complete locator cannot be resolved by a cell edit.
    """
    if finding.entity is None or finding.row is None or finding.column is None:
        return False

    collections: dict[str, Sequence[Any]] = {
        EntityType.CLIENTS.value: clients,
        EntityType.WORKERS.value: workers,
        EntityType.TASKS.value: tasks,
    }
    collections[finding.entity] = apply_correction(
        finding.entity, finding.row, finding.column, candidate, collections[finding.entity]
    )

    remaining = validate_all(
        collections[EntityType.CLIENTS.value],
        collections[EntityType.WORKERS.value],
        collections[EntityType.TASKS.value],
    )
    return not any(
        f.kind == finding.kind and f.locator() == finding.locator() for f in remaining
    )


__all__ = ["would_resolve"]

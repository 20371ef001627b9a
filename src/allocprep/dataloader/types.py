# src/allocprep/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from allocprep.schemas.models import Record


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of a sheet loading step.

    Fields:
        success: True if the sheet mapped onto the canonical columns without issues.
        entity: Collection tag ("clients", "workers", "tasks").
        records: Parsed records in sheet order (kept even when success=False;
                 data problems are the validator's concern).
        issues: List of issue dicts about the sheet structure.
                Each item contains at least: kind, message, and column or line_no.
        header_mapping: Uploaded header -> canonical column actually used.
        total_rows: Number of non-empty data rows in the sheet (excludes header).
        kept_rows: Number of records produced (len(records)).
    """

    success: bool
    entity: str
    records: list[Record] = field(default_factory=list)
    issues: list[dict[str, Any]] = field(default_factory=list)
    header_mapping: dict[str, str] = field(default_factory=dict)
    total_rows: int = 0
    kept_rows: int = 0

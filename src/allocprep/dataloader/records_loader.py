# src/allocprep/dataloader/records_loader.py
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from allocprep.advisory.service import AdvisoryService
from allocprep.dataloader.types import LoadResult
from allocprep.errors import DataError
from allocprep.schemas.models import EntityType
from allocprep.schemas.records import record_type

logger = logging.getLogger(__name__)


class RecordsLoader:
    """
    Sheet (CSV / XLSX) → LoadResult[Record].

    Rules:
      - CSV: UTF-8 (BOM tolerated), delimiter=','; XLSX/XLS: first sheet, all cells as text
      - First row = headers, following rows = data; fully empty rows are skipped
      - Cells are stripped; short rows are padded with ""
      - Header mapping:
          * exact canonical name               → used as-is
          * anything else                      → AdvisoryService.map_headers
                                                 (deterministic fallback when not configured)
          * still unmapped / duplicate target  → issue "unmapped_column", column dropped
          * canonical column absent            → issue "missing_column", filled with ""
      - Records are always built; cell content is checked later by the validator

    Fatal errors (raise DataError immediately):
      - path is not a pathlib.Path / file missing / unreadable
      - unsupported extension
      - sheet without a header row
    """

    CSV_SUFFIXES = {".csv"}
    EXCEL_SUFFIXES = {".xlsx", ".xls"}

    def __init__(self, advisory: AdvisoryService | None = None) -> None:
        self.advisory = advisory or AdvisoryService()

    def load(self, path: Path, entity: EntityType | str) -> LoadResult:
        model = record_type(entity)
        grid = self.read_grid(path)
        if not grid:
            raise DataError(
                message=f"Sheet has no header row: {path}",
                source="RecordsLoader.load",
                suggested_action="Ensure the first line contains column names.",
            )
        result = self.grid_to_result(grid, model.ENTITY.value)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Reading
    # ------------------------------
    def read_grid(self, path: Path) -> list[list[str]]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="RecordsLoader.read_grid",
                suggested_action="Pass a pathlib.Path pointing to the CSV/XLSX file.",
            )
        if not path.exists():
            raise DataError(
                message=f"Input file not found: {path}",
                source="RecordsLoader.read_grid",
                suggested_action="Verify file path and ensure the file is present.",
            )

        suffix = path.suffix.lower()
        if suffix in self.CSV_SUFFIXES:
            rows = self._read_csv(path)
        elif suffix in self.EXCEL_SUFFIXES:
            rows = self._read_excel(path)
        else:
            raise DataError(
                message=f"Unsupported file format: {suffix or '<none>'}",
                source="RecordsLoader.read_grid",
                suggested_action="Upload CSV or XLSX files.",
            )

        stripped = [[(cell or "").strip() for cell in row] for row in rows]
        return [row for row in stripped if any(row)]

    def _read_csv(self, path: Path) -> list[list[str]]:
        try:
            with path.open("r", encoding="utf-8-sig", newline="") as f:
                return [list(row) for row in csv.reader(f, delimiter=",")]
        except (OSError, UnicodeDecodeError) as e:
            raise DataError(
                message=f"Unable to read CSV: {e}",
                source="RecordsLoader._read_csv",
                suggested_action="Check file permissions and that the file is UTF-8 encoded.",
            ) from e

    def _read_excel(self, path: Path) -> list[list[str]]:
        try:
            frame = pd.read_excel(path, sheet_name=0, header=None, dtype=str)
        except (OSError, ValueError, ImportError) as e:
            raise DataError(
                message=f"Unable to read workbook: {e}",
                source="RecordsLoader._read_excel",
                suggested_action="Check that the file is a valid XLSX workbook.",
            ) from e
        return frame.fillna("").astype(str).values.tolist()

    # ------------------------------
    # Mapping
    # ------------------------------
    def map_headers(self, headers: list[str], entity: str) -> tuple[dict[int, str], list[dict]]:
        """
        @brief
        Map header positions to canonical columns.

        @returns
            (position -> column, structural issues)
        """
        expected = record_type(entity).columns()
        issues: list[dict[str, Any]] = []

        # (1) Exact names first
        positions: dict[int, str] = {}
        taken: set[str] = set()
        pending: list[int] = []
        for pos, header in enumerate(headers):
            if header in expected and header not in taken:
                positions[pos] = header
                taken.add(header)
            else:
                pending.append(pos)

        # (2) Remaining headers go through the advisory mapping
        remaining_expected = [c for c in expected if c not in taken]
        if pending and remaining_expected:
            suggested = self.advisory.map_headers(
                [headers[p] for p in pending], remaining_expected, entity
            )
        else:
            suggested = {}

        for pos in pending:
            header = headers[pos]
            target = suggested.get(header)
            if target in remaining_expected and target not in taken:
                positions[pos] = target
                taken.add(target)
            else:
                issues.append(
                    {"kind": "unmapped_column", "column": header, "message": "Column dropped"}
                )

        # (3) Canonical columns that never appeared
        for column in expected:
            if column not in taken:
                issues.append(
                    {
                        "kind": "missing_column",
                        "column": column,
                        "message": "Column absent from sheet; filled with empty values",
                    }
                )
        return positions, issues

    def grid_to_result(self, grid: list[list[str]], entity: str) -> LoadResult:
        model = record_type(entity)
        headers, data_rows = grid[0], grid[1:]
        positions, issues = self.map_headers(headers, entity)

        records = []
        for row in data_rows:
            cells = {column: (row[pos] if pos < len(row) else "") for pos, column in positions.items()}
            records.append(model.model_validate(cells))

        return LoadResult(
            success=not issues,
            entity=entity,
            records=records,
            issues=issues,
            header_mapping={headers[pos]: column for pos, column in positions.items()},
            total_rows=len(data_rows),
            kept_rows=len(records),
        )

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "RecordsLoader OK: %s kept=%d/%d from %s",
                result.entity,
                result.kept_rows,
                result.total_rows,
                path,
            )
        else:
            summary = ", ".join(f"{it['kind']}={it['column']}" for it in result.issues)
            logger.warning(
                "RecordsLoader: %s loaded %d row(s) from %s with %d header issue(s) [%s]",
                result.entity,
                result.kept_rows,
                path,
                len(result.issues),
                summary,
            )


__all__ = ["RecordsLoader"]

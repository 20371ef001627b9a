# src/allocprep/dataloader/report_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from allocprep.dataloader.types import LoadResult
from allocprep.errors import DataError
from allocprep.validator.aggregator import ValidationReport

logger = logging.getLogger(__name__)


class ReportHandler:
    """
    @brief
    Persists load and validation diagnostics next to the export artifacts.

    @details
    Load issues are written to 'load_issues.json' only when some sheet had
    header problems. The validation report is always written when requested,
    so the latest run's findings are on disk even when export is refused.
    I/O failures while writing diagnostics are logged, never raised: they
    must not mask the findings themselves.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def handle_loads(self, results: list[LoadResult]) -> Path | None:
        """
        @brief
        Writes header issues of all loaded sheets, if any.

        @returns
            Path of load_issues.json, or None when every sheet mapped cleanly.
        """
        # (1) Collect issues tagged with their sheet
        issues = [{"entity": r.entity, **issue} for r in results for issue in r.issues]
        if not issues:
            logger.info("PostLoad: %d sheet(s) mapped cleanly.", len(results))
            return None

        # (2) Write the JSON report
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / "load_issues.json"
        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(issues, f, ensure_ascii=False, indent=2)
            logger.warning("PostLoad: %d header issue(s). See %s", len(issues), out_path)
        except OSError as e:
            logger.error("PostLoad: failed to write load issues: %s", e)
            return None
        return out_path

    def handle_report(
        self, report: ValidationReport, filename: str = "validation_report.json"
    ) -> Path | None:
        """Writes the validation report; returns its path or None on I/O failure."""
        try:
            return report.save(self.output_dir, filename=filename)
        except DataError as e:
            logger.error("PostValidate: failed to write validation report: %s", e)
            return None

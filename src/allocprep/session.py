# src/allocprep/session.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from allocprep.advisory.service import AdvisoryService
from allocprep.corrections.applier import apply_correction
from allocprep.export.exporter import ExportGate, check_export_gate, export_all
from allocprep.rules.priorities import DEFAULT_PRIORITIES
from allocprep.rules.rule_builder import RuleSet
from allocprep.schemas.models import EntityType, ExportConfig, Priority, Record, Rule
from allocprep.schemas.records import record_type, to_records
from allocprep.validator.aggregator import ValidationReport, build_report

logger = logging.getLogger(__name__)


class WorkspaceSession:
    """
    @brief
    One user's working state: three collections, rules, priorities, report.

    @details
    Collections are tuples and are only ever replaced as a whole. Every
    replacement recomputes the validation report from scratch, so the
    report always describes the current collections and its row locators
    are valid for them. The advisory service is optional and only used by
    the helpers that ask it for something.
    """

    def __init__(
        self,
        *,
        advisory: AdvisoryService | None = None,
        rules: Iterable[Rule] = (),
        priorities: Iterable[Priority] = DEFAULT_PRIORITIES,
    ) -> None:
        self.advisory = advisory or AdvisoryService()
        self.rules = RuleSet(rules)
        self.priorities: list[Priority] = list(priorities)
        self._collections: dict[str, tuple[Record, ...]] = {e.value: () for e in EntityType}
        self._report = build_report((), (), ())

    # ---------- Collections ----------
    @property
    def clients(self) -> tuple[Record, ...]:
        return self._collections[EntityType.CLIENTS.value]

    @property
    def workers(self) -> tuple[Record, ...]:
        return self._collections[EntityType.WORKERS.value]

    @property
    def tasks(self) -> tuple[Record, ...]:
        return self._collections[EntityType.TASKS.value]

    def collection(self, entity: EntityType | str) -> tuple[Record, ...]:
        return self._collections[record_type(entity).ENTITY.value]

    def replace(self, entity: EntityType | str, records: Iterable[Any]) -> ValidationReport:
        """Install a new collection (upload or edit) and revalidate."""
        model = record_type(entity)
        self._collections[model.ENTITY.value] = to_records(model.ENTITY, records)
        logger.info(
            "Collection replaced: %s (%d row(s))",
            model.ENTITY.value,
            len(self._collections[model.ENTITY.value]),
        )
        return self._revalidate()

    def apply_fix(
        self, entity: EntityType | str, row_index: int, field: str, new_value: Any
    ) -> ValidationReport:
        """Replace one cell via apply_correction, commit, and revalidate."""
        updated = apply_correction(entity, row_index, field, new_value, self.collection(entity))
        self._collections[record_type(entity).ENTITY.value] = updated
        return self._revalidate()

    # ---------- Validation ----------
    @property
    def report(self) -> ValidationReport:
        return self._report

    def _revalidate(self) -> ValidationReport:
        self._report = build_report(self.clients, self.workers, self.tasks)
        return self._report

    # ---------- Advisory helpers ----------
    def search(self, entity: EntityType | str, query: str) -> list[Record]:
        entity_tag = record_type(entity).ENTITY.value
        return self.advisory.search(query, list(self.collection(entity)), entity_tag)

    def suggest_fixes(self, entity: EntityType | str) -> dict[int, dict[str, Any]]:
        findings = self._report.for_entity(entity)
        return self.advisory.suggest_corrections(
            list(self.collection(entity)), findings, record_type(entity).ENTITY.value
        )

    def add_rule_from_text(self, text: str) -> Rule | None:
        rule = self.advisory.convert_to_rule(
            text, self.rules.next_id(), self.clients, self.workers, self.tasks
        )
        if rule is not None:
            self.rules = self.rules.add(rule)
        return rule

    # ---------- Export ----------
    def export_gate(self) -> ExportGate:
        return check_export_gate(self._report.findings, self.clients, self.workers, self.tasks)

    def can_export(self) -> bool:
        return self.export_gate().allowed

    def export(
        self,
        out_dir: Path,
        *,
        cfg: ExportConfig | None = None,
        exported_at: datetime | None = None,
    ) -> dict[str, Path]:
        return export_all(
            self.clients,
            self.workers,
            self.tasks,
            self.rules,
            self.priorities,
            out_dir,
            findings=self._report.findings,
            cfg=cfg,
            exported_at=exported_at,
        )


__all__ = ["WorkspaceSession"]

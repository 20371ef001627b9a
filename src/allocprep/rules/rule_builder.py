# src/allocprep/rules/rule_builder.py
"""
@brief
Allocation rules captured as configuration.

@details
Rules describe constraints for a downstream scheduler (co-run groups, load
limits, phase windows). This package only builds, stores and exports them;
nothing here evaluates a rule against the data.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from allocprep.errors import ConfigError
from allocprep.schemas.models import Rule, RuleType

logger = logging.getLogger(__name__)

_RULE_ID_RE = re.compile(r"^rule_(\d+)$")


class RuleSet:
    """
    @brief
    Immutable ordered collection of rules.

    @details
    `add` and `remove` return new sets, matching the whole-collection
    replacement used for the data collections. Rule ids are unique.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)
        ids = [r.id for r in self._rules]
        if len(ids) != len(set(ids)):
            raise ConfigError(
                "Duplicate rule id in rule set",
                source="RuleSet.__init__",
                suggested_action="Give every rule a unique id.",
            )

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RuleSet) and self._rules == other._rules

    def next_id(self) -> str:
        """Next free id of the form rule_<n>."""
        numbers = [int(m.group(1)) for r in self._rules if (m := _RULE_ID_RE.match(r.id))]
        return f"rule_{max(numbers, default=0) + 1}"

    def add(self, rule: Rule) -> RuleSet:
        if any(r.id == rule.id for r in self._rules):
            rule = rule.model_copy(update={"id": self.next_id()})
        logger.info("Rule added: %s (%s)", rule.id, rule.type)
        return RuleSet((*self._rules, rule))

    def remove(self, rule_id: str) -> RuleSet:
        return RuleSet(r for r in self._rules if r.id != rule_id)

    def to_list(self) -> list[dict[str, Any]]:
        return [r.model_dump(mode="json") for r in self._rules]


def co_run_rule(rule_id: str, task_ids: Sequence[str]) -> Rule:
    """Tasks that must run together."""
    if len(task_ids) < 2:
        raise ConfigError(
            "A co-run rule needs at least two tasks",
            source="rule_builder.co_run_rule",
            suggested_action="Select two or more TaskIDs.",
        )
    joined = ", ".join(task_ids)
    return Rule(
        id=rule_id,
        type=RuleType.CO_RUN,
        name=f"Co-run Tasks: {joined}",
        parameters={"tasks": list(task_ids)},
        description=f"Tasks {joined} must run together",
    )


def load_limit_rule(rule_id: str, worker_group: str, max_slots_per_phase: int) -> Rule:
    """Cap on slots per phase for one worker group."""
    if not worker_group or max_slots_per_phase < 1:
        raise ConfigError(
            "A load-limit rule needs a worker group and a limit of at least 1",
            source="rule_builder.load_limit_rule",
        )
    return Rule(
        id=rule_id,
        type=RuleType.LOAD_LIMIT,
        name=f"Load Limit: {worker_group}",
        parameters={"workerGroup": worker_group, "maxSlotsPerPhase": max_slots_per_phase},
        description=(
            f"Workers in {worker_group} group limited to {max_slots_per_phase} slots per phase"
        ),
    )


def phase_window_rule(rule_id: str, task_id: str, allowed_phases: str) -> Rule:
    """Phases a task may run in; `allowed_phases` uses the PreferredPhases encodings."""
    if not task_id:
        raise ConfigError(
            "A phase-window rule needs a TaskID", source="rule_builder.phase_window_rule"
        )
    return Rule(
        id=rule_id,
        type=RuleType.PHASE_WINDOW,
        name=f"Phase Window: {task_id}",
        parameters={"taskId": task_id, "allowedPhases": allowed_phases},
        description=f"Task {task_id} can only run in phases {allowed_phases}",
    )


__all__ = ["RuleSet", "co_run_rule", "load_limit_rule", "phase_window_rule"]

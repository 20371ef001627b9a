# src/allocprep/validator/cross_reference.py
from __future__ import annotations

from collections.abc import Sequence

from allocprep.decoder.field_decoder import split_list
from allocprep.schemas.models import EntityType, Finding, FindingKind, Severity, Task, Worker


def _skill_key(skill: str) -> str:
    return skill.strip().lower()


def worker_skill_pool(workers: Sequence[Worker]) -> set[str]:
    """
    @brief
    Union of all skill tags offered by the worker pool.

    @details
    Tags are trimmed and lower-cased. No synonym folding is done:
    "JS" and "JavaScript" remain distinct tags.
    """
    pool: set[str] = set()
    for worker in workers:
        pool.update(_skill_key(skill) for skill in split_list(worker.skills))
    return pool


def validate_cross_references(workers: Sequence[Worker], tasks: Sequence[Task]) -> list[Finding]:
    """
    @brief
    Skill coverage check across collections.

    @details
    For every task and every required skill not offered by any worker, emits
    one skill_coverage warning on the task's RequiredSkills cell. Warnings
    signal a staffing gap and never gate export.

    @params
        workers : Sequence[Worker]
            Worker pool providing skills.
        tasks : Sequence[Task]
            Tasks whose required skills are checked.

    @returns
        Ordered list of warning findings (task order, then skill order).
    """
    # (1) Collect offered skills once
    pool = worker_skill_pool(workers)

    # (2) Check each required skill of each task
    findings: list[Finding] = []
    for index, task in enumerate(tasks):
        for skill in split_list(task.required_skills):
            key = _skill_key(skill)
            if key not in pool:
                findings.append(
                    Finding(
                        kind=FindingKind.SKILL_COVERAGE,
                        message=f"No worker has required skill: {key}",
                        row=index,
                        column="RequiredSkills",
                        entity=EntityType.TASKS,
                        severity=Severity.WARNING,
                    )
                )
    return findings


__all__ = ["validate_cross_references", "worker_skill_pool"]

# tests/validator/test_cross_reference.py
from __future__ import annotations

from allocprep.schemas.models import FindingKind, Severity, Task, Worker
from allocprep.validator.aggregator import count_errors, count_warnings, validate_all
from allocprep.validator.cross_reference import validate_cross_references, worker_skill_pool


def _worker(wid: str, skills: str) -> Worker:
    return Worker(
        WorkerID=wid, WorkerName=wid, Skills=skills, AvailableSlots="1", MaxLoadPerPhase=1
    )


def _task(tid: str, skills: str) -> Task:
    return Task(TaskID=tid, TaskName=tid, Duration=1, RequiredSkills=skills, MaxConcurrent=1)


def test_skill_pool_is_trimmed_and_lowercased():
    pool = worker_skill_pool([_worker("W1", " Python , SQL"), _worker("W2", "sql,Go")])
    assert pool == {"python", "sql", "go"}


def test_missing_skill_gives_one_warning_and_no_errors():
    """
    @brief
    A required skill offered by no worker yields a single warning.

    @details
    "Rust" is required while the pool only offers python. Exactly one
    skill_coverage warning is produced on the RequiredSkills cell and the
    full validation reports zero errors. Adding a worker offering "RUST"
    removes the warning (comparison is case-insensitive).
    """
    # --- Arrange ---
    workers = [_worker("W1", "python")]
    tasks = [_task("T1", "Rust")]

    # --- Act ---
    findings = validate_all([], workers, tasks)

    # --- Assert ---
    assert count_errors(findings) == 0
    assert count_warnings(findings) == 1
    f = findings[0]
    assert f.kind == FindingKind.SKILL_COVERAGE
    assert f.severity == Severity.WARNING.value
    assert (f.entity, f.row, f.column) == ("tasks", 0, "RequiredSkills")

    # --- Act: staff the gap ---
    findings = validate_all([], [*workers, _worker("W2", "RUST")], tasks)

    # --- Assert ---
    assert findings == []


def test_one_warning_per_missing_skill_in_task_then_skill_order():
    findings = validate_cross_references(
        [_worker("W1", "a")], [_task("T1", "b, a, c"), _task("T2", "d")]
    )

    assert [(f.row, f.message) for f in findings] == [
        (0, "No worker has required skill: b"),
        (0, "No worker has required skill: c"),
        (1, "No worker has required skill: d"),
    ]


def test_no_synonym_folding():
    findings = validate_cross_references([_worker("W1", "JS")], [_task("T1", "JavaScript")])
    assert len(findings) == 1


def test_no_workers_flags_every_required_skill():
    findings = validate_cross_references([], [_task("T1", "x,y")])
    assert len(findings) == 2

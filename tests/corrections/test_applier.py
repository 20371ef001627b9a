# tests/corrections/test_applier.py
from __future__ import annotations

import pytest

from allocprep.corrections.applier import apply_correction
from allocprep.errors import DataError
from allocprep.schemas.models import Task


def _tasks() -> list[Task]:
    return [
        Task(TaskID=f"T{i}", TaskName=f"Task {i}", Duration=1, MaxConcurrent=1)
        for i in range(4)
    ]


def test_apply_correction_replaces_single_cell():
    """
    @brief
    Only the addressed cell changes.

    @details
    apply_correction('tasks', 2, 'Duration', 5, tasks) returns a new
    collection equal to the input except that row 2 has Duration 5.
    The input list is left untouched.
    """
    # --- Arrange ---
    tasks = _tasks()
    snapshot = [t.model_dump() for t in tasks]

    # --- Act ---
    updated = apply_correction("tasks", 2, "Duration", 5, tasks)

    # --- Assert ---
    assert isinstance(updated, tuple)
    assert updated[2].duration == 5
    assert updated[2].model_dump() == {**snapshot[2], "duration": 5}
    for i in (0, 1, 3):
        assert updated[i].model_dump() == snapshot[i]
    assert [t.model_dump() for t in tasks] == snapshot


def test_apply_correction_accepts_attribute_names_and_coerces():
    updated = apply_correction("tasks", 0, "max_concurrent", "3", _tasks())
    assert updated[0].max_concurrent == 3


def test_apply_correction_does_not_validate_value():
    updated = apply_correction("tasks", 1, "Duration", "soon", _tasks())
    assert updated[1].duration == "soon"


@pytest.mark.parametrize("row", [-1, 4, 99])
def test_apply_correction_out_of_bounds(row: int):
    with pytest.raises(DataError) as e:
        apply_correction("tasks", row, "Duration", 5, _tasks())
    assert "out of bounds" in str(e.value)


def test_apply_correction_unknown_field():
    with pytest.raises(DataError) as e:
        apply_correction("tasks", 0, "Colour", "red", _tasks())
    assert "Unknown field" in str(e.value)


def test_apply_correction_unknown_entity():
    with pytest.raises(DataError):
        apply_correction("projects", 0, "Duration", 5, _tasks())


def test_apply_correction_accepts_dict_rows():
    rows = [{"TaskID": "T1", "TaskName": "A"}]
    updated = apply_correction("tasks", 0, "TaskName", "B", rows)
    assert updated[0].task_name == "B"
    assert rows[0]["TaskName"] == "A"

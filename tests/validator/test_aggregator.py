# tests/validator/test_aggregator.py
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from allocprep.dataloader.sample_data import sample_data
from allocprep.errors import DataError
from allocprep.schemas.models import FindingKind
from allocprep.validator.aggregator import (
    ValidationReport,
    build_report,
    count_errors,
    count_warnings,
    validate_all,
)


@pytest.fixture()
def dirty_data():
    """
    @brief
    Collections with exactly one problem per validator.

    @details
    Client row 1 requests T999, worker row 0 has MaxLoadPerPhase 0, task
    row 1 has a reversed phase range and requires an unstaffed skill.
    """
    clients = [
        {"ClientID": "C1", "ClientName": "A", "PriorityLevel": "1", "RequestedTaskIDs": "T1"},
        {"ClientID": "C2", "ClientName": "B", "PriorityLevel": "2", "RequestedTaskIDs": "T999"},
    ]
    workers = [
        {
            "WorkerID": "W1",
            "WorkerName": "Ann",
            "Skills": "python",
            "AvailableSlots": "1,2",
            "MaxLoadPerPhase": "0",
        },
    ]
    tasks = [
        {
            "TaskID": "T1",
            "TaskName": "Build",
            "Duration": "1",
            "RequiredSkills": "python",
            "MaxConcurrent": "1",
        },
        {
            "TaskID": "T2",
            "TaskName": "Ship",
            "Duration": "2",
            "RequiredSkills": "cobol",
            "PreferredPhases": "3-1",
            "MaxConcurrent": "1",
        },
    ]
    return clients, workers, tasks


def test_validate_all_fixed_entity_order(dirty_data):
    """
    @brief
    Findings come as clients, workers, tasks, then cross-reference.
    """
    # --- Act ---
    findings = validate_all(*dirty_data)

    # --- Assert ---
    assert [(f.entity, f.kind) for f in findings] == [
        ("clients", FindingKind.UNKNOWN_REFERENCE),
        ("workers", FindingKind.OUT_OF_RANGE),
        ("tasks", FindingKind.MALFORMED_LIST),
        ("tasks", FindingKind.SKILL_COVERAGE),
    ]
    assert count_errors(findings) == 3
    assert count_warnings(findings) == 1


def test_validate_all_is_deterministic(dirty_data):
    assert validate_all(*dirty_data) == validate_all(*dirty_data)


def test_removing_client_with_unknown_reference_changes_nothing_else(dirty_data):
    # --- Arrange ---
    clients, workers, tasks = dirty_data
    before = validate_all(clients, workers, tasks)

    # --- Act ---
    after = validate_all(clients[:1], workers, tasks)

    # --- Assert ---
    expected = [f for f in before if f.kind != FindingKind.UNKNOWN_REFERENCE]
    assert after == expected


def test_empty_collections_yield_no_findings():
    assert validate_all([], [], []) == []


def test_sample_dataset_is_clean():
    assert validate_all(*sample_data()) == []


def test_validate_all_rejects_mapping_as_collection():
    with pytest.raises(DataError):
        validate_all({"ClientID": "C1"}, [], [])


def test_build_report_counts_and_dict(dirty_data, caplog: pytest.LogCaptureFixture):
    # --- Arrange ---
    caplog.set_level(logging.INFO)

    # --- Act ---
    report = build_report(*dirty_data)
    data = report.to_dict()

    # --- Assert ---
    assert report.error_count == 3
    assert report.warning_count == 1
    assert report.row_counts == {"clients": 2, "workers": 1, "tasks": 2}
    assert [f.kind for f in report.for_row("tasks", 1)] == ["malformed_list", "skill_coverage"]
    assert len(report.for_entity("workers")) == 1
    assert report.kind_counts()["out_of_range"] == 1
    assert data["valid"] is False
    assert data["findings"][0]["kind"] == "unknown_reference"
    assert "Validation failed" in caplog.text


def test_build_report_clean_logs_info(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO)

    report = build_report(*sample_data())

    assert report.to_dict()["valid"] is True
    assert "Validation OK" in caplog.text


def test_report_save_writes_json(tmp_path: Path, dirty_data):
    """
    @brief
    Report is written atomically as JSON.

    @details
    Verifies the final file exists, parses back, and no temporary file is
    left behind.
    """
    # --- Arrange ---
    report = build_report(*dirty_data)

    # --- Act ---
    path = report.save(tmp_path / "out")

    # --- Assert ---
    assert path.name == "validation_report.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["error_count"] == 3
    assert len(data["findings"]) == 4
    assert not list(path.parent.glob("*.tmp"))


def test_empty_report_defaults():
    report = ValidationReport()
    assert report.error_count == 0
    assert report.errors == [] and report.warnings == []

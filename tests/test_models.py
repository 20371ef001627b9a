import pytest
from pydantic import ValidationError

from allocprep.schemas.models import (
    AppConfig,
    Client,
    Finding,
    FindingKind,
    Priority,
    Rule,
    Severity,
    Task,
    Worker,
)


def test_client_model_from_columns():
    c = Client(
        ClientID="C001",
        ClientName="Acme Corp",
        PriorityLevel="3",
        RequestedTaskIDs="T001,T002",
        GroupTag="Enterprise",
        AttributesJSON='{"budget": 100}',
    )
    assert c.client_id == "C001"
    assert c.priority_level == 3
    assert c.record_id == "C001"
    assert c.to_row()["RequestedTaskIDs"] == "T001,T002"


def test_record_cell_coercion():
    """
    @brief
    Cells are coerced leniently; bad integers keep their text.

    @details
    Integer columns accept ints, integral floats and integer strings.
    Anything else (including "2abc" and bools) is kept as trimmed text so
    that the validator, not the model, reports the problem. Blank cells
    become None.
    """
    assert Task(TaskID="T1", Duration=2.0).duration == 2
    assert Task(TaskID="T1", Duration=" 4 ").duration == 4
    assert Task(TaskID="T1", Duration="2abc").duration == "2abc"
    assert Task(TaskID="T1", Duration=True).duration == "True"
    assert Task(TaskID="T1", Duration=" 3 hrs ").duration == "3 hrs"
    assert Task(TaskID="T1", Duration="   ").duration is None
    assert Task(TaskID="T1", Duration=None).duration is None
    assert Worker(WorkerID=7).worker_id == "7"
    assert Worker(WorkerID=None).worker_id == ""


def test_records_are_frozen_and_strict():
    w = Worker(WorkerID="W1", WorkerName="Ann")
    with pytest.raises(ValidationError):
        w.worker_name = "Bob"
    with pytest.raises(ValidationError):
        Worker(WorkerID="W1", Unknown="x")


def test_columns_and_attribute_lookup():
    assert Worker.columns() == [
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
        "MaxLoadPerPhase",
        "WorkerGroup",
        "QualificationLevel",
    ]
    assert Task.attribute_for("PreferredPhases") == "preferred_phases"
    assert Task.attribute_for("preferred_phases") == "preferred_phases"
    assert Task.attribute_for("Nope") is None


def test_finding_defaults_and_locator():
    f = Finding(
        kind=FindingKind.DUPLICATE_ID, message="dup", row=1, column="ClientID", entity="clients"
    )
    assert f.severity == Severity.ERROR.value
    assert f.is_error
    assert f.locator() == ("clients", 1, "ClientID")

    with pytest.raises(ValidationError):
        Finding(kind="duplicate_id", message="x", row=-1)


def test_rule_priority_and_config_defaults():
    r = Rule(id="rule_1", type="coRun", name="Co-run", parameters={"tasks": ["T1", "T2"]})
    assert r.model_dump()["type"] == "coRun"

    with pytest.raises(ValidationError):
        Priority(name="x", weight=101)

    cfg = AppConfig()
    assert cfg.output_dir == "data/output"
    assert cfg.advisory.enabled is False
    assert cfg.export.rules_filename == "rules.json"
    assert cfg.rules == []

# tests/advisory/test_advisory_service.py
from __future__ import annotations

import logging

import httpx
import pytest

from allocprep.advisory.client import AdvisoryClient
from allocprep.advisory.service import AdvisoryService, match_headers, substring_search
from allocprep.dataloader.sample_data import sample_data
from allocprep.errors import AdvisoryError
from allocprep.schemas.models import Finding, FindingKind, Worker


class _ScriptedClient(AdvisoryClient):
    """
    @brief
    Test double returning a fixed answer and recording prompts.

    @details
    When `error` is set, `complete` raises it instead of answering, which
    simulates an unreachable or misbehaving endpoint.
    """

    def __init__(self, answer: str = "", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


# -----------------------------
# Deterministic fallbacks
# -----------------------------
def test_match_headers_exact_substring_and_identity():
    mapping = match_headers(
        ["workerid", "Name", "Favourite colour"], ["WorkerID", "WorkerName", "Skills"]
    )
    assert mapping == {
        "workerid": "WorkerID",
        "Name": "WorkerName",
        "Favourite colour": "Favourite colour",
    }


def test_substring_search_is_case_insensitive():
    _, workers, _ = sample_data()
    found = substring_search("django", workers)
    assert [w.worker_id for w in found] == ["W002"]


def test_unconfigured_service_uses_fallbacks():
    # --- Arrange ---
    service = AdvisoryService()
    clients, workers, tasks = sample_data()
    finding = Finding(kind=FindingKind.OUT_OF_RANGE, message="x", row=0, entity="tasks")

    # --- Act / Assert ---
    assert not service.is_configured
    assert service.map_headers(["taskid"], ["TaskID"], "tasks") == {"taskid": "TaskID"}
    assert [t.task_id for t in service.search("database", tasks, "tasks")] == ["T003"]
    assert service.convert_to_rule("T001 with T002", "rule_1", clients, workers, tasks) is None
    assert service.suggest_corrections(tasks, [finding], "tasks") == {}


def test_empty_query_returns_everything_without_a_call():
    client = _ScriptedClient("[]")
    _, workers, _ = sample_data()

    assert AdvisoryService(client).search("  ", workers, "workers") == workers
    assert client.prompts == []


# -----------------------------
# Configured behaviour
# -----------------------------
def test_search_uses_returned_indices():
    _, workers, _ = sample_data()
    service = AdvisoryService(_ScriptedClient("```json\n[2, 0, 7, true]\n```"))

    found = service.search("backend or frontend", workers, "workers")

    assert [w.worker_id for w in found] == ["W001", "W003"]


def test_map_headers_keeps_only_expected_targets():
    client = _ScriptedClient('{"Staff": "WorkerName", "Skillz": "Hobbies"}')
    service = AdvisoryService(client)

    mapping = service.map_headers(["Staff", "Skillz"], ["WorkerName", "Skills"], "workers")

    assert mapping == {"Staff": "WorkerName", "Skillz": "Skillz"}
    assert "Staff" in client.prompts[0]


def test_convert_to_rule_assigns_given_id():
    clients, workers, tasks = sample_data()
    answer = (
        '{"type": "coRun", "name": "Co-run", "parameters": {"tasks": ["T001", "T002"]},'
        ' "description": "together"}'
    )
    service = AdvisoryService(_ScriptedClient(answer))

    rule = service.convert_to_rule("T001 and T002 together", "rule_4", clients, workers, tasks)

    assert rule is not None
    assert rule.id == "rule_4"
    assert rule.type == "coRun"


def test_convert_to_rule_null_answer():
    clients, workers, tasks = sample_data()
    service = AdvisoryService(_ScriptedClient("null"))

    assert service.convert_to_rule("gibberish", "rule_1", clients, workers, tasks) is None


def test_suggest_corrections_filters_rows_and_columns():
    # --- Arrange ---
    workers = [Worker(WorkerID="W1", WorkerName="A", MaxLoadPerPhase=0)]
    finding = Finding(
        kind=FindingKind.OUT_OF_RANGE,
        message="x",
        row=0,
        column="MaxLoadPerPhase",
        entity="workers",
    )
    answer = '{"0": {"MaxLoadPerPhase": 1, "Mood": "happy"}, "5": {"WorkerName": "B"}, "x": {}}'
    service = AdvisoryService(_ScriptedClient(answer))

    # --- Act ---
    suggestions = service.suggest_corrections(workers, [finding], "workers")

    # --- Assert ---
    assert suggestions == {0: {"MaxLoadPerPhase": 1}}


@pytest.mark.parametrize(
    "client",
    [
        _ScriptedClient("not json at all"),
        _ScriptedClient('{"an": "object"}'),
        _ScriptedClient(error=AdvisoryError("down")),
        _ScriptedClient(error=httpx.ConnectError("refused")),
    ],
)
def test_failures_degrade_to_fallback(client, caplog: pytest.LogCaptureFixture):
    """
    @brief
    Any advisory failure returns the deterministic fallback.

    @details
    Unparseable answers, answers of the wrong shape and transport errors
    are logged as warnings and never reach the caller.
    """
    # --- Arrange ---
    caplog.set_level(logging.WARNING)
    _, workers, _ = sample_data()

    # --- Act ---
    found = AdvisoryService(client).search("django", workers, "workers")

    # --- Assert ---
    assert [w.worker_id for w in found] == ["W002"]
    assert "using fallback" in caplog.text

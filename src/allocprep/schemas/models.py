"""
@brief
Pydantic data models for the allocprep project.

@details
Defines the canonical model types:
    - Client, Worker, Task: one uploaded record each (column-name aliases)
    - Finding: one validation error or warning, addressable by entity/row/column
    - Rule, Priority: allocation configuration captured as metadata
    - AppConfig: runtime configuration (from config.yaml)

Record models are frozen and lenient about cell values: string fields take
whatever the sheet holds, integer fields hold an int when the cell is one and
otherwise keep the trimmed cell text (None for a blank cell), so bad input can
still be shown and exported as typed. Rejecting bad content is the
validator's job, not the model's.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from allocprep.decoder.field_decoder import parse_int


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    Designed as a foundation for all other allocprep models.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values
    }


# ------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------
class EntityType(str, Enum):
    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FindingKind(str, Enum):
    DUPLICATE_ID = "duplicate_id"
    MISSING_REQUIRED = "missing_required"
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_REFERENCE = "unknown_reference"
    MALFORMED_JSON = "malformed_json"
    MALFORMED_LIST = "malformed_list"
    SKILL_COVERAGE = "skill_coverage"


class RuleType(str, Enum):
    CO_RUN = "coRun"
    SLOT_RESTRICTION = "slotRestriction"
    LOAD_LIMIT = "loadLimit"
    PHASE_WINDOW = "phaseWindow"
    PATTERN_MATCH = "patternMatch"
    PRECEDENCE = "precedence"


def _coerce_int_cell(value: Any) -> int | str | None:
    """Int when the cell holds one, else the trimmed cell text; None when blank."""
    number = parse_int(value)
    if number is not None:
        return number
    text = "" if value is None else str(value).strip()
    return text or None


# ------------------------------------------------------------
# Uploaded records
# ------------------------------------------------------------
class Record(_StrictBaseModel):
    """
    @brief
    Common base for the three uploaded record types.

    @details
    Records are immutable; corrections produce a new instance. Subclasses
    list their integer columns in `INT_FIELDS`; every other field is text.
    An integer column holds an int, the raw text of a non-integer cell, or
    None for a blank cell.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    ENTITY: ClassVar[EntityType]
    ID_FIELD: ClassVar[str]
    NAME_FIELD: ClassVar[str]
    INT_FIELDS: ClassVar[frozenset[str]] = frozenset()

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_cell(cls, value: Any, info: ValidationInfo) -> Any:
        if info.field_name in cls.INT_FIELDS:
            return _coerce_int_cell(value)
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @classmethod
    def columns(cls) -> list[str]:
        """Canonical column names, in declaration order."""
        return [f.alias or name for name, f in cls.model_fields.items()]

    @classmethod
    def attribute_for(cls, column: str) -> str | None:
        """Python attribute name for a column name (or attribute name)."""
        for name, f in cls.model_fields.items():
            if column in (name, f.alias):
                return name
        return None

    def to_row(self) -> dict[str, Any]:
        """Record as a {column: value} mapping."""
        return self.model_dump(by_alias=True)

    @property
    def record_id(self) -> str:
        return getattr(self, self.attribute_for(self.ID_FIELD) or "")


class Client(Record):
    """
    @brief
    One client record from clients.csv.

    @details
    RequestedTaskIDs is a comma list of task ids, AttributesJSON an opaque
    JSON blob. Both stay raw text here and are decoded by the validator.
    """

    ENTITY: ClassVar[EntityType] = EntityType.CLIENTS
    ID_FIELD: ClassVar[str] = "ClientID"
    NAME_FIELD: ClassVar[str] = "ClientName"
    INT_FIELDS: ClassVar[frozenset[str]] = frozenset({"priority_level"})

    client_id: str = Field("", alias="ClientID")
    client_name: str = Field("", alias="ClientName")
    priority_level: int | str | None = Field(None, alias="PriorityLevel")
    requested_task_ids: str = Field("", alias="RequestedTaskIDs")
    group_tag: str = Field("", alias="GroupTag")
    attributes_json: str = Field("", alias="AttributesJSON")


class Worker(Record):
    """One worker record from workers.csv."""

    ENTITY: ClassVar[EntityType] = EntityType.WORKERS
    ID_FIELD: ClassVar[str] = "WorkerID"
    NAME_FIELD: ClassVar[str] = "WorkerName"
    INT_FIELDS: ClassVar[frozenset[str]] = frozenset({"max_load_per_phase", "qualification_level"})

    worker_id: str = Field("", alias="WorkerID")
    worker_name: str = Field("", alias="WorkerName")
    skills: str = Field("", alias="Skills")
    available_slots: str = Field("", alias="AvailableSlots")
    max_load_per_phase: int | str | None = Field(None, alias="MaxLoadPerPhase")
    worker_group: str = Field("", alias="WorkerGroup")
    qualification_level: int | str | None = Field(None, alias="QualificationLevel")


class Task(Record):
    """One task record from tasks.csv."""

    ENTITY: ClassVar[EntityType] = EntityType.TASKS
    ID_FIELD: ClassVar[str] = "TaskID"
    NAME_FIELD: ClassVar[str] = "TaskName"
    INT_FIELDS: ClassVar[frozenset[str]] = frozenset({"duration", "max_concurrent"})

    task_id: str = Field("", alias="TaskID")
    task_name: str = Field("", alias="TaskName")
    category: str = Field("", alias="Category")
    duration: int | str | None = Field(None, alias="Duration")
    required_skills: str = Field("", alias="RequiredSkills")
    preferred_phases: str = Field("", alias="PreferredPhases")
    max_concurrent: int | str | None = Field(None, alias="MaxConcurrent")


RECORD_TYPES: dict[str, type[Record]] = {
    EntityType.CLIENTS.value: Client,
    EntityType.WORKERS.value: Worker,
    EntityType.TASKS.value: Task,
}


# ------------------------------------------------------------
# Validation findings
# ------------------------------------------------------------
class Finding(_StrictBaseModel):
    """
    @brief
    One validation error or warning.

    @details
    A finding carrying entity, row and column is positionally addressable:
    it stays valid while the row order of its collection is unchanged.
    Only severity "error" gates export.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    kind: FindingKind = Field(..., description="Finding kind tag")
    message: str = Field(..., description="Human-readable description")
    row: int | None = Field(None, ge=0, description="Zero-based row in the owning collection")
    column: str | None = Field(None, description="Exact column name in the entity")
    entity: EntityType | None = Field(None, description="Owning collection")
    severity: Severity = Field(Severity.ERROR, description="error | warning")

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR.value

    def locator(self) -> tuple[str | None, int | None, str | None]:
        return (self.entity, self.row, self.column)


# ------------------------------------------------------------
# Allocation configuration (metadata only)
# ------------------------------------------------------------
class Rule(_StrictBaseModel):
    """
    @brief
    One allocation rule.

    @details
    Parameters are an opaque JSON object whose shape depends on the rule
    type. Rules are exported as configuration and never executed.
    """

    id: str = Field(..., description="Unique rule id, e.g. rule_1")
    type: RuleType = Field(..., description="Rule type tag")
    name: str = Field(..., description="Short display name")
    parameters: dict[str, Any] = Field(default_factory=dict)
    description: str = Field("", description="Human-readable description")


class Priority(_StrictBaseModel):
    """One weighted allocation criterion; weight is a percentage 0..100."""

    name: str
    weight: int = Field(..., ge=0, le=100)
    description: str = ""


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class InputsConfig(_StrictBaseModel):
    """Paths of the three input sheets (CSV or XLSX)."""

    clients: str | None = None
    workers: str | None = None
    tasks: str | None = None


class AdvisoryConfig(_StrictBaseModel):
    """
    @brief
    Connection settings for the optional advisory endpoint.

    @details
    The advisory service is configured only when `enabled` is True and both
    endpoint and api_key are present. Otherwise every advisory feature uses
    its deterministic fallback.
    """

    enabled: bool = False
    endpoint: str | None = Field(None, description="Base URL of a chat-completions API")
    model: str = Field("gpt-4o-mini", description="Model name sent with each request")
    api_key: str | None = None
    request_timeout: float | None = Field(
        None, gt=0.0, description="Seconds per request; None waits indefinitely"
    )


class ValidationConfig(_StrictBaseModel):
    """Controls validation report persistence."""

    write_report: bool = True
    report_filename: str = "validation_report.json"


class ExportConfig(_StrictBaseModel):
    """Output file names for the export step."""

    clients_filename: str = "clients.csv"
    workers_filename: str = "workers.csv"
    tasks_filename: str = "tasks.csv"
    rules_filename: str = "rules.json"


class AppConfig(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Combines input locations, advisory settings, validation and export
    options, and the initial rules and priorities.
    """

    inputs: InputsConfig = Field(default_factory=InputsConfig)
    output_dir: str = "data/output"
    priorities_preset: str | None = Field(
        None, description="maximize-fulfillment | fair-distribution | minimize-workload"
    )
    rules: list[Rule] = Field(default_factory=list)
    advisory: AdvisoryConfig = Field(default_factory=AdvisoryConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)


__all__ = [
    "AdvisoryConfig",
    "AppConfig",
    "Client",
    "EntityType",
    "Finding",
    "FindingKind",
    "Priority",
    "RECORD_TYPES",
    "Record",
    "Rule",
    "RuleType",
    "Severity",
    "Task",
    "Worker",
]

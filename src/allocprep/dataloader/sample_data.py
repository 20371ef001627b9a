# src/allocprep/dataloader/sample_data.py
from __future__ import annotations

from allocprep.schemas.models import Client, Task, Worker


def sample_data() -> tuple[list[Client], list[Worker], list[Task]]:
    """Small clean demonstration dataset: 2 clients, 3 workers, 3 tasks."""
    clients = [
        Client(
            ClientID="C001",
            ClientName="Acme Corp",
            PriorityLevel=3,
            RequestedTaskIDs="T001,T002",
            GroupTag="Enterprise",
            AttributesJSON='{"budget": 100000, "deadline": "2024-12-31"}',
        ),
        Client(
            ClientID="C002",
            ClientName="TechStart Inc",
            PriorityLevel=5,
            RequestedTaskIDs="T003",
            GroupTag="Startup",
            AttributesJSON='{"budget": 50000, "priority": "high"}',
        ),
    ]
    workers = [
        Worker(
            WorkerID="W001",
            WorkerName="John Doe",
            Skills="JavaScript,React,Node.js",
            AvailableSlots="[1,2,3]",
            MaxLoadPerPhase=2,
            WorkerGroup="Frontend",
            QualificationLevel=3,
        ),
        Worker(
            WorkerID="W002",
            WorkerName="Jane Smith",
            Skills="Python,Django,PostgreSQL",
            AvailableSlots="[2,3,4]",
            MaxLoadPerPhase=3,
            WorkerGroup="Backend",
            QualificationLevel=4,
        ),
        Worker(
            WorkerID="W003",
            WorkerName="Bob Johnson",
            Skills="Java,Spring,MySQL",
            AvailableSlots="[1,3,5]",
            MaxLoadPerPhase=2,
            WorkerGroup="Backend",
            QualificationLevel=3,
        ),
    ]
    tasks = [
        Task(
            TaskID="T001",
            TaskName="Frontend Development",
            Category="Development",
            Duration=2,
            RequiredSkills="JavaScript,React",
            PreferredPhases="[1,2]",
            MaxConcurrent=2,
        ),
        Task(
            TaskID="T002",
            TaskName="Backend API",
            Category="Development",
            Duration=3,
            RequiredSkills="Python,Django",
            PreferredPhases="2-4",
            MaxConcurrent=1,
        ),
        Task(
            TaskID="T003",
            TaskName="Database Design",
            Category="Architecture",
            Duration=1,
            RequiredSkills="MySQL,PostgreSQL",
            PreferredPhases="[1]",
            MaxConcurrent=1,
        ),
    ]
    return clients, workers, tasks


__all__ = ["sample_data"]

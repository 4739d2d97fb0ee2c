"""
Sprintrack - sprint-scoped project tracking over a flat document store.

Projects hold a reference map of their tasks, tasks hold a reference map of
their subtasks, and a project moves through four sprints:
Project → Task → Subtask, Sprint 1 → 2 → 3 → 4 → Report
"""

from .version import VERSION, APP_SCHEMA_VERSION
from .models import (
    Project,
    Task,
    Subtask,
    HydratedProject,
    HydratedTask,
    HydratedSubtask,
    ProjectReport,
    SprintAdvance,
    SprintStage,
)
from .recovery import (
    SprintrackError,
    NotFound,
    DanglingReference,
    InvalidInput,
    PartialWriteFailure,
    StoreError,
)
from .tracker import Tracker

__version__ = VERSION

__all__ = [
    "VERSION",
    "APP_SCHEMA_VERSION",
    "Project",
    "Task",
    "Subtask",
    "HydratedProject",
    "HydratedTask",
    "HydratedSubtask",
    "ProjectReport",
    "SprintAdvance",
    "SprintStage",
    "SprintrackError",
    "NotFound",
    "DanglingReference",
    "InvalidInput",
    "PartialWriteFailure",
    "StoreError",
    "Tracker",
]

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

MIN_SPRINT_LEVEL = 1
MAX_SPRINT_LEVEL = 4

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def project_url(project_id: str) -> str:
    """Return a project's own dashboard path."""
    return f"/project/{project_id}"

def task_url(project_id: str, task_id: str) -> str:
    return f"{project_url(project_id)}/{task_id}"

def subtask_url(parent_url: str, subtask_id: str) -> str:
    return f"{parent_url}/{subtask_id}"

class SprintStage(Enum):
    SPRINT_1 = 1
    SPRINT_2 = 2
    SPRINT_3 = 3
    SPRINT_4 = 4
    REPORTED = "reported"

    @classmethod
    def for_level(cls, level: int) -> 'SprintStage':
        """Map a stored sprint level onto its stage."""
        return cls(level)

class Document(BaseModel):
    """An entity stored as a keyed document in the reference store.

    The key lives in the store path, not inside the document, so `id` is
    excluded from `to_document()` and injected by `from_document()`.
    """

    model_config = ConfigDict(populate_by_name=True)

    collection: ClassVar[str] = ""

    id: Optional[str] = Field(default=None, description="Store-generated key, unset until the document is stored")

    @classmethod
    def from_document(cls, key: str, document: Dict[str, Any]) -> 'Document':
        return cls.model_validate({**document, "id": key})

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(mode="json", by_alias=True, exclude={"id"}, exclude_none=True)
        # The store has no empty maps; an empty reference map is an absent one
        return {name: value for name, value in doc.items() if value != {}}

class Project(Document):
    """A sprint-driven project and its flat task reference map."""

    collection: ClassVar[str] = "projects"

    name: str = Field(description="Human readable project name")
    description: str = Field(description="What the project is about")
    start_time: datetime = Field(description="When the project was created")
    active: bool = Field(default=True, description="Whether the project is active")
    sprint_level: int = Field(
        default=MIN_SPRINT_LEVEL,
        ge=MIN_SPRINT_LEVEL,
        le=MAX_SPRINT_LEVEL,
        description="The sprint the project is currently in"
    )
    task_refs: Dict[str, int] = Field(
        default_factory=dict,
        alias="tasks",
        description="A map of task keys to the sprint level the task was filed under"
    )

    @field_validator('sprint_level', mode='before')
    @classmethod
    def default_sprint_level(cls, v):
        return MIN_SPRINT_LEVEL if v is None else v

    def task_ids_for_sprint(self, level: int) -> List[str]:
        """Keys of the tasks filed under `level`."""
        return [task_id for task_id, filed in self.task_refs.items() if filed == level]

    def sprint_levels(self) -> List[int]:
        """Distinct sprint levels that have tasks filed under them, ascending."""
        return sorted(set(self.task_refs.values()))

class Task(Document):
    """A task and the completion flags of its subtasks."""

    collection: ClassVar[str] = "tasks"

    title: str = Field(description="Short title of the task")
    description: str = Field(description="Detailed description of the task")
    completed: bool = Field(default=False, description="Whether the task itself is done")
    created: datetime = Field(description="When the task was created")
    completion_date: Optional[datetime] = Field(default=None, description="When the task was completed")
    subtask_refs: Dict[str, bool] = Field(
        default_factory=dict,
        alias="subtasks",
        description="A map of subtask keys to their completion flag"
    )

class Subtask(Document):
    """Immutable subtask data; completion is owned by the parent task."""

    collection: ClassVar[str] = "subtasks"

    title: str = Field(description="Short title of the subtask")
    description: str = Field(description="Detailed description of the subtask")

class HydratedSubtask(BaseModel):
    id: str
    url: str
    title: str
    description: str
    completed: bool

class HydratedTask(BaseModel):
    id: str
    url: str
    task: Task
    subtasks: List[HydratedSubtask] = Field(default_factory=list)

class HydratedProject(BaseModel):
    """Render-ready view of a project's current sprint."""

    project: Project
    sprint_level: int
    url: str
    tasks: List[HydratedTask] = Field(default_factory=list)

class SprintAdvance(BaseModel):
    """Outcome of advancing a project's sprint."""

    project_id: str
    stage: SprintStage
    sprint_level: int = Field(description="The stored sprint level after the transition")

    @property
    def reported(self) -> bool:
        return self.stage is SprintStage.REPORTED

class ProjectReport(BaseModel):
    """All tasks of a project across every sprint they were filed under."""

    project: Project
    url: str
    sprints: Dict[int, List[HydratedTask]] = Field(default_factory=dict)

    @property
    def total_tasks(self) -> int:
        return sum(len(tasks) for tasks in self.sprints.values())

    @property
    def completed_tasks(self) -> int:
        return sum(1 for tasks in self.sprints.values() for t in tasks if t.task.completed)

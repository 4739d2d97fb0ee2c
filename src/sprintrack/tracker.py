"""
Tracker - the single entry point to sprintrack's operations.

Every operation takes plain identifiers and strings and either returns a
success payload or raises one of the errors in sprintrack.recovery. Owner
identity is always an explicit argument; there is no current user.
"""
from typing import List, Optional

from sprintrack.aggregation import AggregationEngine
from sprintrack.completion import CompletionPropagator
from sprintrack.config import Settings, load_settings
from sprintrack.models import HydratedProject, Project, ProjectReport, SprintAdvance
from sprintrack.repository import EntityRepository
from sprintrack.sprints import SprintProgressionController
from sprintrack.store import ReferenceStore, build_store

class Tracker:

    def __init__(self, store: ReferenceStore):
        self.store = store
        self.repository = EntityRepository(store)
        self.engine = AggregationEngine(self.repository)
        self.sprints = SprintProgressionController(self.repository)
        self.completion = CompletionPropagator(self.repository)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'Tracker':
        return cls(build_store(settings or load_settings()))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.store.close()

    # --- reads -----------------------------------------------------------------

    async def hydrate(self, project_id: str) -> HydratedProject:
        return await self.engine.hydrate(project_id)

    async def report(self, project_id: str) -> ProjectReport:
        return await self.engine.report(project_id)

    async def list_projects(self, user_id: str) -> List[Project]:
        return await self.engine.list_projects(user_id)

    # --- writes ----------------------------------------------------------------

    async def register_user(self, user_id: str) -> None:
        await self.repository.register_user(user_id)

    async def create_project(self, name: str, description: str, owner_user_id: str) -> str:
        return await self.repository.create_project(name, description, owner_user_id)

    async def create_task(self, project_id: str, title: str, description: str) -> str:
        return await self.repository.create_task(project_id, title, description)

    async def create_subtask(self, task_id: str, title: str, description: str) -> str:
        return await self.repository.create_subtask(task_id, title, description)

    async def advance_sprint(self, project_id: str) -> SprintAdvance:
        return await self.sprints.advance(project_id)

    async def complete_task(self, task_id: str) -> None:
        await self.completion.complete_task(task_id)

    async def complete_subtask(self, task_id: str, subtask_id: str) -> None:
        await self.completion.complete_subtask(task_id, subtask_id)

    async def unlink_project(self, user_id: str, project_id: str) -> None:
        await self.repository.unlink_project(user_id, project_id)

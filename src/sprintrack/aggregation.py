"""
Aggregation Engine - turns a project's reference maps into a nested view.

Hydration fetches in two levels. All tasks of the selected sprint are
fetched concurrently and joined; then each task fetches its subtasks
concurrently and joins them. A reference whose target is missing fails the
whole hydration with DanglingReference. Sibling fetches that are already in
flight are left to finish and their results are discarded.
"""
import asyncio
from typing import Dict, Iterable, List

from sprintrack.logs import get_logger
from sprintrack.models import (
    HydratedProject, HydratedSubtask, HydratedTask, Project, ProjectReport,
    project_url, subtask_url, task_url
)
from sprintrack.recovery import DanglingReference, NotFound
from sprintrack.repository import EntityRepository

log = get_logger("aggregation")

class AggregationEngine:

    def __init__(self, repository: EntityRepository):
        self.repository = repository

    async def hydrate(self, project_id: str) -> HydratedProject:
        """
        Build the render-ready view of the project's current sprint.

        Only tasks filed under the project's current sprint level are
        included; tasks of other sprints stay in the store untouched.

        Raises:
            NotFound: the project itself does not exist.
            DanglingReference: a task or subtask reference has no target.
        """
        project = await self.repository.get_project(project_id)
        sprint = project.sprint_level
        task_ids = project.task_ids_for_sprint(sprint)
        log.debug(f"Hydrating project {project_id}, sprint {sprint}: {len(task_ids)} task(s)")

        tasks = await self._hydrate_tasks(project_id, task_ids)
        return HydratedProject(
            project=project,
            sprint_level=sprint,
            url=project_url(project_id),
            tasks=tasks,
        )

    async def report(self, project_id: str) -> ProjectReport:
        """Hydrate every task of the project grouped by the sprint it was filed under."""
        project = await self.repository.get_project(project_id)
        levels = project.sprint_levels()
        grouped = await asyncio.gather(*(
            self._hydrate_tasks(project_id, project.task_ids_for_sprint(level))
            for level in levels
        ))
        log.debug(f"Built report for project {project_id} over sprints {levels}")
        return ProjectReport(
            project=project,
            url=f"{project_url(project_id)}/report",
            sprints=dict(zip(levels, grouped)),
        )

    async def list_projects(self, user_id: str) -> List[Project]:
        """Fetch every project linked from the user's index."""
        project_ids = list(await self.repository.get_user_projects(user_id))
        return list(await asyncio.gather(*(
            self._fetch_project(user_id, project_id) for project_id in project_ids
        )))

    # --- fan-out helpers -------------------------------------------------------

    async def _hydrate_tasks(self, project_id: str, task_ids: Iterable[str]) -> List[HydratedTask]:
        # First barrier: every task of the level
        tasks = await asyncio.gather(*(
            self._fetch_task(project_id, task_id) for task_id in task_ids
        ))
        # Second barrier: the subtasks of each task, one join per task
        return list(await asyncio.gather(*(
            self._attach_subtasks(project_id, task) for task in tasks
        )))

    async def _attach_subtasks(self, project_id: str, task) -> HydratedTask:
        url = task_url(project_id, task.id)
        subtasks = await asyncio.gather(*(
            self._fetch_subtask(url, task.id, subtask_id, completed)
            for subtask_id, completed in task.subtask_refs.items()
        ))
        return HydratedTask(id=task.id, url=url, task=task, subtasks=list(subtasks))

    async def _fetch_project(self, user_id: str, project_id: str) -> Project:
        try:
            return await self.repository.get_project(project_id)
        except NotFound as e:
            log.error(f"User {user_id} links missing project {project_id}")
            raise DanglingReference("projects", project_id, f"users/{user_id}") from e

    async def _fetch_task(self, project_id: str, task_id: str):
        try:
            return await self.repository.get_task(task_id)
        except NotFound as e:
            log.error(f"Project {project_id} references missing task {task_id}")
            raise DanglingReference("tasks", task_id, f"projects/{project_id}") from e

    async def _fetch_subtask(self, parent_url: str, task_id: str, subtask_id: str, completed: bool) -> HydratedSubtask:
        try:
            subtask = await self.repository.get_subtask(subtask_id)
        except NotFound as e:
            log.error(f"Task {task_id} references missing subtask {subtask_id}")
            raise DanglingReference("subtasks", subtask_id, f"tasks/{task_id}") from e

        # Completion lives on the parent's reference map, never on the subtask
        return HydratedSubtask(
            id=subtask.id,
            url=subtask_url(parent_url, subtask.id),
            title=subtask.title,
            description=subtask.description,
            completed=bool(completed),
        )

"""
Entity Repository - typed reads and writes over the reference store.

Relations are flat reference maps held by the parent document:

    /projects/{pid}/tasks       {task_id: sprint level it was filed under}
    /tasks/{tid}/subtasks       {subtask_id: completed}
    /users/{uid}/projects       {project_id: true}

Multi-step creations are not transactional. A failure between the first and
the second write leaves the first record in the store without a parent
reference; that window is accepted and surfaced, never rolled back.
"""
from typing import Dict, Type

from pydantic import ValidationError

from sprintrack.logs import get_logger
from sprintrack.models import (
    Document, Project, Task, Subtask, MIN_SPRINT_LEVEL, MAX_SPRINT_LEVEL, utcnow
)
from sprintrack.recovery import (
    CorruptionError, InvalidInput, NotFound, PartialWriteFailure, StoreError
)
from sprintrack.store import ReferenceStore, join_path

log = get_logger("repository")

def _require_text(field: str, value: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInput(f"Provide a valid {field}")
    return text

# Characters the Realtime Database refuses in keys
FORBIDDEN_KEY_CHARS = set("/.#$[]")

def _require_key(kind: str, key: str) -> str:
    if not key or FORBIDDEN_KEY_CHARS & set(key) or key != key.strip():
        raise InvalidInput(f"Invalid {kind} id: {key!r}")
    return key

class EntityRepository:
    """Typed access to projects, tasks, subtasks and the user index."""

    def __init__(self, store: ReferenceStore):
        self.store = store

    # --- reads ---------------------------------------------------------------

    async def _read(self, model: Type[Document], key: str) -> Document:
        _require_key(model.collection, key)
        document = await self.store.get(join_path(model.collection, key))
        if not document:
            log.debug(f"{model.collection}/{key} not found")
            raise NotFound(model.collection, key)
        if not isinstance(document, dict):
            raise CorruptionError(f"{model.collection}/{key} is not a document")
        try:
            return model.from_document(key, document)
        except ValidationError as e:
            log.error(f"{model.collection}/{key} does not match its model: {e}")
            raise CorruptionError(f"{model.collection}/{key} is malformed: {e}") from e

    async def get_project(self, project_id: str) -> Project:
        return await self._read(Project, project_id)

    async def get_task(self, task_id: str) -> Task:
        return await self._read(Task, task_id)

    async def get_subtask(self, subtask_id: str) -> Subtask:
        return await self._read(Subtask, subtask_id)

    async def get_user_projects(self, user_id: str) -> Dict[str, bool]:
        """The user's project index; empty if the user has none."""
        _require_key("user", user_id)
        refs = await self.store.get(join_path("users", user_id, "projects"))
        if not refs:
            return {}
        if not isinstance(refs, dict):
            raise CorruptionError(f"users/{user_id}/projects is not a reference map")
        return dict(refs)

    # --- creation ------------------------------------------------------------

    async def register_user(self, user_id: str) -> None:
        """Record when a user joined without touching their project index."""
        _require_key("user", user_id)
        await self.store.update(join_path("users", user_id), {"joined": utcnow().isoformat()})
        log.info(f"Registered user {user_id}")

    async def create_project(self, name: str, description: str, owner_user_id: str) -> str:
        """
        Save a new project and link it into its owner's index.

        Returns:
            The new project key.
        """
        name = _require_text("project name", name)
        description = _require_text("project description", description)
        _require_key("user", owner_user_id)

        project = Project(name=name, description=description, start_time=utcnow())
        project_id = await self.store.push("/projects", project.to_document())
        log.info(f"Created project {project_id} for user {owner_user_id}")

        try:
            await self.store.update(join_path("users", owner_user_id, "projects"), {project_id: True})
        except StoreError as e:
            log.error(f"Project {project_id} is not linked to user {owner_user_id}: {e}")
            raise PartialWriteFailure("projects", project_id, str(e)) from e
        return project_id

    async def create_task(self, project_id: str, title: str, description: str) -> str:
        """
        Save a new task and file it under the project's current sprint.

        The sprint level is read after the task is written, so the stored
        reference is whatever level the project is at at that moment.

        Raises:
            NotFound: the project does not exist (the task is left orphaned).
        """
        title = _require_text("task title", title)
        description = _require_text("task description", description)
        _require_key("project", project_id)

        task = Task(title=title, description=description, created=utcnow())
        task_id = await self.store.push("/tasks", task.to_document())
        log.info(f"Created task {task_id}")

        try:
            project = await self.get_project(project_id)
            await self.store.update(join_path("projects", project_id, "tasks"), {task_id: project.sprint_level})
        except StoreError as e:
            log.error(f"Task {task_id} is not linked to project {project_id}: {e}")
            raise PartialWriteFailure("tasks", task_id, str(e)) from e
        except NotFound:
            log.warning(f"Task {task_id} orphaned, project {project_id} does not exist")
            raise

        log.info(f"Filed task {task_id} under sprint {project.sprint_level} of project {project_id}")
        return task_id

    async def create_subtask(self, task_id: str, title: str, description: str) -> str:
        """
        Save a new subtask and reference it, not completed, from its task.

        Raises:
            NotFound: the task does not exist (the subtask is left orphaned).
        """
        title = _require_text("subtask title", title)
        description = _require_text("subtask description", description)
        _require_key("task", task_id)

        subtask = Subtask(title=title, description=description)
        subtask_id = await self.store.push("/subtasks", subtask.to_document())
        log.info(f"Created subtask {subtask_id}")

        try:
            await self.get_task(task_id)
            await self.store.update(join_path("tasks", task_id, "subtasks"), {subtask_id: False})
        except StoreError as e:
            log.error(f"Subtask {subtask_id} is not linked to task {task_id}: {e}")
            raise PartialWriteFailure("subtasks", subtask_id, str(e)) from e
        except NotFound:
            log.warning(f"Subtask {subtask_id} orphaned, task {task_id} does not exist")
            raise
        return subtask_id

    # --- mutation ------------------------------------------------------------

    async def set_task_complete(self, task_id: str) -> None:
        _require_key("task", task_id)
        await self.store.update(join_path("tasks", task_id), {
            "completed": True,
            "completion_date": utcnow().isoformat(),
        })
        log.info(f"Task {task_id} marked complete")

    async def set_subtask_complete(self, task_id: str, subtask_id: str) -> None:
        _require_key("task", task_id)
        _require_key("subtask", subtask_id)
        await self.store.update(join_path("tasks", task_id, "subtasks"), {subtask_id: True})
        log.info(f"Subtask {subtask_id} of task {task_id} marked complete")

    async def set_sprint_level(self, project_id: str, level: int) -> None:
        _require_key("project", project_id)
        if not MIN_SPRINT_LEVEL <= level <= MAX_SPRINT_LEVEL:
            raise InvalidInput(f"Sprint level {level} is outside {MIN_SPRINT_LEVEL}-{MAX_SPRINT_LEVEL}")
        await self.store.update(join_path("projects", project_id), {"sprint_level": level})
        log.info(f"Project {project_id} moved to sprint {level}")

    async def unlink_project(self, user_id: str, project_id: str) -> None:
        """Drop a project from the user's index; the project records stay in the store."""
        _require_key("user", user_id)
        _require_key("project", project_id)
        await self.store.remove(join_path("users", user_id, "projects", project_id))
        log.info(f"Unlinked project {project_id} from user {user_id}")

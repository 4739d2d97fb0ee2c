from sprintrack.repository import EntityRepository

class CompletionPropagator:
    """
    Marks tasks and subtasks complete.

    Both writes are unconditional and idempotent. A subtask's flag lives in
    its task's reference map and is independent of the task's own flag:
    completing every subtask does not complete the task.
    """

    def __init__(self, repository: EntityRepository):
        self.repository = repository

    async def complete_task(self, task_id: str) -> None:
        await self.repository.set_task_complete(task_id)

    async def complete_subtask(self, task_id: str, subtask_id: str) -> None:
        await self.repository.set_subtask_complete(task_id, subtask_id)

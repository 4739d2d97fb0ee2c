"""
Sprint Progression Controller.

A project moves through sprints 1 -> 2 -> 3 -> 4. Advancing from sprint 4
is the terminal transition to the report stage; it writes nothing, so the
stored level never exceeds 4 and never goes back.
"""
from sprintrack.logs import get_logger
from sprintrack.models import MAX_SPRINT_LEVEL, SprintAdvance, SprintStage
from sprintrack.repository import EntityRepository

log = get_logger("sprints")

class SprintProgressionController:

    def __init__(self, repository: EntityRepository):
        self.repository = repository

    async def advance(self, project_id: str) -> SprintAdvance:
        """
        Advance the project to its next sprint.

        Returns:
            The new stage, or SprintStage.REPORTED when the project was
            already in its last sprint.
        """
        project = await self.repository.get_project(project_id)
        level = project.sprint_level

        if level >= MAX_SPRINT_LEVEL:
            log.info(f"Project {project_id} finished sprint {level}, reporting")
            return SprintAdvance(project_id=project_id, stage=SprintStage.REPORTED, sprint_level=level)

        await self.repository.set_sprint_level(project_id, level + 1)
        return SprintAdvance(project_id=project_id, stage=SprintStage.for_level(level + 1), sprint_level=level + 1)

"""End-to-end tests through the Tracker facade."""

import pytest

from sprintrack.models import SprintStage
from sprintrack.recovery import InvalidInput, NotFound
from sprintrack.store import MemoryStore
from sprintrack.tracker import Tracker
from tests.helpers import run, task_ids, find_task


class TestScenario:
    """Test a project through its whole lifecycle."""

    def test_lifecycle(self, tracker):
        async def scenario():
            project_id = await tracker.create_project("P1", "Demo project", "u1")
            task_id = await tracker.create_task(project_id, "T1", "First task")
            subtask_id = await tracker.create_subtask(task_id, "S1", "First step")

            first = await tracker.hydrate(project_id)
            await tracker.complete_subtask(task_id, subtask_id)
            second = await tracker.hydrate(project_id)

            outcomes = [await tracker.advance_sprint(project_id) for _ in range(5)]
            final = await tracker.hydrate(project_id)
            report = await tracker.report(project_id)
            return task_id, subtask_id, first, second, outcomes, final, report

        task_id, subtask_id, first, second, outcomes, final, report = run(scenario())

        assert first.sprint_level == 1
        assert task_ids(first) == {task_id}
        assert [(s.id, s.completed) for s in find_task(first, task_id).subtasks] == [(subtask_id, False)]

        assert find_task(second, task_id).subtasks[0].completed is True
        assert find_task(second, task_id).task.completed is False

        assert [o.stage for o in outcomes][3:] == [SprintStage.REPORTED, SprintStage.REPORTED]
        assert final.sprint_level == 4
        assert final.tasks == []

        assert report.sprints[1][0].id == task_id
        assert report.total_tasks == 1

    def test_tasks_follow_the_sprint_they_were_created_in(self, tracker):
        async def scenario():
            project_id = await tracker.create_project("P", "D", "u1")
            early = await tracker.create_task(project_id, "Early", "sprint 1")
            await tracker.advance_sprint(project_id)
            late = await tracker.create_task(project_id, "Late", "sprint 2")
            return early, late, await tracker.hydrate(project_id)

        early, late, view = run(scenario())
        assert task_ids(view) == {late}
        assert early not in task_ids(view)

    def test_earlier_sprint_tasks_stay_readable_by_id(self, tracker):
        async def scenario():
            project_id = await tracker.create_project("P", "D", "u1")
            task_id = await tracker.create_task(project_id, "T", "D")
            await tracker.advance_sprint(project_id)
            return await tracker.repository.get_task(task_id)

        assert run(scenario()).title == "T"


class TestProjectDeletion:
    """Test deleting a project only unlinks it from the owner."""

    def test_unlinked_project_records_remain(self, tracker):
        """Test project, task and subtask stay addressable after unlinking."""
        async def scenario():
            project_id = await tracker.create_project("P", "D", "u1")
            task_id = await tracker.create_task(project_id, "T", "D")
            await tracker.create_subtask(task_id, "S", "D")
            await tracker.unlink_project("u1", project_id)
            return project_id, task_id, await tracker.list_projects("u1"), await tracker.hydrate(project_id)

        project_id, task_id, listed, view = run(scenario())
        assert listed == []
        assert view.project.id == project_id
        assert len(find_task(view, task_id).subtasks) == 1

    def test_unlink_is_per_user(self, tracker):
        async def scenario():
            mine = await tracker.create_project("Mine", "D", "u1")
            theirs = await tracker.create_project("Theirs", "D", "u2")
            await tracker.unlink_project("u1", mine)
            return [p.id for p in await tracker.list_projects("u2")], theirs

        listed, theirs = run(scenario())
        assert listed == [theirs]


class TestFacade:
    """Test facade plumbing."""

    def test_errors_pass_through(self, tracker):
        with pytest.raises(NotFound):
            run(tracker.hydrate("ghost"))
        with pytest.raises(InvalidInput):
            run(tracker.create_project("  ", "D", "u1"))

    def test_register_user(self, store, tracker):
        run(tracker.register_user("u1"))
        assert "joined" in run(store.get("/users/u1"))

    def test_context_manager_closes_store(self):
        closed = []

        class _Store(MemoryStore):
            async def close(self):
                closed.append(True)

        async def scenario():
            async with Tracker(_Store()) as tracker:
                await tracker.register_user("u1")

        run(scenario())
        assert closed == [True]

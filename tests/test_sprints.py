"""Unit tests for sprint progression."""

import pytest

from sprintrack.models import SprintStage
from sprintrack.recovery import NotFound
from sprintrack.repository import EntityRepository
from sprintrack.sprints import SprintProgressionController
from tests.helpers import run, project_doc


@pytest.fixture()
def controller(store) -> SprintProgressionController:
    return SprintProgressionController(EntityRepository(store))


class TestAdvance:
    """Test the four-stage lifecycle."""

    def test_five_advances_from_first_sprint(self, store, controller):
        """Test stages 2, 3, 4, REPORTED, REPORTED with the stored level capped at 4."""
        run(store.set("/projects/p1", project_doc(sprint_level=1)))

        stages = []
        for _ in range(5):
            stages.append(run(controller.advance("p1")).stage)
            assert 1 <= run(store.get("/projects/p1/sprint_level")) <= 4

        assert stages == [
            SprintStage.SPRINT_2,
            SprintStage.SPRINT_3,
            SprintStage.SPRINT_4,
            SprintStage.REPORTED,
            SprintStage.REPORTED,
        ]
        assert run(store.get("/projects/p1/sprint_level")) == 4

    def test_reported_transition_writes_nothing(self, store, controller):
        run(store.set("/projects/p1", project_doc(sprint_level=4)))
        store.calls.clear()

        outcome = run(controller.advance("p1"))

        assert outcome.reported
        assert outcome.sprint_level == 4
        assert [op for op, _ in store.calls] == ["get"]

    @pytest.mark.parametrize("level", [1, 2, 3])
    def test_never_skips_a_level(self, store, controller, level):
        run(store.set("/projects/p1", project_doc(sprint_level=level)))
        outcome = run(controller.advance("p1"))
        assert outcome.sprint_level == level + 1
        assert outcome.stage is SprintStage.for_level(level + 1)
        assert not outcome.reported

    def test_unset_level_advances_to_second_sprint(self, store, controller):
        doc = project_doc()
        del doc["sprint_level"]
        run(store.set("/projects/p1", doc))
        assert run(controller.advance("p1")).stage is SprintStage.SPRINT_2

    def test_missing_project(self, controller):
        with pytest.raises(NotFound):
            run(controller.advance("ghost"))

    def test_advance_keeps_task_refs(self, store, controller):
        run(store.set("/projects/p1", project_doc(tasks={"t1": 1})))
        run(controller.advance("p1"))
        assert run(store.get("/projects/p1/tasks")) == {"t1": 1}

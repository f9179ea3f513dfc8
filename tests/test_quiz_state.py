import pytest

from app.core.constants import QuizStatus
from app.services.quiz_state import AggregateCounts, QuizProgress, derive_progress, derive_status


def test_empty_quiz_is_draft():
    progress = derive_progress(AggregateCounts(materials=0, objectives=0, plans=0, questions=0))

    assert progress == QuizProgress()
    assert derive_status(progress) == QuizStatus.DRAFT


@pytest.mark.parametrize(
    "counts, expected",
    [
        (AggregateCounts(1, 0, 0, 0), QuizStatus.MATERIALS_ASSIGNED),
        (AggregateCounts(1, 2, 0, 0), QuizStatus.OBJECTIVES_SET),
        (AggregateCounts(0, 2, 0, 0), QuizStatus.OBJECTIVES_SET),
        (AggregateCounts(1, 2, 1, 0), QuizStatus.PLAN_GENERATED),
        (AggregateCounts(1, 2, 1, 0, active_plan_id=7), QuizStatus.PLAN_APPROVED),
        (AggregateCounts(1, 2, 1, 6, active_plan_id=7), QuizStatus.COMPLETED),
    ],
)
def test_status_is_highest_stage_reached(counts, expected):
    assert derive_status(derive_progress(counts)) == expected


def test_questions_mean_completed_without_anything_else():
    progress = derive_progress(AggregateCounts(materials=0, objectives=0, plans=0, questions=1))

    assert progress.questions_generated is True
    assert progress.objectives_set is False
    assert derive_status(progress) == QuizStatus.COMPLETED


def test_progress_flags_follow_counts():
    progress = derive_progress(AggregateCounts(materials=2, objectives=0, plans=3, questions=0))

    assert progress.as_dict() == {
        "materials_assigned": True,
        "objectives_set": False,
        "plan_generated": True,
        "plan_approved": False,
        "questions_generated": False,
    }

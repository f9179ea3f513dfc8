"""
Derived quiz state.

``derive_progress`` and ``derive_status`` are pure functions over the sizes of
a quiz's sub-collections and its active plan. ``sync_quiz_state`` is the only
writer of ``Quiz.status`` and the ``Quiz.progress_*`` columns; every service
that adds, removes or re-points anything inside an aggregate calls it before
committing.
"""
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.constants import QuizStatus
from app.models.objective import LearningObjective
from app.models.plan import GenerationPlan
from app.models.question import Question
from app.models.quiz import GenerationRecord, Quiz, quiz_materials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateCounts:
    """Sizes of the collections a quiz references."""
    materials: int
    objectives: int
    plans: int
    questions: int
    active_plan_id: Optional[int] = None


@dataclass(frozen=True)
class QuizProgress:
    materials_assigned: bool = False
    objectives_set: bool = False
    plan_generated: bool = False
    plan_approved: bool = False
    questions_generated: bool = False

    def as_dict(self) -> Dict[str, bool]:
        return asdict(self)


def derive_progress(counts: AggregateCounts) -> QuizProgress:
    return QuizProgress(
        materials_assigned=counts.materials > 0,
        objectives_set=counts.objectives > 0,
        plan_generated=counts.plans > 0,
        plan_approved=counts.active_plan_id is not None,
        questions_generated=counts.questions > 0,
    )


def derive_status(progress: QuizProgress) -> QuizStatus:
    """Highest completed stage wins; having questions always means completed."""
    if progress.questions_generated:
        return QuizStatus.COMPLETED
    if progress.plan_approved:
        return QuizStatus.PLAN_APPROVED
    if progress.plan_generated:
        return QuizStatus.PLAN_GENERATED
    if progress.objectives_set:
        return QuizStatus.OBJECTIVES_SET
    if progress.materials_assigned:
        return QuizStatus.MATERIALS_ASSIGNED
    return QuizStatus.DRAFT


def count_aggregate(db: Session, quiz: Quiz) -> AggregateCounts:
    """Count the quiz's sub-collections as currently flushed to storage."""
    db.flush()

    def _count(model) -> int:
        return db.query(func.count(model.id)).filter(model.quiz_id == quiz.id).scalar() or 0

    materials = (
        db.query(func.count())
        .select_from(quiz_materials)
        .filter(quiz_materials.c.quiz_id == quiz.id)
        .scalar()
    ) or 0

    return AggregateCounts(
        materials=materials,
        objectives=_count(LearningObjective),
        plans=_count(GenerationPlan),
        questions=_count(Question),
        active_plan_id=quiz.active_plan_id,
    )


def read_progress(quiz: Quiz) -> QuizProgress:
    """Progress as stored on the quiz row."""
    return QuizProgress(
        materials_assigned=bool(quiz.progress_materials_assigned),
        objectives_set=bool(quiz.progress_objectives_set),
        plan_generated=bool(quiz.progress_plan_generated),
        plan_approved=bool(quiz.progress_plan_approved),
        questions_generated=bool(quiz.progress_questions_generated),
    )


def sync_quiz_state(db: Session, quiz: Quiz) -> QuizProgress:
    """Recompute progress and status for ``quiz`` from its collections."""
    progress = derive_progress(count_aggregate(db, quiz))
    status = derive_status(progress)

    quiz.progress_materials_assigned = progress.materials_assigned  # type: ignore
    quiz.progress_objectives_set = progress.objectives_set  # type: ignore
    quiz.progress_plan_generated = progress.plan_generated  # type: ignore
    quiz.progress_plan_approved = progress.plan_approved  # type: ignore
    quiz.progress_questions_generated = progress.questions_generated  # type: ignore

    if quiz.status != status.value:
        logger.info(f"Quiz {quiz.id} status {quiz.status} -> {status.value}")
    quiz.status = status.value  # type: ignore
    quiz.updated_at = datetime.now(timezone.utc)  # type: ignore
    return progress


def add_generation_record(
    db: Session,
    quiz: Quiz,
    approach: Optional[str],
    questions_generated: int,
    processing_time: int,
    llm_model: Optional[str],
    error_message: Optional[str] = None,
) -> GenerationRecord:
    """Append a generation attempt to the quiz history (success when no error)."""
    record = GenerationRecord(
        quiz_id=quiz.id,
        approach=approach,
        questions_generated=questions_generated,
        processing_time=processing_time,
        llm_model=llm_model,
        success=error_message is None,
        error_message=error_message,
    )
    db.add(record)
    if error_message:
        logger.warning(f"Generation attempt for quiz {quiz.id} failed: {error_message}")
    else:
        logger.info(f"Generation attempt for quiz {quiz.id} produced {questions_generated} items")
    return record


def commit_failed_generation(
    db: Session,
    quiz_id: int,
    approach: Optional[str],
    processing_time: int,
    llm_model: Optional[str],
    error_message: str,
) -> None:
    """
    Discard pending writes and commit only a failure record for the quiz.

    The quiz contents are left exactly as they were before the attempt.
    """
    db.rollback()
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).with_for_update().one()
    add_generation_record(
        db, quiz, approach, 0, processing_time, llm_model, error_message=error_message
    )
    db.commit()

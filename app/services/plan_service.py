"""
Generation plans of a quiz: generate, modify, approve, delete.

At most one plan per quiz is active (``Quiz.active_plan_id``) and that plan is
``approved`` or ``used``. Approving another plan puts the previous one back to
``draft``; modifying the active plan withdraws its approval.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.constants import ACTIVE_PLAN_STATUSES, PedagogicalApproach, PlanStatus, QuestionType
from app.core.exceptions import ConflictError, ValidationError
from app.models.objective import LearningObjective
from app.models.plan import GenerationPlan, PlanModification
from app.models.question import Question
from app.models.user import User
from app.services.ownership import get_owned_plan, get_owned_quiz, lock_quiz, reload
from app.services.plan_engine import build_plan_figures, figures_for_breakdown, get_type_distribution
from app.services.quiz_state import sync_quiz_state

logger = logging.getLogger(__name__)

MIN_QUESTIONS_PER_LO = 1
MAX_QUESTIONS_PER_LO = 10


def list_plans(db: Session, quiz_id: int, user: User) -> List[GenerationPlan]:
    quiz = get_owned_quiz(db, quiz_id, user)
    return (
        db.query(GenerationPlan)
        .filter(GenerationPlan.quiz_id == quiz.id)
        .order_by(GenerationPlan.id.desc())
        .all()
    )


def get_plan(db: Session, plan_id: int, user: User) -> GenerationPlan:
    return get_owned_plan(db, plan_id, user)


def generate_plan(
    db: Session,
    quiz_id: int,
    user: User,
    approach: Optional[str] = None,
    questions_per_lo: Optional[int] = None,
) -> GenerationPlan:
    """
    Build a draft plan for the quiz's current objectives.

    ``approach`` and ``questions_per_lo`` default to the quiz settings.
    """
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    quiz_settings = quiz.settings or {}

    try:
        approach = PedagogicalApproach(approach or quiz_settings.get("pedagogical_approach", "support"))
    except ValueError:
        raise ValidationError(f"Unknown pedagogical approach '{approach}'", "INVALID_APPROACH")
    questions_per_lo = questions_per_lo or quiz_settings.get("questions_per_objective") or 3
    if not MIN_QUESTIONS_PER_LO <= questions_per_lo <= MAX_QUESTIONS_PER_LO:
        raise ValidationError(
            f"questions_per_lo must be between {MIN_QUESTIONS_PER_LO} and {MAX_QUESTIONS_PER_LO}",
            "VALIDATION_ERROR",
        )

    objective_ids = [
        row.id for row in
        db.query(LearningObjective.id)
        .filter(LearningObjective.quiz_id == quiz.id)
        .order_by(LearningObjective.order)
        .all()
    ]
    if not objective_ids:
        raise ValidationError(
            "Quiz must have learning objectives before generating a plan", "NO_OBJECTIVES"
        )

    started = time.monotonic()
    figures = build_plan_figures(objective_ids, approach, questions_per_lo)
    plan = GenerationPlan(
        quiz_id=quiz.id,
        approach=approach.value,
        questions_per_lo=questions_per_lo,
        total_questions=figures.total_questions,
        breakdown=figures.breakdown,
        distribution=figures.distribution,
        generation_metadata={
            "llm_model": "rule-based",
            "generation_prompt": f"Generate {approach.value} pedagogy plan",
            "processing_time": int((time.monotonic() - started) * 1000),
            "confidence": 0.9,
            "reasoning": (
                f"Generated plan using {approach.value} pedagogical approach with "
                f"{questions_per_lo} questions per learning objective"
            ),
            "type_percentages": {t.value: p for t, p in get_type_distribution(approach).items()},
        },
        status=PlanStatus.DRAFT.value,
        created_by=user.id,
    )
    db.add(plan)
    sync_quiz_state(db, quiz)
    db.commit()
    db.refresh(plan)

    logger.info(
        f"Plan {plan.id} generated for quiz {quiz.id}: {approach.value}, "
        f"{len(objective_ids)} objectives, {plan.total_questions} questions"
    )
    return plan


def _validate_breakdown(db: Session, quiz_id: int, breakdown: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Normalize a client breakdown, rejecting foreign objectives and bad counts."""
    if not breakdown:
        raise ValidationError("Breakdown must contain at least one objective", "INVALID_BREAKDOWN")

    quiz_objective_ids = {
        row.id for row in db.query(LearningObjective.id).filter(LearningObjective.quiz_id == quiz_id)
    }
    seen = set()
    normalized = []
    for entry in breakdown:
        objective_id = entry.get("learning_objective_id")
        if objective_id not in quiz_objective_ids:
            raise ValidationError(
                f"Learning objective {objective_id} does not belong to this quiz", "INVALID_OBJECTIVES"
            )
        if objective_id in seen:
            raise ValidationError(
                f"Learning objective {objective_id} appears more than once", "INVALID_BREAKDOWN"
            )
        seen.add(objective_id)

        question_types = []
        for qt in entry.get("question_types") or []:
            try:
                question_type = QuestionType(qt.get("type"))
            except ValueError:
                raise ValidationError(f"Unknown question type '{qt.get('type')}'", "INVALID_BREAKDOWN")
            count = qt.get("count")
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise ValidationError("Question counts must be non-negative integers", "INVALID_BREAKDOWN")
            question_types.append({
                "type": question_type.value,
                "count": count,
                "reasoning": qt.get("reasoning") or "",
            })
        normalized.append({"learning_objective_id": objective_id, "question_types": question_types})
    return normalized


def update_breakdown(
    db: Session,
    plan_id: int,
    user: User,
    breakdown: List[Dict[str, Any]],
    changes: Optional[str] = None,
) -> GenerationPlan:
    """
    Replace the breakdown wholesale and recompute totals and distribution.

    The previous breakdown is kept in the modification log. A modified plan is
    no longer approved, so it stops being the quiz's active plan.
    """
    plan = get_owned_plan(db, plan_id, user)
    quiz = lock_quiz(db, plan.quiz_id)  # type: ignore
    reload(db, plan)
    normalized = _validate_breakdown(db, quiz.id, breakdown)  # type: ignore

    figures = figures_for_breakdown(normalized)
    db.add(PlanModification(
        plan_id=plan.id,
        modified_by=user.id,
        changes=changes or "Breakdown updated",
        previous_breakdown=plan.breakdown,
    ))
    plan.breakdown = figures.breakdown  # type: ignore
    plan.total_questions = figures.total_questions  # type: ignore
    plan.distribution = figures.distribution  # type: ignore
    plan.status = PlanStatus.MODIFIED.value  # type: ignore

    if quiz.active_plan_id == plan.id:
        quiz.active_plan_id = None  # type: ignore
        logger.info(f"Plan {plan.id} modified, no longer active for quiz {quiz.id}")

    sync_quiz_state(db, quiz)
    db.commit()
    db.refresh(plan)
    return plan


def approve_plan(db: Session, plan_id: int, user: User) -> GenerationPlan:
    """Make the plan the quiz's only active plan."""
    plan = get_owned_plan(db, plan_id, user)
    quiz = lock_quiz(db, plan.quiz_id)  # type: ignore
    reload(db, plan)

    # A used plan stays used; approving the active plan again changes nothing
    if quiz.active_plan_id == plan.id and plan.status in ACTIVE_PLAN_STATUSES:
        return plan

    if quiz.active_plan_id is not None and quiz.active_plan_id != plan.id:
        previous = (
            db.query(GenerationPlan)
            .filter(GenerationPlan.id == quiz.active_plan_id)
            .populate_existing()
            .first()
        )
        if previous is not None:
            previous.status = PlanStatus.DRAFT.value  # type: ignore
            logger.info(f"Plan {previous.id} superseded by plan {plan.id}")

    plan.status = PlanStatus.APPROVED.value  # type: ignore
    quiz.active_plan_id = plan.id
    sync_quiz_state(db, quiz)
    db.commit()
    db.refresh(plan)

    logger.info(f"Plan {plan.id} approved for quiz {quiz.id}")
    return plan


def delete_plan(db: Session, plan_id: int, user: User) -> None:
    plan = get_owned_plan(db, plan_id, user)
    quiz = lock_quiz(db, plan.quiz_id)  # type: ignore
    if quiz.active_plan_id == plan.id:
        raise ConflictError("Cannot delete active plan", "ACTIVE_PLAN_DELETE")

    # Questions outlive the plan that produced them
    db.query(Question).filter(Question.generation_plan_id == plan.id).update(
        {Question.generation_plan_id: None}, synchronize_session=False
    )
    db.delete(plan)
    sync_quiz_state(db, quiz)
    db.commit()
    logger.info(f"Plan {plan_id} deleted")

"""
Question set of a quiz.

Questions keep a dense zero-based order and are always appended, whether they
come from a plan, are written by hand, or are copied into the quiz. Every
content change is snapshotted into the question's edit history first.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.constants import ACTIVE_PLAN_STATUSES, DifficultyLevel, PlanStatus, QuestionType
from app.core.exceptions import NotFoundError, UpstreamUnavailableError, ValidationError
from app.models.objective import LearningObjective
from app.models.plan import GenerationPlan
from app.models.question import Question, QuestionEdit
from app.models.user import User
from app.services.ai_service import AIGenerationService
from app.services.folder_service import refresh_folder_stats
from app.services.ordering import apply_reorder, compact_order, next_order, ordered_items
from app.services.ownership import get_owned_question, get_owned_quiz, lock_quiz, reload
from app.services.quiz_state import add_generation_record, commit_failed_generation, sync_quiz_state

logger = logging.getLogger(__name__)

# Public field name -> column
EDITABLE_FIELDS = {
    "question_text": "question_text",
    "content": "content",
    "correct_answer": "correct_answer",
    "explanation": "explanation",
    "difficulty": "difficulty",
}

# Columns that cannot be cleared by an edit
REQUIRED_FIELDS = {"question_text", "content", "difficulty"}


def _snapshot(question: Question) -> Dict[str, Any]:
    return {
        "question_text": question.question_text,
        "content": question.content,
        "correct_answer": question.correct_answer,
    }


def _difficulty(value: Optional[str]) -> str:
    try:
        return DifficultyLevel(value or DifficultyLevel.MODERATE.value).value
    except ValueError:
        raise ValidationError(f"Unknown difficulty '{value}'", "VALIDATION_ERROR")


def list_questions(db: Session, quiz_id: int, user: User) -> List[Question]:
    quiz = get_owned_quiz(db, quiz_id, user)
    return ordered_items(db, Question, quiz.id)  # type: ignore


def _get_generation_plan(db: Session, quiz, plan_id: int) -> GenerationPlan:
    """The quiz's active plan, provided it is approved or already used."""
    plan = db.query(GenerationPlan).filter(
        GenerationPlan.id == plan_id,
        GenerationPlan.quiz_id == quiz.id,
    ).populate_existing().first()
    if not plan or quiz.active_plan_id != plan.id or plan.status not in ACTIVE_PLAN_STATUSES:
        raise NotFoundError("Approved generation plan")
    return plan


def generate_from_plan(
    db: Session,
    quiz_id: int,
    user: User,
    plan_id: int,
    ai: AIGenerationService,
) -> List[Question]:
    """
    Generate every question the plan's breakdown asks for.

    All AI calls happen before anything is written. If any of them fails, no
    question is stored and only a failed generation record is committed.

    Returns:
        The new questions in order.
    """
    quiz = get_owned_quiz(db, quiz_id, user)
    plan = _get_generation_plan(db, quiz, plan_id)
    difficulty = _difficulty((quiz.settings or {}).get("difficulty"))

    objectives = {
        o.id: o for o in
        db.query(LearningObjective).filter(LearningObjective.quiz_id == quiz.id).all()
    }
    for entry in plan.breakdown or []:
        if entry.get("learning_objective_id") not in objectives:
            raise ValidationError(
                "Plan references learning objectives that no longer exist; generate a new plan",
                "PLAN_OUTDATED",
            )

    started = time.monotonic()
    drafts = []
    try:
        for entry in plan.breakdown or []:
            objective = objectives[entry["learning_objective_id"]]
            for qt in entry.get("question_types") or []:
                for _ in range(int(qt.get("count") or 0)):
                    generated = ai.generate_question(qt["type"], str(objective.text), difficulty)
                    drafts.append((objective, qt["type"], generated))
    except UpstreamUnavailableError as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        commit_failed_generation(db, quiz.id, plan.approach, elapsed_ms, ai.model_name, e.message)  # type: ignore
        raise
    elapsed_ms = int((time.monotonic() - started) * 1000)

    quiz = lock_quiz(db, quiz.id)  # type: ignore
    # Re-check under the lock; the plan may have been replaced meanwhile
    plan = _get_generation_plan(db, quiz, plan_id)

    start = next_order(db, Question, quiz.id)  # type: ignore
    questions = []
    for offset, (objective, question_type, generated) in enumerate(drafts):
        question = Question(
            quiz_id=quiz.id,
            learning_objective_id=objective.id,
            generation_plan_id=plan.id,
            type=question_type,
            difficulty=difficulty,
            question_text=generated["question_text"],
            content=generated.get("content") or {},
            correct_answer=generated.get("correct_answer"),
            explanation=generated.get("explanation"),
            order=start + offset,
            generation_metadata={
                "generated_from": objective.id,
                "llm_model": ai.model_name,
                "confidence": generated.get("confidence"),
                "processing_time": elapsed_ms,
            },
            created_by=user.id,
        )
        db.add(question)
        questions.append(question)

    plan.status = PlanStatus.USED.value  # type: ignore
    add_generation_record(db, quiz, plan.approach, len(questions), elapsed_ms, ai.model_name)  # type: ignore
    sync_quiz_state(db, quiz)
    refresh_folder_stats(db, quiz.folder)
    db.commit()
    for question in questions:
        db.refresh(question)

    logger.info(f"Generated {len(questions)} questions for quiz {quiz.id} from plan {plan.id}")
    return questions


def create_question_manual(
    db: Session,
    quiz_id: int,
    user: User,
    learning_objective_id: int,
    question_type: str,
    question_text: str,
    content: Optional[Dict[str, Any]] = None,
    correct_answer: Any = None,
    explanation: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> Question:
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    objective = db.query(LearningObjective).filter(
        LearningObjective.id == learning_objective_id,
        LearningObjective.quiz_id == quiz.id,
    ).first()
    if not objective:
        raise ValidationError("Learning objective does not belong to this quiz", "INVALID_OBJECTIVES")
    try:
        question_type = QuestionType(question_type).value
    except ValueError:
        raise ValidationError(f"Unknown question type '{question_type}'", "VALIDATION_ERROR")
    if not (question_text or "").strip():
        raise ValidationError("Question text is required", "VALIDATION_ERROR")

    question = Question(
        quiz_id=quiz.id,
        learning_objective_id=objective.id,
        type=question_type,
        difficulty=_difficulty(difficulty or (quiz.settings or {}).get("difficulty")),
        question_text=question_text.strip(),
        content=content or {},
        correct_answer=correct_answer,
        explanation=explanation,
        order=next_order(db, Question, quiz.id),  # type: ignore
        generation_metadata={"is_manual": True},
        created_by=user.id,
    )
    db.add(question)
    sync_quiz_state(db, quiz)
    refresh_folder_stats(db, quiz.folder)
    db.commit()
    db.refresh(question)
    return question


def edit_question(
    db: Session,
    question_id: int,
    user: User,
    updates: Dict[str, Any],
    changes: Optional[str] = None,
) -> Question:
    """
    Apply ``updates`` (only the editable fields) to a question.

    The previous text, content and answer are appended to the edit history.
    """
    question = get_owned_question(db, question_id, user)
    unknown = set(updates) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}", "VALIDATION_ERROR")
    if not updates:
        return question
    cleared = sorted(f for f in REQUIRED_FIELDS & set(updates) if updates[f] is None)
    if cleared:
        raise ValidationError(f"Fields cannot be empty: {', '.join(cleared)}", "VALIDATION_ERROR")
    if "difficulty" in updates:
        updates["difficulty"] = _difficulty(updates["difficulty"])
    if "question_text" in updates and not (updates["question_text"] or "").strip():
        raise ValidationError("Question text is required", "VALIDATION_ERROR")

    lock_quiz(db, question.quiz_id)  # type: ignore
    reload(db, question)
    db.add(QuestionEdit(
        question_id=question.id,
        edited_by=user.id,
        changes=changes or f"Updated {', '.join(sorted(updates))}",
        previous_version=_snapshot(question),
    ))
    for field, value in updates.items():
        setattr(question, EDITABLE_FIELDS[field], value)
    db.commit()
    db.refresh(question)
    return question


def regenerate_question(db: Session, question_id: int, user: User, ai: AIGenerationService) -> Question:
    """Let the AI rewrite the question for its objective; failures leave it untouched."""
    question = get_owned_question(db, question_id, user)
    objective_text = str(question.learning_objective.text)
    quiz_id = question.quiz_id

    started = time.monotonic()
    try:
        generated = ai.generate_question(str(question.type), objective_text, str(question.difficulty))
    except UpstreamUnavailableError as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        commit_failed_generation(db, quiz_id, None, elapsed_ms, ai.model_name, e.message)  # type: ignore
        raise
    elapsed_ms = int((time.monotonic() - started) * 1000)

    quiz = lock_quiz(db, quiz_id)  # type: ignore
    reload(db, question)
    db.add(QuestionEdit(
        question_id=question.id,
        edited_by=user.id,
        changes="AI regeneration",
        previous_version=_snapshot(question),
    ))
    question.question_text = generated["question_text"]  # type: ignore
    question.content = generated.get("content") or {}  # type: ignore
    question.correct_answer = generated.get("correct_answer")  # type: ignore
    question.explanation = generated.get("explanation")  # type: ignore
    question.generation_metadata = {  # type: ignore
        **(question.generation_metadata or {}),
        "llm_model": ai.model_name,
        "confidence": generated.get("confidence"),
        "processing_time": elapsed_ms,
    }
    add_generation_record(db, quiz, None, 1, elapsed_ms, ai.model_name)
    db.commit()
    db.refresh(question)
    logger.info(f"Question {question.id} regenerated")
    return question


def reorder_questions(db: Session, quiz_id: int, user: User, question_ids: List[int]) -> List[Question]:
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    questions = ordered_items(db, Question, quiz.id)  # type: ignore
    apply_reorder(questions, question_ids, "INVALID_QUESTIONS")
    db.commit()
    return ordered_items(db, Question, quiz.id)  # type: ignore


def set_review_status(db: Session, question_id: int, user: User, review_status: str) -> Question:
    # Any status may follow any other
    question = get_owned_question(db, question_id, user)
    lock_quiz(db, question.quiz_id)  # type: ignore
    question.review_status = review_status  # type: ignore
    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question_id: int, user: User) -> None:
    question = get_owned_question(db, question_id, user)
    quiz = lock_quiz(db, question.quiz_id)  # type: ignore

    db.delete(question)
    db.flush()
    compact_order(db, Question, quiz.id)  # type: ignore
    sync_quiz_state(db, quiz)
    refresh_folder_stats(db, quiz.folder)
    db.commit()
    logger.info(f"Question {question_id} deleted from quiz {quiz.id}")

"""
Learning objective set of a quiz.

Objectives keep a dense zero-based order. New objectives, whether typed in,
classified from text or generated from materials, are always appended.
"""
import logging
import time
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import UpstreamUnavailableError, ValidationError
from app.models.objective import LearningObjective, ObjectiveEdit
from app.models.question import Question
from app.models.quiz import Quiz
from app.models.user import User
from app.services.ai_service import AIGenerationService
from app.services.material_service import get_completed_materials
from app.services.ordering import apply_reorder, compact_order, next_order, ordered_items
from app.services.ownership import get_owned_objective, get_owned_quiz, lock_quiz, reload
from app.services.quiz_state import add_generation_record, commit_failed_generation, sync_quiz_state
from app.services.folder_service import refresh_folder_stats

logger = logging.getLogger(__name__)

OBJECTIVE_MAX_LENGTH = 500


def _clean_text(text: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Objective text is required", "VALIDATION_ERROR")
    if len(cleaned) > OBJECTIVE_MAX_LENGTH:
        raise ValidationError(
            f"Objective text must be at most {OBJECTIVE_MAX_LENGTH} characters", "VALIDATION_ERROR"
        )
    return cleaned


def _append_objectives(
    db: Session,
    quiz: Quiz,
    user: User,
    texts: List[str],
    **provenance,
) -> List[LearningObjective]:
    start = next_order(db, LearningObjective, quiz.id)  # type: ignore
    objectives = []
    for offset, text in enumerate(texts):
        objective = LearningObjective(
            quiz_id=quiz.id,
            text=text,
            order=start + offset,
            created_by=user.id,
            **provenance,
        )
        db.add(objective)
        objectives.append(objective)
    return objectives


def list_objectives(db: Session, quiz_id: int, user: User) -> List[LearningObjective]:
    quiz = get_owned_quiz(db, quiz_id, user)
    return ordered_items(db, LearningObjective, quiz.id)  # type: ignore


def create_objectives(db: Session, quiz_id: int, user: User, texts: List[str]) -> List[LearningObjective]:
    """Append manually written objectives (one or many) at the end of the order."""
    cleaned = [_clean_text(text) for text in texts]
    if not cleaned:
        raise ValidationError("At least one objective is required", "VALIDATION_ERROR")

    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    objectives = _append_objectives(db, quiz, user, cleaned, is_ai_generated=False)
    sync_quiz_state(db, quiz)
    db.commit()
    for objective in objectives:
        db.refresh(objective)

    logger.info(f"{len(objectives)} objectives added to quiz {quiz.id}")
    return objectives


def generate_objectives(
    db: Session,
    quiz_id: int,
    user: User,
    material_ids: List[int],
    ai: AIGenerationService,
) -> List[LearningObjective]:
    """
    Generate objectives from completed materials of the quiz's folder.

    The AI call happens before the quiz is locked. On failure only a failed
    generation record is committed.
    """
    if not material_ids:
        raise ValidationError("At least one material is required", "INVALID_MATERIALS")
    quiz = get_owned_quiz(db, quiz_id, user)
    materials = get_completed_materials(db, quiz.folder_id, material_ids)  # type: ignore

    started = time.monotonic()
    texts = []
    confidences = []
    try:
        for draft in ai.generate_objectives([str(m.content or "") for m in materials]):
            text = (draft.get("text") or "").strip()[:OBJECTIVE_MAX_LENGTH]
            if text:
                texts.append(text)
                confidences.append(draft.get("confidence"))
        if not texts:
            raise UpstreamUnavailableError("AI returned no learning objectives", "AI_GENERATION_ERROR")
    except UpstreamUnavailableError as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        commit_failed_generation(db, quiz.id, None, elapsed_ms, ai.model_name, e.message)  # type: ignore
        raise
    elapsed_ms = int((time.monotonic() - started) * 1000)

    quiz = lock_quiz(db, quiz.id)  # type: ignore
    objectives = _append_objectives(
        db, quiz, user, texts,
        generated_from=[m.id for m in materials],
        is_ai_generated=True,
        llm_model=ai.model_name,
        generation_prompt="Generate learning objectives from provided materials",
        processing_time=elapsed_ms,
    )
    for objective, confidence in zip(objectives, confidences):
        objective.confidence = confidence  # type: ignore

    add_generation_record(db, quiz, None, len(objectives), elapsed_ms, ai.model_name)
    sync_quiz_state(db, quiz)
    db.commit()
    for objective in objectives:
        db.refresh(objective)

    logger.info(f"Generated {len(objectives)} objectives for quiz {quiz.id} from {len(materials)} materials")
    return objectives


def classify_text(
    db: Session, quiz_id: int, user: User, text: str, ai: AIGenerationService
) -> List[LearningObjective]:
    """Split free text into objective statements and append them."""
    quiz = get_owned_quiz(db, quiz_id, user)

    started = time.monotonic()
    statements = [s[:OBJECTIVE_MAX_LENGTH] for s in ai.classify_text(text) if s.strip()]
    elapsed_ms = int((time.monotonic() - started) * 1000)
    if not statements:
        raise ValidationError(
            "No learning objectives could be identified in the provided text", "NO_OBJECTIVES_FOUND"
        )

    quiz = lock_quiz(db, quiz.id)  # type: ignore
    objectives = _append_objectives(
        db, quiz, user, statements,
        is_ai_generated=True,
        llm_model="text-classification",
        generation_prompt="Classify text into learning objectives",
        confidence=0.75,
        processing_time=elapsed_ms,
    )
    sync_quiz_state(db, quiz)
    db.commit()
    for objective in objectives:
        db.refresh(objective)
    return objectives


def update_objective_text(
    db: Session, objective_id: int, user: User, text: str, changes: Optional[str] = None
) -> LearningObjective:
    """Replace the text, recording the previous one in the edit history."""
    objective = get_owned_objective(db, objective_id, user)
    new_text = _clean_text(text)
    if new_text == objective.text:
        return objective

    lock_quiz(db, objective.quiz_id)  # type: ignore
    reload(db, objective)
    if new_text == objective.text:
        return objective
    db.add(ObjectiveEdit(
        objective_id=objective.id,
        edited_by=user.id,
        changes=changes or "Text updated",
        previous_text=objective.text,
    ))
    objective.text = new_text  # type: ignore
    db.commit()
    db.refresh(objective)
    return objective


def reorder_objectives(db: Session, quiz_id: int, user: User, objective_ids: List[int]) -> List[LearningObjective]:
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    objectives = ordered_items(db, LearningObjective, quiz.id)  # type: ignore
    apply_reorder(objectives, objective_ids, "INVALID_OBJECTIVES")
    db.commit()
    return ordered_items(db, LearningObjective, quiz.id)  # type: ignore


def delete_objective(db: Session, objective_id: int, user: User) -> None:
    """
    Delete an objective together with every question written for it.

    Both collections are compacted afterwards so their orders stay dense.
    """
    objective = get_owned_objective(db, objective_id, user)
    quiz = lock_quiz(db, objective.quiz_id)  # type: ignore

    questions = db.query(Question).filter(Question.learning_objective_id == objective.id).all()
    for question in questions:
        db.delete(question)
    db.flush()
    db.delete(objective)
    db.flush()

    compact_order(db, Question, quiz.id)  # type: ignore
    compact_order(db, LearningObjective, quiz.id)  # type: ignore
    sync_quiz_state(db, quiz)
    if questions:
        refresh_folder_stats(db, quiz.folder)
    db.commit()
    logger.info(f"Objective {objective_id} deleted with {len(questions)} questions")

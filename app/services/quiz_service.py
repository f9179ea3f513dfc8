"""
Quiz aggregate operations.

A quiz references materials of its folder and owns objectives, plans,
questions, generation records and exports. Every mutation locks the quiz row,
applies its writes, re-derives progress and status, then commits once.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import DifficultyLevel, PedagogicalApproach
from app.core.exceptions import ConflictError, ValidationError
from app.models.material import Material
from app.models.objective import LearningObjective
from app.models.plan import GenerationPlan
from app.models.question import Question
from app.models.quiz import GenerationRecord, Quiz, QuizExport
from app.models.user import User
from app.services.export_service import remove_export_file
from app.services.folder_service import refresh_folder_stats
from app.services.ownership import get_owned_folder, get_owned_quiz
from app.services.quiz_state import count_aggregate, derive_progress, read_progress, sync_quiz_state
from app.services.transaction import commit_or_conflict

logger = logging.getLogger(__name__)


def default_settings() -> Dict[str, Any]:
    return {
        "pedagogical_approach": PedagogicalApproach.SUPPORT.value,
        "questions_per_objective": settings.DEFAULT_QUESTIONS_PER_OBJECTIVE,
        "question_types": [],
        "difficulty": DifficultyLevel.MODERATE.value,
    }


def _ensure_name_available(db: Session, folder_id: int, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Quiz.id).filter(Quiz.folder_id == folder_id, Quiz.name == name)
    if exclude_id is not None:
        query = query.filter(Quiz.id != exclude_id)
    if query.first():
        raise ConflictError(f"Quiz '{name}' already exists in this folder", "DUPLICATE_QUIZ")


def _load_folder_materials(db: Session, folder_id: int, material_ids: List[int]) -> List[Material]:
    unique_ids = list(dict.fromkeys(material_ids))
    if not unique_ids:
        return []
    materials = db.query(Material).filter(
        Material.id.in_(unique_ids),
        Material.folder_id == folder_id,
    ).all()
    if len(materials) != len(unique_ids):
        raise ValidationError("Some materials not found or not in the same folder", "INVALID_MATERIALS")
    return materials


def _mark_used(materials: List[Material]) -> None:
    now = datetime.now(timezone.utc)
    for material in materials:
        material.times_used_in_quiz = (material.times_used_in_quiz or 0) + 1  # type: ignore
        material.last_used = now  # type: ignore


def create_quiz(
    db: Session,
    folder_id: int,
    user: User,
    name: str,
    material_ids: Optional[List[int]] = None,
    quiz_settings: Optional[Dict[str, Any]] = None,
) -> Quiz:
    folder = get_owned_folder(db, folder_id, user)
    name = name.strip()
    _ensure_name_available(db, folder.id, name)  # type: ignore
    materials = _load_folder_materials(db, folder.id, material_ids or [])  # type: ignore

    quiz = Quiz(
        name=name,
        folder_id=folder.id,
        created_by=user.id,
        settings={**default_settings(), **(quiz_settings or {})},
    )
    quiz.materials = materials
    _mark_used(materials)

    with commit_or_conflict(db, f"Quiz '{name}' already exists in this folder", "DUPLICATE_QUIZ"):
        db.add(quiz)
        db.flush()
        sync_quiz_state(db, quiz)
        refresh_folder_stats(db, folder)
    db.refresh(quiz)

    logger.info(f"Quiz {quiz.id} '{name}' created in folder {folder.id}")
    return quiz


def list_quizzes(db: Session, folder_id: int, user: User) -> List[Quiz]:
    folder = get_owned_folder(db, folder_id, user)
    return (
        db.query(Quiz)
        .filter(Quiz.folder_id == folder.id, Quiz.created_by == user.id)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
        .all()
    )


def update_quiz(
    db: Session,
    quiz_id: int,
    user: User,
    name: Optional[str] = None,
    quiz_settings: Optional[Dict[str, Any]] = None,
) -> Quiz:
    """Rename the quiz and/or merge ``quiz_settings`` into its settings."""
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)

    new_name = name.strip() if name is not None else None
    if new_name and new_name != quiz.name:
        _ensure_name_available(db, quiz.folder_id, new_name, exclude_id=quiz.id)  # type: ignore

    with commit_or_conflict(db, f"Quiz '{new_name}' already exists in this folder", "DUPLICATE_QUIZ"):
        if new_name:
            quiz.name = new_name  # type: ignore
        if quiz_settings:
            quiz.settings = {**(quiz.settings or default_settings()), **quiz_settings}  # type: ignore
        quiz.updated_at = datetime.now(timezone.utc)  # type: ignore
    db.refresh(quiz)
    return quiz


def assign_materials(db: Session, quiz_id: int, user: User, material_ids: List[int]) -> Quiz:
    """Replace the quiz's material set. Newly added materials count as used."""
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    materials = _load_folder_materials(db, quiz.folder_id, material_ids)  # type: ignore

    current_ids = {m.id for m in quiz.materials}
    _mark_used([m for m in materials if m.id not in current_ids])
    quiz.materials = materials

    sync_quiz_state(db, quiz)
    db.commit()
    db.refresh(quiz)
    logger.info(f"Quiz {quiz.id} now references {len(materials)} materials")
    return quiz


def delete_quiz(db: Session, quiz_id: int, user: User) -> None:
    """
    Delete a quiz and everything it owns.

    Children go first (questions, objectives, plans, records, exports), then the
    quiz is detached from its materials and folder, then the quiz row goes.
    """
    quiz = get_owned_quiz(db, quiz_id, user, for_update=True)
    folder = quiz.folder

    quiz.active_plan_id = None  # type: ignore
    db.flush()

    for question in db.query(Question).filter(Question.quiz_id == quiz.id).all():
        db.delete(question)
    db.flush()
    for objective in db.query(LearningObjective).filter(LearningObjective.quiz_id == quiz.id).all():
        db.delete(objective)
    for plan in db.query(GenerationPlan).filter(GenerationPlan.quiz_id == quiz.id).all():
        db.delete(plan)
    for record in db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz.id).all():
        db.delete(record)
    exports = db.query(QuizExport).filter(QuizExport.quiz_id == quiz.id).all()
    export_paths = [str(export.file_path) for export in exports]
    for export in exports:
        db.delete(export)
    db.flush()

    quiz.materials = []
    db.delete(quiz)
    refresh_folder_stats(db, folder)
    db.commit()

    for path in export_paths:
        remove_export_file(path)
    logger.info(f"Quiz {quiz_id} deleted by user {user.id}")


def get_quiz_progress(db: Session, quiz_id: int, user: User) -> Dict[str, Any]:
    quiz = get_owned_quiz(db, quiz_id, user)
    counts = count_aggregate(db, quiz)
    return {
        "quiz_id": quiz.id,
        "status": quiz.status,
        "progress": read_progress(quiz).as_dict(),
        "counts": {
            "materials": counts.materials,
            "objectives": counts.objectives,
            "plans": counts.plans,
            "questions": counts.questions,
        },
        "active_plan_id": quiz.active_plan_id,
    }


def duplicate_quiz(db: Session, quiz_id: int, user: User, name: Optional[str] = None) -> Quiz:
    """Copy name, materials and settings into a new draft quiz in the same folder."""
    source = get_owned_quiz(db, quiz_id, user)
    new_name = (name or "").strip() or f"{source.name} (Copy)"
    _ensure_name_available(db, source.folder_id, new_name)  # type: ignore

    copy = Quiz(
        name=new_name,
        folder_id=source.folder_id,
        created_by=user.id,
        settings=dict(source.settings or default_settings()),
    )
    copy.materials = list(source.materials)
    _mark_used(copy.materials)

    with commit_or_conflict(db, f"Quiz '{new_name}' already exists in this folder", "DUPLICATE_QUIZ"):
        db.add(copy)
        db.flush()
        sync_quiz_state(db, copy)
        refresh_folder_stats(db, source.folder)
    db.refresh(copy)

    logger.info(f"Quiz {source.id} duplicated as {copy.id}")
    return copy


def assemble_quiz(db: Session, quiz: Quiz) -> Dict[str, Any]:
    """Read model: quiz fields plus its ordered collections and plans."""
    progress = derive_progress(count_aggregate(db, quiz))
    return {
        "id": quiz.id,
        "name": quiz.name,
        "folder_id": quiz.folder_id,
        "created_by": quiz.created_by,
        "settings": quiz.settings or default_settings(),
        "status": quiz.status,
        "progress": progress.as_dict(),
        "active_plan_id": quiz.active_plan_id,
        "materials": list(quiz.materials),
        "objectives": (
            db.query(LearningObjective)
            .filter(LearningObjective.quiz_id == quiz.id)
            .order_by(LearningObjective.order)
            .all()
        ),
        "questions": (
            db.query(Question)
            .filter(Question.quiz_id == quiz.id)
            .order_by(Question.order)
            .all()
        ),
        "plans": (
            db.query(GenerationPlan)
            .filter(GenerationPlan.quiz_id == quiz.id)
            .order_by(GenerationPlan.id.desc())
            .all()
        ),
        "generation_history": list(quiz.generation_history),
        "exports": list(quiz.exports),
        "created_at": quiz.created_at,
        "updated_at": quiz.updated_at,
    }


def get_quiz(db: Session, quiz_id: int, user: User) -> Dict[str, Any]:
    return assemble_quiz(db, get_owned_quiz(db, quiz_id, user))

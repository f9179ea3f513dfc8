"""
Folder management: an instructor's container for materials and quizzes.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.constants import ProcessingStatus, QuizStatus
from app.core.exceptions import ConflictError
from app.models.folder import Folder
from app.models.material import Material
from app.models.question import Question
from app.models.quiz import Quiz
from app.models.user import User
from app.services.ownership import get_owned_folder
from app.services.transaction import commit_or_conflict

logger = logging.getLogger(__name__)


def _ensure_name_available(db: Session, user: User, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Folder.id).filter(Folder.instructor_id == user.id, Folder.name == name)
    if exclude_id is not None:
        query = query.filter(Folder.id != exclude_id)
    if query.first():
        raise ConflictError(f"Folder '{name}' already exists", "DUPLICATE_FOLDER")


def refresh_folder_stats(db: Session, folder: Folder) -> None:
    """Recompute the folder's dashboard counters from its current contents."""
    db.flush()
    folder.total_materials = (  # type: ignore
        db.query(func.count(Material.id)).filter(Material.folder_id == folder.id).scalar() or 0
    )
    folder.total_quizzes = (  # type: ignore
        db.query(func.count(Quiz.id)).filter(Quiz.folder_id == folder.id).scalar() or 0
    )
    folder.total_questions = (  # type: ignore
        db.query(func.count(Question.id))
        .join(Quiz, Question.quiz_id == Quiz.id)
        .filter(Quiz.folder_id == folder.id)
        .scalar()
        or 0
    )
    folder.last_activity = datetime.now(timezone.utc)  # type: ignore


def create_folder(db: Session, user: User, name: str) -> Folder:
    name = name.strip()
    _ensure_name_available(db, user, name)

    folder = Folder(name=name, instructor_id=user.id)
    with commit_or_conflict(db, f"Folder '{name}' already exists", "DUPLICATE_FOLDER"):
        db.add(folder)
    db.refresh(folder)

    logger.info(f"Folder {folder.id} '{name}' created by user {user.id}")
    return folder


def list_folders(db: Session, user: User) -> List[Folder]:
    return (
        db.query(Folder)
        .filter(Folder.instructor_id == user.id)
        .order_by(Folder.created_at.desc(), Folder.id.desc())
        .all()
    )


def rename_folder(db: Session, folder_id: int, user: User, name: str) -> Folder:
    folder = get_owned_folder(db, folder_id, user)
    name = name.strip()
    if name == folder.name:
        return folder
    _ensure_name_available(db, user, name, exclude_id=folder.id)  # type: ignore

    with commit_or_conflict(db, f"Folder '{name}' already exists", "DUPLICATE_FOLDER"):
        folder.name = name  # type: ignore
    db.refresh(folder)
    return folder


def delete_folder(db: Session, folder_id: int, user: User) -> None:
    """Delete an empty folder. Folders holding materials or quizzes are kept."""
    folder = get_owned_folder(db, folder_id, user)

    has_materials = db.query(Material.id).filter(Material.folder_id == folder.id).first()
    has_quizzes = db.query(Quiz.id).filter(Quiz.folder_id == folder.id).first()
    if has_materials or has_quizzes:
        raise ConflictError(
            "Cannot delete folder that contains materials or quizzes", "FOLDER_NOT_EMPTY"
        )

    db.delete(folder)
    db.commit()
    logger.info(f"Folder {folder_id} deleted by user {user.id}")


def get_folder_stats(db: Session, folder_id: int, user: User) -> Dict[str, Any]:
    """Materials per processing status, quizzes per status and question totals."""
    folder = get_owned_folder(db, folder_id, user)

    material_rows = (
        db.query(
            Material.processing_status,
            func.count(Material.id),
            func.coalesce(func.sum(Material.file_size), 0),
        )
        .filter(Material.folder_id == folder.id)
        .group_by(Material.processing_status)
        .all()
    )
    materials_by_status = {s.value: 0 for s in ProcessingStatus}
    total_size = 0
    for processing_status, count, size in material_rows:
        materials_by_status[processing_status] = count
        total_size += int(size or 0)

    quiz_rows = (
        db.query(Quiz.status, func.count(Quiz.id))
        .filter(Quiz.folder_id == folder.id)
        .group_by(Quiz.status)
        .all()
    )
    quizzes_by_status = {s.value: 0 for s in QuizStatus}
    for quiz_status, count in quiz_rows:
        quizzes_by_status[quiz_status] = count

    total_questions = (
        db.query(func.count(Question.id))
        .join(Quiz, Question.quiz_id == Quiz.id)
        .filter(Quiz.folder_id == folder.id)
        .scalar()
        or 0
    )

    return {
        "folder_id": folder.id,
        "materials": {
            "total": sum(materials_by_status.values()),
            "by_status": materials_by_status,
            "total_size": total_size,
        },
        "quizzes": {
            "total": sum(quizzes_by_status.values()),
            "by_status": quizzes_by_status,
        },
        "total_questions": total_questions,
        "last_activity": folder.last_activity,
    }

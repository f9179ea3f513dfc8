"""
Quiz endpoints: lifecycle, material assignment, progress, duplication.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_active_user, get_db
from app.models.user import User
from app.schemas.quiz import (
    MaterialAssignment,
    QuizCreate,
    QuizDetail,
    QuizDuplicate,
    QuizProgressResponse,
    QuizSummary,
    QuizUpdate,
)
from app.services import quiz_service

router = APIRouter()


@router.post("/folders/{folder_id}/quizzes", response_model=QuizDetail, status_code=status.HTTP_201_CREATED)
def create_quiz(
    folder_id: int,
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    quiz = quiz_service.create_quiz(
        db,
        folder_id,
        current_user,
        quiz_in.name,
        material_ids=quiz_in.material_ids,
        quiz_settings=quiz_in.settings.model_dump(mode="json") if quiz_in.settings else None,
    )
    return quiz_service.assemble_quiz(db, quiz)


@router.get("/folders/{folder_id}/quizzes", response_model=List[QuizSummary])
def list_quizzes(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return quiz_service.list_quizzes(db, folder_id, current_user)


@router.get("/quizzes/{quiz_id}", response_model=QuizDetail)
def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get a quiz with its materials, ordered objectives and questions, and plans.
    """
    return quiz_service.get_quiz(db, quiz_id, current_user)


@router.patch("/quizzes/{quiz_id}", response_model=QuizDetail)
def update_quiz(
    quiz_id: int,
    quiz_update: QuizUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Rename a quiz and/or merge new values into its settings.
    """
    quiz_settings = (
        quiz_update.settings.model_dump(mode="json", exclude_none=True)
        if quiz_update.settings else None
    )
    quiz = quiz_service.update_quiz(db, quiz_id, current_user, quiz_update.name, quiz_settings)
    return quiz_service.assemble_quiz(db, quiz)


@router.delete("/quizzes/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> None:
    quiz_service.delete_quiz(db, quiz_id, current_user)


@router.put("/quizzes/{quiz_id}/materials", response_model=QuizDetail)
def assign_materials(
    quiz_id: int,
    assignment: MaterialAssignment,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Replace the set of folder materials the quiz is built from.
    """
    quiz = quiz_service.assign_materials(db, quiz_id, current_user, assignment.material_ids)
    return quiz_service.assemble_quiz(db, quiz)


@router.get("/quizzes/{quiz_id}/progress", response_model=QuizProgressResponse)
def get_quiz_progress(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return quiz_service.get_quiz_progress(db, quiz_id, current_user)


@router.post("/quizzes/{quiz_id}/duplicate", response_model=QuizDetail, status_code=status.HTTP_201_CREATED)
def duplicate_quiz(
    quiz_id: int,
    duplicate_in: QuizDuplicate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    quiz = quiz_service.duplicate_quiz(db, quiz_id, current_user, duplicate_in.name)
    return quiz_service.assemble_quiz(db, quiz)

"""
Question endpoints.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_ai_service, get_current_active_user, get_db
from app.models.user import User
from app.schemas.question import (
    Question,
    QuestionCreate,
    QuestionGenerate,
    QuestionReorder,
    QuestionUpdate,
    ReviewStatusUpdate,
)
from app.services import question_service
from app.services.ai_service import AIGenerationService

router = APIRouter()


@router.get("/quizzes/{quiz_id}/questions", response_model=List[Question])
def list_questions(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return question_service.list_questions(db, quiz_id, current_user)


@router.post(
    "/quizzes/{quiz_id}/questions/generate",
    response_model=List[Question],
    status_code=status.HTTP_201_CREATED,
)
def generate_questions(
    quiz_id: int,
    generate_in: QuestionGenerate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    ai: AIGenerationService = Depends(get_ai_service),
) -> Any:
    """
    Generate the questions described by the quiz's approved plan.
    """
    return question_service.generate_from_plan(db, quiz_id, current_user, generate_in.plan_id, ai)


@router.post("/quizzes/{quiz_id}/questions", response_model=Question, status_code=status.HTTP_201_CREATED)
def create_question(
    quiz_id: int,
    question_in: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return question_service.create_question_manual(
        db,
        quiz_id,
        current_user,
        learning_objective_id=question_in.learning_objective_id,
        question_type=question_in.type.value,
        question_text=question_in.question_text,
        content=question_in.content,
        correct_answer=question_in.correct_answer,
        explanation=question_in.explanation,
        difficulty=question_in.difficulty.value if question_in.difficulty else None,
    )


@router.put("/quizzes/{quiz_id}/questions/reorder", response_model=List[Question])
def reorder_questions(
    quiz_id: int,
    reorder_in: QuestionReorder,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return question_service.reorder_questions(db, quiz_id, current_user, reorder_in.question_ids)


@router.patch("/questions/{question_id}", response_model=Question)
def edit_question(
    question_id: int,
    question_update: QuestionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Edit a question. The previous version is kept in its edit history.
    """
    updates = question_update.model_dump(mode="json", exclude_unset=True)
    changes = updates.pop("changes", None)
    return question_service.edit_question(db, question_id, current_user, updates, changes)


@router.post("/questions/{question_id}/regenerate", response_model=Question)
def regenerate_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    ai: AIGenerationService = Depends(get_ai_service),
) -> Any:
    return question_service.regenerate_question(db, question_id, current_user, ai)


@router.put("/questions/{question_id}/review-status", response_model=Question)
def set_review_status(
    question_id: int,
    review_in: ReviewStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return question_service.set_review_status(db, question_id, current_user, review_in.review_status.value)


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> None:
    question_service.delete_question(db, question_id, current_user)

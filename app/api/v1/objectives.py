"""
Learning objective endpoints.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_ai_service, get_current_active_user, get_db
from app.models.user import User
from app.schemas.objective import (
    LearningObjective,
    ObjectiveClassify,
    ObjectiveCreate,
    ObjectiveGenerate,
    ObjectiveReorder,
    ObjectiveUpdate,
)
from app.services import objective_service
from app.services.ai_service import AIGenerationService

router = APIRouter()


@router.get("/quizzes/{quiz_id}/objectives", response_model=List[LearningObjective])
def list_objectives(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return objective_service.list_objectives(db, quiz_id, current_user)


@router.post(
    "/quizzes/{quiz_id}/objectives",
    response_model=List[LearningObjective],
    status_code=status.HTTP_201_CREATED,
)
def create_objectives(
    quiz_id: int,
    objectives_in: ObjectiveCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Add one or more objectives at the end of the quiz's list.
    """
    return objective_service.create_objectives(db, quiz_id, current_user, objectives_in.texts)


@router.post(
    "/quizzes/{quiz_id}/objectives/generate",
    response_model=List[LearningObjective],
    status_code=status.HTTP_201_CREATED,
)
def generate_objectives(
    quiz_id: int,
    generate_in: ObjectiveGenerate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    ai: AIGenerationService = Depends(get_ai_service),
) -> Any:
    """
    Generate objectives from processed materials of the quiz's folder.
    """
    return objective_service.generate_objectives(db, quiz_id, current_user, generate_in.material_ids, ai)


@router.post(
    "/quizzes/{quiz_id}/objectives/classify",
    response_model=List[LearningObjective],
    status_code=status.HTTP_201_CREATED,
)
def classify_objectives(
    quiz_id: int,
    classify_in: ObjectiveClassify,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    ai: AIGenerationService = Depends(get_ai_service),
) -> Any:
    return objective_service.classify_text(db, quiz_id, current_user, classify_in.text, ai)


@router.put("/quizzes/{quiz_id}/objectives/reorder", response_model=List[LearningObjective])
def reorder_objectives(
    quiz_id: int,
    reorder_in: ObjectiveReorder,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return objective_service.reorder_objectives(db, quiz_id, current_user, reorder_in.objective_ids)


@router.patch("/objectives/{objective_id}", response_model=LearningObjective)
def update_objective(
    objective_id: int,
    objective_update: ObjectiveUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return objective_service.update_objective_text(
        db, objective_id, current_user, objective_update.text, objective_update.changes
    )


@router.delete("/objectives/{objective_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_objective(
    objective_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> None:
    """
    Delete an objective and every question written for it.
    """
    objective_service.delete_objective(db, objective_id, current_user)

"""
Generation plan endpoints.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_active_user, get_db
from app.models.user import User
from app.schemas.plan import GenerationPlan, PlanBreakdownUpdate, PlanGenerate
from app.services import plan_service

router = APIRouter()


@router.get("/quizzes/{quiz_id}/plans", response_model=List[GenerationPlan])
def list_plans(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return plan_service.list_plans(db, quiz_id, current_user)


@router.post("/quizzes/{quiz_id}/plans", response_model=GenerationPlan, status_code=status.HTTP_201_CREATED)
def generate_plan(
    quiz_id: int,
    plan_in: PlanGenerate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Generate a draft plan for the quiz's objectives.
    """
    return plan_service.generate_plan(
        db,
        quiz_id,
        current_user,
        approach=plan_in.approach.value if plan_in.approach else None,
        questions_per_lo=plan_in.questions_per_lo,
    )


@router.get("/plans/{plan_id}", response_model=GenerationPlan)
def get_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return plan_service.get_plan(db, plan_id, current_user)


@router.put("/plans/{plan_id}/breakdown", response_model=GenerationPlan)
def update_breakdown(
    plan_id: int,
    breakdown_in: PlanBreakdownUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Replace the plan's breakdown. Totals and distribution are recomputed.
    """
    breakdown = [entry.model_dump(mode="json") for entry in breakdown_in.breakdown]
    return plan_service.update_breakdown(db, plan_id, current_user, breakdown, breakdown_in.changes)


@router.post("/plans/{plan_id}/approve", response_model=GenerationPlan)
def approve_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return plan_service.approve_plan(db, plan_id, current_user)


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> None:
    plan_service.delete_plan(db, plan_id, current_user)

"""Generation plan schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.constants import PedagogicalApproach, QuestionType


class PlanGenerate(BaseModel):
    """
    Both fields default to the quiz settings.

    ``questions_per_lo`` is a per-objective quota. Each type share is rounded on
    its own, so the plan total can differ from objectives x quota.
    """
    approach: Optional[PedagogicalApproach] = None
    questions_per_lo: Optional[int] = Field(None, ge=1, le=10)


class QuestionTypeCount(BaseModel):
    type: QuestionType
    count: int = Field(..., ge=0)
    reasoning: Optional[str] = None


class BreakdownEntry(BaseModel):
    learning_objective_id: int
    question_types: List[QuestionTypeCount]


class PlanBreakdownUpdate(BaseModel):
    breakdown: List[BreakdownEntry] = Field(..., min_length=1)
    changes: Optional[str] = None


class DistributionEntry(BaseModel):
    type: str
    total_count: int
    percentage: int


class PlanModification(BaseModel):
    id: int
    modified_by: int
    modified_at: Optional[datetime] = None
    changes: Optional[str] = None
    previous_breakdown: Optional[List[Dict[str, Any]]] = None

    class Config:
        from_attributes = True


class GenerationPlan(BaseModel):
    """``total_questions`` is always the sum of the breakdown counts."""
    id: int
    quiz_id: int
    approach: str
    questions_per_lo: int
    total_questions: int
    breakdown: List[Dict[str, Any]]
    distribution: List[DistributionEntry]
    generation_metadata: Optional[Dict[str, Any]] = None
    status: str
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    modifications: List[PlanModification] = []

    class Config:
        from_attributes = True

"""Question schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.constants import DifficultyLevel, QuestionType, ReviewStatus


class QuestionCreate(BaseModel):
    learning_objective_id: int
    type: QuestionType
    question_text: str = Field(..., min_length=1)
    content: Dict[str, Any] = {}
    correct_answer: Optional[Any] = None
    explanation: Optional[str] = None
    difficulty: Optional[DifficultyLevel] = None


class QuestionUpdate(BaseModel):
    """Editable fields; only those sent are changed."""
    question_text: Optional[str] = Field(None, min_length=1)
    content: Optional[Dict[str, Any]] = None
    correct_answer: Optional[Any] = None
    explanation: Optional[str] = None
    difficulty: Optional[DifficultyLevel] = None
    changes: Optional[str] = None


class QuestionGenerate(BaseModel):
    plan_id: int


class QuestionReorder(BaseModel):
    question_ids: List[int]


class ReviewStatusUpdate(BaseModel):
    review_status: ReviewStatus


class QuestionEdit(BaseModel):
    id: int
    edited_by: int
    edited_at: Optional[datetime] = None
    changes: Optional[str] = None
    previous_version: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class Question(BaseModel):
    id: int
    quiz_id: int
    learning_objective_id: int
    generation_plan_id: Optional[int] = None
    type: str
    difficulty: str
    question_text: str
    content: Dict[str, Any] = {}
    correct_answer: Optional[Any] = None
    explanation: Optional[str] = None
    order: int
    generation_metadata: Optional[Dict[str, Any]] = None
    review_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    edit_history: List[QuestionEdit] = []

    class Config:
        from_attributes = True

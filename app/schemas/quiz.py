"""Quiz schemas for request/response validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.constants import DifficultyLevel, PedagogicalApproach, QuestionType
from app.schemas.export import QuizExport
from app.schemas.material import Material
from app.schemas.objective import LearningObjective
from app.schemas.plan import GenerationPlan
from app.schemas.question import Question


class QuestionTypeSetting(BaseModel):
    type: QuestionType
    count: int = Field(..., ge=0)


class QuizSettings(BaseModel):
    """Authoring settings of a quiz."""
    pedagogical_approach: PedagogicalApproach = PedagogicalApproach.SUPPORT
    questions_per_objective: int = Field(3, ge=1, le=10)
    question_types: List[QuestionTypeSetting] = []
    difficulty: DifficultyLevel = DifficultyLevel.MODERATE


class QuizSettingsUpdate(BaseModel):
    """Partial settings; only given fields are merged."""
    pedagogical_approach: Optional[PedagogicalApproach] = None
    questions_per_objective: Optional[int] = Field(None, ge=1, le=10)
    question_types: Optional[List[QuestionTypeSetting]] = None
    difficulty: Optional[DifficultyLevel] = None


class QuizCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    material_ids: List[int] = []
    settings: Optional[QuizSettings] = None


class QuizUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    settings: Optional[QuizSettingsUpdate] = None


class QuizDuplicate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)


class MaterialAssignment(BaseModel):
    material_ids: List[int]


class QuizProgress(BaseModel):
    materials_assigned: bool
    objectives_set: bool
    plan_generated: bool
    plan_approved: bool
    questions_generated: bool


class QuizSummary(BaseModel):
    """Quiz row without its collections."""
    id: int
    name: str
    folder_id: int
    created_by: int
    status: str
    active_plan_id: Optional[int] = None
    settings: Dict[str, Any] = {}
    progress_materials_assigned: bool = False
    progress_objectives_set: bool = False
    progress_plan_generated: bool = False
    progress_plan_approved: bool = False
    progress_questions_generated: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GenerationRecord(BaseModel):
    id: int
    timestamp: Optional[datetime] = None
    approach: Optional[str] = None
    questions_generated: int
    processing_time: Optional[int] = None
    llm_model: Optional[str] = None
    success: bool
    error_message: Optional[str] = None

    class Config:
        from_attributes = True


class QuizDetail(BaseModel):
    """Assembled quiz read model."""
    id: int
    name: str
    folder_id: int
    created_by: int
    settings: Dict[str, Any]
    status: str
    progress: QuizProgress
    active_plan_id: Optional[int] = None
    materials: List[Material] = []
    objectives: List[LearningObjective] = []
    questions: List[Question] = []
    plans: List[GenerationPlan] = []
    generation_history: List[GenerationRecord] = []
    exports: List[QuizExport] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuizCounts(BaseModel):
    materials: int
    objectives: int
    plans: int
    questions: int


class QuizProgressResponse(BaseModel):
    quiz_id: int
    status: str
    progress: QuizProgress
    counts: QuizCounts
    active_plan_id: Optional[int] = None

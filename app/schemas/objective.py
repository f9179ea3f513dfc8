"""Learning objective schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ObjectiveCreate(BaseModel):
    """One or more manually written objectives."""
    texts: List[str] = Field(..., min_length=1)


class ObjectiveGenerate(BaseModel):
    material_ids: List[int] = Field(..., min_length=1)


class ObjectiveClassify(BaseModel):
    text: str = Field(..., min_length=1)


class ObjectiveUpdate(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)
    changes: Optional[str] = None


class ObjectiveReorder(BaseModel):
    objective_ids: List[int]


class ObjectiveEdit(BaseModel):
    id: int
    edited_by: int
    edited_at: Optional[datetime] = None
    changes: Optional[str] = None
    previous_text: Optional[str] = None

    class Config:
        from_attributes = True


class LearningObjective(BaseModel):
    id: int
    quiz_id: int
    text: str
    order: int
    generated_from: Optional[List[int]] = None
    is_ai_generated: bool = False
    llm_model: Optional[str] = None
    generation_prompt: Optional[str] = None
    confidence: Optional[float] = None
    processing_time: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    edit_history: List[ObjectiveEdit] = []

    class Config:
        from_attributes = True

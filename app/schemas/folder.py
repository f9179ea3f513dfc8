"""Folder schemas for request/response validation."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from app.schemas.material import Material
from app.schemas.quiz import QuizSummary


class FolderBase(BaseModel):
    """Base folder schema."""
    name: str = Field(..., min_length=1, max_length=200, description="Folder name")


class FolderCreate(FolderBase):
    """Schema for creating a new folder."""
    pass


class FolderUpdate(BaseModel):
    """Schema for renaming a folder."""
    name: str = Field(..., min_length=1, max_length=200, description="New folder name")


class FolderInDB(FolderBase):
    """Folder schema with database fields and dashboard stats."""
    id: int
    instructor_id: int
    total_quizzes: int = 0
    total_materials: int = 0
    total_questions: int = 0
    last_activity: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FolderWithContents(FolderInDB):
    """Folder with its materials and quizzes."""
    materials: List[Material] = []
    quizzes: List[QuizSummary] = []

    class Config:
        from_attributes = True


class MaterialStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    total_size: int


class QuizStats(BaseModel):
    total: int
    by_status: Dict[str, int]


class FolderStats(BaseModel):
    """Aggregated statistics of a folder."""
    folder_id: int
    materials: MaterialStats
    quizzes: QuizStats
    total_questions: int
    last_activity: Optional[datetime] = None

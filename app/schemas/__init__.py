"""Schemas module - Import all schemas."""
from app.schemas.user import User, UserCreate, Token
from app.schemas.common import Message, ErrorResponse
from app.schemas.material import (
    Material,
    MaterialStatus,
    MaterialTextCreate,
    MaterialUpdate,
    MaterialUploadResult,
    MaterialURLCreate,
    ProcessingStatusUpdate,
)
from app.schemas.objective import (
    LearningObjective,
    ObjectiveClassify,
    ObjectiveCreate,
    ObjectiveGenerate,
    ObjectiveReorder,
    ObjectiveUpdate,
)
from app.schemas.plan import GenerationPlan, PlanBreakdownUpdate, PlanGenerate
from app.schemas.question import (
    Question,
    QuestionCreate,
    QuestionGenerate,
    QuestionReorder,
    QuestionUpdate,
    ReviewStatusUpdate,
)
from app.schemas.export import QuizExport
from app.schemas.quiz import (
    MaterialAssignment,
    QuizCreate,
    QuizDetail,
    QuizDuplicate,
    QuizProgressResponse,
    QuizSettings,
    QuizSummary,
    QuizUpdate,
)
from app.schemas.folder import FolderCreate, FolderInDB, FolderStats, FolderUpdate, FolderWithContents

__all__ = [
    "User",
    "UserCreate",
    "Token",
    "Message",
    "ErrorResponse",
    "Material",
    "MaterialStatus",
    "MaterialTextCreate",
    "MaterialUpdate",
    "MaterialUploadResult",
    "MaterialURLCreate",
    "ProcessingStatusUpdate",
    "LearningObjective",
    "ObjectiveClassify",
    "ObjectiveCreate",
    "ObjectiveGenerate",
    "ObjectiveReorder",
    "ObjectiveUpdate",
    "GenerationPlan",
    "PlanBreakdownUpdate",
    "PlanGenerate",
    "Question",
    "QuestionCreate",
    "QuestionGenerate",
    "QuestionReorder",
    "QuestionUpdate",
    "ReviewStatusUpdate",
    "QuizExport",
    "MaterialAssignment",
    "QuizCreate",
    "QuizDetail",
    "QuizDuplicate",
    "QuizProgressResponse",
    "QuizSettings",
    "QuizSummary",
    "QuizUpdate",
    "FolderCreate",
    "FolderInDB",
    "FolderStats",
    "FolderUpdate",
    "FolderWithContents",
]

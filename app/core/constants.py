"""
Enumerations shared by models, schemas and services.

Values are the wire representation, so every enum subclasses ``str``.
"""
from enum import Enum


class MaterialType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    URL = "url"
    TEXT = "text"


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    FLASHCARD = "flashcard"
    SUMMARY = "summary"
    DISCUSSION = "discussion"
    MATCHING = "matching"
    ORDERING = "ordering"
    CLOZE = "cloze"


class DifficultyLevel(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class PedagogicalApproach(str, Enum):
    SUPPORT = "support"
    ASSESS = "assess"
    GAMIFY = "gamify"
    CUSTOM = "custom"


class QuizStatus(str, Enum):
    DRAFT = "draft"
    MATERIALS_ASSIGNED = "materials-assigned"
    OBJECTIVES_SET = "objectives-set"
    PLAN_GENERATED = "plan-generated"
    PLAN_APPROVED = "plan-approved"
    GENERATING = "generating"
    GENERATED = "generated"
    REVIEWING = "reviewing"
    COMPLETED = "completed"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    NEEDS_REVIEW = "needs-review"
    REJECTED = "rejected"


class PlanStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    MODIFIED = "modified"
    USED = "used"


# Plans in these states may be referenced by Quiz.active_plan_id
ACTIVE_PLAN_STATUSES = (PlanStatus.APPROVED.value, PlanStatus.USED.value)

EXPORT_FORMAT_H5P = "h5p"

"""Models module - Import all models here for Alembic."""
from app.db.base import Base
from app.models.user import User
from app.models.folder import Folder
from app.models.material import Material
from app.models.quiz import Quiz, GenerationRecord, QuizExport, quiz_materials
from app.models.objective import LearningObjective, ObjectiveEdit
from app.models.plan import GenerationPlan, PlanModification
from app.models.question import Question, QuestionEdit

__all__ = ["Base", "User", "Folder", "Material", "Quiz", "GenerationRecord", "QuizExport", "quiz_materials", "LearningObjective", "ObjectiveEdit", "GenerationPlan", "PlanModification", "Question", "QuestionEdit"]

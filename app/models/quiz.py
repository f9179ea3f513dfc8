from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import EXPORT_FORMAT_H5P, QuizStatus
from app.db.base import Base


quiz_materials = Table(
    "quiz_materials",
    Base.metadata,
    Column("quiz_id", Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), primary_key=True),
    Column("material_id", Integer, ForeignKey("materials.id", ondelete="CASCADE"), primary_key=True),
)


class Quiz(Base):
    """
    Quiz aggregate root.

    ``status`` and the ``progress_*`` flags are derived columns. They are only
    written by ``app.services.quiz_state.sync_quiz_state``.
    """

    __tablename__ = "quizzes"
    __table_args__ = (
        UniqueConstraint("folder_id", "name", name="uq_quizzes_folder_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    folder_id = Column(Integer, ForeignKey("folders.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    active_plan_id = Column(
        Integer,
        ForeignKey("generation_plans.id", use_alter=True, name="fk_quizzes_active_plan", ondelete="SET NULL"),
        nullable=True,
    )

    # pedagogicalApproach, questionsPerObjective, questionTypes, difficulty
    settings = Column(JSON, nullable=False, default=dict)

    status = Column(String, default=QuizStatus.DRAFT.value, index=True)
    progress_materials_assigned = Column(Boolean, default=False, nullable=False)
    progress_objectives_set = Column(Boolean, default=False, nullable=False)
    progress_plan_generated = Column(Boolean, default=False, nullable=False)
    progress_plan_approved = Column(Boolean, default=False, nullable=False)
    progress_questions_generated = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    folder = relationship("Folder", back_populates="quizzes")
    materials = relationship("Material", secondary=quiz_materials, back_populates="quizzes")
    objectives = relationship(
        "LearningObjective", back_populates="quiz", order_by="LearningObjective.order"
    )
    questions = relationship("Question", back_populates="quiz", order_by="Question.order")
    plans = relationship(
        "GenerationPlan",
        back_populates="quiz",
        foreign_keys="GenerationPlan.quiz_id",
        order_by="GenerationPlan.id.desc()",
    )
    active_plan = relationship("GenerationPlan", foreign_keys=[active_plan_id], post_update=True)
    generation_history = relationship(
        "GenerationRecord", back_populates="quiz", order_by="GenerationRecord.id"
    )
    exports = relationship("QuizExport", back_populates="quiz", order_by="QuizExport.id")


class GenerationRecord(Base):
    """One generation attempt (AI or export) against a quiz. Rows are never updated."""

    __tablename__ = "generation_records"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
    approach = Column(String, nullable=True)
    questions_generated = Column(Integer, default=0, nullable=False)
    processing_time = Column(Integer, nullable=True)  # milliseconds
    llm_model = Column(String, nullable=True)
    success = Column(Boolean, default=True, nullable=False)
    error_message = Column(Text, nullable=True)

    quiz = relationship("Quiz", back_populates="generation_history")


class QuizExport(Base):
    """Export artifact produced for a quiz, with its download counter."""

    __tablename__ = "quiz_exports"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    export_id = Column(String(64), unique=True, index=True, nullable=False)
    format = Column(String, default=EXPORT_FORMAT_H5P, nullable=False)
    file_path = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    content_length = Column(Integer, nullable=False, default=0)
    download_count = Column(Integer, default=0, nullable=False)
    exported_at = Column(DateTime(timezone=True), server_default=func.now())

    quiz = relationship("Quiz", back_populates="exports")

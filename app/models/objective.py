from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class LearningObjective(Base):
    """Learning objective within a quiz. ``order`` is dense and zero-based per quiz."""

    __tablename__ = "learning_objectives"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    text = Column(String(500), nullable=False)
    order = Column(Integer, nullable=False, default=0)

    # Provenance
    generated_from = Column(JSON, nullable=True)  # material ids used by the AI
    is_ai_generated = Column(Boolean, default=False, nullable=False)
    llm_model = Column(String, nullable=True)
    generation_prompt = Column(Text, nullable=True)
    confidence = Column(Float, nullable=True)
    processing_time = Column(Integer, nullable=True)  # milliseconds

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    quiz = relationship("Quiz", back_populates="objectives")
    edit_history = relationship(
        "ObjectiveEdit",
        back_populates="objective",
        order_by="ObjectiveEdit.id",
        cascade="all, delete-orphan",
    )


class ObjectiveEdit(Base):
    """Append-only edit history entry for a learning objective."""

    __tablename__ = "objective_edits"

    id = Column(Integer, primary_key=True, index=True)
    objective_id = Column(
        Integer, ForeignKey("learning_objectives.id", ondelete="CASCADE"), nullable=False, index=True
    )
    edited_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    edited_at = Column(DateTime(timezone=True), server_default=func.now())
    changes = Column(Text, nullable=True)
    previous_text = Column(String(500), nullable=True)

    objective = relationship("LearningObjective", back_populates="edit_history")

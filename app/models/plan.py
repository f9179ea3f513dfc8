from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import PlanStatus
from app.db.base import Base


class GenerationPlan(Base):
    """
    Question generation plan for a quiz.

    ``breakdown`` is a list of ``{"learning_objective_id", "question_types":
    [{"type", "count", "reasoning"}]}`` entries; ``distribution`` is always
    recomputed from it by ``app.services.plan_engine``.
    """

    __tablename__ = "generation_plans"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    approach = Column(String, nullable=False, index=True)
    questions_per_lo = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False, default=0)
    breakdown = Column(JSON, nullable=False, default=list)
    distribution = Column(JSON, nullable=False, default=list)
    generation_metadata = Column(JSON, nullable=True)  # llm_model, prompt, confidence, reasoning
    status = Column(String, default=PlanStatus.DRAFT.value, index=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    quiz = relationship("Quiz", back_populates="plans", foreign_keys=[quiz_id])
    modifications = relationship(
        "PlanModification",
        back_populates="plan",
        order_by="PlanModification.id",
        cascade="all, delete-orphan",
    )


class PlanModification(Base):
    """Append-only record of a breakdown replacement."""

    __tablename__ = "plan_modifications"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("generation_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    modified_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    modified_at = Column(DateTime(timezone=True), server_default=func.now())
    changes = Column(Text, nullable=True)
    previous_breakdown = Column(JSON, nullable=True)

    plan = relationship("GenerationPlan", back_populates="modifications")

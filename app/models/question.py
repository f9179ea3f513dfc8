from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import ReviewStatus
from app.db.base import Base


class Question(Base):
    """Quiz question linked to one learning objective and optionally one plan."""

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    learning_objective_id = Column(
        Integer, ForeignKey("learning_objectives.id"), nullable=False, index=True
    )
    generation_plan_id = Column(
        Integer, ForeignKey("generation_plans.id", ondelete="SET NULL"), nullable=True, index=True
    )

    type = Column(String, nullable=False, index=True)  # multiple-choice, true-false, flashcard, ...
    difficulty = Column(String, nullable=False)  # easy, moderate, hard
    question_text = Column(Text, nullable=False)
    # options / front+back / leftItems+rightItems+matchingPairs / items+correctOrder / textWithBlanks...
    content = Column(JSON, nullable=False, default=dict)
    correct_answer = Column(JSON, nullable=True)
    explanation = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)

    generation_metadata = Column(JSON, nullable=True)
    review_status = Column(String, default=ReviewStatus.PENDING.value, index=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    learning_objective = relationship("LearningObjective")
    edit_history = relationship(
        "QuestionEdit",
        back_populates="question",
        order_by="QuestionEdit.id",
        cascade="all, delete-orphan",
    )


class QuestionEdit(Base):
    """Append-only edit history entry for a question."""

    __tablename__ = "question_edits"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    edited_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    edited_at = Column(DateTime(timezone=True), server_default=func.now())
    changes = Column(Text, nullable=True)
    previous_version = Column(JSON, nullable=True)  # questionText, content, correctAnswer

    question = relationship("Question", back_populates="edit_history")

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

class Folder(Base):
    """Folder model grouping an instructor's materials and quizzes (e.g. one course)."""

    __tablename__ = "folders"
    __table_args__ = (
        UniqueConstraint("instructor_id", "name", name="uq_folders_instructor_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Dashboard statistics, refreshed whenever contents change
    total_quizzes = Column(Integer, default=0, nullable=False)
    total_materials = Column(Integer, default=0, nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)
    last_activity = Column(DateTime(timezone=True), server_default=func.now())

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    instructor = relationship("User", back_populates="folders")
    materials = relationship("Material", back_populates="folder", order_by="Material.created_at.desc()")
    quizzes = relationship("Quiz", back_populates="folder", order_by="Quiz.created_at.desc()")

"""
Material model for course source documents (uploaded files, URLs, raw text).
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import ProcessingStatus
from app.db.base import Base


class Material(Base):
    """Material model."""

    __tablename__ = "materials"
    __table_args__ = (
        # Same content may not be stored twice in one folder
        UniqueConstraint("folder_id", "checksum", name="uq_materials_folder_checksum"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String, nullable=False, index=True)  # pdf, docx, txt, url, text

    original_filename = Column(String, nullable=True)
    file_path = Column(String, nullable=True)  # storage reference for uploaded files
    url = Column(String, nullable=True)
    content = Column(Text, nullable=True)  # raw text, or text extracted during processing

    file_size = Column(Integer, nullable=True)
    mime_type = Column(String, nullable=True)
    checksum = Column(String, nullable=True, index=True)

    folder_id = Column(Integer, ForeignKey("folders.id"), nullable=False, index=True)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    processing_status = Column(String, default=ProcessingStatus.PENDING.value, index=True)
    processing_error = Column(JSON, nullable=True)  # {"message": ..., "timestamp": ...}

    times_used_in_quiz = Column(Integer, default=0, nullable=False)
    last_used = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    folder = relationship("Folder", back_populates="materials")
    quizzes = relationship("Quiz", secondary="quiz_materials", back_populates="materials")

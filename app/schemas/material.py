"""Material schemas for request/response validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.constants import ProcessingStatus


class MaterialURLCreate(BaseModel):
    """Register a web page as a material."""
    url: str = Field(..., min_length=1)
    name: Optional[str] = Field(None, max_length=255)


class MaterialTextCreate(BaseModel):
    """Register pasted text as a material."""
    name: str = Field(..., min_length=1, max_length=255)
    content: str


class MaterialUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class ProcessingStatusUpdate(BaseModel):
    status: ProcessingStatus
    error: Optional[str] = None


class Material(BaseModel):
    """Material response. ``content`` is omitted; it can be large."""
    id: int
    name: str
    type: str
    folder_id: int
    uploaded_by: int
    original_filename: Optional[str] = None
    url: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    checksum: Optional[str] = None
    processing_status: str
    processing_error: Optional[Dict[str, Any]] = None
    times_used_in_quiz: int = 0
    last_used: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UploadError(BaseModel):
    filename: str
    error: str
    code: Optional[str] = None


class MaterialUploadResult(BaseModel):
    """Per-file outcome of a multi-file upload."""
    materials: List[Material]
    errors: List[UploadError] = []


class MaterialStatus(BaseModel):
    material_id: int
    processing_status: str
    processing_error: Optional[Dict[str, Any]] = None

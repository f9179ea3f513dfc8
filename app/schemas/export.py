"""Export schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class QuizExport(BaseModel):
    id: int
    quiz_id: int
    export_id: str
    format: str
    filename: str
    content_length: int
    download_count: int
    exported_at: Optional[datetime] = None

    class Config:
        from_attributes = True

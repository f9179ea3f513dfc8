"""
Quiz export endpoints.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_active_user, get_db, get_exporter
from app.models.user import User
from app.schemas.export import QuizExport
from app.services import export_service
from app.services.export_service import QuizExporter

router = APIRouter()


@router.post("/quizzes/{quiz_id}/exports", response_model=QuizExport, status_code=status.HTTP_201_CREATED)
def export_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    exporter: QuizExporter = Depends(get_exporter),
) -> Any:
    """
    Export the quiz's questions as an H5P question set.
    """
    return export_service.record_export(db, quiz_id, current_user, exporter)


@router.get("/quizzes/{quiz_id}/exports", response_model=List[QuizExport])
def list_exports(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return export_service.list_exports(db, quiz_id, current_user)


@router.get("/exports/{export_id}/download")
def download_export(
    export_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    export = export_service.download_export(db, export_id, current_user)
    return FileResponse(
        path=str(export.file_path),
        filename=str(export.filename),
        media_type="application/json",
    )


@router.delete("/exports/{export_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_export(
    export_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> None:
    export_service.delete_export(db, export_id, current_user)

"""Folder management API endpoints."""

from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_active_user, get_db
from app.models.user import User
from app.schemas.folder import FolderCreate, FolderInDB, FolderStats, FolderUpdate, FolderWithContents
from app.services import folder_service
from app.services.ownership import get_owned_folder

router = APIRouter()


@router.post("/", response_model=FolderInDB, status_code=status.HTTP_201_CREATED)
def create_folder(
    folder: FolderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Create a new folder to organize materials and quizzes.
    """
    return folder_service.create_folder(db, current_user, folder.name)


@router.get("/", response_model=List[FolderInDB])
def list_folders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get all folders of the current instructor, newest first.
    """
    return folder_service.list_folders(db, current_user)


@router.get("/{folder_id}", response_model=FolderWithContents)
def get_folder(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get a folder with its materials and quizzes.
    """
    return get_owned_folder(db, folder_id, current_user)


@router.patch("/{folder_id}", response_model=FolderInDB)
def rename_folder(
    folder_id: int,
    folder_update: FolderUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return folder_service.rename_folder(db, folder_id, current_user, folder_update.name)


@router.delete("/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_folder(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> None:
    """
    Delete an empty folder. Folders that still hold materials or quizzes are kept.
    """
    folder_service.delete_folder(db, folder_id, current_user)


@router.get("/{folder_id}/stats", response_model=FolderStats)
def get_folder_stats(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return folder_service.get_folder_stats(db, folder_id, current_user)

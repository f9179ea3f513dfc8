"""
Material endpoints: uploads, URLs, pasted text, processing lifecycle.
"""
import logging
from typing import Any, Callable, List

from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from app.core.dependencies import (
    get_current_active_user,
    get_db,
    get_file_storage,
    get_session_factory,
    get_text_extractor,
)
from app.core.helpers.extracter import MaterialTextExtractor
from app.models.user import User
from app.schemas.material import (
    Material as MaterialSchema,
    MaterialStatus,
    MaterialTextCreate,
    MaterialUpdate,
    MaterialUploadResult,
    MaterialURLCreate,
    ProcessingStatusUpdate,
)
from app.services import material_service
from app.services.file_service import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/folders/{folder_id}/materials/upload",
    response_model=MaterialUploadResult,
    status_code=status.HTTP_201_CREATED,
)
async def upload_materials(
    folder_id: int,
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    storage: FileStorage = Depends(get_file_storage),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    extractor: MaterialTextExtractor = Depends(get_text_extractor),
) -> Any:
    """
    Upload one or more files into a folder and queue them for text extraction.

    Files are accepted or rejected individually; rejected ones are listed in
    ``errors``.
    """
    payload = []
    for upload in files:
        payload.append((upload.filename or "upload", upload.content_type, await upload.read()))

    result = material_service.upload_materials(db, storage, folder_id, current_user, payload)
    for material in result["materials"]:
        background_tasks.add_task(
            material_service.process_material_background,
            session_factory,
            material.id,
            storage,
            extractor,
        )
    logger.info(
        f"Upload to folder {folder_id}: {len(result['materials'])} accepted, {len(result['errors'])} rejected"
    )
    return result


@router.post(
    "/folders/{folder_id}/materials/url",
    response_model=MaterialSchema,
    status_code=status.HTTP_201_CREATED,
)
def add_url_material(
    folder_id: int,
    material_in: MaterialURLCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    storage: FileStorage = Depends(get_file_storage),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    extractor: MaterialTextExtractor = Depends(get_text_extractor),
) -> Any:
    material = material_service.create_url_material(
        db, folder_id, current_user, material_in.url, material_in.name
    )
    background_tasks.add_task(
        material_service.process_material_background, session_factory, material.id, storage, extractor
    )
    return material


@router.post(
    "/folders/{folder_id}/materials/text",
    response_model=MaterialSchema,
    status_code=status.HTTP_201_CREATED,
)
def add_text_material(
    folder_id: int,
    material_in: MaterialTextCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return material_service.create_text_material(
        db, folder_id, current_user, material_in.name, material_in.content
    )


@router.get("/folders/{folder_id}/materials", response_model=List[MaterialSchema])
def list_materials(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return material_service.list_materials(db, folder_id, current_user)


@router.patch("/materials/{material_id}", response_model=MaterialSchema)
def rename_material(
    material_id: int,
    material_update: MaterialUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return material_service.rename_material(db, material_id, current_user, material_update.name)


@router.get("/materials/{material_id}/status", response_model=MaterialStatus)
def get_material_status(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the processing status of a material.
    Possible statuses: pending, processing, completed, failed
    """
    return material_service.get_material_status(db, material_id, current_user)


@router.patch("/materials/{material_id}/status", response_model=MaterialSchema)
def update_processing_status(
    material_id: int,
    status_update: ProcessingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return material_service.update_processing_status(
        db, material_id, current_user, status_update.status, status_update.error
    )


@router.post("/materials/{material_id}/reprocess", response_model=MaterialSchema)
def reprocess_material(
    material_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    storage: FileStorage = Depends(get_file_storage),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    extractor: MaterialTextExtractor = Depends(get_text_extractor),
) -> Any:
    """
    Reset a failed material to pending and process it again.
    """
    material = material_service.reprocess_material(db, material_id, current_user)
    background_tasks.add_task(
        material_service.process_material_background, session_factory, material.id, storage, extractor
    )
    return material


@router.delete("/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    storage: FileStorage = Depends(get_file_storage),
) -> None:
    material_service.delete_material(db, material_id, current_user, storage)

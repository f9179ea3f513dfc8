"""
Material registry.

Materials are the raw course sources of a folder: uploaded files, web pages and
pasted text. Content is checksummed so the same source is stored at most once
per folder.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse, urlunparse

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import MaterialType, ProcessingStatus
from app.core.exceptions import ConflictError, ValidationError
from app.core.helpers.extracter import MaterialTextExtractor
from app.models.material import Material
from app.models.user import User
from app.services.file_service import FileStorage, compute_checksum
from app.services.folder_service import refresh_folder_stats
from app.services.ownership import get_owned_folder, get_owned_material, lock_quiz
from app.services.quiz_state import sync_quiz_state
from app.services.transaction import commit_or_conflict

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ProcessingStatus.PENDING.value: {ProcessingStatus.PROCESSING.value},
    ProcessingStatus.PROCESSING.value: {
        ProcessingStatus.COMPLETED.value,
        ProcessingStatus.FAILED.value,
    },
    ProcessingStatus.FAILED.value: {ProcessingStatus.PENDING.value},
    ProcessingStatus.COMPLETED.value: set(),
}

FILE_TYPES = (MaterialType.PDF.value, MaterialType.DOCX.value, MaterialType.TXT.value)


def _ensure_unique_checksum(db: Session, folder_id: int, checksum: str, code: str) -> None:
    existing = db.query(Material.id).filter(
        Material.folder_id == folder_id,
        Material.checksum == checksum,
    ).first()
    if existing:
        raise ConflictError("Material with identical content already exists in this folder", code)


def validate_upload(filename: str, content_type: Optional[str], data: bytes) -> str:
    """Return the material type of an acceptable upload, raise otherwise."""
    material_type = settings.ALLOWED_MIME_TYPES.get(content_type or "")
    if material_type is None:
        raise ValidationError(
            f"File type '{content_type}' of '{filename}' is not allowed", "INVALID_FILE_TYPE"
        )
    if len(data) == 0:
        raise ValidationError(f"File '{filename}' is empty", "EMPTY_FILE")
    if len(data) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(
            f"File '{filename}' exceeds the maximum size of {settings.MAX_UPLOAD_SIZE} bytes",
            "FILE_TOO_LARGE",
        )
    return material_type


def create_file_material(
    db: Session,
    storage: FileStorage,
    folder_id: int,
    user: User,
    filename: str,
    content_type: Optional[str],
    data: bytes,
) -> Material:
    """
    Store an uploaded file and register it as a pending material.

    The bytes of a duplicate upload are removed from storage again before the
    conflict is reported.
    """
    folder = get_owned_folder(db, folder_id, user)
    material_type = validate_upload(filename, content_type, data)
    _ensure_unique_checksum(db, folder.id, compute_checksum(data), "DUPLICATE_FILE")  # type: ignore

    stored = storage.save(data, filename, user.id)  # type: ignore
    material = Material(
        name=filename,
        type=material_type,
        original_filename=filename,
        file_path=stored.reference,
        file_size=stored.size,
        mime_type=content_type,
        checksum=stored.checksum,
        folder_id=folder.id,
        uploaded_by=user.id,
        processing_status=ProcessingStatus.PENDING.value,
    )
    try:
        with commit_or_conflict(
            db, "Material with identical content already exists in this folder", "DUPLICATE_FILE"
        ):
            db.add(material)
            refresh_folder_stats(db, folder)
    except ConflictError:
        storage.delete(stored.reference)
        raise
    db.refresh(material)

    logger.info(f"Material {material.id} '{filename}' uploaded to folder {folder.id}")
    return material


def upload_materials(
    db: Session,
    storage: FileStorage,
    folder_id: int,
    user: User,
    files: List[Tuple[str, Optional[str], bytes]],
) -> Dict[str, Any]:
    """
    Upload several files into one folder.

    Each file succeeds or fails on its own; the result lists both. When no file
    succeeded the first error is raised.
    """
    get_owned_folder(db, folder_id, user)
    if not files:
        raise ValidationError("No files provided", "NO_FILES")
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise ValidationError(
            f"At most {settings.MAX_FILES_PER_UPLOAD} files can be uploaded at once", "TOO_MANY_FILES"
        )

    materials: List[Material] = []
    errors: List[Dict[str, Any]] = []
    first_error = None
    for filename, content_type, data in files:
        try:
            materials.append(
                create_file_material(db, storage, folder_id, user, filename, content_type, data)
            )
        except (ConflictError, ValidationError) as e:
            db.rollback()
            first_error = first_error or e
            errors.append({"filename": filename, "error": e.message, "code": e.code})

    if not materials and first_error is not None:
        raise first_error

    return {"materials": materials, "errors": errors}


def normalize_url(url: str) -> str:
    parsed = urlparse(url.strip())
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ValidationError("URL must be an absolute http or https address", "INVALID_URL")
    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def create_url_material(
    db: Session, folder_id: int, user: User, url: str, name: Optional[str] = None
) -> Material:
    folder = get_owned_folder(db, folder_id, user)
    normalized = normalize_url(url)

    duplicate = db.query(Material.id).filter(
        Material.folder_id == folder.id,
        Material.url == normalized,
    ).first()
    if duplicate:
        raise ConflictError("URL already added to this folder", "DUPLICATE_URL")

    material = Material(
        name=(name or "").strip() or normalized,
        type=MaterialType.URL.value,
        url=normalized,
        checksum=compute_checksum(normalized.encode("utf-8")),
        folder_id=folder.id,
        uploaded_by=user.id,
        processing_status=ProcessingStatus.PENDING.value,
    )
    with commit_or_conflict(db, "URL already added to this folder", "DUPLICATE_URL"):
        db.add(material)
        refresh_folder_stats(db, folder)
    db.refresh(material)

    logger.info(f"URL material {material.id} added to folder {folder.id}")
    return material


def create_text_material(db: Session, folder_id: int, user: User, name: str, content: str) -> Material:
    """Pasted text is usable right away, so it starts out completed."""
    folder = get_owned_folder(db, folder_id, user)
    if not content or not content.strip():
        raise ValidationError("Text content is required", "EMPTY_CONTENT")

    checksum = compute_checksum(content.encode("utf-8"))
    _ensure_unique_checksum(db, folder.id, checksum, "DUPLICATE_CONTENT")  # type: ignore

    material = Material(
        name=name.strip(),
        type=MaterialType.TEXT.value,
        content=content,
        file_size=len(content.encode("utf-8")),
        mime_type="text/plain",
        checksum=checksum,
        folder_id=folder.id,
        uploaded_by=user.id,
        processing_status=ProcessingStatus.COMPLETED.value,
    )
    with commit_or_conflict(
        db, "Material with identical content already exists in this folder", "DUPLICATE_CONTENT"
    ):
        db.add(material)
        refresh_folder_stats(db, folder)
    db.refresh(material)

    logger.info(f"Text material {material.id} added to folder {folder.id}")
    return material


def list_materials(db: Session, folder_id: int, user: User) -> List[Material]:
    folder = get_owned_folder(db, folder_id, user)
    return (
        db.query(Material)
        .filter(Material.folder_id == folder.id)
        .order_by(Material.created_at.desc(), Material.id.desc())
        .all()
    )


def rename_material(db: Session, material_id: int, user: User, name: str) -> Material:
    material = get_owned_material(db, material_id, user)
    material.name = name.strip()  # type: ignore
    db.commit()
    db.refresh(material)
    return material


def set_processing_status(
    material: Material, new_status: ProcessingStatus, error: Optional[str] = None
) -> None:
    """
    Apply one lifecycle step to ``material`` (caller commits).

    Failed carries ``{message, timestamp}`` in ``processing_error``; every other
    status clears it.
    """
    new_status = ProcessingStatus(new_status)
    current = str(material.processing_status)
    if new_status.value not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationError(
            f"Cannot move material from '{current}' to '{new_status.value}'",
            "INVALID_STATUS_TRANSITION",
        )

    material.processing_status = new_status.value  # type: ignore
    if new_status == ProcessingStatus.FAILED:
        material.processing_error = {  # type: ignore
            "message": error or "Processing failed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    else:
        material.processing_error = None  # type: ignore
    logger.info(f"Material {material.id} status {current} -> {new_status.value}")


def update_processing_status(
    db: Session,
    material_id: int,
    user: User,
    new_status: ProcessingStatus,
    error: Optional[str] = None,
) -> Material:
    material = get_owned_material(db, material_id, user)
    set_processing_status(material, new_status, error)
    db.commit()
    db.refresh(material)
    return material


def reprocess_material(db: Session, material_id: int, user: User) -> Material:
    """Reset a failed material to pending so it is processed again."""
    material = get_owned_material(db, material_id, user)
    if material.processing_status != ProcessingStatus.FAILED.value:
        raise ValidationError("Only failed materials can be reprocessed", "MATERIAL_NOT_FAILED")

    set_processing_status(material, ProcessingStatus.PENDING)
    db.commit()
    db.refresh(material)
    return material


def process_material(
    db: Session,
    material_id: int,
    storage: FileStorage,
    extractor: Optional[MaterialTextExtractor] = None,
) -> Optional[Material]:
    """
    Extract the text of a pending file or URL material.

    Ends in ``completed`` with the text stored in ``content``, or in ``failed``
    with the error detail. Materials that are not pending are left alone.
    """
    extractor = extractor or MaterialTextExtractor()
    material = db.query(Material).filter(Material.id == material_id).first()
    if material is None:
        logger.warning(f"Material {material_id} vanished before processing")
        return None
    if material.processing_status != ProcessingStatus.PENDING.value:
        logger.info(f"Material {material_id} is {material.processing_status}, skipping processing")
        return material

    set_processing_status(material, ProcessingStatus.PROCESSING)
    db.commit()

    try:
        if material.type == MaterialType.URL.value:
            text = extractor.extract_url(str(material.url))
        elif material.type in FILE_TYPES:
            text = extractor.extract_file(storage.read(str(material.file_path)), str(material.type))
        else:
            text = str(material.content or "")
        if not text.strip():
            raise ValueError("No text content could be extracted")
    except Exception as e:
        logger.error(f"Processing failed for material {material_id}: {e}")
        set_processing_status(material, ProcessingStatus.FAILED, str(e))
        db.commit()
        return material

    material.content = text  # type: ignore
    set_processing_status(material, ProcessingStatus.COMPLETED)
    db.commit()
    db.refresh(material)
    return material


def process_material_background(
    session_factory: Callable[[], Session],
    material_id: int,
    storage: FileStorage,
    extractor: Optional[MaterialTextExtractor] = None,
) -> None:
    """
    Background task to process a material in its own session.
    """
    db = session_factory()
    try:
        logger.info(f"Starting background processing for material ID {material_id}")
        process_material(db, material_id, storage, extractor)
    except Exception as e:
        logger.error(f"Error processing material ID {material_id} in background: {e}")
    finally:
        db.close()


def delete_material(db: Session, material_id: int, user: User, storage: FileStorage) -> None:
    """
    Remove a material from its quizzes, then from storage and its folder.

    File deletion is best effort; a storage failure never keeps the record.
    """
    material = get_owned_material(db, material_id, user)
    folder = material.folder

    quiz_ids = sorted(quiz.id for quiz in material.quizzes)
    quizzes = [lock_quiz(db, quiz_id) for quiz_id in quiz_ids]
    for quiz in quizzes:
        quiz.materials.remove(material)

    if material.file_path:
        storage.delete(str(material.file_path))

    db.delete(material)
    for quiz in quizzes:
        sync_quiz_state(db, quiz)
    refresh_folder_stats(db, folder)
    db.commit()
    logger.info(f"Material {material_id} deleted by user {user.id}")


def get_material_status(db: Session, material_id: int, user: User) -> Dict[str, Any]:
    material = get_owned_material(db, material_id, user)
    return {
        "material_id": material.id,
        "processing_status": material.processing_status,
        "processing_error": material.processing_error,
    }


def get_completed_materials(db: Session, folder_id: int, material_ids: List[int]) -> List[Material]:
    """Load ``material_ids`` from one folder, all of which must be completed."""
    unique_ids = list(dict.fromkeys(material_ids))
    materials = db.query(Material).filter(
        Material.id.in_(unique_ids),
        Material.folder_id == folder_id,
    ).all()
    if len(materials) != len(unique_ids):
        raise ValidationError("Some materials not found or not in the same folder", "INVALID_MATERIALS")

    not_ready = [m.id for m in materials if m.processing_status != ProcessingStatus.COMPLETED.value]
    if not_ready:
        raise ValidationError(
            "Some materials are not yet processed. Please wait for processing to complete.",
            "MATERIALS_NOT_READY",
        )
    by_id = {m.id: m for m in materials}
    return [by_id[material_id] for material_id in unique_ids]

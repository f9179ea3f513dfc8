"""
Commit helpers.

Each service operation finishes with exactly one commit. Uniqueness is checked
before the first write, and the database constraints catch the race where two
writers pass that check at the same time.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError

logger = logging.getLogger(__name__)


@contextmanager
def commit_or_conflict(db: Session, message: str, code: str) -> Iterator[None]:
    """
    Commit the writes made inside the block.

    A unique-constraint violation, at flush or at commit, rolls everything back
    and surfaces as ``ConflictError(message, code)``.
    """
    try:
        yield
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Write rejected by constraint ({code}): {e.orig}")
        raise ConflictError(message, code)

"""
Dense ordering helpers shared by learning objectives and questions.

Both collections keep ``order`` equal to ``{0, ..., N-1}`` within a quiz.
"""
from typing import List, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError


def next_order(db: Session, model, quiz_id: int) -> int:
    """Order value for an item appended at the end of the quiz's collection."""
    db.flush()
    current_max = db.query(func.max(model.order)).filter(model.quiz_id == quiz_id).scalar()
    return 0 if current_max is None else current_max + 1


def ordered_items(db: Session, model, quiz_id: int) -> List:
    return (
        db.query(model)
        .filter(model.quiz_id == quiz_id)
        .order_by(model.order, model.id)
        .all()
    )


def compact_order(db: Session, model, quiz_id: int) -> None:
    """Close gaps left by deletions, keeping relative order."""
    for index, item in enumerate(ordered_items(db, model, quiz_id)):
        if item.order != index:
            item.order = index


def apply_reorder(items: Sequence, ordered_ids: Sequence[int], code: str) -> None:
    """
    Set each item's order to its index in ``ordered_ids``.

    Nothing is touched unless ``ordered_ids`` is exactly the ids of ``items``
    (no duplicates, no missing ids, no foreign ids).
    """
    by_id = {item.id: item for item in items}
    if len(ordered_ids) != len(set(ordered_ids)):
        raise ValidationError("Ordered ids contain duplicates", code)
    if set(ordered_ids) != set(by_id):
        raise ValidationError(
            "Ordered ids must match exactly the items belonging to the quiz", code
        )

    for index, item_id in enumerate(ordered_ids):
        by_id[item_id].order = index

"""
Ownership guard.

Every lookup filters by id *and* owner, so an entity that exists but belongs
to another instructor is reported exactly like a missing one.

``get_owned_quiz(..., for_update=True)`` locks the quiz row for the rest of the
transaction. All mutations of a quiz aggregate go through it, which serializes
concurrent writers on the same quiz at the database and leaves different
quizzes independent.

The lock re-reads the quiz row; anything else read before it is refreshed with
``reload`` once the lock is held.
"""
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.folder import Folder
from app.models.material import Material
from app.models.objective import LearningObjective
from app.models.plan import GenerationPlan
from app.models.question import Question
from app.models.quiz import Quiz
from app.models.user import User


def get_owned_folder(db: Session, folder_id: int, user: User) -> Folder:
    folder = db.query(Folder).filter(
        Folder.id == folder_id,
        Folder.instructor_id == user.id,
    ).first()
    if not folder:
        raise NotFoundError("Folder")
    return folder


def get_owned_quiz(db: Session, quiz_id: int, user: User, for_update: bool = False) -> Quiz:
    query = db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.created_by == user.id)
    if for_update:
        query = query.with_for_update().populate_existing()
    quiz = query.first()
    if not quiz:
        raise NotFoundError("Quiz")
    return quiz


def lock_quiz(db: Session, quiz_id: int) -> Quiz:
    """
    Lock a quiz already known to be owned by the caller.

    The row is re-read under the lock. Other rows loaded before the lock must be
    passed through ``reload`` before they are used for a decision or a snapshot.
    """
    return db.query(Quiz).filter(Quiz.id == quiz_id).with_for_update().populate_existing().one()


def reload(db: Session, *instances) -> None:
    """Refresh already loaded rows from the database inside the locked transaction."""
    for instance in instances:
        try:
            db.refresh(instance)
        except InvalidRequestError:
            # Deleted by a writer that held the lock before us
            raise NotFoundError(type(instance).__name__)


def get_owned_material(db: Session, material_id: int, user: User) -> Material:
    material = db.query(Material).filter(
        Material.id == material_id,
        Material.uploaded_by == user.id,
    ).first()
    if not material:
        raise NotFoundError("Material")
    return material


def get_owned_objective(db: Session, objective_id: int, user: User) -> LearningObjective:
    objective = db.query(LearningObjective).filter(
        LearningObjective.id == objective_id,
        LearningObjective.created_by == user.id,
    ).first()
    if not objective:
        raise NotFoundError("Learning objective")
    return objective


def get_owned_plan(db: Session, plan_id: int, user: User) -> GenerationPlan:
    plan = db.query(GenerationPlan).filter(
        GenerationPlan.id == plan_id,
        GenerationPlan.created_by == user.id,
    ).first()
    if not plan:
        raise NotFoundError("Generation plan")
    return plan


def get_owned_question(db: Session, question_id: int, user: User) -> Question:
    question = db.query(Question).filter(
        Question.id == question_id,
        Question.created_by == user.id,
    ).first()
    if not question:
        raise NotFoundError("Question")
    return question

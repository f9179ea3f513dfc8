"""
Quiz exports.

``QuizExporter`` turns a populated quiz into an H5P-style question set written
as JSON under ``EXPORT_DIR``. The service layer only records the resulting
file reference and counts downloads.
"""
import json
import logging
import os
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import EXPORT_FORMAT_H5P, QuestionType
from app.core.exceptions import NotFoundError, UpstreamUnavailableError, ValidationError
from app.models.objective import LearningObjective
from app.models.question import Question
from app.models.quiz import Quiz, QuizExport
from app.models.user import User
from app.services.ownership import get_owned_quiz, lock_quiz
from app.services.quiz_state import commit_failed_generation

logger = logging.getLogger(__name__)

H5P_LIBRARIES = {
    QuestionType.MULTIPLE_CHOICE.value: "H5P.MultiChoice 1.16",
    QuestionType.TRUE_FALSE.value: "H5P.TrueFalse 1.8",
    QuestionType.FLASHCARD.value: "H5P.Dialogcards 1.9",
    QuestionType.SUMMARY.value: "H5P.Summary 1.10",
    QuestionType.DISCUSSION.value: "H5P.Essay 1.5",
    QuestionType.MATCHING.value: "H5P.DragText 1.10",
    QuestionType.ORDERING.value: "H5P.SortParagraphs 0.11",
    QuestionType.CLOZE.value: "H5P.Blanks 1.14",
}


@dataclass
class ExportArtifact:
    file_path: str
    filename: str
    content_length: int


def remove_export_file(path: str) -> bool:
    """Best-effort removal of an export artifact."""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Could not remove export file {path}: {e}")
        return False


def _question_params(question: Question) -> Dict[str, Any]:
    content = question.content or {}
    qtype = question.type

    if qtype in (QuestionType.MULTIPLE_CHOICE.value, QuestionType.TRUE_FALSE.value):
        return {
            "question": question.question_text,
            "answers": [
                {"text": o.get("text"), "correct": bool(o.get("isCorrect"))}
                for o in sorted(content.get("options", []), key=lambda o: o.get("order", 0))
            ],
        }
    if qtype == QuestionType.FLASHCARD.value:
        return {"dialogs": [{"text": content.get("front"), "answer": content.get("back")}]}
    if qtype == QuestionType.MATCHING.value:
        return {
            "taskDescription": question.question_text,
            "pairs": [{"left": p[0], "right": p[1]} for p in content.get("matchingPairs", [])],
        }
    if qtype == QuestionType.ORDERING.value:
        return {"taskDescription": question.question_text, "paragraphs": content.get("correctOrder", [])}
    if qtype == QuestionType.CLOZE.value:
        return {
            "text": question.question_text,
            "questions": [content.get("textWithBlanks", "")],
            "answers": content.get("correctAnswers", []),
        }
    return {"question": question.question_text, **content}


class QuizExporter:
    """Writes quiz export artifacts to disk."""

    def __init__(self, export_dir: Optional[str] = None):
        self.export_dir = export_dir or settings.EXPORT_DIR

    def build_document(
        self, quiz: Quiz, objectives: List[LearningObjective], questions: List[Question]
    ) -> Dict[str, Any]:
        return {
            "title": quiz.name,
            "language": "en",
            "introduction": "\n".join(f"- {o.text}" for o in objectives),
            "learningObjectives": [{"id": o.id, "text": o.text, "order": o.order} for o in objectives],
            "questions": [
                {
                    "library": H5P_LIBRARIES.get(str(q.type), "H5P.Essay 1.5"),
                    "type": q.type,
                    "difficulty": q.difficulty,
                    "learningObjectiveId": q.learning_objective_id,
                    "params": _question_params(q),
                    "explanation": q.explanation,
                }
                for q in questions
            ],
            "settings": quiz.settings or {},
            "metadata": {
                "quizId": quiz.id,
                "questionCount": len(questions),
                "exportedAt": datetime.now(timezone.utc).isoformat(),
            },
        }

    def export(
        self, quiz: Quiz, objectives: List[LearningObjective], questions: List[Question], export_id: str
    ) -> ExportArtifact:
        document = self.build_document(quiz, objectives, questions)
        payload = json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8")

        safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in str(quiz.name)) or "quiz"
        filename = f"{safe_name}_{export_id[:8]}.h5p.json"
        file_path = os.path.join(self.export_dir, filename)
        try:
            os.makedirs(self.export_dir, exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(payload)
        except OSError as e:
            logger.error(f"Failed to write export for quiz {quiz.id}: {e}")
            raise UpstreamUnavailableError("Failed to write export file", "EXPORT_ERROR") from e

        return ExportArtifact(file_path=file_path, filename=filename, content_length=len(payload))


def _ordered(db: Session, model, quiz_id: int) -> List:
    return db.query(model).filter(model.quiz_id == quiz_id).order_by(model.order).all()


def record_export(db: Session, quiz_id: int, user: User, exporter: QuizExporter) -> QuizExport:
    """Export the quiz and append the artifact to its export list."""
    quiz = get_owned_quiz(db, quiz_id, user)
    questions = _ordered(db, Question, quiz.id)  # type: ignore
    if not questions:
        raise ValidationError("Quiz has no questions to export", "NO_QUESTIONS")
    objectives = _ordered(db, LearningObjective, quiz.id)  # type: ignore

    export_id = secrets.token_hex(16)
    started = time.monotonic()
    try:
        artifact = exporter.export(quiz, objectives, questions, export_id)
    except UpstreamUnavailableError as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        commit_failed_generation(db, quiz.id, None, elapsed_ms, None, e.message)  # type: ignore
        raise

    lock_quiz(db, quiz.id)  # type: ignore
    export = QuizExport(
        quiz_id=quiz.id,
        export_id=export_id,
        format=EXPORT_FORMAT_H5P,
        file_path=artifact.file_path,
        filename=artifact.filename,
        content_length=artifact.content_length,
        download_count=0,
    )
    db.add(export)
    db.commit()
    db.refresh(export)

    logger.info(f"Quiz {quiz.id} exported as {export_id} ({artifact.content_length} bytes)")
    return export


def list_exports(db: Session, quiz_id: int, user: User) -> List[QuizExport]:
    quiz = get_owned_quiz(db, quiz_id, user)
    return (
        db.query(QuizExport)
        .filter(QuizExport.quiz_id == quiz.id)
        .order_by(QuizExport.id.desc())
        .all()
    )


def _get_owned_export(db: Session, export_id: str, user: User) -> QuizExport:
    export = (
        db.query(QuizExport)
        .join(Quiz, Quiz.id == QuizExport.quiz_id)
        .filter(QuizExport.export_id == export_id, Quiz.created_by == user.id)
        .first()
    )
    if not export:
        raise NotFoundError("Export")
    return export


def download_export(db: Session, export_id: str, user: User) -> QuizExport:
    """Count a download and return the export record pointing at the file."""
    export = _get_owned_export(db, export_id, user)
    if not os.path.exists(str(export.file_path)):
        raise NotFoundError("Export file")

    lock_quiz(db, export.quiz_id)  # type: ignore
    db.query(QuizExport).filter(QuizExport.id == export.id).update(
        {QuizExport.download_count: QuizExport.download_count + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(export)
    return export


def delete_export(db: Session, export_id: str, user: User) -> None:
    export = _get_owned_export(db, export_id, user)
    file_path = str(export.file_path)
    lock_quiz(db, export.quiz_id)  # type: ignore
    db.delete(export)
    db.commit()
    remove_export_file(file_path)
    logger.info(f"Export {export_id} deleted")

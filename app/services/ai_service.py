"""
AI generation collaborator.

``AIGenerationService`` is the narrow contract the authoring services depend
on. ``TemplateAIService`` is deterministic and needs no model;
``LLMAIService`` calls the configured chat model. Any model failure surfaces
as ``UpstreamUnavailableError`` and is never retried here.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from app.core.agents.authoring.generator import AuthoringGenerator
from app.core.config import settings
from app.core.constants import QuestionType
from app.core.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_OBJECTIVE_PREFIX = re.compile(r"^(students?|learners?)\s+(will\s+)?(be\s+able\s+to\s+)?", re.IGNORECASE)
_OBJECTIVE_KEYWORDS = ("student", "learn", "understand", "demonstrate")

GENERIC_OBJECTIVES = [
    "Students will understand the fundamental concepts presented in the materials",
    "Students will be able to analyze key relationships between different topics",
    "Students will demonstrate critical thinking skills in problem-solving scenarios",
]


def classify_objective_sentences(text: str, limit: int = 10) -> List[str]:
    """
    Pick objective-like sentences out of free text.

    Sentences longer than 10 characters that mention students, learning,
    understanding or demonstrating are kept (at most ``limit``), with a leading
    "Students will be able to" stripped.
    """
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text or "")]
    sentences = [s for s in sentences if len(s) > 10]
    matching = [s for s in sentences if any(k in s.lower() for k in _OBJECTIVE_KEYWORDS)]
    return [_OBJECTIVE_PREFIX.sub("", s).strip() for s in matching[:limit]]


class AIGenerationService(ABC):
    """Contract of the AI collaborator."""

    model_name: str = "unknown"

    @abstractmethod
    def generate_objectives(self, material_texts: List[str]) -> List[Dict[str, Any]]:
        """Return ``[{"text", "confidence"}]`` for the given material texts."""

    @abstractmethod
    def generate_question(self, question_type: str, objective_text: str, difficulty: str) -> Dict[str, Any]:
        """Return ``{"question_text", "content", "correct_answer", "explanation", "confidence"}``."""

    def classify_text(self, text: str) -> List[str]:
        return classify_objective_sentences(text, settings.MAX_CLASSIFIED_OBJECTIVES)


class TemplateAIService(AIGenerationService):
    """Deterministic generator used when no model is configured."""

    model_name = "template"

    def generate_objectives(self, material_texts: List[str]) -> List[Dict[str, Any]]:
        classified = classify_objective_sentences(
            "\n".join(material_texts), settings.MAX_CLASSIFIED_OBJECTIVES
        )
        if classified:
            return [{"text": text, "confidence": 0.75} for text in classified]
        return [{"text": text, "confidence": 0.85} for text in GENERIC_OBJECTIVES]

    def generate_question(self, question_type: str, objective_text: str, difficulty: str) -> Dict[str, Any]:
        question_type = QuestionType(question_type)
        data = _QUESTION_TEMPLATES[question_type](objective_text)
        data["confidence"] = 0.8
        return data


class LLMAIService(AIGenerationService):
    """Chat-model backed generator."""

    def __init__(self):
        self.generator = AuthoringGenerator()
        self.model_name = self.generator.model_name

    def generate_objectives(self, material_texts: List[str]) -> List[Dict[str, Any]]:
        try:
            return self.generator.generate_objectives(material_texts)
        except Exception as e:
            logger.error(f"Objective generation failed: {e}")
            raise UpstreamUnavailableError(
                "Failed to generate learning objectives", "AI_GENERATION_ERROR"
            ) from e

    def generate_question(self, question_type: str, objective_text: str, difficulty: str) -> Dict[str, Any]:
        try:
            return self.generator.generate_question(question_type, objective_text, difficulty)
        except Exception as e:
            logger.error(f"Question generation failed ({question_type}): {e}")
            raise UpstreamUnavailableError(
                "Failed to generate question", "AI_GENERATION_ERROR"
            ) from e


def _options(*texts: str) -> List[Dict[str, Any]]:
    return [
        {"text": text, "isCorrect": i == 0, "order": i}
        for i, text in enumerate(texts)
    ]


_QUESTION_TEMPLATES = {
    QuestionType.MULTIPLE_CHOICE: lambda objective: {
        "question_text": f"Which of the following best demonstrates understanding of: {objective}?",
        "content": {"options": _options(
            "Option A - Correct understanding",
            "Option B - Common misconception",
            "Option C - Partial understanding",
            "Option D - Incorrect approach",
        )},
        "correct_answer": "Option A",
        "explanation": "This option correctly demonstrates the key concept.",
    },
    QuestionType.TRUE_FALSE: lambda objective: {
        "question_text": f"True or False: {objective} is essential for understanding this topic.",
        "content": {"options": _options("True", "False")},
        "correct_answer": "True",
        "explanation": "This statement is true because it aligns with the learning objective.",
    },
    QuestionType.FLASHCARD: lambda objective: {
        "question_text": "Review this concept",
        "content": {"front": "What does this learning objective focus on?", "back": objective},
        "correct_answer": objective,
        "explanation": "This flashcard helps reinforce the key learning objective.",
    },
    QuestionType.SUMMARY: lambda objective: {
        "question_text": f"Summarize the key ideas behind: {objective}",
        "content": {"keyPoints": [objective]},
        "correct_answer": objective,
        "explanation": "A complete summary covers the main points of the objective.",
    },
    QuestionType.DISCUSSION: lambda objective: {
        "question_text": f"Discuss how you would apply the following in practice: {objective}",
        "content": {"prompts": [f"Give an example related to: {objective}"]},
        "correct_answer": None,
        "explanation": "Strong answers connect the objective to a concrete situation.",
    },
    QuestionType.MATCHING: lambda objective: {
        "question_text": f"Match each concept with its description for: {objective}",
        "content": {
            "leftItems": ["Concept A", "Concept B"],
            "rightItems": ["Description of A", "Description of B"],
            "matchingPairs": [["Concept A", "Description of A"], ["Concept B", "Description of B"]],
        },
        "correct_answer": [["Concept A", "Description of A"], ["Concept B", "Description of B"]],
        "explanation": "Each concept pairs with the description that defines it.",
    },
    QuestionType.ORDERING: lambda objective: {
        "question_text": f"Put the steps in the correct order for: {objective}",
        "content": {
            "items": ["Step 2", "Step 1", "Step 3"],
            "correctOrder": ["Step 1", "Step 2", "Step 3"],
        },
        "correct_answer": ["Step 1", "Step 2", "Step 3"],
        "explanation": "The steps build on each other in this sequence.",
    },
    QuestionType.CLOZE: lambda objective: {
        "question_text": "Fill in the blank",
        "content": {
            "textWithBlanks": f"$ is the focus of the objective: {objective}",
            "blankOptions": [["This concept", "An unrelated idea"]],
            "correctAnswers": ["This concept"],
        },
        "correct_answer": ["This concept"],
        "explanation": "The blank refers to the concept the objective describes.",
    },
}


def create_ai_service() -> AIGenerationService:
    """Model-backed service when an API key is configured, templates otherwise."""
    if settings.OPENAI_API_KEY:
        return LLMAIService()
    logger.info("OPENAI_API_KEY not set, using template generation")
    return TemplateAIService()

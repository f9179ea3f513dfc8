"""
LLM-backed authoring generator.
Writes learning objectives from material text and single quiz questions for an objective.
"""
import json
import logging
from typing import Any, Dict, List

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.llm_config import LLMFactory
from app.core.agents.authoring.prompts import (
    OBJECTIVE_GENERATION_SYSTEM_PROMPT,
    OBJECTIVE_GENERATION_USER_PROMPT_TEMPLATE,
    QUESTION_GENERATION_SYSTEM_PROMPT,
    QUESTION_GENERATION_USER_PROMPT_TEMPLATE,
)

logger = logging.getLogger(__name__)

# Keeps the prompt within the model context for large folders
MAX_MATERIAL_CHARS = 12000


class ObjectiveDraft(BaseModel):
    """Schema for one generated learning objective."""
    text: str
    confidence: float = Field(ge=0, le=1)


class ObjectiveDraftList(BaseModel):
    """Schema for LLM generation of learning objectives."""
    objectives: List[ObjectiveDraft]


class QuestionDraft(BaseModel):
    """Schema for LLM generation of one question."""
    question_text: str
    content_json: str = Field(description="JSON object with the type-specific question structure")
    correct_answer: str
    explanation: str
    confidence: float = Field(ge=0, le=1)


class AuthoringGenerator:
    """
    Generates objectives and questions with the configured chat model.

    Errors from the model are not caught here; the service layer decides how a
    failed generation is reported.
    """

    def __init__(self):
        self.model_name = settings.LLM_MODEL
        self.llm = LLMFactory.create_llm(
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            json_mode=False,
            tracing_project="quiz-authoring",
        )
        self.objectives_llm = self.llm.with_structured_output(ObjectiveDraftList)
        self.question_llm = self.llm.with_structured_output(QuestionDraft)

    def generate_objectives(self, material_texts: List[str]) -> List[Dict[str, Any]]:
        materials = self._format_materials(material_texts)
        messages = [
            SystemMessage(content=OBJECTIVE_GENERATION_SYSTEM_PROMPT),
            HumanMessage(content=OBJECTIVE_GENERATION_USER_PROMPT_TEMPLATE.format(
                materials=materials,
                max_objectives=settings.MAX_CLASSIFIED_OBJECTIVES,
            )),
        ]

        result = self.objectives_llm.invoke(messages)
        objectives = [
            {"text": o.text.strip(), "confidence": o.confidence}
            for o in result.objectives  # type: ignore
            if o.text.strip()
        ]
        logger.info(f"Generated {len(objectives)} learning objectives")
        return objectives

    def generate_question(self, question_type: str, objective_text: str, difficulty: str) -> Dict[str, Any]:
        messages = [
            SystemMessage(content=QUESTION_GENERATION_SYSTEM_PROMPT),
            HumanMessage(content=QUESTION_GENERATION_USER_PROMPT_TEMPLATE.format(
                question_type=question_type,
                difficulty=difficulty,
                objective_text=objective_text,
            )),
        ]

        draft: QuestionDraft = self.question_llm.invoke(messages)  # type: ignore
        content = json.loads(draft.content_json)
        if not isinstance(content, dict):
            raise ValueError("Question content must be a JSON object")

        return {
            "question_text": draft.question_text,
            "content": content,
            "correct_answer": draft.correct_answer,
            "explanation": draft.explanation,
            "confidence": draft.confidence,
        }

    def _format_materials(self, material_texts: List[str]) -> str:
        """Number the materials and trim the combined text to the character limit."""
        parts = []
        remaining = MAX_MATERIAL_CHARS
        for i, text in enumerate(material_texts, 1):
            if remaining <= 0:
                break
            excerpt = text.strip()[:remaining]
            remaining -= len(excerpt)
            parts.append(f"[Material {i}]\n{excerpt}")
        return "\n\n".join(parts)

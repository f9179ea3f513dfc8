"""
Generation plan engine.

Pure functions that turn an ordered list of objectives, a pedagogical approach
and a per-objective quota into a breakdown (per objective, per question type)
and the quiz-wide distribution derived from it.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from app.core.constants import PedagogicalApproach, QuestionType

# Share of each objective's quota per question type, in percent
APPROACH_DISTRIBUTIONS: Dict[PedagogicalApproach, Dict[QuestionType, int]] = {
    PedagogicalApproach.SUPPORT: {
        QuestionType.MULTIPLE_CHOICE: 40,
        QuestionType.TRUE_FALSE: 20,
        QuestionType.FLASHCARD: 30,
        QuestionType.SUMMARY: 10,
    },
    PedagogicalApproach.ASSESS: {
        QuestionType.MULTIPLE_CHOICE: 50,
        QuestionType.TRUE_FALSE: 20,
        QuestionType.DISCUSSION: 20,
        QuestionType.SUMMARY: 10,
    },
    PedagogicalApproach.GAMIFY: {
        QuestionType.MATCHING: 30,
        QuestionType.ORDERING: 25,
        QuestionType.MULTIPLE_CHOICE: 25,
        QuestionType.FLASHCARD: 20,
    },
    PedagogicalApproach.CUSTOM: {
        QuestionType.MULTIPLE_CHOICE: 35,
        QuestionType.TRUE_FALSE: 15,
        QuestionType.FLASHCARD: 15,
        QuestionType.DISCUSSION: 15,
        QuestionType.SUMMARY: 10,
        QuestionType.MATCHING: 10,
    },
}

QUESTION_TYPE_REASONING: Dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: (
        "Multiple choice questions provide clear assessment with immediate feedback, "
        "suitable for {approach} approach"
    ),
    QuestionType.TRUE_FALSE: (
        "True/false questions test basic understanding and work well for quick comprehension checks"
    ),
    QuestionType.FLASHCARD: "Flashcards support active recall and spaced repetition learning",
    QuestionType.SUMMARY: "Summary questions encourage synthesis and deeper understanding",
    QuestionType.DISCUSSION: "Discussion prompts foster critical thinking and analysis",
    QuestionType.MATCHING: "Matching exercises help connect related concepts in an engaging way",
    QuestionType.ORDERING: "Ordering questions test understanding of sequences and relationships",
    QuestionType.CLOZE: "Fill-in-the-blank questions test specific knowledge retention",
}

DEFAULT_REASONING = "Selected to support learning objectives"


@dataclass
class PlanFigures:
    breakdown: List[Dict[str, Any]]
    total_questions: int
    distribution: List[Dict[str, Any]]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (``round`` is banker's)."""
    return int(math.floor(value + 0.5))


def get_type_distribution(approach: PedagogicalApproach) -> Dict[QuestionType, int]:
    return APPROACH_DISTRIBUTIONS.get(
        PedagogicalApproach(approach), APPROACH_DISTRIBUTIONS[PedagogicalApproach.SUPPORT]
    )


def reasoning_for(question_type: QuestionType, approach: PedagogicalApproach) -> str:
    template = QUESTION_TYPE_REASONING.get(QuestionType(question_type), DEFAULT_REASONING)
    return template.format(approach=PedagogicalApproach(approach).value)


def build_breakdown(
    objective_ids: Sequence[int],
    approach: PedagogicalApproach,
    questions_per_lo: int,
) -> List[Dict[str, Any]]:
    """Apply the approach's percentage table to every objective's quota."""
    table = get_type_distribution(approach)
    breakdown = []
    for objective_id in objective_ids:
        question_types = []
        for question_type, percentage in table.items():
            count = round_half_up(percentage / 100 * questions_per_lo)
            if count > 0:
                question_types.append({
                    "type": question_type.value,
                    "count": count,
                    "reasoning": reasoning_for(question_type, approach),
                })
        breakdown.append({
            "learning_objective_id": objective_id,
            "question_types": question_types,
        })
    return breakdown


def breakdown_total(breakdown: Sequence[Dict[str, Any]]) -> int:
    return sum(
        qt["count"]
        for entry in breakdown
        for qt in entry.get("question_types", [])
    )


def compute_distribution(breakdown: Sequence[Dict[str, Any]], total_questions: int) -> List[Dict[str, Any]]:
    """
    Aggregate counts per type across objectives.

    Percentages are rounded per type independently, so they may not add up
    to exactly 100. Consumers treat that as display drift.
    """
    type_counts: Dict[str, int] = {}
    for entry in breakdown:
        for qt in entry.get("question_types", []):
            type_counts[qt["type"]] = type_counts.get(qt["type"], 0) + qt["count"]

    return [
        {
            "type": question_type,
            "total_count": count,
            "percentage": round_half_up(100 * count / total_questions) if total_questions else 0,
        }
        for question_type, count in type_counts.items()
    ]


def build_plan_figures(
    objective_ids: Sequence[int],
    approach: PedagogicalApproach,
    questions_per_lo: int,
) -> PlanFigures:
    breakdown = build_breakdown(objective_ids, approach, questions_per_lo)
    return figures_for_breakdown(breakdown)


def figures_for_breakdown(breakdown: List[Dict[str, Any]]) -> PlanFigures:
    total = breakdown_total(breakdown)
    return PlanFigures(
        breakdown=breakdown,
        total_questions=total,
        distribution=compute_distribution(breakdown, total),
    )

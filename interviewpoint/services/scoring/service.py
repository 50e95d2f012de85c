"""Score arithmetic shared by interview execution, results and statistics.

A question is worth ``100 * multiplier`` points. Choosing a feedback option with
raw score ``s`` awards ``s * multiplier``, clamped to the question's worth, so a
template's total can never exceed its maximum.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from interviewpoint.services.templates.schema import Category, Question

from .schema import CategoryScore, QuestionPoint, ScoreSummary

MAX_RAW_SCORE = 100.0
UNKNOWN_CATEGORY = "Unknown"

# question id -> awarded score
AnswerScores = Mapping[str, float]


def question_max(question: Question) -> float:
    return MAX_RAW_SCORE * question.multiplier


def score_answer(raw_score: float, multiplier: float) -> float:
    ceiling = MAX_RAW_SCORE * multiplier
    return max(0.0, min(float(raw_score) * multiplier, ceiling))


def percentage(total: float, maximum: float) -> float:
    return (total / maximum) * 100 if maximum > 0 else 0.0


def compute_totals(questions: Iterable[Question], answers: AnswerScores) -> ScoreSummary:
    total = 0.0
    maximum = 0.0
    for question in questions:
        maximum += question_max(question)
        awarded = answers.get(question.id)
        if awarded is not None:
            total += awarded
    return ScoreSummary(total=total, max=maximum, percentage=percentage(total, maximum))


def category_rollup(
    categories: Sequence[Category],
    questions: Sequence[Question],
    answers: AnswerScores,
) -> List[CategoryScore]:
    rollup: List[CategoryScore] = []
    for category in sorted(categories, key=lambda c: c.order):
        members = [q for q in questions if q.category_id == category.id]
        summary = compute_totals(members, answers)
        rollup.append(
            CategoryScore(
                category_id=category.id,
                name=category.name,
                score=summary.total,
                max=summary.max,
                percentage=summary.percentage,
                answered=sum(1 for q in members if q.id in answers),
                question_count=len(members),
            )
        )
    return rollup


def question_series(
    categories: Sequence[Category],
    questions: Sequence[Question],
    answers: AnswerScores,
) -> List[QuestionPoint]:
    """Questions in display order (category order, then question order) labelled Q1..Qn."""

    category_order = {category.id: category.order for category in categories}
    ordered = sorted(questions, key=lambda q: (category_order.get(q.category_id, 0), q.order))
    points: List[QuestionPoint] = []
    for idx, question in enumerate(ordered, start=1):
        worth = question_max(question)
        awarded = answers.get(question.id) or 0.0
        points.append(
            QuestionPoint(
                name=f"Q{idx}",
                question_id=question.id,
                short_text=question.text[:15] + "...",
                score=awarded,
                missed=worth - awarded,
                max=worth,
            )
        )
    return points


def rollup_by_category_name(
    categories: Sequence[Category],
    questions: Sequence[Question],
    answers: AnswerScores,
) -> Dict[str, Tuple[float, float]]:
    """(total, max) per category name, so results of different templates line up."""

    names = {category.id: category.name for category in categories}
    totals: Dict[str, Tuple[float, float]] = {}
    for question in questions:
        name = names.get(question.category_id, UNKNOWN_CATEGORY)
        total, maximum = totals.get(name, (0.0, 0.0))
        awarded = answers.get(question.id)
        totals[name] = (total + (awarded or 0.0), maximum + question_max(question))
    return totals


def category_percentage(
    category_id: str,
    questions: Sequence[Question],
    answers: AnswerScores,
) -> float:
    members = [q for q in questions if q.category_id == category_id]
    summary = compute_totals(members, answers)
    return summary.percentage

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import NoResultFound

from interviewpoint.services.common import new_id, utc_now
from interviewpoint.services.storage import TEMPLATES_KEY, StorageService

from .schema import (
    Category,
    CategoryView,
    CustomFeedback,
    CustomFeedbackIn,
    CustomFeedbackPatch,
    InterviewTemplate,
    Question,
    QuestionIn,
    QuestionPatch,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_NAME = "New Interview Template"
DEFAULT_CATEGORY_NAME = "General"

Mutation = Callable[[InterviewTemplate], None]


def check_references(template: InterviewTemplate) -> None:
    """Every question must point at a category of the same template."""

    category_ids = {category.id for category in template.categories}
    for question in template.questions:
        if question.category_id not in category_ids:
            raise ValueError(
                f"Question {question.id} references unknown category {question.category_id}"
            )


def sorted_view(template: InterviewTemplate) -> List[CategoryView]:
    views: List[CategoryView] = []
    for category in sorted(template.categories, key=lambda c: c.order):
        questions = sorted(
            (q for q in template.questions if q.category_id == category.id),
            key=lambda q: q.order,
        )
        views.append(CategoryView(category=category, questions=questions))
    return views


class TemplatesService:
    """Interview templates kept under a single storage key."""

    def __init__(self, storage: StorageService, *, seed_demo: bool = True) -> None:
        self._storage = storage
        if seed_demo:
            self._ensure_seed_data()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def list(self) -> List[InterviewTemplate]:
        return [InterviewTemplate.model_validate(item) for item in self._storage.get(TEMPLATES_KEY, [])]

    def get(self, template_id: str) -> InterviewTemplate:
        for template in self.list():
            if template.id == template_id:
                return template
        raise NoResultFound(f"Template {template_id} not found")

    def create(self, name: Optional[str] = None) -> InterviewTemplate:
        template = InterviewTemplate(
            id=new_id(),
            name=(name or "").strip() or DEFAULT_TEMPLATE_NAME,
            created_at=utc_now(),
            categories=[Category(id=new_id(), name=DEFAULT_CATEGORY_NAME, order=0)],
            questions=[],
        )
        return self.add(template, keep_id=True)

    def add(self, template: InterviewTemplate, *, keep_id: bool = False) -> InterviewTemplate:
        check_references(template)
        if not keep_id:
            template = template.model_copy(update={"id": new_id()})
        templates = self.list()
        templates.append(template)
        self._save(templates)
        logger.info("template %s created (%s)", template.id, template.name)
        return template

    def update(self, template: InterviewTemplate) -> InterviewTemplate:
        check_references(template)
        templates = self.list()
        for idx, existing in enumerate(templates):
            if existing.id == template.id:
                templates[idx] = template
                self._save(templates)
                return template
        raise NoResultFound(f"Template {template.id} not found")

    def rename(self, template_id: str, name: str) -> InterviewTemplate:
        if not name.strip():
            raise ValueError("Template name must not be blank")

        def apply(template: InterviewTemplate) -> None:
            template.name = name

        return self._mutate(template_id, apply)

    def delete(self, template_id: str) -> None:
        templates = self.list()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            raise NoResultFound(f"Template {template_id} not found")
        self._save(remaining)
        logger.info("template %s deleted; results kept", template_id)

    def duplicate(self, template_id: str) -> InterviewTemplate:
        source = self.get(template_id)
        category_map: Dict[str, str] = {}
        categories: List[Category] = []
        for category in source.categories:
            fresh = new_id()
            category_map[category.id] = fresh
            categories.append(category.model_copy(update={"id": fresh}))
        questions = [
            question.model_copy(
                update={
                    "id": new_id(),
                    "category_id": category_map[question.category_id],
                    "custom_feedbacks": [
                        feedback.model_copy(update={"id": new_id()}) for feedback in question.custom_feedbacks
                    ],
                }
            )
            for question in source.questions
        ]
        copy = InterviewTemplate(
            id=new_id(),
            name=f"{source.name} (Copy)",
            created_at=source.created_at,
            categories=categories,
            questions=questions,
        )
        return self.add(copy, keep_id=True)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------
    def add_category(self, template_id: str, name: str) -> InterviewTemplate:
        if not name.strip():
            raise ValueError("Category name must not be blank")

        def apply(template: InterviewTemplate) -> None:
            template.categories.append(Category(id=new_id(), name=name, order=len(template.categories)))

        return self._mutate(template_id, apply)

    def rename_category(self, template_id: str, category_id: str, name: str) -> InterviewTemplate:
        if not name.strip():
            raise ValueError("Category name must not be blank")

        def apply(template: InterviewTemplate) -> None:
            _find_category(template, category_id).name = name

        return self._mutate(template_id, apply)

    def remove_category(self, template_id: str, category_id: str) -> InterviewTemplate:
        def apply(template: InterviewTemplate) -> None:
            _find_category(template, category_id)
            template.categories = [c for c in template.categories if c.id != category_id]
            template.questions = [q for q in template.questions if q.category_id != category_id]

        return self._mutate(template_id, apply)

    def reorder_category(self, template_id: str, source_id: str, target_id: str) -> InterviewTemplate:
        """Drop ``source_id`` onto ``target_id``'s slot and renumber orders from zero."""

        def apply(template: InterviewTemplate) -> None:
            ordered = sorted(template.categories, key=lambda c: c.order)
            ids = [c.id for c in ordered]
            if source_id not in ids or target_id not in ids:
                raise NoResultFound("Category to reorder not found")
            if source_id == target_id:
                return
            moved = ordered.pop(ids.index(source_id))
            ordered.insert(ids.index(target_id), moved)
            for idx, category in enumerate(ordered):
                category.order = idx
            template.categories = ordered

        return self._mutate(template_id, apply)

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------
    def add_question(self, template_id: str, payload: QuestionIn) -> InterviewTemplate:
        def apply(template: InterviewTemplate) -> None:
            _find_category(template, payload.category_id)
            siblings = [q for q in template.questions if q.category_id == payload.category_id]
            template.questions.append(
                Question(
                    id=new_id(),
                    text=payload.text,
                    type=payload.type,
                    multiplier=payload.multiplier,
                    category_id=payload.category_id,
                    order=len(siblings),
                    custom_feedbacks=[],
                )
            )

        return self._mutate(template_id, apply)

    def update_question(self, template_id: str, question_id: str, patch: QuestionPatch) -> InterviewTemplate:
        def apply(template: InterviewTemplate) -> None:
            question = _find_question(template, question_id)
            if patch.text is not None:
                question.text = patch.text
            if patch.type is not None:
                question.type = patch.type
            if patch.multiplier is not None:
                question.multiplier = patch.multiplier
            if patch.category_id is not None and patch.category_id != question.category_id:
                _find_category(template, patch.category_id)
                question.order = len([q for q in template.questions if q.category_id == patch.category_id])
                question.category_id = patch.category_id

        return self._mutate(template_id, apply)

    def remove_question(self, template_id: str, question_id: str) -> InterviewTemplate:
        def apply(template: InterviewTemplate) -> None:
            _find_question(template, question_id)
            template.questions = [q for q in template.questions if q.id != question_id]

        return self._mutate(template_id, apply)

    def move_question(self, template_id: str, question_id: str, direction: str) -> InterviewTemplate:
        """Swap ``order`` with the neighbour in the same category; no-op at either end."""

        def apply(template: InterviewTemplate) -> None:
            question = _find_question(template, question_id)
            siblings = sorted(
                (q for q in template.questions if q.category_id == question.category_id),
                key=lambda q: q.order,
            )
            idx = next(i for i, q in enumerate(siblings) if q.id == question_id)
            if direction == "up" and idx > 0:
                other = siblings[idx - 1]
            elif direction == "down" and idx < len(siblings) - 1:
                other = siblings[idx + 1]
            elif direction in ("up", "down"):
                return
            else:
                raise ValueError(f"Unsupported move direction: {direction}")
            question.order, other.order = other.order, question.order

        return self._mutate(template_id, apply)

    # ------------------------------------------------------------------
    # Custom feedbacks
    # ------------------------------------------------------------------
    def add_custom_feedback(
        self, template_id: str, question_id: str, payload: Optional[CustomFeedbackIn] = None
    ) -> InterviewTemplate:
        payload = payload or CustomFeedbackIn()

        def apply(template: InterviewTemplate) -> None:
            question = _find_question(template, question_id)
            question.custom_feedbacks.append(
                CustomFeedback(id=new_id(), label=payload.label, score=payload.score)
            )

        return self._mutate(template_id, apply)

    def update_custom_feedback(
        self, template_id: str, question_id: str, feedback_id: str, patch: CustomFeedbackPatch
    ) -> InterviewTemplate:
        def apply(template: InterviewTemplate) -> None:
            feedback = _find_feedback(_find_question(template, question_id), feedback_id)
            if patch.label is not None:
                feedback.label = patch.label
            if patch.score is not None:
                feedback.score = patch.score

        return self._mutate(template_id, apply)

    def remove_custom_feedback(self, template_id: str, question_id: str, feedback_id: str) -> InterviewTemplate:
        def apply(template: InterviewTemplate) -> None:
            question = _find_question(template, question_id)
            _find_feedback(question, feedback_id)
            question.custom_feedbacks = [f for f in question.custom_feedbacks if f.id != feedback_id]

        return self._mutate(template_id, apply)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _mutate(self, template_id: str, apply: Mutation) -> InterviewTemplate:
        templates = self.list()
        for template in templates:
            if template.id == template_id:
                apply(template)
                check_references(template)
                self._save(templates)
                return template
        raise NoResultFound(f"Template {template_id} not found")

    def replace_all(self, templates: List[InterviewTemplate]) -> None:
        for template in templates:
            check_references(template)
        self._save(templates)

    def _save(self, templates: List[InterviewTemplate]) -> None:
        self._storage.put(TEMPLATES_KEY, [t.to_document() for t in templates])

    def _ensure_seed_data(self) -> None:
        if self._storage.has(TEMPLATES_KEY):
            return
        defaults_categories = [
            ("cat-1", "Introduction"),
            ("cat-2", "Frontend"),
            ("cat-3", "Databases"),
        ]
        defaults_questions = [
            ("q1", "Explain the event loop in JavaScript.", "DIRECT", 1.5, "cat-2", 0),
            ("q2", "How do you handle state management in a large React app?", "INDIRECT", 1.2, "cat-2", 1),
            ("q3", "Difference between SQL and NoSQL?", "DIRECT", 1.0, "cat-3", 0),
        ]
        demo = InterviewTemplate(
            id=new_id(),
            name="Full Stack Developer Internship",
            created_at=utc_now(),
            categories=[
                Category(id=cid, name=name, order=order)
                for order, (cid, name) in enumerate(defaults_categories)
            ],
            questions=[
                Question(id=qid, text=text, type=qtype, multiplier=mult, category_id=cid, order=order)
                for qid, text, qtype, mult, cid, order in defaults_questions
            ],
        )
        self._save([demo])
        logger.info("seeded demo template %s", demo.id)


def _find_category(template: InterviewTemplate, category_id: str) -> Category:
    for category in template.categories:
        if category.id == category_id:
            return category
    raise NoResultFound(f"Category {category_id} not found in template {template.id}")


def _find_question(template: InterviewTemplate, question_id: str) -> Question:
    for question in template.questions:
        if question.id == question_id:
            return question
    raise NoResultFound(f"Question {question_id} not found in template {template.id}")


def _find_feedback(question: Question, feedback_id: str) -> CustomFeedback:
    for feedback in question.custom_feedbacks:
        if feedback.id == feedback_id:
            return feedback
    raise NoResultFound(f"Custom feedback {feedback_id} not found on question {question.id}")


__all__ = ["TemplatesService", "check_references", "sorted_view"]

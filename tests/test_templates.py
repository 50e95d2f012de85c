"""
Tests for template editing.

Tests:
- Demo seeding and template creation
- Duplication with fresh ids
- Category add / rename / remove / reorder
- Question add / update / move / remove
- Custom feedback editing
- Reference checks
"""

import pytest
from sqlalchemy.exc import NoResultFound

from interviewpoint.services.templates import TemplatesService, check_references, sorted_view
from interviewpoint.services.templates.schema import CustomFeedbackIn, CustomFeedbackPatch, QuestionIn, QuestionPatch


# ==================== Creation ==================== #


class TestCreation:
    def test_demo_template_seeded_once(self, storage):
        first = TemplatesService(storage)
        seeded = first.list()
        assert [t.name for t in seeded] == ["Full Stack Developer Internship"]
        assert {c.id for c in seeded[0].categories} == {"cat-1", "cat-2", "cat-3"}

        again = TemplatesService(storage)
        assert [t.id for t in again.list()] == [seeded[0].id]

    def test_deleted_demo_is_not_reseeded(self, storage):
        service = TemplatesService(storage)
        service.delete(service.list()[0].id)
        assert TemplatesService(storage).list() == []

    def test_create_defaults(self, templates):
        created = templates.create()
        assert created.name == "New Interview Template"
        assert [c.name for c in created.categories] == ["General"]
        assert created.questions == []
        assert templates.get(created.id) == created

    def test_create_blank_name_uses_default(self, templates):
        assert templates.create("   ").name == "New Interview Template"

    def test_get_unknown_template(self, templates):
        with pytest.raises(NoResultFound):
            templates.get("missing")

    def test_delete_unknown_template(self, templates):
        with pytest.raises(NoResultFound):
            templates.delete("missing")

    def test_rename(self, templates, template):
        assert templates.rename(template.id, "Platform Engineer").name == "Platform Engineer"
        assert templates.get(template.id).name == "Platform Engineer"

    def test_blank_rename_rejected(self, templates, template):
        with pytest.raises(ValueError, match="must not be blank"):
            templates.rename(template.id, "   ")
        assert templates.get(template.id).name == "Backend Engineer"


# ==================== Duplication ==================== #


class TestDuplicate:
    def test_duplicate_has_fresh_ids(self, templates, template):
        copy = templates.duplicate(template.id)

        assert copy.id != template.id
        assert copy.name == "Backend Engineer (Copy)"
        assert not {c.id for c in copy.categories} & {c.id for c in template.categories}
        assert not {q.id for q in copy.questions} & {q.id for q in template.questions}
        copied_feedback = next(q for q in copy.questions if q.custom_feedbacks).custom_feedbacks[0]
        assert copied_feedback.id != "fb-1"
        assert copied_feedback.label == "Strong tradeoffs"

    def test_duplicate_remaps_categories(self, templates, template):
        copy = templates.duplicate(template.id)
        names = {c.id: c.name for c in copy.categories}
        original_names = {c.id: c.name for c in template.categories}

        check_references(copy)
        for question in copy.questions:
            source = next(q for q in template.questions if q.text == question.text)
            assert names[question.category_id] == original_names[source.category_id]

    def test_duplicate_leaves_source_untouched(self, templates, template):
        templates.duplicate(template.id)
        assert templates.get(template.id) == template
        assert len(templates.list()) == 2


# ==================== Categories ==================== #


class TestCategories:
    def test_add_category_appends_with_next_order(self, templates, template):
        updated = templates.add_category(template.id, "Behaviour")
        added = updated.categories[-1]
        assert added.name == "Behaviour"
        assert added.order == 2

    def test_add_blank_category_rejected(self, templates, template):
        with pytest.raises(ValueError):
            templates.add_category(template.id, "  ")

    def test_rename_category(self, templates, template):
        updated = templates.rename_category(template.id, "c-design", "System Design")
        assert [c.name for c in updated.categories] == ["Basics", "System Design"]

    def test_blank_category_rename_rejected(self, templates, template):
        with pytest.raises(ValueError, match="must not be blank"):
            templates.rename_category(template.id, "c-design", "\t")
        assert [c.name for c in templates.get(template.id).categories] == ["Basics", "Design"]

    def test_remove_category_removes_its_questions(self, templates, template):
        updated = templates.remove_category(template.id, "c-basics")
        assert [c.id for c in updated.categories] == ["c-design"]
        assert [q.id for q in updated.questions] == ["q-c"]
        assert templates.get(template.id).questions == updated.questions

    def test_remove_unknown_category(self, templates, template):
        with pytest.raises(NoResultFound):
            templates.remove_category(template.id, "nope")

    def test_reorder_moves_source_into_target_slot(self, templates, template):
        extra = templates.add_category(template.id, "Extra").categories[-1]
        updated = templates.reorder_category(template.id, extra.id, "c-basics")
        ordered = sorted(updated.categories, key=lambda c: c.order)
        assert [c.name for c in ordered] == ["Extra", "Basics", "Design"]
        assert [c.order for c in ordered] == [0, 1, 2]

    def test_reorder_forward(self, templates, template):
        extra = templates.add_category(template.id, "Extra").categories[-1]
        updated = templates.reorder_category(template.id, "c-basics", extra.id)
        assert [c.name for c in sorted(updated.categories, key=lambda c: c.order)] == ["Design", "Extra", "Basics"]

    def test_reorder_onto_itself_is_noop(self, templates, template):
        assert templates.reorder_category(template.id, "c-basics", "c-basics") == template

    def test_reorder_unknown_category_onto_itself(self, templates, template):
        with pytest.raises(NoResultFound):
            templates.reorder_category(template.id, "nope", "nope")

    def test_sorted_view_groups_questions(self, template):
        view = sorted_view(template)
        assert [v.category.id for v in view] == ["c-basics", "c-design"]
        assert [q.id for q in view[0].questions] == ["q-a", "q-b"]


# ==================== Questions ==================== #


class TestQuestions:
    def test_add_question_defaults(self, templates, template):
        updated = templates.add_question(template.id, QuestionIn(category_id="c-design"))
        added = updated.questions[-1]
        assert added.text == "New Question"
        assert added.type == "DIRECT"
        assert added.multiplier == 1.0
        assert added.order == 1

    def test_add_question_unknown_category(self, templates, template):
        with pytest.raises(NoResultFound):
            templates.add_question(template.id, QuestionIn(category_id="nope"))

    def test_update_question_fields(self, templates, template):
        updated = templates.update_question(
            template.id, "q-a", QuestionPatch(text="What is hoisting?", type="INDIRECT", multiplier=3)
        )
        question = next(q for q in updated.questions if q.id == "q-a")
        assert (question.text, question.type, question.multiplier) == ("What is hoisting?", "INDIRECT", 3.0)

    def test_move_question_to_other_category(self, templates, template):
        updated = templates.update_question(template.id, "q-a", QuestionPatch(category_id="c-design"))
        question = next(q for q in updated.questions if q.id == "q-a")
        assert question.category_id == "c-design"
        assert question.order == 1

    def test_multiplier_must_be_positive(self):
        with pytest.raises(ValueError):
            QuestionPatch(multiplier=0)

    def test_move_up_swaps_with_neighbour(self, templates, template):
        updated = templates.move_question(template.id, "q-b", "up")
        orders = {q.id: q.order for q in updated.questions}
        assert orders["q-b"] == 0
        assert orders["q-a"] == 1

    def test_move_at_edges_is_noop(self, templates, template):
        assert templates.move_question(template.id, "q-a", "up") == template
        assert templates.move_question(template.id, "q-b", "down") == template
        assert templates.move_question(template.id, "q-c", "down") == template

    def test_move_bad_direction(self, templates, template):
        with pytest.raises(ValueError):
            templates.move_question(template.id, "q-a", "sideways")

    def test_remove_question(self, templates, template):
        updated = templates.remove_question(template.id, "q-b")
        assert [q.id for q in updated.questions] == ["q-a", "q-c"]


# ==================== Custom feedbacks ==================== #


class TestCustomFeedbacks:
    def test_add_default_feedback(self, templates, template):
        updated = templates.add_custom_feedback(template.id, "q-a")
        feedback = next(q for q in updated.questions if q.id == "q-a").custom_feedbacks[0]
        assert (feedback.label, feedback.score) == ("New Feedback", 50)

    def test_add_named_feedback(self, templates, template):
        updated = templates.add_custom_feedback(template.id, "q-a", CustomFeedbackIn(label="Partial", score=60))
        assert [f.label for f in next(q for q in updated.questions if q.id == "q-a").custom_feedbacks] == ["Partial"]

    def test_update_feedback(self, templates, template):
        updated = templates.update_custom_feedback(template.id, "q-c", "fb-1", CustomFeedbackPatch(score=80))
        feedback = next(q for q in updated.questions if q.id == "q-c").custom_feedbacks[0]
        assert (feedback.label, feedback.score) == ("Strong tradeoffs", 80)

    def test_remove_feedback(self, templates, template):
        updated = templates.remove_custom_feedback(template.id, "q-c", "fb-1")
        assert next(q for q in updated.questions if q.id == "q-c").custom_feedbacks == []

    def test_remove_unknown_feedback(self, templates, template):
        with pytest.raises(NoResultFound):
            templates.remove_custom_feedback(template.id, "q-c", "nope")


# ==================== References ==================== #


class TestReferences:
    def test_add_rejects_dangling_category(self, templates, make_template):
        broken = make_template()
        broken.questions[0].category_id = "ghost"
        with pytest.raises(ValueError, match="unknown category"):
            templates.add(broken)

    def test_add_without_keep_id_refreshes_id(self, templates, make_template):
        stored = templates.add(make_template())
        assert stored.id != "tpl-1"

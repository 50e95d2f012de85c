import itertools

import pytest

from interviewpoint.services.scoring import (
    category_percentage,
    category_rollup,
    compute_totals,
    percentage,
    question_max,
    question_series,
    rollup_by_category_name,
    score_answer,
)
from interviewpoint.services.settings import default_settings
from interviewpoint.services.settings.schema import standard_options
from interviewpoint.services.templates import Category, Question


def test_question_worth_scales_with_multiplier(make_template):
    template = make_template()
    assert [question_max(q) for q in template.questions] == [100.0, 200.0, 150.0]


def test_score_answer_clamps_to_question_worth():
    assert score_answer(75, 1.5) == 112.5
    assert score_answer(140, 1.0) == 100.0
    assert score_answer(-20, 2.0) == 0.0


def test_percentage_of_empty_maximum_is_zero():
    assert percentage(0, 0) == 0.0
    assert percentage(50, 200) == 25.0


def test_max_is_sum_of_worth_and_total_never_exceeds_it(make_template):
    template = make_template()
    settings = default_settings()
    expected_max = sum(100 * q.multiplier for q in template.questions)
    choices = [
        [None] + [o.score for o in standard_options(settings, q.type)] + [f.score for f in q.custom_feedbacks]
        for q in template.questions
    ]
    for combo in itertools.product(*choices):
        answers = {
            q.id: score_answer(raw, q.multiplier) for q, raw in zip(template.questions, combo) if raw is not None
        }
        summary = compute_totals(template.questions, answers)
        assert summary.max == pytest.approx(expected_max)
        assert 0 <= summary.total <= summary.max


def test_unanswered_questions_count_towards_max_only(make_template):
    template = make_template()
    summary = compute_totals(template.questions, {"q-a": 100.0})
    assert summary.total == 100.0
    assert summary.max == 450.0
    assert summary.percentage == pytest.approx(100 / 450 * 100)


def test_category_rollup_follows_category_order(make_template):
    template = make_template()
    template.categories[0].order = 5
    rollup = category_rollup(template.categories, template.questions, {"q-c": 150.0})
    assert [c.name for c in rollup] == ["Design", "Basics"]
    design = rollup[0]
    assert (design.score, design.max, design.percentage) == (150.0, 150.0, 100.0)
    assert (design.answered, design.question_count) == (1, 1)


def test_question_series_labels_in_display_order(make_template):
    template = make_template()
    series = question_series(template.categories, template.questions, {"q-b": 80.0})
    assert [p.name for p in series] == ["Q1", "Q2", "Q3"]
    assert [p.question_id for p in series] == ["q-a", "q-b", "q-c"]
    assert series[1].score == 80.0
    assert series[1].missed == 120.0
    assert series[0].short_text == "What is a closu..."


def test_rollup_by_name_merges_and_marks_unknown():
    categories = [Category(id="a", name="Coding"), Category(id="b", name="Coding", order=1)]
    questions = [
        Question(id="1", text="x", category_id="a"),
        Question(id="2", text="y", category_id="b", multiplier=2),
        Question(id="3", text="z", category_id="gone"),
    ]
    totals = rollup_by_category_name(categories, questions, {"1": 50.0, "2": 200.0})
    assert totals == {"Coding": (250.0, 300.0), "Unknown": (0.0, 100.0)}


def test_category_percentage_without_questions():
    assert category_percentage("empty", [], {}) == 0.0

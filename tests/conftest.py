"""Shared fixtures for service and API tests."""

import os
import tempfile
from pathlib import Path

import pytest

# The API builds its services at import time, so point it at a throwaway database first.
_API_DB_DIR = tempfile.mkdtemp(prefix="interviewpoint-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_API_DB_DIR) / 'api.db'}"
os.environ.setdefault("SEED_DEMO_TEMPLATE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from interviewpoint.services.interchange import InterchangeService  # noqa: E402
from interviewpoint.services.interviews import InterviewService, ResultsService  # noqa: E402
from interviewpoint.services.runs import RunsService  # noqa: E402
from interviewpoint.services.settings import SettingsService  # noqa: E402
from interviewpoint.services.statistics import StatisticsService  # noqa: E402
from interviewpoint.services.storage import StorageService  # noqa: E402
from interviewpoint.services.templates import (  # noqa: E402
    Category,
    CustomFeedback,
    InterviewTemplate,
    Question,
    TemplatesService,
)


@pytest.fixture
def storage(tmp_path):
    """Fresh SQLite-backed storage per test."""
    return StorageService(database_url=f"sqlite:///{tmp_path / 'store.db'}")


@pytest.fixture
def settings_service(storage):
    return SettingsService(storage)


@pytest.fixture
def templates(storage):
    return TemplatesService(storage, seed_demo=False)


@pytest.fixture
def results(storage):
    return ResultsService(storage)


@pytest.fixture
def runs(storage, results):
    return RunsService(storage, results)


@pytest.fixture
def interviews(templates, settings_service, results, storage):
    return InterviewService(templates=templates, settings=settings_service, results=results, storage=storage)


@pytest.fixture
def statistics(results):
    return StatisticsService(results)


@pytest.fixture
def interchange(templates, results, runs, settings_service):
    return InterchangeService(templates=templates, results=results, runs=runs, settings=settings_service)


def build_template(name: str = "Backend Engineer") -> InterviewTemplate:
    """Two categories, three questions, one custom feedback on the indirect question."""
    return InterviewTemplate(
        id="tpl-1",
        name=name,
        created_at="2024-03-01T09:00:00Z",
        categories=[
            Category(id="c-basics", name="Basics", order=0),
            Category(id="c-design", name="Design", order=1),
        ],
        questions=[
            Question(id="q-a", text="What is a closure?", type="DIRECT", multiplier=1.0, category_id="c-basics", order=0),
            Question(id="q-b", text="Explain HTTP caching.", type="DIRECT", multiplier=2.0, category_id="c-basics", order=1),
            Question(
                id="q-c",
                text="Design a URL shortener.",
                type="INDIRECT",
                multiplier=1.5,
                category_id="c-design",
                order=0,
                custom_feedbacks=[CustomFeedback(id="fb-1", label="Strong tradeoffs", score=90)],
            ),
        ],
    )


@pytest.fixture
def template(templates):
    return templates.add(build_template(), keep_id=True)


@pytest.fixture
def make_template():
    return build_template

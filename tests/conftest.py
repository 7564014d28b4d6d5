"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from folio.database.document_store import SqlDocumentStore
from folio.services.experiences import ExperienceService
from folio.services.projects import ProjectService


class TickingClock:
    """Clock that advances one second per call so timestamps are strictly ordered."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step
        self.calls = 0

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        self.calls += 1
        return current


@pytest.fixture
def sqlite_path(tmp_path):
    return str(tmp_path / "folio.db")


@pytest.fixture
def store(sqlite_path):
    """Document store backed by a temporary SQLite file."""
    store = SqlDocumentStore(sqlite_path)
    yield store
    store.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def projects(store, clock):
    return ProjectService(store, "projects", clock=clock)


@pytest.fixture
def experiences(store, clock):
    return ExperienceService(store, "experiences", clock=clock)


def make_project(**overrides):
    fields = {
        "title": "Portfolio site",
        "description": "Static site with a document store backend",
        "category": "web",
        "technologies": ["Next.js", "TypeScript", "Firestore"],
        "status": "completed",
        "featured": False,
        "sortOrder": 1,
    }
    fields.update(overrides)
    return fields


def make_experience(**overrides):
    fields = {
        "company": "Acme Corp",
        "role": "Backend Engineer",
        "technologies": ["Python", "PostgreSQL"],
        "startDate": "2022-03-01",
        "endDate": "2023-06-30",
        "current": False,
        "featured": False,
    }
    fields.update(overrides)
    return fields

"""Pytest fixtures: in-memory SQLite store, repository and HTTP client."""

import random

import pytest
from fastapi.testclient import TestClient

from cms.content_repository import ContentRepository
from cms.db_helpers import create_session_factory, get_db_engine


@pytest.fixture
def engine():
    engine = get_db_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def repo(session_factory):
    return ContentRepository(session_factory, rng=random.Random(7))


@pytest.fixture
def client(repo):
    from server import app, get_repository

    app.dependency_overrides[get_repository] = lambda: repo
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator

# Settings are read at import time; point them at local throwaway services
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "1000000"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from fixtures import StubGeminiModel, StubTriviaSource  # noqa: E402

from quizmaster.api.feedback import get_feedback_service  # noqa: E402
from quizmaster.api.quizzes import get_registry  # noqa: E402
from quizmaster.database import build_engine, get_db, init_db  # noqa: E402
from quizmaster.main import app  # noqa: E402
from quizmaster.services.feedback_service import FeedbackService  # noqa: E402
from quizmaster.services.quiz_controller import QuizSessionController  # noqa: E402
from quizmaster.services.session_registry import SessionRegistry  # noqa: E402
from quizmaster.services.session_store import SessionStore  # noqa: E402


@pytest.fixture
def session_factory() -> Iterator[sessionmaker]:
    """Fresh in-memory database per test."""

    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(session_factory) -> SessionStore:
    return SessionStore(session_factory)


@pytest.fixture
def trivia_source() -> StubTriviaSource:
    return StubTriviaSource()


@pytest.fixture
def gemini_model() -> StubGeminiModel:
    return StubGeminiModel(text="You did well on science questions.")


@pytest.fixture
def controller(trivia_source, store) -> QuizSessionController:
    return QuizSessionController(source=trivia_source, store=store)


@pytest.fixture
def registry(trivia_source, store) -> SessionRegistry:
    return SessionRegistry(
        controller_factory=lambda: QuizSessionController(source=trivia_source, store=store)
    )


@pytest.fixture
def client(session_factory, registry, gemini_model) -> Iterator[TestClient]:
    """API client wired to the test database and stub upstreams."""

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_feedback_service] = lambda: FeedbackService(model=gemini_model)

    yield TestClient(app)

    app.dependency_overrides.clear()

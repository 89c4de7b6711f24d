from __future__ import annotations

import uuid

import pytest

from fixtures import make_questions

from quizmaster.models import Category, Difficulty, IncorrectAnswer, Question, QuizSession
from quizmaster.services.session_store import difficulty_label


def test_difficulty_label() -> None:
    assert difficulty_label("medium") == "Medium"
    assert difficulty_label("any") == "Any Difficulty"
    assert difficulty_label("") == "Any Difficulty"


def test_create_session_upserts_lookup_rows(store, db) -> None:
    first = store.create_session(uuid.uuid4(), "Science", "Medium", 10)
    second = store.create_session(None, "Science", "Hard", 5)

    assert first != second
    assert db.query(Category).filter(Category.name == "Science").count() == 1
    assert {d.name for d in db.query(Difficulty).all()} == {"Medium", "Hard"}

    row = db.query(QuizSession).filter(QuizSession.id == second).one()
    assert row.user_id is None
    assert row.score == 0
    assert row.date_taken is not None


def test_ensure_question_deduplicates_by_text(store, db) -> None:
    question = make_questions(1, category="History", difficulty="easy")[0]

    first = store.ensure_question(question)
    again = store.ensure_question(question.model_copy(update={"correct_answer": "changed"}))

    assert first == again
    assert db.query(Question).count() == 1
    stored = db.query(Question).one()
    assert stored.correct_answer == "answer-0"
    assert stored.type == "multiple"
    answers = db.query(IncorrectAnswer).filter(IncorrectAnswer.question_id == first).all()
    assert sorted(a.answer_text for a in answers) == ["wrong-0-a", "wrong-0-b", "wrong-0-c"]
    assert db.query(Difficulty).filter(Difficulty.name == "Easy").count() == 1


def test_record_attempt_allows_duplicates(store, db) -> None:
    session_id = store.create_session(uuid.uuid4(), "Any Category", "Any Difficulty", 1)
    question_id = store.ensure_question(make_questions(1)[0])

    store.record_attempt(session_id, question_id, 0, "answer-0", True)
    store.record_attempt(session_id, question_id, 0, "answer-0", True)

    from quizmaster.models import Attempt
    assert db.query(Attempt).filter(Attempt.session_id == session_id).count() == 2


def test_update_score(store, db) -> None:
    session_id = store.create_session(None, "Any Category", "Any Difficulty", 3)

    store.update_score(session_id, 2)

    assert db.query(QuizSession).filter(QuizSession.id == session_id).one().score == 2


def test_update_score_unknown_session(store) -> None:
    with pytest.raises(LookupError):
        store.update_score(uuid.uuid4(), 1)

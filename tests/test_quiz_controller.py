from __future__ import annotations

import random
import time
import uuid

import pytest

from fixtures import BlockingStore, FailingStore, StubTriviaSource, make_questions

from quizmaster.models import Attempt, QuizSession
from quizmaster.schemas.quiz import QuizConfig, QuizState
from quizmaster.services.quiz_controller import (
    InvalidTransition,
    NoQuestionsAvailable,
    QuizSessionController,
)
from quizmaster.services.trivia_service import TriviaServiceError


def play(controller: QuizSessionController, answers: list[str]) -> None:
    for answer in answers:
        controller.submit_answer(answer)
        controller.advance()


def test_start_any_settings_begins_at_first_question(controller, trivia_source) -> None:
    state = controller.start(QuizConfig(amount=10, category="any", difficulty="any", type="any"))

    assert state.status == "in_progress"
    assert state.index == 0
    assert state.score == 0
    assert controller.total_questions == 10
    assert state.category_label == "Any Category"
    assert state.difficulty_label == "Any Difficulty"
    assert state.session_id is None
    assert trivia_source.calls[0].amount == 10


def test_ten_correct_answers_complete_with_full_score(controller) -> None:
    controller.start(QuizConfig(amount=10))

    play(controller, [f"answer-{n}" for n in range(10)])

    assert controller.state.status == "completed"
    assert controller.state.score == 10
    summary = controller.summary()
    assert summary.percentage == 100
    assert summary.message == "Outstanding! You're a quiz master!"


def test_score_counts_only_correct_answers(controller) -> None:
    controller.start(QuizConfig(amount=5))

    answers = ["answer-0", "wrong-1-a", "answer-2", "nope", "answer-4"]
    play(controller, answers)

    results = controller.state.results.values()
    assert controller.state.score == sum(1 for r in results if r.is_correct) == 3
    assert controller.state.score <= controller.total_questions
    assert controller.summary().percentage == 60


def test_correctness_is_exact_text_match(controller) -> None:
    controller.start(QuizConfig(amount=2))

    first = controller.submit_answer("ANSWER-0")
    controller.advance()
    second = controller.submit_answer("answer-1 ")

    assert first.is_correct is False
    assert second.is_correct is False
    assert controller.state.score == 0


def test_second_submit_at_same_index_is_a_noop(controller) -> None:
    controller.start(QuizConfig(amount=3))

    first = controller.submit_answer("wrong-0-a")
    second = controller.submit_answer("answer-0")

    assert second == first
    assert second.selected_answer == "wrong-0-a"
    assert controller.state.score == 0


def test_repeated_correct_submit_does_not_double_count(controller) -> None:
    controller.start(QuizConfig(amount=3))

    controller.submit_answer("answer-0")
    controller.submit_answer("answer-0")

    assert controller.state.score == 1


def test_advance_before_answer_is_invalid(controller) -> None:
    controller.start(QuizConfig(amount=3))

    with pytest.raises(InvalidTransition):
        controller.advance()

    assert controller.state.index == 0

    controller.submit_answer("answer-0")
    controller.advance()
    with pytest.raises(InvalidTransition):
        controller.advance()
    assert controller.state.index == 1


def test_operations_after_completion_are_invalid(controller) -> None:
    controller.start(QuizConfig(amount=1))
    play(controller, ["answer-0"])

    with pytest.raises(InvalidTransition):
        controller.submit_answer("answer-0")
    with pytest.raises(InvalidTransition):
        controller.advance()
    assert controller.current_question() is None


def test_operations_before_start_are_invalid(controller) -> None:
    with pytest.raises(InvalidTransition):
        controller.submit_answer("x")
    with pytest.raises(InvalidTransition):
        controller.restart()


def test_empty_batch_raises_and_persists_nothing(store, session_factory) -> None:
    controller = QuizSessionController(source=StubTriviaSource(questions=[]), store=store)

    with pytest.raises(NoQuestionsAvailable):
        controller.start(QuizConfig(user_id=uuid.uuid4()))

    assert controller.state is None
    with session_factory() as db:
        assert db.query(QuizSession).count() == 0


def test_source_error_becomes_no_questions_available(store) -> None:
    source = StubTriviaSource(error=TriviaServiceError("Rate limit exceeded"))
    controller = QuizSessionController(source=source, store=store)

    with pytest.raises(NoQuestionsAvailable, match="Rate limit"):
        controller.start(QuizConfig())

    assert controller.state is None


def test_specific_category_uses_question_category_label(store) -> None:
    source = StubTriviaSource(questions=make_questions(3, category="History", difficulty="hard"))
    controller = QuizSessionController(source=source, store=store)

    state = controller.start(QuizConfig(category="23", difficulty="hard", amount=3))

    assert state.category_label == "History"
    assert state.difficulty_label == "Hard"


def test_authenticated_session_is_mirrored(controller, session_factory) -> None:
    user_id = uuid.uuid4()
    controller.start(QuizConfig(amount=3, user_id=user_id))
    play(controller, ["answer-0", "wrong", "answer-2"])
    controller.mirror.flush()

    session_id = controller.state.session_id
    with session_factory() as db:
        row = db.query(QuizSession).filter(QuizSession.id == session_id).one()
        attempts = db.query(Attempt).filter(Attempt.session_id == session_id).order_by(Attempt.position).all()

        assert row.user_id == user_id
        assert row.score == 2
        assert row.total_questions == 3
        assert [a.position for a in attempts] == [0, 1, 2]
        assert [a.is_correct for a in attempts] == [True, False, True]
        assert attempts[1].user_answer == "wrong"


def test_anonymous_session_is_not_persisted(controller, session_factory) -> None:
    controller.start(QuizConfig(amount=2))
    play(controller, ["answer-0", "answer-1"])

    with session_factory() as db:
        assert db.query(QuizSession).count() == 0
        assert db.query(Attempt).count() == 0


def test_store_failures_do_not_change_progress(session_factory) -> None:
    store = FailingStore(fail_create=False, session_factory=session_factory)
    controller = QuizSessionController(source=StubTriviaSource(), store=store)
    controller.start(QuizConfig(amount=2, user_id=uuid.uuid4()))

    result = controller.submit_answer("answer-0")
    assert result.is_correct is True
    assert result.score == 1
    controller.mirror.flush()
    assert any("answer" in w for w in controller.snapshot().warnings)

    controller.advance()
    controller.submit_answer("answer-1")
    controller.advance()
    controller.mirror.flush()

    assert controller.state.status == "completed"
    assert controller.state.score == 2
    assert any("final score" in w for w in controller.snapshot().warnings)
    assert controller.snapshot().warnings == []
    assert controller.mirror.failures >= 3


def test_failed_session_insert_runs_unmirrored(session_factory) -> None:
    store = FailingStore(fail_create=True, session_factory=session_factory)
    controller = QuizSessionController(source=StubTriviaSource(), store=store)

    state = controller.start(QuizConfig(amount=2, user_id=uuid.uuid4()))

    assert state.status == "in_progress"
    assert state.session_id is None
    assert controller.warnings
    play(controller, ["answer-0", "answer-1"])
    assert controller.state.score == 2
    assert "record_attempt" not in store.calls


def test_restart_authenticated_creates_new_session(store, session_factory) -> None:
    source = StubTriviaSource(questions=make_questions(10, category="Science", difficulty="medium"))
    controller = QuizSessionController(source=source, store=store)
    controller.start(QuizConfig(category="17", difficulty="medium", amount=10, user_id=uuid.uuid4()))
    controller.submit_answer("answer-0")
    controller.advance()
    old_session = controller.state.session_id
    old_handle = controller.handle_id

    state = controller.restart()
    controller.mirror.flush()

    assert state.score == 0
    assert state.index == 0
    assert state.results == {}
    assert state.session_id is not None
    assert state.session_id != old_session
    assert state.handle_id != old_handle
    with session_factory() as db:
        old_row = db.query(QuizSession).filter(QuizSession.id == old_session).one()
        new_row = db.query(QuizSession).filter(QuizSession.id == state.session_id).one()
        assert old_row.score == 1
        assert new_row.score == 0
        assert new_row.total_questions == old_row.total_questions == 10
        assert new_row.category.name == old_row.category.name == "Science"
        assert new_row.difficulty.name == old_row.difficulty.name == "Medium"
    assert source.calls and len(source.calls) == 1


def test_restart_anonymous_resets_local_state(controller, session_factory) -> None:
    controller.start(QuizConfig(amount=2))
    play(controller, ["answer-0", "answer-1"])
    handle = controller.handle_id

    state = controller.restart()

    assert state.status == "in_progress"
    assert state.score == 0
    assert state.handle_id == handle
    assert state.session_id is None
    with session_factory() as db:
        assert db.query(QuizSession).count() == 0


def test_current_question_includes_all_answers(trivia_source, store) -> None:
    controller = QuizSessionController(source=trivia_source, store=store, rng=random.Random(7))
    controller.start(QuizConfig(amount=2))

    view = controller.current_question()

    assert view.index == 0
    assert view.total_questions == 2
    assert sorted(view.answers) == sorted(["answer-0", "wrong-0-a", "wrong-0-b", "wrong-0-c"])
    assert controller.current_question(shuffle=False).answers == sorted(view.answers)


def test_state_round_trips_through_export(controller) -> None:
    controller.start(QuizConfig(amount=3))
    controller.submit_answer("answer-0")

    exported = controller.export_state()
    restored = QuizSessionController.from_state(
        QuizState.model_validate(exported),
        source=controller.source,
        store=controller.store,
    )

    assert restored.state.index == 0
    assert restored.state.score == 1
    assert restored.submit_answer("nope").is_correct is True
    restored.advance()
    assert restored.state.index == 1


def test_answer_write_does_not_block_submit(session_factory) -> None:
    store = BlockingStore(session_factory)
    controller = QuizSessionController(source=StubTriviaSource(), store=store)
    controller.start(QuizConfig(amount=2, user_id=uuid.uuid4()))

    started = time.monotonic()
    result = controller.submit_answer("answer-0")
    elapsed = time.monotonic() - started

    assert result.is_correct is True
    assert elapsed < 1
    assert store.recorded == 0

    store.release.set()
    controller.mirror.flush()

    assert store.recorded == 1
    with session_factory() as db:
        assert db.query(Attempt).count() == 1
        row = db.query(QuizSession).filter(QuizSession.id == controller.state.session_id).one()
        assert row.score == 1


def test_writes_keep_issue_order(controller, session_factory) -> None:
    controller.start(QuizConfig(amount=3, user_id=uuid.uuid4()))
    play(controller, ["answer-0", "answer-1", "wrong"])
    controller.mirror.flush()

    with session_factory() as db:
        row = db.query(QuizSession).filter(QuizSession.id == controller.state.session_id).one()
        assert row.score == 2
        assert db.query(Attempt).count() == 3

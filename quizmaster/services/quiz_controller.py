"""
Quiz session controller
Steps through a fixed batch of questions, scores answers and mirrors
progress to the session store.
"""
import logging
import random
import uuid
from typing import List, Optional

from quizmaster.schemas.quiz import (
    QuizConfig,
    QuizState,
    QuizStateResponse,
    QuizSummary,
    QuestionView,
    AttemptResult,
)
from quizmaster.services.session_store import SessionStore, session_store, difficulty_label, ANY_CATEGORY
from quizmaster.services.trivia_service import TriviaService, TriviaServiceError, trivia_service
from quizmaster.utils.mirror import MirrorWriter
from quizmaster.utils.scoring import percentage, result_message

logger = logging.getLogger(__name__)


class QuizControllerError(Exception):
    """Base exception for quiz controller errors"""
    pass


class NoQuestionsAvailable(QuizControllerError):
    """The question source returned nothing usable; retry with other settings"""
    pass


class InvalidTransition(QuizControllerError):
    """The requested operation is not allowed in the current state"""
    pass


class QuizSessionController:
    """
    State machine for one quiz session

    States: loading -> in_progress(index) -> completed. The in-memory state
    is authoritative; the session store only mirrors it, and only for
    sessions started with a user id.
    """

    def __init__(
        self,
        source: Optional[TriviaService] = None,
        store: Optional[SessionStore] = None,
        mirror: Optional[MirrorWriter] = None,
        rng: Optional[random.Random] = None
    ):
        self.source = source or trivia_service
        self.store = store or session_store
        self.mirror = mirror or MirrorWriter(logger)
        self.rng = rng or random.Random()
        self.state: Optional[QuizState] = None
        self.warnings: List[str] = []

    @classmethod
    def from_state(cls, state: QuizState, **kwargs) -> "QuizSessionController":
        """Rebuild a controller around a previously exported state"""
        controller = cls(**kwargs)
        controller.state = state
        return controller

    def export_state(self) -> dict:
        """JSON-compatible dump of the current state"""
        self._require_started()
        return self.state.model_dump(mode="json")

    @property
    def handle_id(self) -> Optional[uuid.UUID]:
        return self.state.handle_id if self.state else None

    @property
    def total_questions(self) -> int:
        return len(self.state.questions) if self.state else 0

    def start(self, config: QuizConfig) -> QuizState:
        """
        Fetch a question batch and begin at the first question

        Raises:
            NoQuestionsAvailable: source error or empty batch; the controller
                stays uninitialized and nothing is persisted
        """
        self.warnings = []

        try:
            questions = self.source.fetch_questions(config)
        except TriviaServiceError as e:
            raise NoQuestionsAvailable(str(e)) from e

        if not questions:
            raise NoQuestionsAvailable("No questions found. Try different settings.")

        state = QuizState(
            handle_id=uuid.uuid4(),
            user_id=config.user_id,
            config=config,
            category_label=questions[0].category if config.category != "any" else ANY_CATEGORY,
            difficulty_label=difficulty_label(config.difficulty),
            questions=questions,
        )

        if state.user_id:
            self._mirror_new_session(state)
            self._mirror_questions(state)

        state.status = "in_progress"
        state.index = 0
        self.state = state

        logger.info(
            f"Quiz {state.handle_id} started: {len(questions)} questions, "
            f"category={state.category_label}, difficulty={state.difficulty_label}"
        )
        return state

    def submit_answer(self, selected: str) -> AttemptResult:
        """
        Score the answer for the current question

        A repeated call at the same index returns the first result without
        re-scoring. Correctness is exact text equality. The attempt row is
        queued on the mirror thread; a failed write shows up in the warnings
        of a later snapshot.
        """
        self._require_in_progress("submit an answer")
        state = self.state

        previous = state.results.get(state.index)
        if previous is not None:
            logger.debug(f"Quiz {state.handle_id}: question {state.index} already answered")
            self.warnings = []
            return previous

        self.warnings = []
        question = state.questions[state.index]
        is_correct = selected == question.correct_answer
        if is_correct:
            state.score += 1

        if state.session_id:
            self._mirror_attempt(state, selected, is_correct)

        result = AttemptResult(
            index=state.index,
            selected_answer=selected,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            score=state.score,
            warnings=list(self.warnings),
        )
        state.results[state.index] = result
        return result

    def advance(self) -> QuizState:
        """
        Move to the next question, or complete the quiz after the last one

        Raises:
            InvalidTransition: the current question has not been answered
        """
        self._require_in_progress("advance")
        state = self.state
        self.warnings = []

        if state.index not in state.results:
            raise InvalidTransition(f"Question {state.index} must be answered before advancing")

        if state.index + 1 < len(state.questions):
            state.index += 1
            return state

        state.status = "completed"
        logger.info(f"Quiz {state.handle_id} completed: {state.score}/{len(state.questions)}")

        if state.session_id:
            self.mirror.submit("final score", self.store.update_score, state.session_id, state.score)

        return state

    def restart(self) -> QuizState:
        """
        Replay the same questions from the beginning with score 0

        A session with a user gets a new store row (and a new handle); the
        previous row is left as it was. Anonymous sessions only reset.
        """
        self._require_started()
        previous = self.state
        self.warnings = []

        state = previous.model_copy(deep=True)
        state.status = "in_progress"
        state.index = 0
        state.score = 0
        state.results = {}

        if previous.user_id:
            state.handle_id = uuid.uuid4()
            state.session_id = None
            self._mirror_new_session(state)
            if state.session_id and any(q.store_id is None for q in state.questions):
                self._mirror_questions(state)

        self.state = state
        logger.info(f"Quiz {previous.handle_id} restarted as {state.handle_id}")
        return state

    def current_question(self, shuffle: bool = True) -> Optional[QuestionView]:
        """Present the current question; answer order is shuffled per call"""
        if self.state is None or self.state.status != "in_progress":
            return None

        question = self.state.questions[self.state.index]
        answers = question.incorrect_answers + [question.correct_answer]
        if shuffle:
            answers = self.rng.sample(answers, len(answers))
        else:
            answers = sorted(answers)

        return QuestionView(
            index=self.state.index,
            total_questions=len(self.state.questions),
            question=question.question,
            answers=answers,
            type=question.type,
            category=question.category,
            difficulty=question.difficulty,
        )

    def summary(self) -> Optional[QuizSummary]:
        """Final score screen; None until the quiz is completed"""
        if self.state is None or self.state.status != "completed":
            return None

        total = len(self.state.questions)
        pct = percentage(self.state.score, total)
        return QuizSummary(
            score=self.state.score,
            total_questions=total,
            percentage=pct,
            message=result_message(pct),
        )

    def snapshot(self) -> QuizStateResponse:
        """Response body describing the current state"""
        self._require_started()
        state = self.state

        return QuizStateResponse(
            handle_id=state.handle_id,
            session_id=state.session_id,
            status=state.status,
            index=state.index,
            total_questions=len(state.questions),
            score=state.score,
            category=state.category_label,
            difficulty=state.difficulty_label,
            current_question=self.current_question(),
            last_result=state.results.get(state.index),
            summary=self.summary(),
            warnings=self.warnings + self.mirror.drain_warnings(),
        )

    def _mirror_new_session(self, state: QuizState) -> None:
        result = self._dispatch(
            "quiz session",
            self.store.create_session,
            state.user_id,
            state.category_label,
            state.difficulty_label,
            len(state.questions),
        )
        if result.ok:
            state.session_id = result.value

    def _mirror_questions(self, state: QuizState) -> None:
        if not state.session_id:
            return

        for question in state.questions:
            if question.store_id is not None:
                continue
            result = self._dispatch("question", self.store.ensure_question, question)
            if result.ok:
                question.store_id = result.value

    def _mirror_attempt(self, state: QuizState, selected: str, is_correct: bool) -> None:
        question = state.questions[state.index]
        if question.store_id is None:
            warning = f"Could not save answer {state.index + 1}: question was not stored"
            logger.warning(warning)
            self.warnings.append(warning)
            return

        self.mirror.submit(
            "answer",
            self.store.record_attempt,
            state.session_id,
            question.store_id,
            state.index,
            selected,
            is_correct,
        )
        if is_correct:
            self.mirror.submit("score", self.store.update_score, state.session_id, state.score)

    def _dispatch(self, description, write, *args):
        result = self.mirror.dispatch(description, write, *args)
        if not result.ok:
            self.warnings.append(result.warning)
        return result

    def _require_started(self) -> None:
        if self.state is None:
            raise InvalidTransition("Quiz has not been started")

    def _require_in_progress(self, action: str) -> None:
        self._require_started()
        if self.state.status != "in_progress":
            raise InvalidTransition(f"Cannot {action}: quiz is {self.state.status}")

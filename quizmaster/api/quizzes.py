"""
Quiz session API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from uuid import UUID
import logging

from quizmaster.schemas.quiz import QuizConfig, AnswerRequest, QuizStateResponse
from quizmaster.services.quiz_controller import (
    QuizSessionController,
    NoQuestionsAvailable,
    InvalidTransition,
)
from quizmaster.services.session_registry import SessionRegistry, QuizNotFound, session_registry

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


def get_registry() -> SessionRegistry:
    return session_registry


def _controller(registry: SessionRegistry, handle_id: UUID) -> QuizSessionController:
    try:
        return registry.get(handle_id)
    except QuizNotFound:
        raise HTTPException(
            status_code=404,
            detail={"error": "quiz_not_found", "message": "Quiz not found. Start a new quiz."}
        )


def _invalid_transition(e: InvalidTransition) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"error": "invalid_transition", "message": str(e)}
    )


@router.post("", response_model=QuizStateResponse, status_code=201)
def start_quiz(config: QuizConfig, registry: SessionRegistry = Depends(get_registry)):
    """
    Start a quiz

    - Fetches a question batch from Open Trivia DB
    - Creates a session record when a user id is given
    - Returns the first question with shuffled answers
    """
    controller = registry.new_controller()

    try:
        controller.start(config)
    except NoQuestionsAvailable as e:
        logger.info(f"No questions for {config.model_dump(exclude={'user_id'})}: {str(e)}")
        raise HTTPException(
            status_code=404,
            detail={
                "error": "no_questions_available",
                "message": "No questions found. Try different settings.",
                "reason": str(e)
            }
        )

    registry.register(controller)
    return controller.snapshot()


@router.get("/{handle_id}", response_model=QuizStateResponse)
def get_quiz(handle_id: UUID, registry: SessionRegistry = Depends(get_registry)):
    """Current state; answers are reshuffled on every call"""
    return _controller(registry, handle_id).snapshot()


@router.post("/{handle_id}/answer", response_model=QuizStateResponse)
def submit_answer(
    handle_id: UUID,
    request: AnswerRequest,
    registry: SessionRegistry = Depends(get_registry)
):
    """
    Submit an answer for the current question

    Repeating the call before advancing returns the first result.
    """
    controller = _controller(registry, handle_id)

    try:
        result = controller.submit_answer(request.answer)
    except InvalidTransition as e:
        raise _invalid_transition(e)

    snapshot = controller.snapshot()
    snapshot.last_result = result
    return snapshot


@router.post("/{handle_id}/advance", response_model=QuizStateResponse)
def advance_quiz(handle_id: UUID, registry: SessionRegistry = Depends(get_registry)):
    """Move to the next question, or complete the quiz"""
    controller = _controller(registry, handle_id)

    try:
        controller.advance()
    except InvalidTransition as e:
        raise _invalid_transition(e)

    return controller.snapshot()


@router.post("/{handle_id}/restart", response_model=QuizStateResponse)
def restart_quiz(handle_id: UUID, registry: SessionRegistry = Depends(get_registry)):
    """
    Try the same questions again

    Signed-in players get a new session record and a new handle.
    """
    controller = _controller(registry, handle_id)

    try:
        controller.restart()
    except InvalidTransition as e:
        raise _invalid_transition(e)

    registry.rebind(handle_id, controller)
    return controller.snapshot()

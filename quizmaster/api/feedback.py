"""
AI feedback endpoint
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from quizmaster.database import get_db
from quizmaster.schemas.feedback import FeedbackRequest, FeedbackResponse
from quizmaster.services.feedback_service import (
    FeedbackService,
    SessionNotFound,
    QuestionsNotFound,
    UpstreamBusy,
    UpstreamError,
    feedback_service,
)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])
logger = logging.getLogger(__name__)


def get_feedback_service() -> FeedbackService:
    return feedback_service


@router.post("", response_model=FeedbackResponse)
def generate_feedback(
    request: FeedbackRequest,
    db: Session = Depends(get_db),
    service: FeedbackService = Depends(get_feedback_service)
):
    """
    Generate personalized feedback for a past quiz

    The model's text is returned as-is. A busy provider answers 503 with
    `retry_after`; nothing is retried here.
    """
    try:
        return FeedbackResponse(**service.generate_feedback(db, request.quiz_id))

    except (SessionNotFound, QuestionsNotFound) as e:
        raise HTTPException(
            status_code=404,
            detail={"error": "not_found", "message": str(e)}
        )
    except UpstreamBusy as e:
        raise HTTPException(
            status_code=503,
            detail={
                "error": "upstream_busy",
                "message": "AI service is currently busy. Please try again in a few moments.",
                "retry_after": e.retry_after
            }
        )
    except UpstreamError as e:
        raise HTTPException(
            status_code=502,
            detail={"error": "upstream_error", "message": f"Failed to generate AI feedback: {str(e)}"}
        )

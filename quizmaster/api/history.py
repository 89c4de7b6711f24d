"""
Quiz history, review and statistics endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from quizmaster.database import get_db
from quizmaster.schemas.stats import HistoryItem, SessionReview, UserStats
from quizmaster.services.stats_service import stats_service

router = APIRouter(prefix="/api", tags=["history"])
logger = logging.getLogger(__name__)


@router.get("/users/{user_id}/history", response_model=List[HistoryItem])
def get_history(user_id: UUID, db: Session = Depends(get_db)):
    """Past quizzes of a user, newest first"""
    return [HistoryItem(**item) for item in stats_service.get_history(db, user_id)]


@router.get("/users/{user_id}/stats", response_model=UserStats)
def get_user_stats(user_id: UUID, db: Session = Depends(get_db)):
    """
    Aggregate statistics for a user

    Returns:
    - Quiz, question and correct answer totals
    - Average score percentage
    - Category and difficulty breakdowns
    - Scores of the last five quizzes
    """
    logger.info(f"Fetching stats for user {user_id}")
    return UserStats(**stats_service.get_user_stats(db, user_id))


@router.get("/sessions/{session_id}/review", response_model=SessionReview)
def review_session(session_id: UUID, db: Session = Depends(get_db)):
    """Per-question results of a stored quiz"""
    review = stats_service.get_session_review(db, session_id)

    if review is None:
        raise HTTPException(
            status_code=404,
            detail={"error": "session_not_found", "message": "Quiz or its answers not found"}
        )

    return SessionReview(**review)

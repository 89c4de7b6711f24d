"""
Read-side service for quiz history, session review and user statistics
"""
import logging
from typing import Dict, List, Any, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from quizmaster.models import Category, Difficulty, Question, QuizSession, Attempt
from quizmaster.utils.scoring import percentage

logger = logging.getLogger(__name__)


class StatsService:
    """Service for history, review and aggregate statistics"""

    RECENT_LIMIT = 5

    def get_history(self, db: Session, user_id: UUID) -> List[Dict[str, Any]]:
        """Past sessions of a user, newest first"""
        sessions = db.query(QuizSession).filter(
            QuizSession.user_id == user_id
        ).order_by(QuizSession.date_taken.desc()).all()

        return [
            {
                "id": s.id,
                "date": s.date_taken,
                "category": s.category.name if s.category else "Unknown",
                "difficulty": s.difficulty.name if s.difficulty else "Unknown",
                "score": s.score,
                "total_questions": s.total_questions,
                "percentage": percentage(s.score, s.total_questions),
            }
            for s in sessions
        ]

    def load_session_results(
        self,
        db: Session,
        session_id: UUID
    ) -> Tuple[Optional[QuizSession], List[Attempt], List[Dict[str, Any]]]:
        """
        Fetch a session, its attempts and the answered questions

        Returns:
            Tuple of (session or None, attempts in answer order, joined
            question results). Attempts whose question row is missing are
            dropped from the joined results.
        """
        quiz_session = db.query(QuizSession).filter(QuizSession.id == session_id).first()
        if quiz_session is None:
            return None, [], []

        attempts = db.query(Attempt).filter(
            Attempt.session_id == session_id
        ).order_by(Attempt.position, Attempt.created_at).all()
        if not attempts:
            return quiz_session, [], []

        question_ids = [a.question_id for a in attempts]
        questions = {
            q.id: q for q in db.query(Question).filter(Question.id.in_(question_ids)).all()
        }

        results = []
        for attempt in attempts:
            question = questions.get(attempt.question_id)
            if question is None:
                continue
            results.append({
                "id": question.id,
                "question_text": question.question_text,
                "user_answer": attempt.user_answer or "Not answered",
                "correct_answer": question.correct_answer,
                "is_correct": attempt.is_correct,
                "type": question.type or "multiple",
            })

        return quiz_session, attempts, results

    def get_session_review(self, db: Session, session_id: UUID) -> Optional[Dict[str, Any]]:
        """Session detail with per-question review; None when unavailable"""
        quiz_session, _, results = self.load_session_results(db, session_id)
        if quiz_session is None or not results:
            return None

        return {
            "id": quiz_session.id,
            "date": quiz_session.date_taken,
            "category": quiz_session.category.name if quiz_session.category else "Unknown",
            "difficulty": quiz_session.difficulty.name if quiz_session.difficulty else "Unknown",
            "score": quiz_session.score,
            "total_questions": quiz_session.total_questions,
            "questions": results,
        }

    def get_user_stats(self, db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Aggregate statistics for a user

        Returns:
            Totals, average score percentage, category and difficulty
            breakdowns, and the most recent scores oldest to newest
        """
        total_quizzes, total_questions, correct_answers = db.query(
            func.count(QuizSession.id),
            func.coalesce(func.sum(QuizSession.total_questions), 0),
            func.coalesce(func.sum(QuizSession.score), 0),
        ).filter(QuizSession.user_id == user_id).one()

        category_rows = db.query(Category.name, func.count(QuizSession.id)).join(
            QuizSession, QuizSession.category_id == Category.id
        ).filter(QuizSession.user_id == user_id).group_by(Category.name).order_by(Category.name).all()

        difficulty_rows = db.query(Difficulty.name, func.count(QuizSession.id)).join(
            QuizSession, QuizSession.difficulty_id == Difficulty.id
        ).filter(QuizSession.user_id == user_id).group_by(Difficulty.name).order_by(Difficulty.name).all()

        recent = db.query(QuizSession).filter(
            QuizSession.user_id == user_id
        ).order_by(QuizSession.date_taken.desc()).limit(self.RECENT_LIMIT).all()

        recent_scores = [
            {
                "date": f"{s.date_taken:%b} {s.date_taken.day}" if s.date_taken else "",
                "score": percentage(s.score, s.total_questions),
            }
            for s in reversed(recent)
        ]

        logger.info(f"Stats for user {user_id}: {total_quizzes} quizzes, {correct_answers}/{total_questions} correct")

        return {
            "user_id": user_id,
            "total_quizzes": int(total_quizzes),
            "average_score": percentage(int(correct_answers), int(total_questions)),
            "total_questions": int(total_questions),
            "correct_answers": int(correct_answers),
            "category_breakdown": [{"name": name, "value": count} for name, count in category_rows],
            "difficulty_breakdown": [{"name": name, "value": count} for name, count in difficulty_rows],
            "recent_scores": recent_scores,
        }


# Global instance
stats_service = StatsService()

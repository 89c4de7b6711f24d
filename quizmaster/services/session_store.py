"""
Session store - writes quiz sessions, questions and attempts
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from quizmaster.database import SessionLocal
from quizmaster.models import Category, Difficulty, Question, IncorrectAnswer, QuizSession, Attempt
from quizmaster.schemas.quiz import TriviaQuestion

logger = logging.getLogger(__name__)


ANY_CATEGORY = "Any Category"
ANY_DIFFICULTY = "Any Difficulty"


def difficulty_label(value: str) -> str:
    """'medium' -> 'Medium', 'any' -> 'Any Difficulty'"""
    if not value or value.lower() == "any":
        return ANY_DIFFICULTY
    return value.capitalize()


class SessionStore:
    """
    Row-level writes against the quiz tables

    Each method runs in its own transaction: commit on success, rollback and
    re-raise on failure. Callers decide whether a failure matters.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def create_session(
        self,
        user_id: Optional[UUID],
        category: str,
        difficulty: str,
        total_questions: int
    ) -> UUID:
        """Insert a quiz session row with score 0"""
        with self.session_factory() as db:
            try:
                quiz_session = QuizSession(
                    user_id=user_id,
                    category_id=self._category(db, category).id,
                    difficulty_id=self._difficulty(db, difficulty).id,
                    total_questions=total_questions,
                    score=0,
                )
                db.add(quiz_session)
                db.commit()
                logger.info(f"Quiz session created: {quiz_session.id}")
                return quiz_session.id
            except SQLAlchemyError:
                db.rollback()
                raise

    def ensure_question(self, question: TriviaQuestion) -> UUID:
        """
        Return the id of the stored question with the same text

        Inserts the question and its incorrect answers when missing.
        """
        with self.session_factory() as db:
            try:
                existing = db.query(Question).filter(
                    Question.question_text == question.question
                ).first()
                if existing:
                    return existing.id

                row = Question(
                    question_text=question.question,
                    correct_answer=question.correct_answer,
                    type=question.type,
                    category_id=self._category(db, question.category).id,
                    difficulty_id=self._difficulty(db, difficulty_label(question.difficulty)).id,
                )
                db.add(row)
                db.flush()

                for answer in question.incorrect_answers:
                    db.add(IncorrectAnswer(question_id=row.id, answer_text=answer))

                db.commit()
                logger.debug(f"Question stored: {row.id}")
                return row.id
            except SQLAlchemyError:
                db.rollback()
                raise

    def record_attempt(
        self,
        session_id: UUID,
        question_id: UUID,
        position: int,
        user_answer: str,
        is_correct: bool
    ) -> UUID:
        """Insert one attempt row"""
        with self.session_factory() as db:
            try:
                attempt = Attempt(
                    session_id=session_id,
                    question_id=question_id,
                    position=position,
                    user_answer=user_answer,
                    is_correct=is_correct,
                )
                db.add(attempt)
                db.commit()
                return attempt.id
            except SQLAlchemyError:
                db.rollback()
                raise

    def update_score(self, session_id: UUID, score: int) -> None:
        """Overwrite the stored score of a session"""
        with self.session_factory() as db:
            try:
                updated = db.query(QuizSession).filter(
                    QuizSession.id == session_id
                ).update({QuizSession.score: score})
                if not updated:
                    raise LookupError(f"Quiz session {session_id} not found")
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

    def _category(self, db: Session, name: str) -> Category:
        row = db.query(Category).filter(Category.name == name).first()
        if row is None:
            row = Category(name=name)
            db.add(row)
            db.flush()
        return row

    def _difficulty(self, db: Session, name: str) -> Difficulty:
        row = db.query(Difficulty).filter(Difficulty.name == name).first()
        if row is None:
            row = Difficulty(name=name)
            db.add(row)
            db.flush()
        return row


# Global instance
session_store = SessionStore()

"""
QuizSession model - one user's run through a question batch
"""
from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from quizmaster.database import Base
import uuid


class QuizSession(Base):
    """
    Quiz sessions table - category, difficulty, size and running score
    """
    __tablename__ = "quiz_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=True, index=True)  # NULL for anonymous runs
    category_id = Column(Integer, ForeignKey("categories.id"))
    difficulty_id = Column(Integer, ForeignKey("difficulties.id"))
    total_questions = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False, default=0)
    date_taken = Column(
        TIMESTAMP,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    category = relationship("Category")
    difficulty = relationship("Difficulty")

    def __repr__(self):
        return f"<QuizSession(id={self.id}, score={self.score}/{self.total_questions})>"

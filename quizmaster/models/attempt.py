"""
Attempt model - one submitted answer within a session
"""
from sqlalchemy import Column, Integer, Boolean, Text, TIMESTAMP, ForeignKey, Uuid, func
from datetime import datetime, timezone
from quizmaster.database import Base
import uuid


class Attempt(Base):
    """
    Attempts table - selected answer and correctness per question

    No uniqueness constraint on (session_id, question_id).
    """
    __tablename__ = "attempts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid, ForeignKey("quiz_sessions.id"), nullable=False, index=True)
    question_id = Column(Uuid, ForeignKey("questions.id"), nullable=False)
    position = Column(Integer, nullable=False)  # index within the session
    user_answer = Column(Text)
    is_correct = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        TIMESTAMP,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    def __repr__(self):
        return f"<Attempt(session_id={self.session_id}, position={self.position}, correct={self.is_correct})>"

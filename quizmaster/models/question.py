"""
Question model - trivia questions deduplicated by text
"""
from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from quizmaster.database import Base
import uuid


class Question(Base):
    """
    Questions table - decoded question text and its correct answer
    """
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_text = Column(Text, nullable=False, index=True)
    correct_answer = Column(Text, nullable=False)
    type = Column(String(20))  # multiple, boolean
    category_id = Column(Integer, ForeignKey("categories.id"))
    difficulty_id = Column(Integer, ForeignKey("difficulties.id"))
    created_at = Column(
        TIMESTAMP,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    incorrect_answers = relationship("IncorrectAnswer", back_populates="question")

    def __repr__(self):
        return f"<Question(id={self.id}, type={self.type})>"


class IncorrectAnswer(Base):
    """
    Incorrect answer options for a question
    """
    __tablename__ = "incorrect_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Uuid, ForeignKey("questions.id"), nullable=False, index=True)
    answer_text = Column(Text, nullable=False)

    question = relationship("Question", back_populates="incorrect_answers")

    def __repr__(self):
        return f"<IncorrectAnswer(question_id={self.question_id}, answer={self.answer_text})>"

"""
Database models package
"""
from quizmaster.models.lookup import Category, Difficulty
from quizmaster.models.question import Question, IncorrectAnswer
from quizmaster.models.quiz_session import QuizSession
from quizmaster.models.attempt import Attempt

__all__ = ["Category", "Difficulty", "Question", "IncorrectAnswer", "QuizSession", "Attempt"]

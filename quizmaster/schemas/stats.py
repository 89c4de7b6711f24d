"""
Pydantic schemas for history, review and statistics endpoints
"""
from pydantic import BaseModel
from typing import List
from uuid import UUID
from datetime import datetime


class HistoryItem(BaseModel):
    """One past quiz session"""
    id: UUID
    date: datetime
    category: str
    difficulty: str
    score: int
    total_questions: int
    percentage: int


class QuestionReview(BaseModel):
    """One answered question in a session review"""
    id: UUID
    question_text: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    type: str


class SessionReview(BaseModel):
    """Session detail with per-question review"""
    id: UUID
    date: datetime
    category: str
    difficulty: str
    score: int
    total_questions: int
    questions: List[QuestionReview]


class NamedCount(BaseModel):
    """Chart slice: label and count"""
    name: str
    value: int


class RecentScore(BaseModel):
    """Percentage score of a recent session"""
    date: str
    score: int


class UserStats(BaseModel):
    """Aggregate statistics for a user"""
    user_id: UUID
    total_quizzes: int
    average_score: int
    total_questions: int
    correct_answers: int
    category_breakdown: List[NamedCount]
    difficulty_breakdown: List[NamedCount]
    recent_scores: List[RecentScore]

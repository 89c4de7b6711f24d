"""
Pydantic schemas for AI feedback
"""
from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class FeedbackRequest(BaseModel):
    """Request feedback for a past session"""
    quiz_id: UUID


class FeedbackSummary(BaseModel):
    """Summary fields computed alongside the feedback"""
    category: str
    difficulty: str
    score: int
    total_questions: int
    percentage: int
    date_taken: Optional[datetime] = None


class FeedbackResponse(BaseModel):
    """Generated feedback text, returned unmodified"""
    feedback: str
    quiz_data: FeedbackSummary
    success: bool = True

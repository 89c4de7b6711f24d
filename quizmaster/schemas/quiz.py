"""
Pydantic schemas for quiz sessions, questions and answers
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Optional, Literal
from uuid import UUID

from quizmaster.config import settings


class QuizConfig(BaseModel):
    """Constraints for starting a quiz"""
    category: str = Field("any", pattern=r"^(any|\d+)$", description="Open Trivia DB category id or 'any'")
    difficulty: str = Field("any", pattern="^(any|easy|medium|hard)$", description="Question difficulty")
    type: str = Field("any", pattern="^(any|multiple|boolean)$", description="Question type")
    amount: int = Field(
        settings.DEFAULT_QUESTION_COUNT,
        ge=1,
        le=settings.MAX_QUESTIONS,
        description="Number of questions"
    )
    user_id: Optional[UUID] = Field(None, description="Authenticated user; omit for anonymous play")


class TriviaQuestion(BaseModel):
    """A decoded question from the question source"""
    question: str
    correct_answer: str
    incorrect_answers: List[str]
    type: str  # multiple, boolean
    category: str = "General"
    difficulty: str = "any"
    store_id: Optional[UUID] = None  # questions.id once mirrored


class QuestionView(BaseModel):
    """Current question as presented to the player"""
    index: int
    total_questions: int
    question: str
    answers: List[str]
    type: str
    category: str
    difficulty: str


class AttemptResult(BaseModel):
    """Outcome of submitting an answer"""
    index: int
    selected_answer: str
    correct_answer: str
    is_correct: bool
    score: int
    advance_after: float = settings.REVEAL_DELAY_SECONDS
    warnings: List[str] = []


class QuizSummary(BaseModel):
    """Result screen for a completed quiz"""
    score: int
    total_questions: int
    percentage: int
    message: str


class QuizState(BaseModel):
    """
    Serializable state of one quiz session

    `status` moves loading -> in_progress -> completed; `index` is only
    meaningful while in progress.
    """
    handle_id: UUID
    session_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    config: QuizConfig
    category_label: str = "Any Category"
    difficulty_label: str = "Any Difficulty"
    questions: List[TriviaQuestion] = []
    status: Literal["loading", "in_progress", "completed"] = "loading"
    index: int = 0
    score: int = 0
    results: Dict[int, AttemptResult] = {}


class AnswerRequest(BaseModel):
    """Answer submitted for the current question"""
    answer: str


class QuizStateResponse(BaseModel):
    """Snapshot returned by every quiz endpoint"""
    handle_id: UUID
    session_id: Optional[UUID] = None
    status: str
    index: int
    total_questions: int
    score: int
    category: str
    difficulty: str
    current_question: Optional[QuestionView] = None
    last_result: Optional[AttemptResult] = None
    summary: Optional[QuizSummary] = None
    warnings: List[str] = []

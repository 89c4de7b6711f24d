"""
Gemini AI service for quiz performance feedback
"""
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Dict, Any, List, Optional
import logging

from quizmaster.config import settings
from quizmaster.models import QuizSession
from quizmaster.services.stats_service import stats_service
from quizmaster.utils.scoring import percentage

logger = logging.getLogger(__name__)

# Configure Gemini API
genai.configure(api_key=settings.GEMINI_API_KEY)


SYSTEM_INSTRUCTION = (
    "You are a helpful educational assistant that provides constructive feedback on quiz "
    "performance. Be encouraging, specific, and actionable in your responses."
)

BUSY_MARKERS = ("too busy", "overloaded", "resource exhausted", "rate limit")


class FeedbackError(Exception):
    """Base exception for feedback generation"""
    pass


class SessionNotFound(FeedbackError):
    """No quiz session with the requested id"""
    pass


class QuestionsNotFound(FeedbackError):
    """The session has no recorded attempts or question rows"""
    pass


class UpstreamBusy(FeedbackError):
    """The model provider is overloaded; retry after a delay"""

    def __init__(self, message: str, retry_after: int = 30):
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamError(FeedbackError):
    """Any other model provider failure"""
    pass


class FeedbackService:
    """Builds a feedback prompt from a stored session and sends it to Gemini"""

    def __init__(self, model=None):
        self._model = model

    @property
    def model(self):
        if self._model is None:
            self._model = genai.GenerativeModel(
                settings.GEMINI_MODEL,
                system_instruction=SYSTEM_INSTRUCTION
            )
        return self._model

    def generate_feedback(self, db: Session, session_id: UUID) -> Dict[str, Any]:
        """
        Generate feedback for a completed session

        Args:
            db: Database session
            session_id: Quiz session UUID

        Returns:
            Dictionary with the unmodified feedback text and summary fields

        Raises:
            SessionNotFound, QuestionsNotFound, UpstreamBusy, UpstreamError
        """
        quiz_session, attempts, results = stats_service.load_session_results(db, session_id)

        if quiz_session is None:
            raise SessionNotFound(f"Quiz {session_id} not found")
        if not attempts:
            raise QuestionsNotFound(f"Quiz {session_id} has no recorded answers")
        if not results:
            raise QuestionsNotFound(f"Question details for quiz {session_id} not found")

        summary = self._summary(quiz_session)
        prompt = self.build_prompt(
            summary,
            results,
            category_name=quiz_session.category.name if quiz_session.category else None,
            difficulty_name=quiz_session.difficulty.name if quiz_session.difficulty else None,
        )

        logger.info(f"Requesting feedback for quiz {session_id} ({len(results)} questions)")
        feedback = self._complete(prompt)

        return {
            "feedback": feedback,
            "quiz_data": summary,
            "success": True,
        }

    def build_prompt(
        self,
        summary: Dict[str, Any],
        results: List[Dict[str, Any]],
        category_name: Optional[str] = None,
        difficulty_name: Optional[str] = None
    ) -> str:
        """
        Render the fixed feedback template

        The results block uses the summary labels; the closing checklist
        falls back to generic wording when the session has no category or
        difficulty row.
        """
        date_taken = summary["date_taken"]
        date_text = f"{date_taken.month}/{date_taken.day}/{date_taken.year}" if date_taken else "Unknown"

        question_blocks = "\n".join(
            f"""
Question {i + 1}: {r['question_text']}
Correct Answer: {r['correct_answer']}
User Answer: {r['user_answer']}
Result: {'Correct ✓' if r['is_correct'] else 'Incorrect ✗'}
Question Type: {r['type']}"""
            for i, r in enumerate(results)
        )

        return f"""Please analyze this quiz performance and provide constructive feedback:

Quiz Results:
- Category: {summary['category']}
- Difficulty: {summary['difficulty']}
- Score: {summary['score']}/{summary['total_questions']}
- Percentage: {summary['percentage']}%
- Date Taken: {date_text}

Questions and Answers:
{question_blocks}

Please provide personalized feedback that includes:
1. Overall performance assessment for this {category_name or 'quiz'} quiz
2. Specific areas where the user excelled
3. Areas that need improvement based on incorrect answers
4. Learning recommendations specific to the {category_name or 'subject'} category
5. Tips for tackling {difficulty_name or 'this difficulty'} level questions
6. Encouragement and suggested next steps

Keep the feedback constructive, encouraging, and actionable. Make it personal and specific to their performance."""

    def _summary(self, quiz_session: QuizSession) -> Dict[str, Any]:
        return {
            "category": quiz_session.category.name if quiz_session.category else "General",
            "difficulty": quiz_session.difficulty.name if quiz_session.difficulty else "Unknown",
            "score": quiz_session.score,
            "total_questions": quiz_session.total_questions,
            "percentage": percentage(quiz_session.score, quiz_session.total_questions),
            "date_taken": quiz_session.date_taken,
        }

    def _complete(self, prompt: str) -> str:
        """Single generation call; failures are classified, never retried"""
        try:
            response = self.model.generate_content(
                [{"role": "user", "parts": [prompt]}],
                generation_config=genai.GenerationConfig(
                    max_output_tokens=settings.FEEDBACK_MAX_TOKENS,
                    temperature=settings.FEEDBACK_TEMPERATURE,
                ),
            )
            return response.text
        except (
            google_exceptions.ResourceExhausted,
            google_exceptions.ServiceUnavailable,
            google_exceptions.TooManyRequests,
        ) as e:
            logger.warning(f"Feedback model busy: {str(e)}")
            raise UpstreamBusy(str(e)) from e
        except Exception as e:
            if self._looks_busy(e):
                logger.warning(f"Feedback model busy: {str(e)}")
                raise UpstreamBusy(str(e)) from e
            logger.error(f"Failed to generate feedback: {str(e)}")
            raise UpstreamError(str(e)) from e

    @staticmethod
    def _looks_busy(error: Exception) -> bool:
        message = str(error).lower()
        return any(marker in message for marker in BUSY_MARKERS)


# Global instance
feedback_service = FeedbackService()

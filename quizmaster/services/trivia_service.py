"""
Open Trivia DB client - question batches and category listing
"""
import base64
import binascii
import logging
from typing import List, Dict, Any, Optional

import requests
from pydantic import ValidationError

from quizmaster.config import settings
from quizmaster.schemas.quiz import QuizConfig, TriviaQuestion
from quizmaster.utils.cache import cache_service

logger = logging.getLogger(__name__)


class TriviaServiceError(Exception):
    """Raised when the question source fails or returns an unusable batch"""
    pass


# Open Trivia DB response_code values
RESPONSE_CODES = {
    0: "Success",
    1: "No results: not enough questions for the query",
    2: "Invalid parameter",
    3: "Session token not found",
    4: "Session token exhausted",
    5: "Rate limit exceeded",
}

CATEGORY_CACHE_KEY = "trivia:categories"


class TriviaService:
    """Client for the Open Trivia DB HTTP API"""

    def __init__(
        self,
        http: Optional[requests.Session] = None,
        api_url: Optional[str] = None,
        category_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.http = http or requests.Session()
        self.api_url = api_url or settings.TRIVIA_API_URL
        self.category_url = category_url or settings.TRIVIA_CATEGORY_URL
        self.timeout = timeout or settings.TRIVIA_TIMEOUT

    def build_params(self, config: QuizConfig) -> Dict[str, Any]:
        """
        Build query parameters for a question batch

        "any" filters are omitted; answers are requested base64-encoded so
        no HTML entities reach the client.
        """
        params = {"amount": config.amount, "encode": "base64"}

        if config.category != "any":
            params["category"] = config.category
        if config.difficulty != "any":
            params["difficulty"] = config.difficulty
        if config.type != "any":
            params["type"] = config.type

        return params

    def fetch_questions(self, config: QuizConfig) -> List[TriviaQuestion]:
        """
        Fetch and decode a question batch

        Raises:
            TriviaServiceError: transport failure, non-zero response_code
                or a malformed payload
        """
        params = self.build_params(config)
        logger.info(f"Fetching questions from {self.api_url} with {params}")

        try:
            response = self.http.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Question source request failed: {str(e)}")
            raise TriviaServiceError(f"Failed to fetch questions: {str(e)}") from e

        if not isinstance(payload, dict):
            raise TriviaServiceError("Malformed question payload: expected an object")

        code = payload.get("response_code")
        if code != 0:
            reason = RESPONSE_CODES.get(code, f"Unknown response code {code}")
            logger.warning(f"Question source returned code {code}: {reason}")
            raise TriviaServiceError(reason)

        try:
            questions = [self._decode_question(item) for item in payload.get("results", [])]
        except (KeyError, TypeError, binascii.Error, UnicodeDecodeError, ValidationError) as e:
            logger.error(f"Malformed question payload: {str(e)}")
            raise TriviaServiceError(f"Malformed question payload: {str(e)}") from e

        logger.info(f"Fetched {len(questions)} questions")
        return questions

    def fetch_categories(self) -> List[Dict[str, Any]]:
        """
        List trivia categories as [{"id": 9, "name": "General Knowledge"}, ...]

        Cached in Redis when available.
        """
        cached = cache_service.get(CATEGORY_CACHE_KEY)
        if cached:
            return cached

        try:
            response = self.http.get(self.category_url, timeout=self.timeout)
            response.raise_for_status()
            categories = response.json()["trivia_categories"]
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Failed to fetch categories: {str(e)}")
            raise TriviaServiceError(f"Failed to fetch categories: {str(e)}") from e

        cache_service.set(CATEGORY_CACHE_KEY, categories, ttl=settings.CATEGORY_CACHE_TTL)
        return categories

    def _decode_question(self, item: Dict[str, Any]) -> TriviaQuestion:
        return TriviaQuestion(
            question=self._decode(item["question"]),
            correct_answer=self._decode(item["correct_answer"]),
            incorrect_answers=[self._decode(a) for a in item["incorrect_answers"]],
            type=self._decode(item["type"]),
            category=self._decode(item.get("category", "")) or "General",
            difficulty=self._decode(item.get("difficulty", "")) or "any",
        )

    @staticmethod
    def _decode(value: str) -> str:
        return base64.b64decode(value, validate=True).decode("utf-8")


# Global instance
trivia_service = TriviaService()

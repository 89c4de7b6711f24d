"""
Trivia category listing
"""
from fastapi import APIRouter, HTTPException
from typing import List, Dict, Any
import logging

from quizmaster.services.trivia_service import trivia_service, TriviaServiceError

router = APIRouter(prefix="/api/categories", tags=["categories"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Dict[str, Any]])
def list_categories():
    """Categories offered by the question source"""
    try:
        return trivia_service.fetch_categories()
    except TriviaServiceError as e:
        raise HTTPException(
            status_code=502,
            detail={"error": "upstream_error", "message": f"Failed to fetch categories: {str(e)}"}
        )

"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Gemini API
    GEMINI_API_KEY: str
    GEMINI_MODEL: str = "gemini-1.5-flash"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"

    # Open Trivia DB
    TRIVIA_API_URL: str = "https://opentdb.com/api.php"
    TRIVIA_CATEGORY_URL: str = "https://opentdb.com/api_category.php"
    TRIVIA_TIMEOUT: float = 10.0

    # Application
    APP_NAME: str = "QuizMaster"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Quiz Settings
    DEFAULT_QUESTION_COUNT: int = 10
    MAX_QUESTIONS: int = 50
    REVEAL_DELAY_SECONDS: float = 1.5  # pause before the UI advances
    CATEGORY_CACHE_TTL: int = 86400  # 1 day

    # AI feedback
    FEEDBACK_MAX_TOKENS: int = 500
    FEEDBACK_TEMPERATURE: float = 0.7

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

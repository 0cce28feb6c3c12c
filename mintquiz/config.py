"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "Quiz Mint Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    ALLOWED_ORIGIN_REGEX: Optional[str] = r"https://.*\.vercel\.app"

    # Persistence
    ATTEMPTS_FILE: str = "attempts.json"

    # Trivia provider (OpenTDB)
    TRIVIA_API_URL: str = "https://opentdb.com/api.php"
    TRIVIA_AMOUNT: int = 10
    TRIVIA_CATEGORY: int = 18  # Science: Computers
    TRIVIA_DIFFICULTY: str = "medium"
    TRIVIA_TYPE: str = "multiple"
    TRIVIA_TIMEOUT_SECONDS: float = 5.0

    # Quiz Settings
    QUIZ_SIZE: int = 5
    PASSING_SCORE: float = 80.0
    ATTEMPT_COOLDOWN_HOURS: int = 24
    EXPOSE_CORRECT_ANSWER: bool = False

    # Rate Limiting (0 disables the window)
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Logging
    LOG_LEVEL: str = "INFO"


# Global settings instance
settings = Settings()

"""Configuration and environment settings"""

from pydantic_settings import BaseSettings
from typing import Optional, List


class Settings(BaseSettings):
    """Application configuration"""

    # LLM Configuration
    ANTHROPIC_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None  # Gemini API key

    # LLM Provider Priority (comma-separated: openai,anthropic,gemini)
    LLM_PROVIDER_PRIORITY: str = "openai,anthropic,gemini"

    # LLM Model Selection
    ANTHROPIC_MODEL: str = "claude-sonnet-4-20250514"
    OPENAI_MODEL: str = "gpt-4o-mini"
    GEMINI_MODEL_ID: str = "gemini-2.5-flash"

    # LLM Settings
    LLM_MAX_TOKENS: int = 1024
    LLM_MAX_RETRIES: int = 3
    LLM_RETRY_DELAY: float = 2.0  # seconds
    LLM_TIMEOUT: float = 60.0  # seconds

    # Assistant
    FORMULA_MAX_TOKENS: int = 300
    INSIGHT_MAX_TOKENS: int = 500
    CHAT_MAX_TOKENS: int = 800
    INSIGHT_SAMPLE_SIZE: int = 20
    CHAT_CONTEXT_CELLS: int = 20

    # Grid
    GRID_ROWS: int = 50
    GRID_COLS: int = 26

    # Display (defaults match en-US rendering)
    NUMBER_GROUP_SEPARATOR: str = ","
    NUMBER_DECIMAL_SEPARATOR: str = "."
    NUMBER_MAX_FRACTION_DIGITS: int = 3
    DATE_DISPLAY_FORMAT: str = "{month}/{day}/{year}"

    # Authentication
    JWT_SECRET_KEY: Optional[str] = None  # Auto-generated if not set
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRY_HOURS: int = 1

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def get_llm_provider_priority(self) -> List[str]:
        """Get LLM provider priority list"""
        return [p.strip() for p in self.LLM_PROVIDER_PRIORITY.split(",")]


settings = Settings()

"""
Application configuration and environment settings.
"""
from decimal import Decimal
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Wanderlust"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./wanderlust.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Ledger defaults for new trips
    DEFAULT_CURRENCY: str = "USD"
    DEFAULT_CATEGORIES: Union[List[str], str] = ["Food", "Transport", "Accommodation", "Activity", "Other"]
    DEFAULT_FOLDER_NAME: str = "General"  # Seeded folder holding expenses with no folder

    @field_validator("DEFAULT_CATEGORIES", mode="before")
    @classmethod
    def parse_default_categories(cls, v):
        """Parse DEFAULT_CATEGORIES from comma-separated string or list."""
        if isinstance(v, str):
            return [category.strip() for category in v.split(",") if category.strip()]
        return v

    # Settlement
    SETTLEMENT_EPSILON: Decimal = Decimal("0.01")  # Balances within this of zero count as settled

    # File Upload
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png", "image/jpg", "image/webp"]

    # Gemini (itinerary, insights, receipt and flight email extraction)
    GEMINI_API_KEY: str = ""  # Set via .env file
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_VISION_MODEL: str = "gemini-2.5-flash-image"
    GEMINI_TIMEOUT: float = 60.0  # Seconds; grounded search calls are slow

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

from pydantic_settings import BaseSettings
from typing import Any, Dict, List
from dotenv import load_dotenv
import os

load_dotenv()


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "*")

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # LLM (any OpenAI-compatible chat completions endpoint)
    LLM_API_KEY: str = os.getenv("LLM_API_KEY", os.getenv("NOVITA_AI_API_KEY", ""))
    LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://api.novita.ai/v3/openai")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "meta-llama/llama-3.1-8b-instruct")
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", 300))
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", 0.3))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", 15.0))

    @property
    def has_llm_key(self) -> bool:
        return bool(self.LLM_API_KEY and self.LLM_API_KEY.strip())

    # Feature flags
    ENABLE_SENTIMENT_ANALYSIS: bool = (
        os.getenv("ENABLE_SENTIMENT_ANALYSIS", "true").lower() != "false"
    )
    ENABLE_AI_SUGGESTIONS: bool = (
        os.getenv("ENABLE_AI_SUGGESTIONS", "true").lower() != "false"
    )
    ENABLE_SCREEN_TIME_TRACKING: bool = (
        os.getenv("ENABLE_SCREEN_TIME_TRACKING", "true").lower() != "false"
    )
    NOTIFICATIONS_ENABLED: bool = (
        os.getenv("NOTIFICATIONS_ENABLED", "true").lower() != "false"
    )
    DEMO_MODE: bool = os.getenv("DEMO_MODE", "false").lower() == "true"

    # Storage
    STORAGE_PATH: str = os.getenv("STORAGE_PATH", "data/microhabit.json")
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    REDIS_NAMESPACE: str = os.getenv("REDIS_NAMESPACE", "microhabit")

    # Reminders
    REMINDER_TIMEZONE: str = os.getenv("REMINDER_TIMEZONE", "UTC")

    def config_status(self) -> Dict[str, Any]:
        """Flags for the settings screen. Never includes secrets."""
        return {
            "app_environment": self.ENVIRONMENT,
            "debug_mode": self.DEBUG,
            "has_llm_key": self.has_llm_key,
            "llm_model": self.LLM_MODEL,
            "sentiment_analysis_enabled": self.ENABLE_SENTIMENT_ANALYSIS,
            "ai_suggestions_enabled": self.ENABLE_AI_SUGGESTIONS,
            "screen_time_tracking_enabled": self.ENABLE_SCREEN_TIME_TRACKING,
            "notifications_enabled": self.NOTIFICATIONS_ENABLED,
            "storage_backend": "redis" if self.REDIS_URL else "json_file",
        }

    def validate_configuration(self) -> List[str]:
        errors = []

        if self.ENABLE_SENTIMENT_ANALYSIS and not self.has_llm_key:
            errors.append(
                "Sentiment analysis is enabled but LLM_API_KEY is not set; keyword matching will be used"
            )

        if self.ENABLE_AI_SUGGESTIONS and not self.has_llm_key:
            errors.append(
                "AI suggestions are enabled but LLM_API_KEY is not set; rule-based suggestions will be used"
            )

        return errors

    class Config:
        env_file = [".env.local", ".env"]
        case_sensitive = True
        extra = "ignore"


# Create settings instance
settings = Settings()

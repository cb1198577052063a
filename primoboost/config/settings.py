"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "PrimoBoost AI"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # LLM gateway (OpenAI-compatible chat completions)
    llm_api_url: str = "https://api.agentrouter.ai/v1/chat/completions"
    llm_api_key: str = ""
    llm_default_model: str = "openai/gpt-5"
    llm_question_model: str = "google/gemini-2.0-flash-exp:free"
    llm_linkedin_model: str = "deepseek/deepseek-r1:free"
    llm_proxy_model: str = "gpt-4o"
    llm_referer: str = "https://primoboost.ai"
    llm_app_title: str = "PrimoBoost AI"
    llm_timeout_seconds: float = 60.0
    llm_proxy_timeout_seconds: float = 30.0

    # Retry policy for LLM calls
    llm_max_retries: int = 3
    llm_initial_retry_delay_seconds: float = 1.0
    max_input_length: int = 50000

    # Langfuse observability
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # Hosted database (in-memory when no URL is configured)
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Payments
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_api_url: str = "https://api.razorpay.com"
    payment_currency: str = "INR"

    # Seasonal offer
    offer_coupon_code: str = "diwali"
    offer_discount_percent: int = 90
    offer_end_at: str = "2025-10-25T23:59:59+05:30"

    # Interview settings
    interview_question_count: int = 10
    silence_threshold_seconds: float = 10.0  # auto-submit after this much silence
    min_speech_seconds: float = 3.0
    volume_threshold_db: float = -50.0
    silence_poll_interval_seconds: float = 0.1
    max_resume_bytes: int = 5 * 1024 * 1024

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def database_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @property
    def payment_gateway_configured(self) -> bool:
        return bool(self.razorpay_key_id and self.razorpay_key_secret)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

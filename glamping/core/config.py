# File: glamping/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
import os


class Settings(BaseSettings):
    # ---------------------------
    # Meta / Pydantic settings
    # ---------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore unexpected env vars instead of erroring
    )

    # ---------------------------
    # Local mirror (SQLite by default)
    # ---------------------------
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./glamping.db")

    # ---------------------------
    # API / Project
    # ---------------------------
    API_V1_STR: str = os.getenv("API_V1_STR", "/api/v1")
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Glamping Resort Admin")

    # ---------------------------
    # Environment / Logging
    # ---------------------------
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")  # development | staging | production
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # ---------------------------
    # Remote basket (Pantry)
    # ---------------------------
    PANTRY_ID: Optional[str] = os.getenv("PANTRY_ID")
    PANTRY_BASKET: str = os.getenv("PANTRY_BASKET", "glamping_data_v1")
    PANTRY_BASE_URL: str = os.getenv("PANTRY_BASE_URL", "https://getpantry.cloud/apiv1/pantry")
    REMOTE_SYNC_ENABLED: bool = os.getenv("REMOTE_SYNC_ENABLED", "true").lower() == "true"
    REMOTE_TIMEOUT_SECONDS: int = int(os.getenv("REMOTE_TIMEOUT_SECONDS", "15"))

    # ---------------------------
    # Azure OpenAI
    # ---------------------------
    AZURE_OPENAI_ENDPOINT: Optional[str] = os.getenv("AZURE_OPENAI_ENDPOINT")
    AZURE_OPENAI_API_KEY: Optional[str] = os.getenv("AZURE_OPENAI_API_KEY")
    AZURE_OPENAI_DEPLOYMENT_NAME: str = os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-4o")
    AZURE_OPENAI_API_VERSION: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview")

    # ---------------------------
    # Room engine
    # ---------------------------
    AUTO_CHECKOUT_HOUR: int = int(os.getenv("AUTO_CHECKOUT_HOUR", "11"))
    AUTO_SWEEP_INTERVAL_SECONDS: int = int(os.getenv("AUTO_SWEEP_INTERVAL_SECONDS", "60"))
    SAVE_DEBOUNCE_SECONDS: float = float(os.getenv("SAVE_DEBOUNCE_SECONDS", "1.0"))
    DEFAULT_BLANKET_STOCK: int = int(os.getenv("DEFAULT_BLANKET_STOCK", "35"))
    SCHEDULER_ENABLED: bool = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"

    # ---------------------------
    # Derived / Convenience
    # ---------------------------
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def pantry_url(self) -> Optional[str]:
        """
        Return the basket URL, or None when remote sync cannot be used.
        """
        if not self.REMOTE_SYNC_ENABLED or not self.PANTRY_ID:
            return None
        return f"{self.PANTRY_BASE_URL.rstrip('/')}/{self.PANTRY_ID}/basket/{self.PANTRY_BASKET}"


settings = Settings()

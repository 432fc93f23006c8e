# product_form/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    ENV: str = "development"

    # validation limits
    MAX_IMAGE_BYTES: int = 5_000_000
    IMAGE_ACCEPT: str = "image/*"  # advisory only, never enforced on selection

    # submission / async timing (seconds)
    SUBMIT_DELAY_SECONDS: float = 2.0  # simulated network call
    SUBMIT_TIMEOUT_SECONDS: float = 30.0
    IMAGE_READ_TIMEOUT_SECONDS: float = 10.0
    TOAST_AUTO_CLOSE_SECONDS: float = 5.0

    STATE_HISTORY_LIMIT: int = 50

    # comma separated, e.g. CORS_ORIGINS=http://localhost:3000,https://shop.example.com
    CORS_ORIGINS: str = ""

    # Example .env:
    # SUBMIT_DELAY_SECONDS=0.5
    # MAX_IMAGE_BYTES=2000000

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()


settings = get_settings()

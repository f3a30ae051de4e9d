"""Module: config."""

from pydantic_settings import BaseSettings

# Centralized runtime configuration loaded from environment variables.
class Settings(BaseSettings):
    # SQLAlchemy connection string. Unset means the store is unconfigured:
    # reads come back empty and writes fail with "Changes were not saved."
    database_url: str | None = None
    log_level: str = "INFO"
    # Origins allowed to call the API from a browser.
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    # Avatars and pill photos are stored inline (data URLs), so cap their size.
    max_avatar_bytes: int = 2 * 1024 * 1024
    max_image_bytes: int = 2 * 1024 * 1024
    # How many fresh care codes to draw before giving up on a collision.
    patient_code_attempts: int = 5

    # Configure pydantic-settings to also load values from local .env file.
    class Config:
        env_file = ".env"

# Global settings instance imported by app modules at runtime.
settings = Settings()

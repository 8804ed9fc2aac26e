from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API Keys
    GEMINI_API_KEY: str = ""

    # Model settings
    GEMINI_MODEL: str = "gemini-2.5-flash"
    REQUEST_TIMEOUT_SECONDS: float = 120.0

    # Upload limits
    MAX_VIDEO_SIZE_MB: int = 20

    # Brief editor
    SYNC_DEBOUNCE_SECONDS: float = 1.5

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True
    )

    @property
    def max_video_size_bytes(self) -> int:
        return self.MAX_VIDEO_SIZE_MB * 1024 * 1024


# Create global settings instance
settings = Settings()

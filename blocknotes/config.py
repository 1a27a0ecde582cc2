"""Environment configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early to ensure environment variables are set
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    storage_path: Path = Path(".blocknotes")
    storage_key: str = "pages"
    undo_window_seconds: float = Field(default=4.0, gt=0)
    # 0 = Monday ... 6 = Sunday, same numbering as the calendar module
    first_weekday: int = Field(default=6, ge=0, le=6)
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse allowed origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration settings"""

    # App
    environment: Literal["development", "production"] = "development"
    frontend_url: str

    # API
    api_v1_prefix: str = "/api/v1"

    # Supabase
    supabase_url: str
    supabase_key: str
    tracks_bucket: str = "tracks"

    # Security
    secret_key: str
    access_token_expire_hours: int = 24
    password_hash_rounds: int = 12

    # Uploads
    max_upload_mb: int = 50
    media_probe_timeout: float = 5.0

    # Player
    waveform_bar_count: int = 100
    max_waveform_bars: int = 1000
    default_volume: float = 0.7
    skip_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"

    @property
    def allowed_cors_origins(self) -> list[str]:
        """CORS allowed origins"""
        return [self.frontend_url]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def debug(self) -> bool:
        return self.environment == "development"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()

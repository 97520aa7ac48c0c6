# beautyshelf/config.py
from pathlib import Path
from typing import List, Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # "file" keeps products in a CSV table and photos on disk (local dev, tests);
    # "supabase" talks to the hosted Postgres table and storage buckets.
    DATA_BACKEND: str = "file"
    DATA_DIR: Path = Path("data")
    PRODUCTS_FILE: str = "products.csv"
    STORAGE_DIR: Path = Path("storage")
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None

    # Supabase signs session tokens with the project's JWT secret
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    OPENAI_API_KEY: Optional[str] = None
    AI_MODEL: str = "gpt-4o-mini"
    AI_TEMPERATURE: float = 0.7
    AI_TIMEOUT_SECONDS: float = 120.0

    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    DEFAULT_BUCKET: str = "product-photos"
    PHOTO_DEBUG: Optional[bool] = None  # defaults to ENV == "development"

    CORS_ORIGINS: str = ""

    # Example .env:
    # DATA_BACKEND=supabase
    # SUPABASE_URL=https://xyzcompany.supabase.co
    # SUPABASE_KEY=<anon key>
    # JWT_SECRET=<project jwt secret>

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.ENV.strip().lower() == "development"

    @property
    def photo_debug_enabled(self) -> bool:
        if self.PHOTO_DEBUG is None:
            return self.is_development
        return bool(self.PHOTO_DEBUG)

    @property
    def ai_available(self) -> bool:
        return bool((self.OPENAI_API_KEY or "").strip())

    @property
    def cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return origins or ["http://localhost:3000"]


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()

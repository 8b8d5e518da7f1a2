from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional, Union

from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Supabase
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    PHOTOS_BUCKET: str = "photos"
    PHOTOS_TABLE: str = "photos"

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:5173,http://127.0.0.1:5173"
    SENTRY_DSN: Optional[str] = None

    # Gallery
    PAGE_SIZE: int = 9
    UPLOAD_CACHE_CONTROL: str = "3600"
    MAX_UPLOAD_SIZE_MB: int = 25

    # Transport
    HTTP_TIMEOUT: float = 10.0

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("SUPABASE_URL", "SUPABASE_ANON_KEY", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip().strip('"').strip("'")
            return v or None
        return v

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

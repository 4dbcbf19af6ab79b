from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "chartdata - Chart Data Adapter Service"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "*"

    # Adapters
    ROW_ERROR_POLICY: str = "strict"  # "strict" (warn + skip) or "lenient" (silent skip)
    VALIDATION_SAMPLE_SIZE: int = 10
    FIELD_SAMPLE_SIZE: int = 20
    TYPE_SAMPLE_SIZE: int = 100
    MAX_NESTED_DEPTH: int = 4

    # Optional upper bound on records accepted by the HTTP layer
    MAX_RECORDS: Optional[int] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "ID Transportes Deliveries"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 3003

    DATABASE_URL: str = "postgresql+asyncpg://localhost:5432/id_transportes"
    DATABASE_SYNC_URL: str = ""
    DB_POOL_SIZE: int = 15
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_RECYCLE: int = 600
    DB_SSL: bool = False

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_PRIVATE_KEY_PATH: Optional[str] = None
    JWT_PUBLIC_KEY_PATH: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    ALERT_CACHE_SIZE: int = 50
    ALERT_LIST_MAX: int = 100

    CORS_ORIGINS: str = "http://localhost:8080"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]

    @property
    def uses_asymmetric_jwt(self) -> bool:
        return self.JWT_ALGORITHM.upper().startswith(("RS", "ES"))


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

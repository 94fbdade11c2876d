# app/core/config.py
from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    url: str
    timeout_seconds: float = 5.0
    echo: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "MedCair API"
    LOG_LEVEL: str = "INFO"

    JWT_SECRET: str = Field("medcair-secret-key-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # DATABASE_URL wins over the DB_* parts (tests use sqlite+aiosqlite)
    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "medcair"
    DB_PASSWORD: str = ""
    DB_NAME: str = "medcair"
    DB_TIMEOUT_SECONDS: float = 5.0
    DB_ECHO: bool = False

    REQUEST_TIMEOUT_SECONDS: float = 10.0

    SLOT_WINDOW_DAYS: int = 7
    FOLLOWUP_OFFSET_DAYS: int = 30

    CORS_ORIGINS: list[str] = ["*"]
    SEED_SAMPLE_DATA: bool = False

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")

    @property
    def database(self) -> DatabaseConfig:
        return DatabaseConfig(
            url=self.async_database_url,
            timeout_seconds=self.DB_TIMEOUT_SECONDS,
            echo=self.DB_ECHO,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

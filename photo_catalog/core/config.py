from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schema.sql"


class Settings(BaseSettings):
    DATABASE_PATH: str = "photos.db"
    SCHEMA_PATH: str = str(DEFAULT_SCHEMA_PATH)
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()

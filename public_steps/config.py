from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database Configuration
    # Security: Read from .env, never hardcode credentials here
    DATABASE_URL: str
    SQL_ECHO: bool = False # Never enable in production, it logs bound parameters

    # Duplication
    # Appended to the source group's name when a public step group is copied
    COPY_SUFFIX: str = "_copy"

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_STORAGE_DIR = Path.home() / ".gitmaster"


class Settings(BaseSettings):
    AUTHOR: str = "You"
    DEFAULT_BRANCH: str = "main"

    README_PATH: str = "README.md"
    README_CONTENT: str = "# My Project\n\nWelcome to my Git repository!"

    HASH_LENGTH: int = 7

    MAX_SNAPSHOT_SIZE: int = 5 * 1024 * 1024
    STORAGE_PREFIX: str = "gitmaster-level-"
    STORAGE_DIR: Path = _DEFAULT_STORAGE_DIR

    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="GITMASTER_", env_file=".env")


@lru_cache
def get_settings() -> Settings:
    return Settings()

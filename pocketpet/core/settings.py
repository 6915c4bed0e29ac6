# pocketpet/core/settings.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Pocket Pet"
    API_V1_STR: str = "/api/v1"

    DECAY_TICK_INTERVAL_SECONDS: float = 30  # Decay scheduler period
    AUTOSAVE_INTERVAL_SECONDS: float = 30

    STORAGE_BACKEND: str = "json"  # json | memory | mongo
    SAVE_PATH: str = "data/pet_save.json"
    STORAGE_KEY: str = "tamagotchi-pet"

    MONGO_CONNECTION_URI: Optional[str] = None
    MONGO_DATABASE_NAME: str = "pocketpet"

    DEFAULT_PET_NAME: str = "Buddy"
    GAME_MINUTES_PER_SECOND: float = 1.0

    LOG_LEVEL: str = "INFO"  # Default log level
    ENV_TYPE: str = "dev"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore",
                                      case_sensitive=False)  # case_sensitive=False for env vars


settings = Settings()

# File: /viewengine/core/config.py | Version: 1.0 | Title: Central Settings for the Saved View Engine (Pydantic v2)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Database ---
    DATABASE_URL: str = "sqlite:///./viewengine.db"

    # --- Security / JWT ---
    SECRET_KEY: str = "CHANGE_ME_FOR_DEV_ONLY"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- API behavior toggles ---
    ENABLE_STD_ERRORS: bool = (
        False  # set True in .env to enable standardized error responses
    )

    # --- Filter ceilings ---
    MAX_FILTER_GROUPS: int = 2
    MAX_CONDITIONS_PER_GROUP: int = 20

    # --- Columns & paging ---
    MAX_FROZEN_COLUMNS: int = 3
    DEFAULT_FROZEN_COLUMNS: int = 1
    DEFAULT_PAGE_SIZE: int = 25
    MAX_PAGE_SIZE: int = 200

    # --- Controller timing ---
    FILTER_DEBOUNCE_SECONDS: float = 0.3
    RECORD_COUNT_TTL_SECONDS: int = 300

    # --- Client gateway ---
    API_BASE_URL: str = "http://localhost:8000"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # v2-style config
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()

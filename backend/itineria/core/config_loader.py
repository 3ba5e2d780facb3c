# backend/itineria/core/config_loader.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    GOOGLE_MAPS_API_KEY: str = ""
    OPENAI_API_KEY: str = ""

    places_base_url: str = "https://maps.googleapis.com/maps/api/place"
    openai_base_url: str = "https://api.openai.com/v1"
    chat_model: str = "gpt-3.5-turbo"

    nearby_radius: int = 100
    photo_max_width: int = 400
    request_timeout: float = 15.0

    DB_PATH: str = "data.sqlite3"
    PROFILE_PATH: str = "profile.json"

    log_dir: str = ""
    log_level: str = "DEBUG"

    timezone: str = "Australia/Melbourne"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()

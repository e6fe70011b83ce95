# Path: anki_lang/core/config.py
from pathlib import Path
from typing import Dict, Optional

import typer
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "anki-lang"

# File key -> environment variable
ENV_VARS: Dict[str, str] = {
    "openai_api_key": "OPENAI_API_KEY",
    "openai_model": "OPENAI_MODEL",
    "openai_base_url": "OPENAI_BASE_URL",
    "anki_connect_url": "ANKI_CONNECT_URL",
    "hindi_deck": "HINDI_DECK",
    "english_deck": "ENGLISH_DECK",
    "temperature": "OPENAI_TEMPERATURE",
    "tags": "ANKI_TAGS",
}


class Settings(BaseSettings):
    PROJECT_NAME: str = "Anki Lang"

    # Raw environment layer, parsed later by the resolver
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    ANKI_CONNECT_URL: Optional[str] = None
    HINDI_DECK: Optional[str] = None
    ENGLISH_DECK: Optional[str] = None
    OPENAI_TEMPERATURE: Optional[str] = None
    ANKI_TAGS: Optional[str] = None

    # Paths
    APP_DIR: Path = Path(typer.get_app_dir(APP_NAME))
    CONFIG_FILE: Path = APP_DIR / "config.toml"
    LOG_DIR: Path = APP_DIR / "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def environment_layer(self) -> Dict[str, str]:
        """Environment variables that are set to something non-blank."""
        layer = {}
        for env_name in ENV_VARS.values():
            value = getattr(self, env_name)
            if value is not None and value.strip():
                layer[env_name] = value
        return layer


settings = Settings()

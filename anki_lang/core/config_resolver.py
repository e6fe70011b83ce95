# Path: anki_lang/core/config_resolver.py
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from anki_lang.adapters.anki_connect import DEFAULT_ANKI_CONNECT_URL
from anki_lang.adapters.openai_client import DEFAULT_BASE_URL, DEFAULT_MODEL
from anki_lang.core.config import ENV_VARS
from anki_lang.core.errors import ConfigError
from anki_lang.models.config import AppConfig

__all__ = ["DEFAULTS", "FIELD_KEYS", "resolve_config"]

logger = logging.getLogger(__name__)

# Built-in layer, keyed like the config file
DEFAULTS: Dict[str, Any] = {
    "openai_model": DEFAULT_MODEL,
    "openai_base_url": DEFAULT_BASE_URL,
    "anki_connect_url": DEFAULT_ANKI_CONNECT_URL,
    "hindi_deck": "Hindi Sentence Practice",
    "english_deck": "English Cloze Practice",
    "temperature": 0.7,
    "tags": [],
}

# Config file key -> AppConfig field
FIELD_KEYS: Dict[str, str] = {
    "openai_api_key": "llm_api_key",
    "openai_model": "llm_model",
    "openai_base_url": "llm_base_url",
    "anki_connect_url": "backend_url",
    "hindi_deck": "hindi_deck_name",
    "english_deck": "english_deck_name",
    "temperature": "temperature",
    "tags": "extra_tags",
}


def _env_to_keys(env: Mapping[str, str]) -> Dict[str, Any]:
    """Translate environment variable names to config keys, ignoring blanks."""
    layer = {}
    for key, env_name in ENV_VARS.items():
        value = env.get(env_name)
        if value is not None and str(value).strip():
            layer[key] = value
    return layer


def _defined(layer: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not layer:
        return {}
    return {k: v for k, v in layer.items() if k in FIELD_KEYS and v is not None}


def resolve_config(
    cli_args: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
    file_contents: Optional[Mapping[str, Any]] = None,
    defaults: Optional[Mapping[str, Any]] = None,
) -> AppConfig:
    """
    Merge the four configuration layers into one AppConfig.

    Priority per key: CLI flags > environment > config file > defaults.
    A layer that leaves a key undefined (missing or None) does not hide lower layers.

    Raises:
        ConfigError: the API key is missing or a value is outside its domain.
    """
    layers = [
        ("defaults", _defined(DEFAULTS if defaults is None else defaults)),
        ("file", _defined(file_contents)),
        ("env", _defined(_env_to_keys(env or {}))),
        ("cli", _defined(cli_args)),
    ]

    merged: Dict[str, Any] = {}
    sources: Dict[str, str] = {}
    for name, layer in layers:
        for key, value in layer.items():
            merged[FIELD_KEYS[key]] = value
            sources[key] = name

    for key, source in sorted(sources.items()):
        logger.debug(f"config {key} <- {source}")

    if not merged.get("llm_api_key"):
        raise ConfigError(
            "missing OpenAI API key; set OPENAI_API_KEY or add openai_api_key to the config file"
        )

    try:
        return AppConfig(**merged)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field_name = ".".join(str(p) for p in err["loc"])
            problems.append(f"{field_name}: {err['msg']}")
        raise ConfigError("invalid configuration: " + "; ".join(problems)) from e

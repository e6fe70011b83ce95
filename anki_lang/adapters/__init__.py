# Path: anki_lang/adapters/__init__.py
from .anki_connect import AnkiConnectAdapter, AnkiConnectError
from .openai_client import CompletionRequest, OpenAIClient

__all__ = ["AnkiConnectAdapter", "AnkiConnectError", "CompletionRequest", "OpenAIClient"]

# Path: anki_lang/adapters/anki_connect.py
import logging
from typing import Any, Dict, List

import requests

__all__ = ["AnkiConnectAdapter", "AnkiConnectError", "DEFAULT_ANKI_CONNECT_URL"]

logger = logging.getLogger(__name__)

DEFAULT_ANKI_CONNECT_URL = "http://127.0.0.1:8765"


class AnkiConnectError(Exception):
    """Custom exception for logical errors returned by AnkiConnect."""
    pass


class AnkiConnectAdapter:
    """
    Adapter talking to Anki through the AnkiConnect add-on.
    Document: https://foosoft.net/projects/anki-connect/
    """

    def __init__(self, base_url: str = DEFAULT_ANKI_CONNECT_URL, timeout: float = 30):
        self.base_url = base_url
        self.timeout = timeout

    def _invoke(self, action: str, **params: Any) -> Any:
        """
        Send one POST request to the AnkiConnect API.

        Args:
            action: API action name (e.g. 'deckNames', 'addNote').
            params: Keyword arguments sent as the action's params.

        Returns:
            The 'result' field of the response.

        Raises:
            ConnectionError: Anki is not running or the HTTP call failed.
            AnkiConnectError: Anki answered with an error (e.g. duplicate note, unknown deck).
        """
        payload = {
            "action": action,
            "version": 6,
            "params": params
        }

        try:
            response = requests.post(self.base_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.ConnectionError:
            logger.error(f"Could not connect to Anki at {self.base_url}. Is Anki running?")
            raise ConnectionError(
                f"Failed to connect to Anki at {self.base_url}. Please make sure Anki is running and AnkiConnect is installed."
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"HTTP error invoking {action}: {e}")
            raise ConnectionError(f"AnkiConnect request '{action}' failed: {e}")

        try:
            response_data = response.json()
        except ValueError as e:
            raise AnkiConnectError(f"AnkiConnect returned a non-JSON body: {e}")

        if not isinstance(response_data, dict) or len(response_data) != 2:
            raise AnkiConnectError("Response has an unexpected number of fields.")

        if "error" not in response_data:
            raise AnkiConnectError("Response is missing required error field.")

        if response_data["error"] is not None:
            error_msg = response_data["error"]
            logger.debug(f"AnkiConnect Error [{action}]: {error_msg}")
            raise AnkiConnectError(f"{error_msg}")

        return response_data["result"]

    # =========================================================================
    # SYSTEM & CONNECTION
    # =========================================================================

    def ping(self) -> str:
        """Check the connection and return the API version."""
        return f"AnkiConnect v{self._invoke('version')}"

    # =========================================================================
    # DECK OPERATIONS
    # =========================================================================

    def get_deck_names(self) -> List[str]:
        return self._invoke("deckNames")

    def create_deck(self, deck_name: str) -> int:
        """
        Create a deck. AnkiConnect returns the existing id if it is already there.
        Returns: deck id.
        """
        return self._invoke("createDeck", deck=deck_name)

    # =========================================================================
    # NOTE OPERATIONS
    # =========================================================================

    def add_note(self, note: Dict[str, Any]) -> int:
        """
        Add a single note.
        Returns: the new note id.
        Raises AnkiConnectError if Anki refuses it (duplicate, unknown deck, ...).
        """
        result = self._invoke("addNote", note=note)
        if result is None:
            raise AnkiConnectError("cannot create note: AnkiConnect returned no note id")
        return result

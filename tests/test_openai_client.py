"""Tests for the OpenAI client wrapper."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from anki_lang.adapters.openai_client import CompletionRequest, OpenAIClient
from anki_lang.core.errors import ConfigError, LLMTransportError

_URL = "https://api.openai.com/v1/chat/completions"


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _status_error(cls, status):
    request = httpx.Request("POST", _URL)
    return cls("boom", response=httpx.Response(status, request=request), body=None)


def _request(temperature=0.7):
    return CompletionRequest(model="gpt-4o", messages=[{"role": "user", "content": "hi"}], temperature=temperature)


@pytest.fixture
def mock_client():
    client = MagicMock()
    with patch("anki_lang.adapters.openai_client.OpenAI", return_value=client) as cls:
        client.constructor = cls
        yield client


class TestOpenAIClient:
    def test_empty_key_is_a_config_error(self):
        with pytest.raises(ConfigError):
            OpenAIClient(api_key="  ")

    def test_sdk_retries_disabled(self, mock_client):
        OpenAIClient(api_key="test-key", base_url="http://localhost:11434/v1/")
        kwargs = mock_client.constructor.call_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["base_url"] == "http://localhost:11434/v1"

    def test_returns_first_choice(self, mock_client):
        mock_client.chat.completions.create.return_value = _completion('{"word": "x"}')

        assert OpenAIClient(api_key="test-key").complete(_request()) == '{"word": "x"}'
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_temperature_is_clamped(self, mock_client):
        mock_client.chat.completions.create.return_value = _completion("{}")

        OpenAIClient(api_key="test-key").complete(_request(temperature=3.5))

        assert mock_client.chat.completions.create.call_args.kwargs["temperature"] == 2.0

    def test_no_choices_is_transient(self, mock_client):
        mock_client.chat.completions.create.return_value = SimpleNamespace(choices=[])

        with pytest.raises(LLMTransportError) as exc_info:
            OpenAIClient(api_key="test-key").complete(_request())
        assert exc_info.value.transient

    @pytest.mark.parametrize(
        "error",
        [
            openai.APIConnectionError(request=httpx.Request("POST", _URL)),
            _status_error(openai.RateLimitError, 429),
            _status_error(openai.InternalServerError, 500),
        ],
    )
    def test_transient_errors(self, mock_client, error):
        mock_client.chat.completions.create.side_effect = error

        with pytest.raises(LLMTransportError) as exc_info:
            OpenAIClient(api_key="test-key").complete(_request())
        assert exc_info.value.transient

    @pytest.mark.parametrize(
        "error",
        [
            _status_error(openai.AuthenticationError, 401),
            _status_error(openai.BadRequestError, 400),
        ],
    )
    def test_permanent_errors(self, mock_client, error):
        mock_client.chat.completions.create.side_effect = error

        with pytest.raises(LLMTransportError) as exc_info:
            OpenAIClient(api_key="test-key").complete(_request())
        assert not exc_info.value.transient

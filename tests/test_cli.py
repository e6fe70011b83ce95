"""CLI tests: typer commands wired to fake LLM and AnkiConnect backends."""

import tomllib

import pytest
from typer.testing import CliRunner

from anki_lang import main
from anki_lang.core.config_resolver import DEFAULTS
from tests.conftest import FakeAnki, FakeLLM, cloze_payload, hindi_payload

runner = CliRunner()


@pytest.fixture
def backends(monkeypatch, tmp_path):
    """Replace the real clients and keep the environment under control."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main, "setup_logging", lambda level: None)
    for name in ("OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL", "ANKI_CONNECT_URL",
                 "HINDI_DECK", "ENGLISH_DECK", "OPENAI_TEMPERATURE", "ANKI_TAGS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")

    state = {"llm": FakeLLM(), "anki": FakeAnki(), "anki_urls": []}

    def make_anki(url):
        state["anki_urls"].append(url)
        return state["anki"]

    monkeypatch.setattr(main, "OpenAIClient", lambda api_key, base_url: state["llm"])
    monkeypatch.setattr(main, "AnkiConnectAdapter", make_anki)
    return state


def _load(path):
    with open(path, "rb") as f:
        return tomllib.load(f)


class TestBatchCommands:
    def test_hindi_auto_approve(self, backends, config_path):
        config_path.write_text("", encoding="utf-8")
        backends["llm"].responses = [hindi_payload()]

        result = runner.invoke(
            main.app, ["--config", str(config_path), "--auto-approve", "--tags", "vocab", "hindi", "नमस्ते"]
        )

        assert result.exit_code == 0, result.output
        notes = backends["anki"].notes
        assert len(notes) == 2
        assert notes[0]["tags"] == ["vocab", "generated"]
        assert _load(config_path) == {"hindi_deck": DEFAULTS["hindi_deck"]}

    def test_deck_option_is_saved(self, backends, config_path):
        config_path.write_text('english_deck = "Cloze"\n', encoding="utf-8")
        backends["llm"].responses = [cloze_payload()]

        result = runner.invoke(
            main.app, ["--config", str(config_path), "--auto-approve", "english", "serendipity", "--deck", "Vocab"]
        )

        assert result.exit_code == 0, result.output
        assert backends["anki"].notes[0]["deckName"] == "Vocab"
        assert backends["anki"].notes[0]["modelName"] == "Cloze"
        assert _load(config_path) == {"english_deck": "Vocab"}

    def test_words_from_input_file(self, backends, tmp_path, config_path):
        words_file = tmp_path / "words.txt"
        words_file.write_text("# list\nserendipity\n", encoding="utf-8")
        config_path.write_text("", encoding="utf-8")
        backends["llm"].responses = [cloze_payload()]

        result = runner.invoke(
            main.app, ["--config", str(config_path), "--auto-approve", "english", "--input", str(words_file)]
        )

        assert result.exit_code == 0, result.output
        assert backends["llm"].words == ["serendipity"]

    def test_interactive_review_approve(self, backends, config_path):
        config_path.write_text("", encoding="utf-8")
        backends["llm"].responses = [hindi_payload()]

        result = runner.invoke(main.app, ["--config", str(config_path), "hindi", "नमस्ते"], input="a\n")

        assert result.exit_code == 0, result.output
        assert len(backends["anki"].notes) == 2

    def test_dry_run_touches_nothing(self, backends, config_path):
        config_path.write_text("", encoding="utf-8")
        backends["llm"].responses = [hindi_payload()]

        result = runner.invoke(main.app, ["--config", str(config_path), "--dry-run", "hindi", "नमस्ते"])

        assert result.exit_code == 0, result.output
        assert backends["anki_urls"] == []
        assert backends["anki"].calls == 0
        assert config_path.read_text(encoding="utf-8") == ""
        assert "DRY RUN" in result.output


class TestExitCodes:
    def test_missing_api_key(self, backends, monkeypatch, config_path):
        monkeypatch.delenv("OPENAI_API_KEY")
        config_path.write_text("", encoding="utf-8")

        result = runner.invoke(main.app, ["--config", str(config_path), "hindi", "नमस्ते"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert backends["llm"].requests == []

    def test_explicit_config_must_exist(self, backends, tmp_path):
        result = runner.invoke(main.app, ["--config", str(tmp_path / "nope.toml"), "hindi", "नमस्ते"])

        assert result.exit_code == 1

    def test_invalid_temperature(self, backends, config_path):
        config_path.write_text("temperature = 5.0\n", encoding="utf-8")

        result = runner.invoke(main.app, ["--config", str(config_path), "hindi", "नमस्ते"])

        assert result.exit_code == 1
        assert "temperature" in result.output

    def test_no_words(self, backends, config_path):
        result = runner.invoke(main.app, ["--config", str(config_path), "hindi"])

        assert result.exit_code == 2
        assert "No words" in result.output

    def test_unreadable_input_file(self, backends, tmp_path, config_path):
        result = runner.invoke(
            main.app, ["--config", str(config_path), "english", "--input", str(tmp_path / "missing.txt")]
        )

        assert result.exit_code == 2


class TestInteractive:
    def test_single_round(self, backends, config_path):
        config_path.write_text("", encoding="utf-8")
        backends["llm"].responses = [hindi_payload()]

        result = runner.invoke(
            main.app, ["--config", str(config_path), "--auto-approve", "interactive"], input="hindi\nनमस्ते\nn\n"
        )

        assert result.exit_code == 0, result.output
        assert len(backends["anki"].notes) == 2

    def test_empty_words_exits(self, backends, config_path):
        result = runner.invoke(
            main.app, ["--config", str(config_path), "interactive", "--language", "english"], input="\n"
        )

        assert result.exit_code == 0, result.output
        assert backends["llm"].requests == []


class TestInfo:
    def test_shows_masked_key_and_version(self, backends, monkeypatch, config_path):
        api_key = "sk-test-1234567890"
        monkeypatch.delenv("OPENAI_API_KEY")
        config_path.write_text(f'openai_api_key = "{api_key}"\n', encoding="utf-8")

        result = runner.invoke(main.app, ["--config", str(config_path), "info"])

        assert result.exit_code == 0, result.output
        assert "AnkiConnect v6" in result.output
        assert api_key not in result.output
        assert "sk-t...7890" in result.output

    def test_reports_missing_decks(self, backends, config_path):
        config_path.write_text('hindi_deck = "Hindi"\n', encoding="utf-8")
        backends["anki"] = FakeAnki(decks=["Default", "Hindi"])

        result = runner.invoke(main.app, ["--config", str(config_path), "info"])

        assert result.exit_code == 0, result.output
        assert "Deck 'Hindi' exists" in result.output
        assert f"Deck '{DEFAULTS['english_deck']}' not found" in result.output

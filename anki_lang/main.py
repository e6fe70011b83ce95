# Path: anki_lang/main.py
#!/usr/bin/env python3
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from anki_lang.adapters import AnkiConnectAdapter, AnkiConnectError, OpenAIClient
from anki_lang.core.config import Settings, settings
from anki_lang.core.config_resolver import DEFAULTS, resolve_config
from anki_lang.core.config_store import ConfigFileStore
from anki_lang.core.errors import ConfigError
from anki_lang.core.logging_config import setup_logging
from anki_lang.models import AppConfig, LanguageMode, RunSummary
from anki_lang.services import (
    BatchPipeline,
    CardGenerator,
    ConfigPersister,
    ConsolePrompter,
    NoteSubmitter,
    ReviewWorkflow,
    RunOptions,
    render_summary,
)
from anki_lang.utils.text_utils import normalize_words, read_words_from_file, split_input

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="anki-lang",
    help="Generate Hindi sentence cards and English cloze cards in Anki with an LLM",
    add_completion=False,
)
console = Console()


@dataclass
class GlobalOptions:
    config: Optional[Path] = None
    model: Optional[str] = None
    anki_url: Optional[str] = None
    hindi_deck: Optional[str] = None
    english_deck: Optional[str] = None
    temperature: Optional[float] = None
    tags: Optional[str] = None
    dry_run: bool = False
    auto_approve: bool = False
    verbose: bool = False


# --- Helpers ---

def _initialize_app(verbose: bool) -> None:
    """Common setup for all commands."""
    log_level = "DEBUG" if verbose else "INFO"
    setup_logging(log_level)
    logger.debug(f"App initialized with log level: {log_level}")


def _cli_layer(opts: GlobalOptions, mode: Optional[LanguageMode], deck: Optional[str]) -> Dict[str, Any]:
    layer: Dict[str, Any] = {
        "openai_model": opts.model,
        "anki_connect_url": opts.anki_url,
        "hindi_deck": opts.hindi_deck,
        "english_deck": opts.english_deck,
        "temperature": opts.temperature,
        "tags": opts.tags.split(",") if opts.tags else None,
    }
    # Subcommand --deck wins over the global deck flags
    if deck and mode is LanguageMode.HINDI:
        layer["hindi_deck"] = deck
    elif deck and mode is LanguageMode.ENGLISH_CLOZE:
        layer["english_deck"] = deck
    return layer


def _load_config(
    opts: GlobalOptions,
    mode: Optional[LanguageMode] = None,
    deck: Optional[str] = None,
) -> Tuple[AppConfig, ConfigFileStore, Dict[str, Any]]:
    """Resolve the effective config or stop the run with exit code 1."""
    store = ConfigFileStore(opts.config or settings.CONFIG_FILE, explicit=opts.config is not None)
    try:
        file_contents = store.load()
        config = resolve_config(
            cli_args=_cli_layer(opts, mode, deck),
            env=Settings().environment_layer(),
            file_contents=file_contents,
            defaults=DEFAULTS,
        )
    except ConfigError as e:
        logger.debug("Configuration failed", exc_info=True)
        console.print(f"[bold red]❌ Configuration error:[/bold red] {e}")
        raise typer.Exit(code=1)
    return config, store, file_contents


def _build_pipeline(
    opts: GlobalOptions,
    config: AppConfig,
    store: ConfigFileStore,
    file_contents: Dict[str, Any],
) -> BatchPipeline:
    try:
        llm = OpenAIClient(config.llm_api_key, config.llm_base_url)
    except ConfigError as e:
        console.print(f"[bold red]❌ Configuration error:[/bold red] {e}")
        raise typer.Exit(code=1)

    submitter = None if opts.dry_run else NoteSubmitter(AnkiConnectAdapter(config.backend_url))
    return BatchPipeline(
        config=config,
        generator=CardGenerator(llm),
        review=ReviewWorkflow(ConsolePrompter(console)),
        submitter=submitter,
        persister=ConfigPersister(store),
        file_contents=file_contents,
        options=RunOptions(dry_run=opts.dry_run, auto_approve=opts.auto_approve),
        console=console,
    )


def _run_batch(opts: GlobalOptions, mode: LanguageMode, words: List[str], deck: Optional[str] = None) -> RunSummary:
    config, store, file_contents = _load_config(opts, mode, deck)
    pipeline = _build_pipeline(opts, config, store, file_contents)

    target_deck = config.deck_for(mode)
    label = "DRY RUN " if opts.dry_run else ""
    console.print(
        f"[bold blue]🚀 {label}{mode.label} cards for {len(words)} word(s) → deck '{target_deck}'[/bold blue]"
    )
    summary = pipeline.run(words, mode)
    console.print(render_summary(summary, dry_run=opts.dry_run))
    return summary


def _collect_words(words: Optional[List[str]], input_file: Optional[Path]) -> List[str]:
    collected = list(words or [])
    if input_file is not None:
        try:
            collected.extend(read_words_from_file(input_file))
        except OSError as e:
            console.print(f"[bold red]❌ Failed to read words from {input_file}:[/bold red] {e}")
            raise typer.Exit(code=2)
    collected = normalize_words(collected)
    if not collected:
        console.print("[bold red]❌ No words provided;[/bold red] pass words as arguments or use --input FILE")
        raise typer.Exit(code=2)
    return collected


# --- Commands ---

@app.callback()
def cli(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a config TOML file"),
    model: Optional[str] = typer.Option(None, "--model", help="Override the OpenAI model"),
    anki_url: Optional[str] = typer.Option(None, "--anki-url", help="Override the AnkiConnect URL"),
    hindi_deck: Optional[str] = typer.Option(None, "--hindi-deck", help="Hindi deck name for this run"),
    english_deck: Optional[str] = typer.Option(None, "--english-deck", help="English deck name for this run"),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="LLM temperature (0.0-2.0)"),
    tags: Optional[str] = typer.Option(None, "--tags", help="Extra tags, comma separated: a,b,c"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview cards without sending them to Anki"),
    auto_approve: bool = typer.Option(False, "--auto-approve", help="Send every generated card without review"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
) -> None:
    """Generate language flashcards in Anki via AnkiConnect."""
    _initialize_app(verbose)
    ctx.obj = GlobalOptions(
        config=config,
        model=model,
        anki_url=anki_url,
        hindi_deck=hindi_deck,
        english_deck=english_deck,
        temperature=temperature,
        tags=tags,
        dry_run=dry_run,
        auto_approve=auto_approve,
        verbose=verbose,
    )


@app.command()
def hindi(
    ctx: typer.Context,
    words: Optional[List[str]] = typer.Argument(None, help="Hindi words"),
    input_file: Optional[Path] = typer.Option(None, "--input", "-i", help="File with words, one per line"),
    deck: Optional[str] = typer.Option(None, "--deck", help="Deck name for this run"),
) -> None:
    """Generate Hindi sentence cards (two notes per word)."""
    _run_batch(ctx.obj, LanguageMode.HINDI, _collect_words(words, input_file), deck)


@app.command()
def english(
    ctx: typer.Context,
    words: Optional[List[str]] = typer.Argument(None, help="English words"),
    input_file: Optional[Path] = typer.Option(None, "--input", "-i", help="File with words, one per line"),
    deck: Optional[str] = typer.Option(None, "--deck", help="Deck name for this run"),
) -> None:
    """Generate English cloze cards (one note per word)."""
    _run_batch(ctx.obj, LanguageMode.ENGLISH_CLOZE, _collect_words(words, input_file), deck)


def _prompt_language() -> Optional[LanguageMode]:
    while True:
        choice = typer.prompt("Choose a language workflow [hindi/english/exit]", default="hindi")
        choice = choice.strip().lower()
        if choice in ("exit", "q", "quit"):
            return None
        try:
            return LanguageMode(choice)
        except ValueError:
            console.print(f"[yellow]Unknown language '{choice}'[/yellow]")


@app.command()
def interactive(
    ctx: typer.Context,
    language: Optional[LanguageMode] = typer.Option(None, "--language", help="Preselect the language"),
) -> None:
    """Run an interactive session for adding cards."""
    opts: GlobalOptions = ctx.obj
    preset = language

    try:
        while True:
            mode = preset or _prompt_language()
            preset = None
            if mode is None:
                logger.info("Exiting interactive session.")
                break

            raw = typer.prompt(
                "Enter words (comma or newline separated). Leave empty to exit",
                default="",
                show_default=False,
            )
            words = split_input(raw)
            if not words:
                logger.info("No words provided. Exiting interactive mode.")
                break

            summary = _run_batch(opts, mode, words)
            if summary.cancelled:
                break
            if not typer.confirm("Add more cards?", default=True):
                break
    except typer.Abort:
        console.print("\n[yellow]Interactive session aborted.[/yellow]")


@app.command()
def info(ctx: typer.Context) -> None:
    """Show the effective configuration and test the AnkiConnect connection."""
    config, store, _ = _load_config(ctx.obj)

    table = Table(title="Effective configuration", show_header=False)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Config file", str(store.path))
    table.add_row("API key", config.masked_api_key())
    table.add_row("Model", config.llm_model)
    table.add_row("Base URL", config.llm_base_url)
    table.add_row("AnkiConnect", config.backend_url)
    table.add_row("Hindi deck", config.hindi_deck_name)
    table.add_row("English deck", config.english_deck_name)
    table.add_row("Temperature", str(config.temperature))
    table.add_row("Tags", ", ".join(config.extra_tags) or "-")
    console.print(table)

    adapter = AnkiConnectAdapter(config.backend_url)
    try:
        version = adapter.ping()
        console.print(f"✅ [bold green]Connected:[/bold green] {version}")
        existing = set(adapter.get_deck_names())
    except (ConnectionError, AnkiConnectError) as e:
        logger.debug("Failed to connect to Anki", exc_info=True)
        console.print(f"❌ [bold red]Error:[/bold red] {e}")
        return

    for deck in (config.hindi_deck_name, config.english_deck_name):
        if deck in existing:
            console.print(f"📂 Deck '{deck}' exists")
        else:
            console.print(f"[yellow]📂 Deck '{deck}' not found, created on first use[/yellow]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()

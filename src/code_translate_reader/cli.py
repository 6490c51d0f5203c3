import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from code_translate_reader.config import CONFIG_FILE, Config, load_config, save_translation_service
from code_translate_reader.display import TranslationView
from code_translate_reader.errors import ReaderError
from code_translate_reader.pipeline import speak, translate
from code_translate_reader.providers import PROVIDER_LABELS
from code_translate_reader.speech import SpeechEngine, create_speech_engine
from code_translate_reader.types import ProviderId

console = Console()
err_console = Console(stderr=True)

PROVIDER_CHOICES = [p.value for p in ProviderId]


@dataclass
class AppState:
    config_path: Path
    config: Config
    engine: SpeechEngine


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(error: ReaderError) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise SystemExit(1)


def _read_selection(words: tuple[str, ...]) -> str:
    if words:
        return " ".join(words)
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        raise ReaderError("No text given: pass it as arguments or pipe it on stdin")
    return stdin.read()


async def _run_translate(
    source: str,
    state: AppState,
    target_language: str | None,
    provider: ProviderId | None,
    speak_result: bool,
) -> None:
    config = state.config
    with TranslationView(console, config.show_original_text, config.hover_duration) as view:
        view.busy("Translating...")
        result = await translate(source, config, target_language=target_language, provider=provider)
        view.done("Translation complete")

        if not speak_result:
            await view.show(source.strip(), result)
            return

        # reading starts while the result panel is still on screen
        await asyncio.gather(
            view.show(source.strip(), result),
            speak(result.text, state.engine, config.voice_speed),
        )
        view.done("Reading complete")


async def _run_speak(source: str, engine: SpeechEngine, speed: float) -> None:
    with TranslationView(console) as view:
        view.busy("Reading...")
        await speak(source, engine, speed)
        view.done("Reading complete")


@click.group(epilog="""\b
Examples:
  code-translate-reader translate getUserAPIVersion
  code-translate-reader translate --to ja --provider baidu "max_retry_count"
  pbpaste | code-translate-reader translate --speak
  code-translate-reader speak --speed 1.5 parseHTTPResponse
  code-translate-reader configure youdao
""")
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
    default=CONFIG_FILE, show_default=True, envvar="CODE_TRANSLATE_READER_CONFIG",
    help="Config file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Path, verbose: bool) -> None:
    """Translate identifiers and text, and read them aloud."""
    _setup_logging(verbose)
    try:
        config = load_config(config_path)
    except ReaderError as e:
        _fail(e)

    engine = create_speech_engine()
    ctx.obj = AppState(config_path=config_path, config=config, engine=engine)
    ctx.call_on_close(engine.stop)


@main.command("translate")
@click.argument("text", nargs=-1)
@click.option("--to", "to_lang", default=None, help="Target language code (default from config)")
@click.option(
    "--provider", type=click.Choice(PROVIDER_CHOICES), default=None,
    help="Translation service for this call (default from config)",
)
@click.option("--speak", "speak_result", is_flag=True, help="Read the translation aloud")
@click.pass_obj
def translate_command(
    state: AppState,
    text: tuple[str, ...],
    to_lang: str | None,
    provider: str | None,
    speak_result: bool,
) -> None:
    """Translate TEXT, or stdin when no TEXT is given."""
    try:
        source = _read_selection(text)
        asyncio.run(
            _run_translate(
                source, state, to_lang, ProviderId(provider) if provider else None, speak_result
            )
        )
    except ReaderError as e:
        _fail(e)


@main.command("speak")
@click.argument("text", nargs=-1)
@click.option("--speed", type=float, default=None, help="Speed multiplier, 1.0 is normal (default from config)")
@click.pass_obj
def speak_command(state: AppState, text: tuple[str, ...], speed: float | None) -> None:
    """Read TEXT aloud, or stdin when no TEXT is given."""
    try:
        source = _read_selection(text)
        asyncio.run(_run_speak(source, state.engine, speed if speed is not None else state.config.voice_speed))
    except ReaderError as e:
        _fail(e)


@main.command("configure")
@click.argument("provider", type=click.Choice(PROVIDER_CHOICES))
@click.pass_obj
def configure_command(state: AppState, provider: str) -> None:
    """Set the default translation service."""
    provider_id = ProviderId(provider)
    label = PROVIDER_LABELS[provider_id]
    try:
        save_translation_service(provider_id, state.config_path)
    except ReaderError as e:
        _fail(e)
    except OSError as e:
        _fail(ReaderError(f"Could not write {state.config_path}: {e}"))

    console.print(f"Translation service set to [bold]{label}[/bold]")

    credentials = state.config.credentials_for(provider_id)
    if credentials is not None and not credentials.complete:
        id_key = "app_id" if provider_id is ProviderId.BAIDU else "app_key"
        console.print(
            f"[yellow]{label} needs {id_key} and app_secret.[/yellow] "
            f"Add them to the [bold]\\[{provider_id.value}][/bold] section of {escape(str(state.config_path))}"
        )

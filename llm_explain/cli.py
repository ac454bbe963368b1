"""
Command-line interface for llm-explain.

Usage:
    llm-explain setup            # Store API key and engine
    llm-explain start            # Record a shell session with script(1)
    llm-explain stop [-c]        # Stop recording (optionally delete the log)
    llm-explain prompt [TEXT]    # Ask any question
    llm-explain explain          # Explain the last command in the session
    llm-explain change-key       # Update the API key only
    llm-explain change-engine    # Update the engine only
"""

import functools
import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__, recorder
from .client import AssistantClient, build_explain_prompt
from .config import (
    API_KEY,
    DEFAULT_ENGINE,
    ENGINE_KEY,
    ENGINES,
    ExplainSettings,
    load_settings,
    read_config,
    write_config,
)
from .console import ConsoleHelper, render_response
from .errors import ExplainError
from .prompt_detection import get_prompt_predicate
from .transcript import parse_transcript, read_transcript

logger = logging.getLogger(__name__)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def setup_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    logging.getLogger("llm_explain").setLevel(level.upper())


def handle_errors(func):
    """Report ExplainError as a one-line message and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ExplainError as e:
            logger.debug(f"{type(e).__name__}: {e}")
            ConsoleHelper.error(err_console, escape(e.message))
            raise SystemExit(1)
    return wrapper


def _require_config() -> dict:
    current = read_config()
    if current is None:
        ConsoleHelper.error(err_console, "Please run the setup command first.")
        raise SystemExit(1)
    return current


def _prompt_api_key(message: str, current: Optional[str]) -> str:
    # click.prompt re-asks on empty input when there is no default
    return click.prompt(message, default=current or None, show_default=False)


def _prompt_engine(message: str, current: Optional[str]) -> str:
    return click.prompt(
        message,
        type=click.Choice(ENGINES),
        default=current if current in ENGINES else DEFAULT_ENGINE,
    )


@click.group()
@click.version_option(__version__, prog_name="llm-explain")
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
@handle_errors
def main(ctx: click.Context, debug: bool):
    """Explain terminal errors and answer questions with an LLM."""
    settings = load_settings()
    setup_logging("DEBUG" if debug else settings.log_level)
    ctx.obj = settings


@main.command()
def setup():
    """Setup your OpenAI API key and engine."""
    current = read_config() or {}
    api_key = _prompt_api_key("What is your OpenAI API key?", current.get(API_KEY))
    engine = _prompt_engine("Choose your OpenAI engine", current.get(ENGINE_KEY))
    write_config({API_KEY: api_key, ENGINE_KEY: engine})
    ConsoleHelper.success(console, "API key and engine saved.")


@main.command('change-key')
def change_key():
    """Change your OpenAI API key."""
    current = _require_config()
    api_key = _prompt_api_key("What is your new OpenAI API key?", current.get(API_KEY))
    write_config({API_KEY: api_key})
    ConsoleHelper.success(console, "API key updated.")


@main.command('change-engine')
def change_engine():
    """Change your OpenAI engine."""
    current = _require_config()
    engine = _prompt_engine("Choose your new OpenAI engine", current.get(ENGINE_KEY))
    write_config({ENGINE_KEY: engine})
    ConsoleHelper.success(console, "Engine updated.")


@main.command()
@click.pass_obj
@handle_errors
def start(settings: ExplainSettings):
    """Start capturing terminal session."""
    ConsoleHelper.dim(console, f"Recording to {escape(str(settings.session_log))}. Type \"exit\" to stop.")
    recorder.start(settings.session_log)
    ConsoleHelper.info(console, "Script session ended.")


@main.command()
@click.option('-c', '--cleanup', is_flag=True, help='Delete the log after stopping')
@click.pass_obj
@handle_errors
def stop(settings: ExplainSettings, cleanup: bool):
    """Stop the script session and optionally cleanup the log."""
    if recorder.stop(settings.session_log, cleanup=cleanup):
        ConsoleHelper.success(console, "Script session stopped and log file cleaned up.")
    else:
        ConsoleHelper.success(console, "Script session stopped.")
    ConsoleHelper.dim(console, 'Type "exit" to leave the recorded shell.')


@main.command()
@click.argument('question', nargs=-1)
@click.pass_obj
@handle_errors
def prompt(settings: ExplainSettings, question: Tuple[str, ...]):
    """Ask any question to OpenAI."""
    text = " ".join(question)
    if not text.strip():
        text = click.prompt("Please enter your question for OpenAI")

    client = AssistantClient(settings)
    with err_console.status("[cyan]Thinking...[/]", spinner="dots"):
        answer = client.ask(text)
    render_response(console, "OpenAI Response", answer)


@main.command()
@click.option('-f', '--file', 'log_file', type=click.Path(dir_okay=False, path_type=Path),
              help='Transcript to read (default: the recorded session log)')
@click.option('--raw', is_flag=True, help='Do not strip terminal escape sequences')
@click.option('--dry-run', is_flag=True, help='Print the request without sending it')
@click.pass_obj
@handle_errors
def explain(settings: ExplainSettings, log_file: Optional[Path], raw: bool, dry_run: bool):
    """Explain the last error from terminal."""
    path = log_file or settings.session_log
    lines = read_transcript(path, strip_escapes=not raw)
    logger.debug(f"Read {len(lines)} lines from {path}")

    interaction = parse_transcript(lines, get_prompt_predicate(settings.prompt_style))
    if interaction.is_empty:
        ConsoleHelper.warning(console, "Nothing to explain: no shell prompts found in the session log.")
        return
    if interaction.command is None:
        ConsoleHelper.warning(console, "Nothing to explain: no completed command found in the session log.")
        return

    ConsoleHelper.dim(console, f"Last command: {escape(interaction.command)}")
    logger.debug(f"Captured {len(interaction.output)} output lines")

    if dry_run:
        console.print(build_explain_prompt(interaction), markup=False, highlight=False)
        return

    client = AssistantClient(settings)
    with err_console.status("[cyan]Thinking...[/]", spinner="dots"):
        answer = client.explain(interaction)
    render_response(console, "Explanation", answer)


if __name__ == "__main__":
    main()

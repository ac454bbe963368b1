"""Console output formatting helpers.

Helpers receive a rich.Console from the caller so tests can capture output
with Console(file=StringIO()).
"""

from rich.console import Console
from rich.text import Text

CODE_FENCE = "```"
CODE_STYLE = "white on black"


class ConsoleHelper:
    """Consistent console output formatting using Rich markup."""

    @staticmethod
    def success(console: Console, message: str) -> None:
        """Print success message with green checkmark."""
        console.print(f"[green]✓[/] {message}")

    @staticmethod
    def error(console: Console, message: str) -> None:
        """Print error message with red X."""
        console.print(f"[red]✗[/] {message}")

    @staticmethod
    def warning(console: Console, message: str) -> None:
        console.print(f"[yellow]{message}[/]")

    @staticmethod
    def info(console: Console, message: str) -> None:
        console.print(f"[cyan]{message}[/]")

    @staticmethod
    def dim(console: Console, message: str) -> None:
        console.print(f"[dim]{message}[/]")


def stylize_code_blocks(message: str) -> Text:
    """Highlight text between ``` fences; fences themselves are dropped."""
    text = Text()
    for i, segment in enumerate(message.split(CODE_FENCE)):
        # Odd segments sit between an opening and a closing fence
        text.append(segment, style=CODE_STYLE if i % 2 else None)
    return text


def render_response(console: Console, title: str, message: str) -> None:
    """Print a model response between horizontal rules."""
    console.rule(title)
    console.print(stylize_code_blocks(message))
    console.rule()

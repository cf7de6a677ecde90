"""Reusable UI components: prompts, notices and loading spinners.

This module wraps the terminal libraries used by the navigation flow:
- TerminalPrompt.ask() / select() - Interactive prompts with InquirerPy
- TerminalPrompt.intro() / error() / outro() - Themed messages with Rich
- loading() - Rich spinners for network calls
"""

from contextlib import contextmanager
from typing import NamedTuple

from InquirerPy import inquirer
from InquirerPy.base.control import Choice
from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.theme import Theme

from utils.exceptions import PromptError

# Catppuccin Mocha Theme
CATPPUCCIN_MOCHA = Theme(
    {
        "menu.title": "bold #cba6f7",  # Purple header
        "menu.muted": "#6c7086",  # Muted gray
        "success": "#a6e3a1",  # Green for success
        "warning": "#f9e2af",  # Yellow for warnings
        "error": "#f38ba8",  # Red for errors
    }
)

# Global console with theme
console = Console(theme=CATPPUCCIN_MOCHA)


class MenuOption(NamedTuple):
    """One entry of a select menu.

    Attributes:
        label: Text shown to the user
        value: Value returned when the entry is chosen
        hint: Optional muted annotation, display only
    """

    label: str
    value: str
    hint: str | None = None

    def display(self) -> str:
        if self.hint:
            return f"{self.label}  ({self.hint})"
        return self.label


class TerminalPrompt:
    """Terminal chrome used by the navigator.

    Failures of the underlying terminal are raised as PromptError;
    Ctrl+C propagates as KeyboardInterrupt.
    """

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def intro(self, title: str) -> None:
        """Clear the screen and print a section header."""
        self.console.clear()
        self.console.rule(f"[menu.title]{title}[/menu.title]")

    def ask(self, question: str) -> str:
        try:
            return inquirer.text(
                message=question,
                qmark="",
                amark="►",
                validate=lambda text: bool(text.strip()),
                invalid_message="Escribe algo para buscar.",
            ).execute().strip()
        except (EOFError, OSError) as e:
            raise PromptError(f"Hubo un error al mostrar el menu: {e}") from e

    def select(self, message: str, options: list[MenuOption]) -> str:
        """Show a select menu and return the value of the chosen option."""
        choices = [Choice(value=opt.value, name=opt.display()) for opt in options]
        try:
            return inquirer.select(
                message=message,
                choices=choices,
                qmark="",
                amark="►",
                pointer="►",
                instruction="(Usa las flechas)",
                max_height="70%",
            ).execute()
        except (EOFError, OSError) as e:
            raise PromptError(f"Hubo un error al mostrar el menu: {e}") from e

    def error(self, message: str) -> None:
        self.console.print(f"[error]✖ {message}[/error]")

    def outro(self, message: str) -> None:
        self.console.print(f"\n[success]{message}[/success]")

    @contextmanager
    def loading(self, msg: str = "Cargando..."):
        """Display a spinner while the body runs.

        Usage:
            with prompt.loading("Buscando..."):
                results = scraper.search_titles(query)
        """
        with Live(
            Spinner("dots", text=msg),
            console=self.console,
            refresh_per_second=12.5,
            transient=True,  # Spinner disappears after completion
        ):
            yield

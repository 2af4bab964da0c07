"""
Colour-tagged terminal output.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape


TAG_STYLES = {
    "CHECK": "bold blue",
    "INFO": "bold cyan",
    "PASS": "bold green",
    "SUCCESS": "bold green",
    "WARN": "bold yellow",
    "WARNING": "bold yellow",
    "FAIL": "bold red",
    "ERROR": "bold red",
}


class Reporter:
    """Prints `[TAG] message` lines the way operators expect from setup scripts."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def tagged(self, tag: str, message: str, hint: Optional[str] = None) -> None:
        style = TAG_STYLES.get(tag, "bold")
        self.console.print(f"[{style}]\\[{tag}][/{style}] {escape(message)}")
        if hint:
            self.console.print(f"       [dim]→ {escape(hint)}[/dim]")

    def check(self, message: str) -> None:
        self.tagged("CHECK", message)

    def info(self, message: str) -> None:
        self.tagged("INFO", message)

    def success(self, message: str) -> None:
        self.tagged("SUCCESS", message)

    def warning(self, message: str, hint: Optional[str] = None) -> None:
        self.tagged("WARNING", message, hint)

    def error(self, message: str, hint: Optional[str] = None) -> None:
        self.tagged("ERROR", message, hint)

    def heading(self, title: str, underline: str = "=") -> None:
        self.console.print()
        self.console.print(f"[bold]{escape(title)}[/bold]")
        self.console.print(underline * len(title))

    def detail(self, message: str, style: Optional[str] = None) -> None:
        if style:
            self.console.print(f"[{style}]{escape(message)}[/{style}]")
        else:
            self.console.print(escape(message))

    def blank(self) -> None:
        self.console.print()

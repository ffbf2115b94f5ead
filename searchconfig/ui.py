"""Central UI handler for searchconfig.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every module.

Usage:
    from searchconfig.ui import console, print_header, print_error

    console.print("[success]COM API is functional[/success]")
    print_header("COM REGISTRATION")
    print_error("SearchAPI.dll not found")
"""

import sys

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

SEARCHCONFIG_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

# Single console instance - import this, don't create your own
console = Console(
    theme=SEARCHCONFIG_THEME,
    force_terminal=sys.stdout.isatty(),
    highlight=False,
)


def print_header(title: str) -> None:
    """Print a styled section header with horizontal rules."""
    console.rule(f"[bold]{title}[/bold]", characters="=")


def print_error(msg: str) -> None:
    console.print(f"[error]ERROR:[/error] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]SUCCESS:[/success] {msg}")


def print_status_panel(status: str, message: str, detail: str, level: str = "info") -> None:
    """Print a status panel with colored border.

    Args:
        status: Status label (e.g., "REGISTERED", "MISSING")
        message: Main message line
        detail: Additional detail line
        level: One of "error", "warning", "success", "info"
    """
    style_map = {
        "error": ("bold red", "red"),
        "warning": ("bold yellow", "yellow"),
        "success": ("bold green", "green"),
        "info": ("bold cyan", "cyan"),
    }
    text_style, border_style = style_map.get(level, ("white", "white"))

    panel = Panel(
        Text.assemble(
            (f"STATUS: [{status}]\n", text_style),
            (f"{message}\n", border_style),
            (detail, border_style),
        ),
        border_style=border_style,
        box=box.ASCII,
        expand=False,
    )
    console.print(panel)

"""Console output module for colored messages and formatting.

This module provides colored console output functions using Rich, with a
colorama rendering path for terminals where Rich output is disabled. The
command interface and the entry point print all user-facing messages
through these helpers.
"""

import os
import sys

from colorama import init, Fore, Back, Style
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

init(autoreset=True)  # Initialize colorama

console = Console()

# Rich rendering can be switched off (e.g. for plain log capture)
_FORCE_COLORAMA_ONLY = os.environ.get("FORCE_COLORAMA_ONLY", "").lower() in ("true", "1", "yes", "on")

_EMOJI_FALLBACKS = {
    "✅": "OK",
    "❌": "X",
    "⚠️": "!",
    "ℹ️": "i",
    "🔷": "*",
    "🛒": "[B]",
    "📤": "[S]",
    "💾": "[SAVE]",
    "📈": "[^]",
}


def _safe_emoji(emoji: str) -> str:
    """Return emoji if the console can encode it, otherwise a safe alternative."""
    try:
        emoji.encode(sys.stdout.encoding or 'utf-8')
        return emoji
    except (UnicodeEncodeError, LookupError):
        return _EMOJI_FALLBACKS.get(emoji, "*")


def _use_rich() -> bool:
    return not _FORCE_COLORAMA_ONLY


def has_rich_support() -> bool:
    """Check if output is rendered with Rich."""
    return _use_rich()


def get_console() -> Console:
    """Get the shared Rich console."""
    return console


def set_colorama_only(enabled: bool = True) -> None:
    """Render with colorama instead of Rich.

    Args:
        enabled: If True, disable Rich output
    """
    global _FORCE_COLORAMA_ONLY
    _FORCE_COLORAMA_ONLY = enabled


def _print_styled(message: str, emoji: str, rich_style: str, color: str, label: str) -> None:
    safe_emoji = _safe_emoji(emoji)
    if _use_rich():
        try:
            console.print(Text(f"{safe_emoji} {message}", style=rich_style))
        except UnicodeEncodeError:
            print(f"{label}: {message}")
    else:
        print(f"{color}{safe_emoji} {message}{Style.RESET_ALL}")


def print_success(message: str, emoji: str = "✅") -> None:
    """Print a success message with green color and emoji.

    Args:
        message: The success message to display
        emoji: The emoji to display with the message (default: ✅)
    """
    _print_styled(message, emoji, "bold green", Fore.GREEN, "SUCCESS")


def print_error(message: str, emoji: str = "❌") -> None:
    """Print an error message with red color and emoji.

    Args:
        message: The error message to display
        emoji: The emoji to display with the message (default: ❌)
    """
    _print_styled(message, emoji, "bold red", Fore.RED, "ERROR")


def print_warning(message: str, emoji: str = "⚠️") -> None:
    """Print a warning message with yellow color and emoji."""
    _print_styled(message, emoji, "bold yellow", Fore.YELLOW, "WARNING")


def print_info(message: str, emoji: str = "ℹ️") -> None:
    """Print an info message with blue color and emoji."""
    _print_styled(message, emoji, "bold blue", Fore.BLUE, "INFO")


def print_plain(message: str) -> None:
    """Print an unstyled line (e.g. raw log lines)."""
    if _use_rich():
        console.print(Text(message))
    else:
        print(message)


def print_header(title: str, emoji: str = "🔷", width: int = 60) -> None:
    """Print a formatted header with emoji.

    Args:
        title: The header title to display
        emoji: The emoji to display with the title (default: 🔷)
        width: The width of the header line in colorama mode (default: 60)
    """
    safe_emoji = _safe_emoji(emoji)
    header_text = f"{safe_emoji} {title} {safe_emoji}"

    if _use_rich():
        panel = Panel(
            Text(header_text, style="bold bright_white", justify="center"),
            style="bright_cyan",
            padding=(0, 1)
        )
        console.print(panel)
    else:
        print(f"{Fore.CYAN}{Style.BRIGHT}{'=' * width}{Style.RESET_ALL}")
        print(f"{Back.CYAN}{Fore.WHITE}{Style.BRIGHT}{header_text:^{width}}{Style.RESET_ALL}")
        print(f"{Fore.CYAN}{Style.BRIGHT}{'=' * width}{Style.RESET_ALL}")



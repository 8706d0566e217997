"""Logging utilities for econsim.

Color-coded console output. Deterministic engine steps print in blue,
recoverable problems (storage failures, authoring mistakes) in yellow/red.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Deterministic engine operations
    YELLOW = "\033[93m"    # Warnings (authoring mistakes, ignored data)
    RED = "\033[91m"       # Errors (storage failures)
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


# Markers for message types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_WARNING = "[?]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if ECONSIM_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("ECONSIM_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def _enabled(level: str) -> bool:
    threshold = _LEVELS.get(Config.LOG_LEVEL.upper(), _LEVELS["INFO"])
    return _LEVELS[level] >= threshold


def log_deterministic(message: str) -> None:
    """Log a deterministic engine operation (blue)."""
    if _enabled("DEBUG"):
        print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    if _enabled("INFO"):
        print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


def log_success(message: str) -> None:
    """Log a success (green)."""
    if _enabled("INFO"):
        print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_warning(message: str) -> None:
    """Log a warning (yellow)."""
    if _enabled("WARNING"):
        print(colored(f"{LOG_TAG_WARNING} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error (red)."""
    if _enabled("ERROR"):
        print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))

"""Logging utilities for Populace simulations.

Provides color-coded output to distinguish deterministic engine work from
oracle (LLM) calls and recoverable errors.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Deterministic operations (clock, queue, stores)
    YELLOW = "\033[93m"    # Oracle calls
    RED = "\033[91m"       # Recoverable errors
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if POPULACE_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("POPULACE_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def _quiet() -> bool:
    if os.getenv("POPULACE_QUIET", "").lower() in ("1", "true", "yes"):
        return True
    return os.getenv("LOG_LEVEL", "").upper() in ("ERROR", "CRITICAL")


def log_deterministic(message: str) -> None:
    """Log a deterministic operation (blue)."""
    if not _quiet():
        print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_llm(message: str) -> None:
    """Log an oracle operation (yellow)."""
    if not _quiet():
        print(colored(f"{LOG_TAG_LLM} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log a recoverable error (red). Never silenced."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    if not _quiet():
        print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    if not _quiet():
        print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_LLM = "[AI]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"

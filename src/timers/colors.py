"""
Terminal color support with automatic detection of terminal capabilities.

Honors FORCE_COLOR and NO_COLOR, and disables colors when stdout is not a TTY.
"""

import os
import sys


def _supports_color() -> bool:
    """Check if the terminal supports ANSI color codes."""
    # FORCE_COLOR overrides all detection
    if 'FORCE_COLOR' in os.environ:
        return True

    if 'NO_COLOR' in os.environ:
        return False

    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False

    if os.environ.get('TERM', '') == 'dumb':
        return False

    return True


class Colors:
    """
    ANSI color codes - automatically disabled on unsupported terminals.

    Usage:
        from timers.colors import Colors
        print(f"{Colors.GREEN}Stopped{Colors.RESET}")
    """
    _enabled = _supports_color()

    RESET = "\033[0m" if _enabled else ""

    # Styles
    BOLD = "\033[1m" if _enabled else ""
    DIM = "\033[2m" if _enabled else ""

    # Colors
    RED = "\033[31m" if _enabled else ""
    GREEN = "\033[32m" if _enabled else ""
    YELLOW = "\033[33m" if _enabled else ""

    @classmethod
    def status_color(cls, status: str) -> str:
        colors = {
            'logging': cls.GREEN,
            'stopped': cls.DIM,
        }
        return colors.get(status, cls.RESET)

    @classmethod
    def format_status(cls, status: str) -> str:
        return f"{cls.status_color(status)}{status}{cls.RESET}"

    @classmethod
    def format_task_id(cls, task_id: int, active: bool = False) -> str:
        """Format a task ID as ``@id:``, highlighted when the task is logging."""
        if active:
            return f"{cls.YELLOW}{cls.BOLD}@{task_id}:{cls.RESET}"
        return f"@{task_id}:"

    @classmethod
    def format_task_name(cls, name: str, active: bool = False) -> str:
        if active:
            return f"{cls.RED}{cls.BOLD}{name}{cls.RESET}"
        return name


def status_str(s: str) -> str:
    """Format status with color (shorthand)."""
    return Colors.format_status(s)


def colorize(text: str, color: str) -> str:
    """Apply a color to text if colors are enabled."""
    if Colors._enabled:
        return f"{color}{text}{Colors.RESET}"
    return text

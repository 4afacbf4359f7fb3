"""
Colored logging formatter for PocketBase Model Generator.

This module provides colored console output so progress, warnings about
degraded expansion data and failures stand apart during a generation run.
"""

import logging
import os
import sys
from typing import Optional, TextIO


SUCCESS_MARK = "✓"
PROGRESS_MARK = "→"
HIGHLIGHT_MARK = "•"
SECTION_RULE = "=" * 60


class ColoredFormatter(logging.Formatter):
    """
    Colored logging formatter that adds ANSI color codes to log messages.

    Levels pick the color for warnings and errors; INFO and DEBUG records are
    colored by the marker the ``log_*`` helpers put in front of the message.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    # Special colors for specific messages
    SPECIAL_COLORS = {
        'success': '\033[92m',    # Bright Green
        'progress': '\033[94m',   # Bright Blue
        'highlight': '\033[96m',  # Bright Cyan
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, stream: Optional[TextIO] = None):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors
            stream: Stream the records end up on; colors are dropped when it is not a TTY
        """
        if fmt is None:
            fmt = "%(levelname)s: %(message)s"
        super().__init__(fmt)
        self.use_colors = should_use_colors(stream if stream is not None else sys.stderr, use_colors)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        color = self._color_for(record)
        if not color:
            return formatted_message
        return f"{color}{formatted_message}{self.RESET}"

    def _color_for(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return self.COLORS.get(record.levelname, '')

        message = record.getMessage().lstrip()
        if message.startswith(SUCCESS_MARK):
            return self.SPECIAL_COLORS['success'] + self.BOLD
        if message.startswith(PROGRESS_MARK):
            return self.SPECIAL_COLORS['progress']
        if message.startswith(HIGHLIGHT_MARK):
            return self.SPECIAL_COLORS['highlight']
        if SECTION_RULE in message or message.isupper():
            return self.BOLD + self.SPECIAL_COLORS['highlight']
        if record.levelno == logging.DEBUG:
            return self.COLORS['DEBUG']
        # Plain INFO stays uncolored
        return ''


def should_use_colors(stream: TextIO, use_colors: bool = True) -> bool:
    """Colors only for interactive streams, and never when NO_COLOR is set."""
    if not use_colors or os.environ.get("NO_COLOR"):
        return False
    return hasattr(stream, 'isatty') and stream.isatty()


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True, stream: Optional[TextIO] = None) -> None:
    """
    Set up colored logging for the application.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
        stream: Output stream (default: stderr)
    """
    stream = stream if stream is not None else sys.stderr
    formatter = ColoredFormatter(use_colors=use_colors, stream=stream)

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    # Keep HTTP connection chatter out of verbose runs
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))


# Convenience functions for special message types
def log_success(logger: logging.Logger, message: str) -> None:
    """Log a success message with special formatting."""
    logger.info(f"{SUCCESS_MARK} {message}")


def log_progress(logger: logging.Logger, current: int, total: int, message: str) -> None:
    """Log a counted progress step, e.g. '→ [2/5] Wrote post_data.py'."""
    logger.info(f"{PROGRESS_MARK} [{current}/{total}] {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    """Log a highlighted message with special formatting."""
    logger.info(f"{HIGHLIGHT_MARK} {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header with special formatting."""
    logger.info(SECTION_RULE)
    logger.info(f"  {section_name.upper()}")
    logger.info(SECTION_RULE)

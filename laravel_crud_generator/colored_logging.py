"""
Colored logging formatter for the Laravel CRUD generator.

Step outcomes are easier to scan when created and patched files, skipped
files and failures stand out from ordinary progress messages.
"""

import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Colored logging formatter that adds ANSI color codes to log messages.

    Levels decide the color of warnings and errors; INFO and DEBUG messages
    are colored by the prefix the ``log_*`` helpers put in front of them.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    # Colors keyed by the message prefix of the helpers below
    PREFIX_COLORS = {
        '✓': '\033[92m',    # Bright Green: created / patched
        '→': '\033[94m',    # Bright Blue: progress
        '•': '\033[96m',    # Bright Cyan: skipped / highlighted
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, stream=None):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors (disabled anyway when the stream is not a TTY)
            stream: Stream the handler writes to, checked for TTY support
        """
        if fmt is None:
            fmt = "%(levelname)s: %(message)s"
        super().__init__(fmt)

        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        if record.levelno >= logging.WARNING:
            color = self.COLORS.get(record.levelname, '')
            return f"{color}{formatted_message}{self.RESET}" if color else formatted_message

        message = record.getMessage().lstrip()
        prefix_color = self.PREFIX_COLORS.get(message[:1])
        if prefix_color:
            bold = self.BOLD if message.startswith('✓') else ''
            return f"{prefix_color}{bold}{formatted_message}{self.RESET}"
        if self._is_section_message(message):
            return f"{self.BOLD}{self.PREFIX_COLORS['•']}{formatted_message}{self.RESET}"
        if record.levelname == 'DEBUG':
            return f"{self.COLORS['DEBUG']}{formatted_message}{self.RESET}"
        return formatted_message

    @staticmethod
    def _is_section_message(message: str) -> bool:
        """Check if message is a section header."""
        return message.startswith('=') and len(message.strip()) > 20


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Set up colored logging for the application.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors, stream=sys.stderr))
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def log_success(logger: logging.Logger, message: str) -> None:
    """Log a success message with special formatting."""
    logger.info(f"✓ {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    """Log a progress message with special formatting."""
    logger.info(f"→ {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    """Log a highlighted message with special formatting."""
    logger.info(f"• {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header with special formatting."""
    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {section_name.upper()}")
    logger.info(separator)

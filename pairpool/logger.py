"""
PairPool Logging System
=======================

A single logging entry point for the pool. This module wires the standard
Python `logging` library to the `rich` console handler and an optional
rotating log file.

Usage:
    >>> from pairpool.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Pool initialized")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    DEFAULT_LOG_DATE_FORMAT,
    DEFAULT_LOG_FORMAT,
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
)


PROJECT_ROOT = Path(__file__).parent.parent
LOG_FILE_PATH = PROJECT_ROOT / "logs" / "pairpool.log"

_FORMAT_SPECIFIER_PATTERN = r"\([a-zA-Z_][a-zA-Z0-9_]*\)[a-zA-Z]"


class LogManager:
    """
    Manages logging configuration via the Singleton pattern.

    The logging subsystem is initialized exactly once per process, with a
    'Rich' console handler and, when enabled, a rotating file handler.
    """

    _instance: Optional["LogManager"] = None
    _lock: threading.Lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._configured = False
        self._initialized = True

    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """
        Validates a logging format string.

        Every ``(name)x`` specifier must be preceded by ``%`` and the string
        must format a dummy record cleanly.

        Returns:
            str: The validated format string, or `DEFAULT_LOG_FORMAT`.
        """
        try:
            if not log_format:
                return DEFAULT_LOG_FORMAT

            log_format = str(log_format)
            for match in re.finditer(_FORMAT_SPECIFIER_PATTERN, log_format):
                start_pos = match.start()
                if start_pos == 0 or log_format[start_pos - 1] != "%":
                    raise ValueError("Malformed format specifier.")

            formatter = logging.Formatter(fmt=log_format)
            record = logging.LogRecord(
                name="test", level=logging.INFO, pathname="", lineno=0,
                msg="test", args=(), exc_info=None,
            )
            if re.search(_FORMAT_SPECIFIER_PATTERN, formatter.format(record)):
                raise ValueError("Format specifiers not properly processed.")

            return log_format
        except (ValueError, KeyError, TypeError) as e:
            print(
                f"{time.strftime(DEFAULT_LOG_DATE_FORMAT)} - pairpool.logger - "
                f"Validation Error: {e}. Using default.",
                file=sys.stderr,
            )
            return DEFAULT_LOG_FORMAT

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
        force: bool = False,
    ) -> None:
        """
        Configures the root logger with console and file handlers.

        Args:
            log_level: Logging level (DEBUG, INFO, etc.). Defaults to `LOG_LEVEL`.
            log_file: Path to the log file. Defaults to `logs/pairpool.log`.
            console_output: Enable console logging.
            file_output: Enable rotating file logging. Defaults to `LOG_FILE_OUTPUT`.
            force: Replace the handlers of an already configured subsystem.
        """
        with self._lock:
            if self._configured and not force:
                return

            level_str = log_level or LOG_LEVEL
            numeric_level = getattr(logging, str(level_str).upper(), logging.INFO)

            root_logger = logging.getLogger()
            root_logger.setLevel(numeric_level)
            root_logger.handlers.clear()

            log_format = self.validate_log_format(LOG_FORMAT)
            formatter = TerminalSafeFormatter(fmt=log_format, datefmt=LOG_DATE_FORMAT + " UTC")
            formatter.converter = time.gmtime

            if console_output:
                if LOG_CONSOLE_HIGHLIGHTING:
                    theme = Theme(
                        {
                            "pairpool.account":        "cyan",
                            "pairpool.amount":         "bold white",
                            "pairpool.arrow":          "bold yellow",
                            "pairpool.level_critical": "bold red reverse",
                            "pairpool.level_debug":    "bold dim",
                            "pairpool.level_error":    "bold red",
                            "pairpool.level_info":     "bold green",
                            "pairpool.level_warning":  "bold yellow",
                            "pairpool.logger_name":    "magenta",
                            "pairpool.refund":         "bold red",
                            "pairpool.tag":            "bold magenta",
                            "pairpool.timestamp":      "bold cyan",
                        }
                    )
                    rich_handler = RichHandler(
                        console=Console(theme=theme, highlight=False, stderr=True),
                        highlighter=PoolLogHighlighter(),
                        keywords=[],
                        rich_tracebacks=True,
                        omit_repeated_times=False,
                        show_path=False,
                        show_time=False,
                        show_level=False,
                        markup=False,
                    )
                    rich_handler.setLevel(numeric_level)
                    rich_handler.setFormatter(formatter)
                    root_logger.addHandler(rich_handler)
                else:
                    console_handler = logging.StreamHandler(sys.stderr)
                    console_handler.setLevel(numeric_level)
                    console_handler.setFormatter(formatter)
                    root_logger.addHandler(console_handler)

            if file_output is None:
                file_output = LOG_FILE_OUTPUT

            if file_output:
                log_file_path = log_file or LOG_FILE_PATH
                log_file_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    filename=str(log_file_path),
                    maxBytes=LOG_MAX_FILE_SIZE,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                )
                file_handler.setLevel(numeric_level)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)

            self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        """Returns a standard logger, configuring the subsystem on first use."""
        if not self._configured:
            self.configure()
        return logging.getLogger(name)

    @property
    def is_configured(self) -> bool:
        return self._configured


class TerminalSafeFormatter(logging.Formatter):
    """
    Formatter that strips ANSI escape sequences and control characters.

    Account ids and transfer messages come from callers, so they are never
    written to the terminal unsanitized.
    """

    _ansi_escape_re = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"
        r"|\x1b[@-Z\\-_]"
    )
    # Control chars (0x00-0x1F) excluding Tab and Newline
    _control_chars_re = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
    _carriage_return_re = re.compile(r"\r")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        text = cls._ansi_escape_re.sub("", text)
        text = cls._carriage_return_re.sub("", text)
        text = cls._control_chars_re.sub("", text)
        return text

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class PoolLogHighlighter(RegexHighlighter):
    """Highlights account ids, amounts and swap arrows in pool log lines."""

    base_style = "pairpool."
    highlights = [
        r"(?P<arrow>(\-\->)|(<--)|(→)|(←))",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<account>`[a-z\d._-]+`)",
        r"(?P<amount>(?<![\w.])\d+(?![\w.]))",
        r"(?P<refund>\b[Rr]efund(ing|ed)?\b)",
        r"(?P<tag>\[.*?\])",
        r"(?P<timestamp>^(.*?)UTC)",
    ]


_manager = LogManager()

def get_logger(name: str) -> logging.Logger:
    """
    Public accessor of the logging system.

    Args:
        name (str): The name of the module requesting the logger.
    """
    return _manager.get_logger(name)


def configure_logging(**kwargs) -> None:
    """Reconfigure the logging system, e.g. from a loaded `[logging]` config section."""
    _manager.configure(force=True, **kwargs)

# Auto-configure on import to ensure immediate availability
_manager.configure()

"""
Logging for Dozeframe
Colored console output plus an optional rotating log file
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional
from enum import Enum


class LogLevel(Enum):
    """Log levels accepted by settings and the command line"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, value: str) -> 'LogLevel':
        """Map a free-form level name to a LogLevel, INFO when unknown"""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.INFO


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps each line in an ANSI color for its level"""

    COLORS = {
        logging.DEBUG: '\033[36m',    # Cyan
        logging.INFO: '\033[32m',     # Green
        logging.WARNING: '\033[33m',  # Yellow
        logging.ERROR: '\033[31m',    # Red
        logging.CRITICAL: '\033[35m'  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt=None, datefmt=None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors

    def format(self, record):
        formatted = super().format(record)
        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            if color:
                formatted = f"{color}{formatted}{self.RESET}"
        return formatted


LOG_FORMAT = '%(asctime)s [%(levelname)8s] %(name)s.%(module)s: %(message)s'


class Logger:
    """Process-wide logger for the slideshow engine and its host window"""

    _instance: Optional['Logger'] = None
    _logger: Optional[logging.Logger] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if self._logger is None:
            self._setup_logger()

    def _setup_logger(self):
        """Attach the console handler; level filtering happens per handler"""
        self._logger = logging.getLogger('Dozeframe')
        self._logger.setLevel(logging.DEBUG)
        self._logger.handlers.clear()
        self._logger.propagate = False

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt='%H:%M:%S',
                                                      use_colors=sys.stdout.isatty()))
        console_handler.setLevel(logging.INFO)

        self._logger.addHandler(console_handler)
        self._console_handler = console_handler
        self._file_handler: Optional[logging.Handler] = None

    @property
    def level(self) -> int:
        return self._console_handler.level

    def set_level(self, level: str):
        """Set the console (and file) logging level"""
        log_level = getattr(logging, LogLevel.parse(level).value)
        self._console_handler.setLevel(log_level)
        if self._file_handler:
            self._file_handler.setLevel(log_level)
        self.info(f"Log level set to {LogLevel.parse(level).value}")

    def add_file_handler(self, path: str, max_bytes: int = 5 * 1024 * 1024, backup_count: int = 3):
        """Also write log lines to a rotating file at path"""
        if self._file_handler:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
        handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count,
                                      encoding='utf-8')
        handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, use_colors=False))
        handler.setLevel(self._console_handler.level)
        self._logger.addHandler(handler)
        self._file_handler = handler

    def debug(self, message: str, *args, **kwargs):
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._logger.error(message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self._logger.critical(message, *args, **kwargs)


logger = Logger()


def set_log_level(level: str):
    """Set the global log level"""
    logger.set_level(level)


def add_file_handler(path: str):
    """Mirror log output into a rotating file"""
    logger.add_file_handler(path)


def debug(message: str, *args, **kwargs):
    kwargs.setdefault("stacklevel", 3)
    logger.debug(message, *args, **kwargs)


def info(message: str, *args, **kwargs):
    kwargs.setdefault("stacklevel", 3)
    logger.info(message, *args, **kwargs)


def warning(message: str, *args, **kwargs):
    kwargs.setdefault("stacklevel", 3)
    logger.warning(message, *args, **kwargs)


def error(message: str, *args, **kwargs):
    kwargs.setdefault("stacklevel", 3)
    logger.error(message, *args, **kwargs)


def critical(message: str, *args, **kwargs):
    kwargs.setdefault("stacklevel", 3)
    logger.critical(message, *args, **kwargs)

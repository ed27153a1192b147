import logging
import inspect
from logging.handlers import RotatingFileHandler
from typing import Optional

from config import constants


_VERSION_TAG = f"{constants.APP_NAME}@{constants.APP_VERSION}"

LOG_FORMAT = f"%(asctime)s - [{_VERSION_TAG}] - %(name)s - %(levelname)-8s - [%(module)s.%(funcName)s:%(lineno)d] - %(message)s"


class ColoredFormatter(logging.Formatter):
    """
    A custom formatter to add colors to log messages based on log level.
    """
    GREY = "\x1b[90m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    FORMATS = {
        logging.DEBUG: GREY + LOG_FORMAT + RESET,
        logging.INFO: GREEN + LOG_FORMAT + RESET,
        logging.WARNING: YELLOW + LOG_FORMAT + RESET,
        logging.ERROR: RED + LOG_FORMAT + RESET,
        logging.CRITICAL: BOLD_RED + LOG_FORMAT + RESET
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, LOG_FORMAT)
        formatter = logging.Formatter(log_fmt, datefmt=constants.LOG_DATE_FORMAT)
        return formatter.format(record)


class AppLogger:
    """
    A wrapper class to simplify the creation and configuration of a logger.
    """

    def __init__(self, level=logging.DEBUG, log_file: Optional[str] = None, use_colors: bool = True):
        """
        Initializes and configures the root logger for the host application.

        Args:
            level (int, optional): The master logging level. Defaults to logging.DEBUG.
            log_file (str, optional): Path to a file to save logs.
            use_colors (bool, optional): Colorize console output by level.
        """
        self.logger = logging.getLogger()
        self.logger.setLevel(level)

        # Clear any existing handlers to prevent duplicates from previous runs or basicConfig.
        if self.logger.hasHandlers():
            self.logger.handlers.clear()

        ch = logging.StreamHandler()
        ch.setLevel(level)
        if use_colors:
            ch.setFormatter(ColoredFormatter())
        else:
            ch.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=constants.LOG_DATE_FORMAT))
        self.logger.addHandler(ch)

        if log_file:
            # Rotating file handler keeps the log size bounded
            fh = RotatingFileHandler(
                log_file,
                mode='a',
                maxBytes=constants.LOG_MAX_BYTES,
                backupCount=constants.LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=constants.LOG_DATE_FORMAT))
            self.logger.addHandler(fh)

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """
        Returns a logger for ``name``, or for the calling module when no name is given.
        """
        return logging.getLogger(name or self.get_caller_name())

    def get_caller_name(self):
        """Helper to get the name of the module that called get_logger."""
        try:
            frm = inspect.stack()[2]  # 2 levels up to get the caller of get_logger
            mod = inspect.getmodule(frm[0])
            return mod.__name__ if mod else '__main__'
        except IndexError:
            return 'unknown_module'

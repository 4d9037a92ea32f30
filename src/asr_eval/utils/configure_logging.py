"""
Logging configuration for ASR vendor evaluation.

This module provides centralized logging setup for the evaluation pipeline.
"""

import logging
import sys

from rich.logging import RichHandler

from asr_eval.config.evaluation_config import LoggerConfig


def configure_logging(config: LoggerConfig) -> None:
    """
    Configure the global logging system from the provided LoggerConfig.

    This function should be called once at the start of your application.
    After calling this function, you can use `logging.getLogger(__name__)`
    anywhere in your code to get a properly configured logger.

    Args:
        config: The logging section of the evaluation configuration
    """
    log_level = getattr(logging, config.log_level.upper())

    handlers = []

    # Console handler (only if show_terminal_logs is True)
    if config.show_terminal_logs:
        if config.use_rich_logging:
            console_handler = RichHandler(
                rich_tracebacks=True, show_time=True, show_path=False
            )
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(config.log_format))
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    # File handler (if log_file is specified)
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(config.log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(config.log_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s" if config.use_rich_logging else config.log_format,
        datefmt="[%X]" if config.use_rich_logging else None,
        handlers=handlers or [logging.NullHandler()],
        force=True,
    )

    # Ensure all existing loggers propagate to the root handlers
    for logger_name in logging.root.manager.loggerDict:
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.propagate = True

"""
Logging utilities for the speech coach.
"""
import os
import logging


def setup_logging(log_file_path: str, console_level: str = "WARNING") -> str:
    """
    Set up logging to file with minimal console output.

    Args:
        log_file_path: Full path to the log file
        console_level: Level name for the console handler

    Returns:
        Path to the log file
    """
    logdir = os.path.dirname(log_file_path)
    if logdir:
        os.makedirs(logdir, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # File handler for detailed logs
    file_handler = logging.FileHandler(log_file_path, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s - %(message)s'))

    # Console only shows what the user has to see
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.WARNING))
    console_handler.setFormatter(logging.Formatter('%(levelname)s %(message)s'))

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return log_file_path

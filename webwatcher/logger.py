import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name, level=logging.WARNING, log_dir=None, log_filename="webwatcher.log", console=True):
    """
    Set up and return a logger with console and (optionally) file handlers.

    The console handler writes to stderr; stdout carries the audit trail.

    Args:
        name (str): The logger name.
        level (int): Logging level.
        log_dir (str): Directory for the log file; no file handler when empty.
        log_filename (str): Log file name.
        console (bool): Whether to add a console handler.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear out any existing handlers.
    logger.handlers = []

    formatter = logging.Formatter(LOG_FORMAT)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def level_from_name(level_name, default=logging.WARNING):
    level = getattr(logging, str(level_name).upper(), default)
    return level if isinstance(level, int) else default

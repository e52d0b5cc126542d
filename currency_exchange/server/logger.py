import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOGGER_NAME = 'Currency-Exchange'


def setup_logger(log_file=None, console_level=logging.INFO):
    """Setup console + rotating file logger for the server"""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)

        # Rotating File handler - max 5 MB per file, keep 3 backup files
        file_handler = RotatingFileHandler(
            log_path,
            mode='a',
            maxBytes=5*1024*1024,
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(threadName)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    logger.info("=" * 60)
    logger.info("Currency Exchange Server")
    if log_file:
        logger.info(f"Log file: {log_file}")
    logger.info(f"Python Version: {sys.version.split()[0]}")
    logger.info("=" * 60)

    return logger

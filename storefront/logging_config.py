"""
Logging setup shared by every storefront module.
Console gets warnings and above; a rotating file gets everything when
STOREFRONT_LOG_FILE is set.
"""
import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_SIZE_MB = 5
BACKUP_COUNT = 3
LOG_FILE_ENV = "STOREFRONT_LOG_FILE"


def get_logger(name: str) -> logging.Logger:
    """
    Returns a configured logger for the given module name.

    Usage:
        from storefront.logging_config import get_logger
        logger = get_logger(__name__)
        logger.info("Something happened")
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    log_file = os.getenv(LOG_FILE_ENV)
    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
                backupCount=BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            # If file handler fails, continue with console only
            logging.getLogger(__name__).warning("Could not create log file handler: %s", e)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def log_exception(logger: logging.Logger, context: str, exception: Exception) -> None:
    logger.error(f"{context}: {type(exception).__name__} - {exception}")


def log_database_operation(logger: logging.Logger, operation: str, table: str, record_id=None, success: bool = True) -> None:
    """
    Helper to log database operations consistently.

    Usage:
        log_database_operation(logger, "UPDATE", "products", product_id)
        log_database_operation(logger, "SELECT", "products", success=False)
    """
    status = "SUCCESS" if success else "FAILED"
    id_info = f" (id={record_id})" if record_id is not None else ""
    logger.info(f"DB {operation} on {table}{id_info} [{status}]")
